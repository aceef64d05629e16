"""
Models for the JSON emitted by `container inspect`.
"""
from typing import List
from pydantic import BaseModel

RUNNING = "running"

class NetworkAttachment(BaseModel):
    """
    A network a container is attached to. Reported, never interpreted.
    """
    address: str = ""
    gateway: str = ""
    hostname: str = ""
    network: str = ""

class InspectionResult(BaseModel):
    """
    Snapshot of one container, taken fresh on every inspection.
    """
    status: str
    networks: List[NetworkAttachment] = []

    @property
    def is_running(self) -> bool:
        return self.status == RUNNING
