"""
Models for the result of running one operation across all services.
"""
from typing import Dict, List, Optional
from enum import Enum
from pydantic import BaseModel

class ServiceState(str, Enum):
    """
    Terminal state of a service after a batch operation.
    """
    STARTED = "started"
    ALREADY_RUNNING = "already-running"
    FAILED = "failed"
    STOPPED = "stopped"
    # status only
    REPORTED = "reported"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"

class ServiceOutcome(BaseModel):
    """
    What happened to one service.

    For REPORTED, detail is the status string returned by the runtime.
    For FAILED and UNKNOWN, detail is the cause.
    """
    name: str
    state: ServiceState
    detail: Optional[str] = None
    warnings: List[str] = []

class BatchOutcome(BaseModel):
    """
    Outcomes for every service in a batch, in processing order.
    """
    outcomes: List[ServiceOutcome] = []

    def add(self, outcome: ServiceOutcome) -> ServiceOutcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def failed(self) -> bool:
        """
        True if any service failed.
        """
        return any(o.state == ServiceState.FAILED for o in self.outcomes)

    def by_name(self) -> Dict[str, ServiceOutcome]:
        return {o.name: o for o in self.outcomes}

    def count(self, state: ServiceState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)
