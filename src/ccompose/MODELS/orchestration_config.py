"""
Models for overall orchestration configuration.
"""
from typing import Dict, Iterator, Tuple
from pydantic import BaseModel
from .service_definition import ServiceDefinition
from ..exceptions import ServiceNotFound

class OrchestrationConfig(BaseModel):
    """
    Complete configuration for a multi-service stack.
    Equivalent to a parsed docker-compose.yml file.

    Services keep the order they were declared in.
    """
    services: Dict[str, ServiceDefinition] = {}

    def ordered_services(self) -> Iterator[Tuple[str, ServiceDefinition]]:
        """
        Yields (name, service) pairs in declaration order.
        """
        yield from self.services.items()

    def get(self, name: str) -> ServiceDefinition:
        """
        Looks up a service by name.

        :raises ServiceNotFound: If no service has that name.
        """
        try:
            return self.services[name]
        except KeyError:
            raise ServiceNotFound(name) from None
