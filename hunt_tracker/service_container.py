from typing import Dict, Type, TypeVar
from hunt_tracker.services.base_service import IService
from hunt_tracker.logger import logger

T = TypeVar('T', bound=IService)

class ServiceContainer:
    """Registry of the running services, keyed by interface. Registration order is init order."""

    def __init__(self):
        self._services: Dict[Type[IService], IService] = {}

    def register(self, interface: Type[T], implementation: T) -> None:
        """Register a service implementation for an interface."""
        self._services[interface] = implementation

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service by its interface."""
        if interface not in self._services:
            raise KeyError(f"Service {interface.__name__} not registered")
        return self._services[interface]

    def initialize_all(self) -> bool:
        """Initialize all registered services. Returns False if any failed."""
        ok = True
        for interface, service in self._services.items():
            if not service.initialize():
                logger.error(f"ServiceContainer: {interface.__name__} failed to initialize")
                ok = False
        return ok

    def shutdown_all(self) -> None:
        """Shutdown all registered services, last registered first."""
        for service in reversed(list(self._services.values())):
            service.shutdown()
