"""
Service Registry

Holds the services instantiated at startup and resolves them by type for
the host and for other services.
"""

import logging
from typing import Iterator, List, Optional, Tuple, Type, TypeVar

from .exceptions import ServiceNotEnabledError, ServiceNotLoadedError
from .service_base import ServiceBase

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=ServiceBase)


class ServiceRegistry:
    """
    Registry of loaded services.

    Services are registered once during discovery, in discovery order, and
    the registry is sealed afterwards. Lookups go by exact concrete type and
    hide disabled services unless the caller asks for them.
    """

    def __init__(self):
        self._services: List[ServiceBase] = []
        self._sealed = False

    def register(self, service: ServiceBase) -> None:
        """
        Add a service instance to the registry.

        Args:
            service: The service instance to register

        Raises:
            RuntimeError: If the registry has been sealed
            ValueError: If a service of the same type is already registered
        """
        if self._sealed:
            raise RuntimeError(f"Cannot register {service.info}: services are only loaded at startup")

        if type(service) in self:
            raise ValueError(f"Service type '{type(service).__name__}' is already registered")

        self._services.append(service)
        service._inject_registry(self)
        logger.debug(f"Registered service {service.info}")

    def seal(self) -> None:
        """Close the registry to further registrations."""
        self._sealed = True

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    @property
    def services(self) -> Tuple[ServiceBase, ...]:
        """All registered services in registration order."""
        return tuple(self._services)

    def enabled_services(self) -> List[ServiceBase]:
        """Registered services whose configuration is enabled."""
        return [service for service in self._services if service.config.is_enabled]

    def get_service(self, service_type: Type[T], allow_disabled: bool = False) -> T:
        """
        Get the loaded instance of a service type.

        Args:
            service_type: Concrete service class to look up
            allow_disabled: Whether a disabled service may be returned

        Returns:
            The registered instance

        Raises:
            ServiceNotEnabledError: The service is loaded but disabled
            ServiceNotLoadedError: No service of this type is loaded
        """
        for service in self._services:
            if type(service) is service_type:
                if not service.config.is_enabled and not allow_disabled:
                    raise ServiceNotEnabledError(service_type)
                return service

        raise ServiceNotLoadedError(service_type)

    def find_by_name(self, name: str) -> Optional[ServiceBase]:
        """Find a service by its display name, ignoring enablement."""
        for service in self._services:
            if service.info.name.lower() == name.lower():
                return service
        return None

    def __contains__(self, service_type: object) -> bool:
        return any(type(service) is service_type for service in self._services)

    def __iter__(self) -> Iterator[ServiceBase]:
        return iter(tuple(self._services))

    def __len__(self) -> int:
        return len(self._services)
