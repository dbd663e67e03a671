"""
Service Manager Exceptions

Error signals raised by the service host to its callers.
"""

from typing import Type


class ServiceLookupError(LookupError):
    """Base class for failed registry lookups."""

    def __init__(self, service_type: Type, message: str):
        super().__init__(message)
        self.service_type = service_type


class ServiceNotLoadedError(ServiceLookupError):
    """The requested service type was never registered."""

    def __init__(self, service_type: Type):
        super().__init__(service_type, f"Service '{service_type.__name__}' is not loaded")


class ServiceNotEnabledError(ServiceLookupError):
    """The requested service is registered but administratively disabled."""

    def __init__(self, service_type: Type):
        super().__init__(service_type, f"Service '{service_type.__name__}' is not enabled")


class ModuleLoadError(Exception):
    """A service module could not be imported or enumerated."""

    def __init__(self, module_name: str, reason: str):
        super().__init__(f"Failed to load service module '{module_name}': {reason}")
        self.module_name = module_name
        self.reason = reason
