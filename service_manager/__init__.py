"""
Service Manager System

This package loads bot services from the built-in module and from extension
modules, binds each one to its configuration document, and supervises its
start/stop lifecycle so one failing service cannot take down the others.
"""

from .commands import ChatCommandDefinition, ConsoleCommandDefinition, ConsoleCommandDispatcher
from .config_store import ConfigStore
from .discovery import DiscoveredService, ModuleDiscovery
from .exceptions import ModuleLoadError, ServiceLookupError, ServiceNotEnabledError, ServiceNotLoadedError
from .lifecycle import LifecycleSupervisor
from .service_base import HookResult, ServiceBase, ServiceConfig, ServiceInfo, ServiceState
from .service_registry import ServiceRegistry
from .settings import HostSettings, get_host_settings, reset_host_settings

__all__ = [
    'ChatCommandDefinition',
    'ConsoleCommandDefinition',
    'ConsoleCommandDispatcher',
    'ConfigStore',
    'DiscoveredService',
    'ModuleDiscovery',
    'ModuleLoadError',
    'ServiceLookupError',
    'ServiceNotEnabledError',
    'ServiceNotLoadedError',
    'LifecycleSupervisor',
    'HookResult',
    'ServiceBase',
    'ServiceConfig',
    'ServiceInfo',
    'ServiceState',
    'ServiceRegistry',
    'HostSettings',
    'get_host_settings',
    'reset_host_settings',
]
