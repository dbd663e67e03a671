"""
Service Definition System

Defines the core structures every bot service implements: identity,
configuration document, command surface and the lifecycle hooks.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Type, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .commands import (
    ChatCommandDefinition,
    ConsoleCommandDefinition,
    get_chat_commands,
    get_console_commands,
    owning_module,
)

if TYPE_CHECKING:
    from .service_registry import ServiceRegistry


class ServiceState(Enum):
    """Lifecycle state of a service instance."""
    CONSTRUCTED = "constructed"
    CONFIG_BOUND = "config_bound"
    STARTED = "started"
    STOPPED = "stopped"


@dataclass(frozen=True)
class HookResult:
    """Outcome of one start or stop hook invocation."""
    service: 'ServiceBase'
    operation: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None


class ServiceInfo(BaseModel):
    """
    Display identity of a service.

    The name doubles as the configuration file key, so it must stay stable
    across releases of the service.

    Attributes:
        name: Unique service name
        version: Semantic version, rendered with three components
        author: Author of the service
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Unique service name")
    version: str = Field(description="Semantic version of the service")
    author: str = Field(description="Author of the service")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """The name is used as a file name, so path separators are rejected."""
        if '/' in v or '\\' in v or v.strip() in ('.', '..') or v != v.strip():
            raise ValueError(f"Invalid service name '{v}'")
        return v

    @field_validator('version')
    @classmethod
    def normalize_version(cls, v: str) -> str:
        """Accept 1 to 3 numeric components and pad to major.minor.patch."""
        parts = v.strip().lstrip('v').split('.')
        if not 1 <= len(parts) <= 3 or not all(part.isdigit() for part in parts):
            raise ValueError(f"Invalid service version '{v}'")
        parts += ['0'] * (3 - len(parts))
        return '.'.join(str(int(part)) for part in parts)

    def __str__(self) -> str:
        return f'"{self.name}" v{self.version} by "{self.author}"'


class ServiceConfig(BaseModel):
    """
    Base configuration document of a service.

    Every field needs a default so a fresh document can be generated when
    none exists on disk.
    """

    is_enabled: bool = Field(True, description="Whether the service is started and visible to lookups")


class ServiceBase(ABC):
    """
    Abstract base class for bot services.

    Subclasses set ``config_class`` and implement ``info``, ``on_start`` and
    ``on_stop``. The host calls ``start``/``stop``, which wrap the hooks with
    logging and error capture; subclasses may not override them.
    """

    config_class: ClassVar[Type[ServiceConfig]] = ServiceConfig

    _SEALED_METHODS = ('start', 'stop')

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for name in ServiceBase._SEALED_METHODS:
            if name in cls.__dict__:
                raise TypeError(f"{cls.__name__} must not override '{name}'; implement 'on_{name}' instead")

    def __init__(self):
        self.config = self.config_class()
        self.state = ServiceState.CONSTRUCTED
        self.logger = logging.getLogger(type(self).__module__)

        # Injected by the registry during registration
        self.registry: Optional['ServiceRegistry'] = None

        module = owning_module(type(self))
        self._chat_commands = get_chat_commands(module)
        self._console_commands = get_console_commands(module)

    @property
    @abstractmethod
    def info(self) -> ServiceInfo:
        """Return the identity of this service."""
        pass

    @property
    def chat_commands(self) -> Tuple[ChatCommandDefinition, ...]:
        """Chat commands exposed by this service."""
        return self._chat_commands

    @property
    def console_commands(self) -> Tuple[ConsoleCommandDefinition, ...]:
        """Operator console commands exposed by this service."""
        return self._console_commands

    @property
    def is_enabled(self) -> bool:
        return self.config.is_enabled

    async def start(self) -> HookResult:
        """Start the service; hook failures are logged and returned, never raised."""
        return await self._run_hook('start')

    async def stop(self) -> HookResult:
        """Stop the service; hook failures are logged and returned, never raised."""
        return await self._run_hook('stop')

    @abstractmethod
    async def on_start(self) -> None:
        """Called when the service is being started."""
        pass

    @abstractmethod
    async def on_stop(self) -> None:
        """Called when the service is being stopped."""
        pass

    def _inject_registry(self, registry: 'ServiceRegistry') -> None:
        """Called by the registry when the service is registered."""
        self.registry = registry

    def _set_state(self, state: ServiceState) -> None:
        self.state = state

    async def _run_hook(self, operation: str) -> HookResult:
        if operation == 'start' and self.state in (ServiceState.STARTED, ServiceState.STOPPED):
            raise RuntimeError(f"Service {self.info} cannot be started again without a restart")
        if operation == 'stop' and self.state == ServiceState.STOPPED:
            raise RuntimeError(f"Service {self.info} is already stopped")

        verb, past = ('Starting', 'started') if operation == 'start' else ('Stopping', 'stopped')
        hook = self.on_start if operation == 'start' else self.on_stop

        self.logger.info(f"{verb} service {self.info}...")
        error = None
        try:
            await hook()
        except Exception as e:
            error = e
            self.logger.error(
                f"Exception thrown while {verb.lower()} service {self.info}: {e!r}",
                exc_info=True
            )

        self._set_state(ServiceState.STARTED if operation == 'start' else ServiceState.STOPPED)
        self.logger.info(f"Service {self.info} {past}.")
        return HookResult(service=self, operation=operation, error=error)
