"""
Command Definitions

Chat and console command descriptors declared by service modules, plus the
loader that collects them from a module and the operator console dispatcher.
"""

import logging
import sys
from dataclasses import dataclass, field
from types import ModuleType
from typing import Awaitable, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from .exceptions import ServiceLookupError

if TYPE_CHECKING:
    from twitchAPI.chat import ChatCommand
    from .service_registry import ServiceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatCommandDefinition:
    """Defines a Twitch chat command."""
    name: str
    handler: Callable[['ServiceRegistry', 'ChatCommand'], Awaitable[None]]
    description: str = ""
    permission: Optional[str] = None
    aliases: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ConsoleCommandDefinition:
    """Defines an operator console command."""
    name: str
    handler: Callable[['ServiceRegistry', str], Awaitable[str]]
    description: str = ""


def owning_module(service_class: type) -> Optional[ModuleType]:
    """
    Find the module that publishes a service class.

    Walks the dotted module path of the class from the outermost package
    inward and returns the first module exposing ``get_services``. Falls back
    to the module the class is defined in.
    """
    parts = service_class.__module__.split('.')
    for depth in range(1, len(parts) + 1):
        module = sys.modules.get('.'.join(parts[:depth]))
        if module is not None and callable(getattr(module, 'get_services', None)):
            return module
    return sys.modules.get(service_class.__module__)


def get_chat_commands(module: Optional[ModuleType]) -> Tuple[ChatCommandDefinition, ...]:
    """Return the chat commands a module declares."""
    loader = getattr(module, 'get_chat_commands', None)
    if not callable(loader):
        return ()
    return tuple(loader())


def get_console_commands(module: Optional[ModuleType]) -> Tuple[ConsoleCommandDefinition, ...]:
    """Return the operator console commands a module declares."""
    loader = getattr(module, 'get_console_commands', None)
    if not callable(loader):
        return ()
    return tuple(loader())


class ConsoleCommandDispatcher:
    """
    Routes operator console input to the console commands of enabled services.

    The first service to declare a command name owns it; later declarations
    with the same name are skipped.
    """

    def __init__(self, registry: 'ServiceRegistry'):
        self.registry = registry
        self._commands: Dict[str, ConsoleCommandDefinition] = {}

    def register_enabled_services(self) -> int:
        """Register console commands of every enabled service."""
        for service in self.registry.enabled_services():
            for command in service.console_commands:
                if command.name in self._commands:
                    if self._commands[command.name] is not command:
                        logger.warning(f"Console command '{command.name}' already registered, skipping")
                    continue
                self._commands[command.name] = command
        logger.debug(f"Registered {len(self._commands)} console commands")
        return len(self._commands)

    @property
    def commands(self) -> Dict[str, ConsoleCommandDefinition]:
        return dict(self._commands)

    async def dispatch(self, line: str) -> str:
        """
        Run one console line and return the text to show the operator.

        Args:
            line: Raw console input, command name followed by arguments

        Returns:
            The command output or an error description
        """
        line = line.strip()
        if not line:
            return ""

        name, _, args = line.partition(' ')
        if name == 'help':
            return '\n'.join(
                f"{command.name} - {command.description}" for command in self._commands.values()
            )

        command = self._commands.get(name)
        if command is None:
            return f"Unknown command: {name}. Type 'help' for a list of commands."

        try:
            return await command.handler(self.registry, args.strip())
        except ServiceLookupError as e:
            logger.warning(f"Console command '{name}' needs an unavailable service: {e}")
            return f"Command '{name}' is unavailable: {e}"
        except Exception as e:
            logger.error(f"Error in console command '{name}': {e}", exc_info=True)
            return f"Command '{name}' failed: {e}"
