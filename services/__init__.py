"""
Built-in Services

The host's own service module. It is always discovered before any
extension module.
"""

from .channel_info import ChannelInfoProviderService
from .host_commands import HOST_CHAT_COMMANDS, HOST_CONSOLE_COMMANDS
from .permissions import PERMISSION_COMMANDS, PermissionService


def get_services():
    """Return the service classes of the built-in module, in start order."""
    return [ChannelInfoProviderService, PermissionService]


def get_chat_commands():
    return list(HOST_CHAT_COMMANDS) + list(PERMISSION_COMMANDS)


def get_console_commands():
    return list(HOST_CONSOLE_COMMANDS)


__all__ = [
    'ChannelInfoProviderService',
    'PermissionService',
    'get_services',
    'get_chat_commands',
    'get_console_commands',
]
