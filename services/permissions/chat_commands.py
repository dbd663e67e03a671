"""
Permission Chat Commands

Chat commands for granting, revoking and listing permissions.
"""

import logging
import re
from typing import TYPE_CHECKING

from service_manager import ChatCommandDefinition, ServiceLookupError

from .permission_service import ROLES, PermissionNotFoundError, get_permission_service

if TYPE_CHECKING:
    from twitchAPI.chat import ChatCommand
    from service_manager import ServiceRegistry

logger = logging.getLogger(__name__)

CHANGE_PATTERN = re.compile(r'^(add|remove)\s+(@?\w+)\s+(\S+)\s*$', re.IGNORECASE)
LIST_PATTERN = re.compile(r'^list(?:\s+(@?\w+))?\s*$', re.IGNORECASE)


async def require_permission(registry: 'ServiceRegistry', cmd: 'ChatCommand', permission: str) -> bool:
    """
    Check a chatter's permission and reply when it is missing.

    Returns:
        True if the command may proceed
    """
    try:
        permissions = get_permission_service(registry)
    except ServiceLookupError as e:
        logger.warning(f"Cannot check permission '{permission}': {e}")
        await cmd.reply('Permissions are currently unavailable.')
        return False

    if not permissions.has_permission(cmd.user, permission):
        await cmd.reply('You do not have permission to use this command.')
        return False
    return True


async def permissions_command_handler(registry: 'ServiceRegistry', cmd: 'ChatCommand') -> None:
    """Route `!permissions <add|remove|list>` to its subcommand."""
    parameter = (cmd.parameter or '').strip()
    subcommand = parameter.split(' ', 1)[0].lower()

    if subcommand in ('add', 'remove'):
        await _change_permission(registry, cmd, parameter)
    elif subcommand == 'list':
        await _list_permissions(registry, cmd, parameter)
    else:
        await cmd.reply('Usage: !permissions <add|remove|list> [role|@user] [permission]')


async def _change_permission(registry: 'ServiceRegistry', cmd: 'ChatCommand', parameter: str) -> None:
    match = CHANGE_PATTERN.match(parameter)
    verb = parameter.split(' ', 1)[0].lower()
    if not await require_permission(registry, cmd, f'permissions.{verb}'):
        return

    if not match:
        await cmd.reply('Invalid parameters!')
        return

    target, permission = match.group(2), match.group(3)
    if not target.startswith('@') and target.lower() not in ROLES:
        await cmd.reply(f"Unknown role '{target}'. Roles: {', '.join(ROLES)}")
        return

    service = get_permission_service(registry)
    try:
        if verb == 'add':
            if target.startswith('@'):
                added = service.add_user_permission(target[1:], permission)
            else:
                added = service.add_role_permission(target.lower(), permission)
            await cmd.reply('Permission added.' if added else 'Permission already granted.')
        else:
            if target.startswith('@'):
                service.remove_user_permission(target[1:], permission)
            else:
                service.remove_role_permission(target.lower(), permission)
            await cmd.reply('Permission removed.')
    except PermissionNotFoundError:
        await cmd.reply("Permission doesn't exist!")


async def _list_permissions(registry: 'ServiceRegistry', cmd: 'ChatCommand', parameter: str) -> None:
    if not await require_permission(registry, cmd, 'permissions.list'):
        return

    match = LIST_PATTERN.match(parameter)
    if not match:
        await cmd.reply('Invalid parameters!')
        return

    target = match.group(1) or f'@{cmd.user.name}'
    if not target.startswith('@'):
        target = target.lower()
    granted = get_permission_service(registry).get_permissions(target)
    await cmd.reply(f"{target}: {', '.join(granted) if granted else 'no permissions'}")


PERMISSION_COMMANDS = (
    ChatCommandDefinition(
        name="permissions",
        handler=permissions_command_handler,
        description="Permission commands: add, remove, list",
        aliases=("perms",),
    ),
)
