"""
Permission Service

Role and user based permissions for chat commands.
"""

from .chat_commands import PERMISSION_COMMANDS, permissions_command_handler, require_permission
from .permission_service import (
    ROLES,
    PermissionNotFoundError,
    PermissionService,
    PermissionServiceConfig,
    get_permission_service,
    permission_matches,
    roles_of,
)

__all__ = [
    'PERMISSION_COMMANDS',
    'permissions_command_handler',
    'require_permission',
    'ROLES',
    'PermissionNotFoundError',
    'PermissionService',
    'PermissionServiceConfig',
    'get_permission_service',
    'permission_matches',
    'roles_of',
]
