"""
Permission Service Implementation

Stores chat permissions per Twitch role and per user, and answers whether a
chatter holds a permission.
"""

from typing import Dict, List, TYPE_CHECKING

from pydantic import Field

from service_manager import ServiceBase, ServiceConfig, ServiceInfo

if TYPE_CHECKING:
    from twitchAPI.chat import ChatUser
    from service_manager import ServiceRegistry

ROLES = ('broadcaster', 'moderator', 'vip', 'subscriber', 'everyone')

WILDCARD = '*'


class PermissionNotFoundError(KeyError):
    """Raised when removing a permission that was never granted."""

    def __init__(self, target: str, permission: str):
        super().__init__(f"Permission '{permission}' doesn't exist for '{target}'")
        self.target = target
        self.permission = permission


def _default_role_permissions() -> Dict[str, List[str]]:
    return {
        'broadcaster': [WILDCARD],
        'moderator': ['services.list', 'permissions.list'],
    }


class PermissionServiceConfig(ServiceConfig):
    """Configuration for the permission service."""
    role_permissions: Dict[str, List[str]] = Field(
        default_factory=_default_role_permissions,
        description="Permissions granted to each Twitch role"
    )
    user_permissions: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Permissions granted to individual users, keyed by lowercase login"
    )


def permission_matches(granted: str, permission: str) -> bool:
    """
    Check if a granted permission covers a requested one.

    ``*`` covers everything and ``prefix.*`` covers every permission under
    ``prefix.``.
    """
    if granted == WILDCARD or granted == permission:
        return True
    if granted.endswith('.*'):
        return permission.startswith(granted[:-1])
    return False


def roles_of(user: 'ChatUser') -> List[str]:
    """Get the roles a chat user holds, from the badges of the message."""
    badges = getattr(user, 'badges', None) or {}
    roles = []
    if 'broadcaster' in badges:
        roles.append('broadcaster')
    if getattr(user, 'mod', False):
        roles.append('moderator')
    if getattr(user, 'vip', False):
        roles.append('vip')
    if getattr(user, 'subscriber', False):
        roles.append('subscriber')
    roles.append('everyone')
    return roles


class PermissionService(ServiceBase):
    """
    Role and user based permissions for chat commands.

    Role names are the Twitch roles in ``ROLES``; user entries are keyed by
    lowercase login name.
    """

    config_class = PermissionServiceConfig

    @property
    def info(self) -> ServiceInfo:
        return ServiceInfo(name="PermissionService", version="1.1.0", author="Service Host Team")

    async def on_start(self) -> None:
        unknown = [role for role in self.config.role_permissions if role not in ROLES]
        if unknown:
            self.logger.warning(f"Ignoring permissions for unknown roles: {unknown}")

    async def on_stop(self) -> None:
        pass

    def has_permission(self, user: 'ChatUser', permission: str) -> bool:
        """Check if a chat user holds a permission through their roles or directly."""
        granted = list(self.config.user_permissions.get(user.name.lower(), []))
        for role in roles_of(user):
            granted.extend(self.config.role_permissions.get(role, []))
        return any(permission_matches(entry, permission) for entry in granted)

    def add_role_permission(self, role: str, permission: str) -> bool:
        """
        Grant a permission to a role.

        Returns:
            True if added, False if the role already had it
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role '{role}'")
        return self._add(self.config.role_permissions, role, permission)

    def remove_role_permission(self, role: str, permission: str) -> None:
        """
        Revoke a permission from a role.

        Raises:
            PermissionNotFoundError: If the role does not hold the permission
        """
        self._remove(self.config.role_permissions, role, permission)

    def add_user_permission(self, login: str, permission: str) -> bool:
        """Grant a permission to a single user."""
        return self._add(self.config.user_permissions, login.lower(), permission)

    def remove_user_permission(self, login: str, permission: str) -> None:
        """
        Revoke a permission from a single user.

        Raises:
            PermissionNotFoundError: If the user does not hold the permission
        """
        self._remove(self.config.user_permissions, login.lower(), permission)

    def get_permissions(self, target: str) -> List[str]:
        """Get the permissions of a role, or of a user when prefixed with '@'."""
        if target.startswith('@'):
            return list(self.config.user_permissions.get(target[1:].lower(), []))
        return list(self.config.role_permissions.get(target, []))

    @staticmethod
    def _add(table: Dict[str, List[str]], key: str, permission: str) -> bool:
        entries = table.setdefault(key, [])
        if permission in entries:
            return False
        entries.append(permission)
        return True

    @staticmethod
    def _remove(table: Dict[str, List[str]], key: str, permission: str) -> None:
        entries = table.get(key, [])
        if permission not in entries:
            raise PermissionNotFoundError(key, permission)
        entries.remove(permission)
        if not entries:
            del table[key]


def get_permission_service(registry: 'ServiceRegistry') -> PermissionService:
    """Get the enabled permission service through the registry."""
    return registry.get_service(PermissionService)
