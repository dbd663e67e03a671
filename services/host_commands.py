"""
Host Commands

Chat and console commands for inspecting the loaded services.
"""

from typing import TYPE_CHECKING

from service_manager import ChatCommandDefinition, ConsoleCommandDefinition

from .permissions import get_permission_service

if TYPE_CHECKING:
    from twitchAPI.chat import ChatCommand
    from service_manager import ServiceRegistry


async def services_chat_handler(registry: 'ServiceRegistry', cmd: 'ChatCommand') -> None:
    """Reply with the names of the enabled services."""
    names = [service.info.name for service in registry.enabled_services()]
    await cmd.reply(f"Services: {', '.join(names) if names else 'none'}")


async def services_console_handler(registry: 'ServiceRegistry', args: str) -> str:
    """List every loaded service, enabled or not."""
    lines = [f"{'Name':<24} {'Version':<10} {'Enabled':<8} {'State':<14} Author", "-" * 72]
    for service in registry:
        lines.append(
            f"{service.info.name:<24} {service.info.version:<10} "
            f"{'Yes' if service.config.is_enabled else 'No':<8} "
            f"{service.state.value:<14} {service.info.author}"
        )
    return '\n'.join(lines)


async def permissions_console_handler(registry: 'ServiceRegistry', args: str) -> str:
    """Show the permissions of one role or user, or of every role."""
    permissions = get_permission_service(registry)
    if args:
        granted = permissions.get_permissions(args)
        return f"{args}: {', '.join(granted) if granted else 'no permissions'}"

    lines = []
    for role, granted in permissions.config.role_permissions.items():
        lines.append(f"{role}: {', '.join(granted)}")
    for login, granted in permissions.config.user_permissions.items():
        lines.append(f"@{login}: {', '.join(granted)}")
    return '\n'.join(lines) if lines else 'No permissions granted.'


HOST_CHAT_COMMANDS = (
    ChatCommandDefinition(
        name="services",
        handler=services_chat_handler,
        description="List the enabled services",
        permission="services.list",
    ),
)

HOST_CONSOLE_COMMANDS = (
    ConsoleCommandDefinition(
        name="services",
        handler=services_console_handler,
        description="List all loaded services",
    ),
    ConsoleCommandDefinition(
        name="permissions",
        handler=permissions_console_handler,
        description="Show granted permissions: permissions [role|@user]",
    ),
)
