"""
Bot Host Tests

This module tests how the bot host wires services to Twitch chat and the
operator console:
- Chat command registration, deduplicated by name and alias
- The permission guard on chat commands
- Unavailable services reported as chat replies
- Console input ending without shutting the bot down
"""

import asyncio
import io
import sys
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from bot import ServiceBot
from service_fixtures import FakeChatCommand, FakeChatUser
from service_manager import ChatCommandDefinition, HostSettings, ServiceNotLoadedError
from services.permissions import PermissionService


class FakeChat:
    """Stands in for twitchAPI's Chat; records registered commands."""

    def __init__(self):
        self.commands = {}
        self.registrations = []

    def register_command(self, name, handler):
        self.registrations.append(name)
        self.commands[name] = handler
        return True


def _started_bot(root: Path) -> ServiceBot:
    settings = HostSettings(
        _env_file=None,
        config_dir=root / "configs",
        extensions_dir=root / "extensions",
    )
    bot = ServiceBot(settings)
    asyncio.run(bot.supervisor.start_all())
    bot.chat = FakeChat()
    bot._register_chat_commands()
    return bot


def _invoke(bot: ServiceBot, name: str, user: FakeChatUser, parameter: str = "") -> FakeChatCommand:
    cmd = FakeChatCommand(user, parameter)
    asyncio.run(bot.chat.commands[name](cmd))
    return cmd


def test_chat_commands_registered_once():
    """Both built-in services expose the same commands; each name is registered once."""
    print("🔍 TESTING CHAT COMMAND REGISTRATION")

    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))
        assert bot.chat.registrations == ["services", "permissions", "perms"]

    print("✅ Commands and aliases registered once")


def test_permission_guard():
    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))

        cmd = _invoke(bot, "services", FakeChatUser("Viewer"))
        assert cmd.replies == ["You do not have permission to use this command."]

        cmd = _invoke(bot, "services", FakeChatUser("Boss", broadcaster=True))
        assert cmd.replies == ["Services: ChannelInfoProvider, PermissionService"]

        cmd = _invoke(bot, "perms", FakeChatUser("Mod", mod=True), "list moderator")
        assert cmd.replies == ["moderator: services.list, permissions.list"]


def test_disabled_permission_service_replies_unavailable():
    """Commands depending on a disabled service answer in chat instead of raising."""
    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))
        bot.registry.get_service(PermissionService).config.is_enabled = False

        boss = FakeChatUser("Boss", broadcaster=True)
        assert _invoke(bot, "services", boss).replies == ["Permissions are currently unavailable."]
        assert _invoke(bot, "permissions", boss, "list").replies == ["Permissions are currently unavailable."]


def test_handler_failures_stay_inside_the_handler():
    async def needs_missing_service(registry, cmd):
        raise ServiceNotLoadedError(PermissionService)

    async def explodes(registry, cmd):
        raise RuntimeError("handler bug")

    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))
        viewer = FakeChatUser("Viewer")

        cmd = FakeChatCommand(viewer)
        handler = bot._make_chat_handler(ChatCommandDefinition(name="lookup", handler=needs_missing_service))
        asyncio.run(handler(cmd))
        assert cmd.replies == ["This command is unavailable right now (PermissionService)."]

        cmd = FakeChatCommand(viewer)
        handler = bot._make_chat_handler(ChatCommandDefinition(name="broken", handler=explodes))
        asyncio.run(handler(cmd))
        assert cmd.replies == []


def test_console_stops_on_exit_command():
    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))
        bot.console.register_enabled_services()

        stdin = sys.stdin
        sys.stdin = io.StringIO("services\nexit\nservices\n")
        try:
            with redirect_stdout(io.StringIO()) as output:
                assert asyncio.run(bot.run_console()) is True
        finally:
            sys.stdin = stdin

        assert output.getvalue().count("PermissionService") == 1


def test_closed_console_input_keeps_bot_running():
    """End of input means no operator console, not an exit request."""
    print("🔍 TESTING HEADLESS CONSOLE")

    with tempfile.TemporaryDirectory() as temp_dir:
        bot = _started_bot(Path(temp_dir))

        stdin = sys.stdin
        sys.stdin = io.StringIO("")
        try:
            assert asyncio.run(bot.run_console()) is False
        finally:
            sys.stdin = stdin

        assert all(service.state.value == "started" for service in bot.registry.enabled_services())

    print("✅ Closed input does not stop the bot")


def main():
    """Run all bot host tests."""
    print("🧪 BOT HOST TESTS")
    print("=" * 70)

    test_chat_commands_registered_once()
    test_permission_guard()
    test_disabled_permission_service_replies_unavailable()
    test_handler_failures_stay_inside_the_handler()
    test_console_stops_on_exit_command()
    test_closed_console_input_keeps_bot_running()

    print("\n🎉 ALL BOT HOST TESTS PASSED!")


if __name__ == "__main__":
    main()
