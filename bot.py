"""
Twitch Service Bot

Main application that loads the built-in and extension services, connects
them to Twitch chat and the operator console, and supervises their lifecycle.
"""

import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

# Twitch API imports
from twitchAPI.chat import Chat, ChatCommand, EventData
from twitchAPI.oauth import UserAuthenticator
from twitchAPI.twitch import Twitch
from twitchAPI.type import AuthScope, ChatEvent

# Local imports
import services
from service_manager import (
    ChatCommandDefinition,
    ConfigStore,
    ConsoleCommandDispatcher,
    HostSettings,
    LifecycleSupervisor,
    ModuleDiscovery,
    ServiceLookupError,
    ServiceRegistry,
    get_host_settings,
)
from services.channel_info import ChannelInfoProviderService
from services.permissions import require_permission

logger = logging.getLogger(__name__)

USER_SCOPE = [
    AuthScope.CHAT_READ,
    AuthScope.CHAT_EDIT,
    AuthScope.MODERATOR_READ_CHATTERS,
]

EXIT_COMMANDS = ('exit', 'quit', 'stop')


class ServiceBot:
    """
    Host process for bot services.
    """

    def __init__(self, settings: HostSettings):
        self.settings = settings
        self.twitch: Optional[Twitch] = None
        self.chat: Optional[Chat] = None

        # Initialize core systems
        self.registry = ServiceRegistry()
        self.config_store = ConfigStore(settings.config_dir)
        self.discovery = ModuleDiscovery(services, settings.extensions_dir)
        self.supervisor = LifecycleSupervisor(self.registry, self.config_store, self.discovery)
        self.console = ConsoleCommandDispatcher(self.registry)

        self._registered_chat_commands: List[str] = []

    async def start(self) -> None:
        """Start all services, then connect chat and the console."""
        logger.info("Starting Service Bot...")

        await self.supervisor.start_all()
        self.console.register_enabled_services()

        if self.settings.has_twitch_credentials:
            await self._initialize_twitch_api()
            self._register_chat_commands()
            self.chat.start()
        else:
            logger.warning("Twitch credentials not configured, running without chat")

        logger.info("Bot started successfully")

    async def _initialize_twitch_api(self) -> None:
        """Authenticate the bot account and create the chat connection."""
        logger.info("Initializing Twitch API...")

        self.twitch = await Twitch(self.settings.client_id, self.settings.client_secret)
        auth = UserAuthenticator(self.twitch, USER_SCOPE)
        token, refresh_token = await auth.authenticate()
        await self.twitch.set_user_authentication(token, USER_SCOPE, refresh_token)

        self.chat = await Chat(self.twitch)
        self.chat.set_prefix(self.settings.command_prefix)
        self.chat.register_event(ChatEvent.READY, self._on_chat_ready)

        logger.info("Twitch API initialized")

    async def _on_chat_ready(self, ready_event: EventData) -> None:
        """Join the channel and hand the Twitch context to the channel provider."""
        await ready_event.chat.join_room(self.settings.channel)
        logger.info(f"Bot connected to channel: {self.settings.channel}")

        try:
            provider = self.registry.get_service(ChannelInfoProviderService)
            await provider.set_twitch_context(self.twitch, self.chat, self.settings.channel)
        except ServiceLookupError as e:
            logger.warning(f"Channel info is unavailable: {e}")
        except Exception as e:
            logger.error(f"Failed to provide Twitch context to ChannelInfoProvider: {e}")

    def _register_chat_commands(self) -> None:
        """Register the chat commands of every enabled service with the chat."""
        for service in self.registry.enabled_services():
            for command in service.chat_commands:
                for name in (command.name, *command.aliases):
                    if name in self._registered_chat_commands:
                        continue
                    self.chat.register_command(name, self._make_chat_handler(command))
                    self._registered_chat_commands.append(name)
                    logger.debug(f"Registered command: {name} for service: {service.info.name}")

        logger.info(f"Registered {len(self._registered_chat_commands)} chat commands from services")

    def _make_chat_handler(self, command: ChatCommandDefinition):
        """Bind a chat command to the registry and guard it with its permission."""

        async def handler(cmd: ChatCommand):
            try:
                if command.permission and not await require_permission(self.registry, cmd, command.permission):
                    return
                await command.handler(self.registry, cmd)
            except ServiceLookupError as e:
                logger.warning(f"Chat command '{command.name}' needs an unavailable service: {e}")
                await cmd.reply(f"This command is unavailable right now ({e.service_type.__name__}).")
            except Exception as e:
                logger.error(f"Error in chat command '{command.name}': {e}", exc_info=True)

        return handler

    async def run_console(self) -> bool:
        """
        Read operator commands from stdin.

        Returns:
            True if the operator asked to exit, False if stdin was closed
        """
        logger.info("Operator console ready. Type 'help' for commands, 'exit' to stop.")
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                logger.info("Console input closed, running without the operator console")
                return False
            if line.strip().lower() in EXIT_COMMANDS:
                return True
            output = await self.console.dispatch(line)
            if output:
                print(output)

    async def stop(self) -> None:
        """Disconnect chat, stop all services and save their configuration."""
        logger.info("Stopping Service Bot...")

        if self.chat:
            logger.debug("Stopping chat connection...")
            self.chat.stop()

        await self.supervisor.stop_all()

        if self.twitch:
            logger.debug("Closing Twitch API connection...")
            await self.twitch.close()

        logger.info("Bot stopped")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


async def main():
    """Main application entry point."""
    load_dotenv()
    settings = get_host_settings()
    setup_logging(settings.log_level)

    bot = ServiceBot(settings)
    try:
        await bot.start()

        if settings.console_enabled and await bot.run_console():
            return

        # Keep running until interrupted
        while True:
            await asyncio.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutdown signal received...")
    finally:
        await bot.stop()


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot shutdown complete")
