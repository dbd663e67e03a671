"""
Channel Info Provider Service Implementation

Resolves and provides the Twitch channel the bot operates in.
"""

from typing import Optional, TYPE_CHECKING

from pydantic import Field

from service_manager import ServiceBase, ServiceConfig, ServiceInfo

if TYPE_CHECKING:
    from twitchAPI.chat import Chat
    from twitchAPI.twitch import Twitch
    from service_manager import ServiceRegistry


class ChannelInfoProviderConfig(ServiceConfig):
    """Configuration for the channel info provider."""
    channel: str = Field("", description="Login name of the channel; empty uses the host setting")


class ChannelInfoProviderService(ServiceBase):
    """
    Provides the broadcaster identity of the single channel the bot joins.

    The Twitch context arrives after the chat connection is ready, so the
    broadcaster id is unavailable until ``set_twitch_context`` completes.
    """

    config_class = ChannelInfoProviderConfig

    def __init__(self):
        super().__init__()
        self._twitch: Optional['Twitch'] = None
        self._chat: Optional['Chat'] = None
        self._channel: Optional[str] = None
        self._broadcaster_id: Optional[str] = None

    @property
    def info(self) -> ServiceInfo:
        return ServiceInfo(name="ChannelInfoProvider", version="1.0.0", author="Service Host Team")

    @property
    def channel(self) -> Optional[str]:
        return self._channel or self.config.channel or None

    @property
    def chat(self) -> Optional['Chat']:
        return self._chat

    @property
    def broadcaster_id(self) -> str:
        if self._broadcaster_id is None:
            raise RuntimeError("Broadcaster id has not been resolved yet")
        return self._broadcaster_id

    async def on_start(self) -> None:
        if not self.config.channel:
            self.logger.info("No channel configured for ChannelInfoProvider, using the host channel")

    async def on_stop(self) -> None:
        self._twitch = None
        self._chat = None
        self._broadcaster_id = None

    async def set_twitch_context(self, twitch: 'Twitch', chat: 'Chat', default_channel: Optional[str] = None) -> None:
        """
        Set the Twitch API context and resolve the broadcaster id.

        Args:
            twitch: Authenticated Twitch API instance
            chat: Connected chat instance
            default_channel: Channel to use when none is configured
        """
        self._twitch = twitch
        self._chat = chat
        self._channel = self.config.channel or default_channel
        if not self._channel:
            raise ValueError("No channel configured for ChannelInfoProvider")

        async for user in twitch.get_users(logins=[self._channel]):
            self._broadcaster_id = user.id
            break

        if self._broadcaster_id is None:
            raise ValueError(f"Failed to get broadcaster ID for channel: {self._channel}")

        self.logger.info(f"Resolved channel {self._channel} to broadcaster id {self._broadcaster_id}")


def get_broadcaster_id(registry: 'ServiceRegistry') -> str:
    """Get the broadcaster id through the registry."""
    return registry.get_service(ChannelInfoProviderService).broadcaster_id
