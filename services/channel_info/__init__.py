"""
Channel Info Provider

Provides the identity of the Twitch channel the bot is connected to.
"""

from .channel_info_service import ChannelInfoProviderConfig, ChannelInfoProviderService, get_broadcaster_id

__all__ = ['ChannelInfoProviderConfig', 'ChannelInfoProviderService', 'get_broadcaster_id']
