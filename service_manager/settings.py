"""
Host Settings

Settings of the service host with environment variable support.
All settings can be overridden via environment variables with the BOT_ prefix.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HostSettings(BaseSettings):
    """
    Service host settings with validation and environment variable support.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Paths
    config_dir: Path = Field(Path("configs"), description="Directory holding one JSON config per service")
    extensions_dir: Path = Field(Path("extensions"), description="Directory scanned for extension modules")

    # Logging
    log_level: str = Field("INFO", description="Root logging level")

    # Twitch connection
    client_id: Optional[str] = Field(None, description="Twitch application client id")
    client_secret: Optional[str] = Field(None, description="Twitch application client secret")
    channel: Optional[str] = Field(None, description="Channel the bot joins")
    bot_name: Optional[str] = Field(None, description="Login name of the bot account")
    command_prefix: str = Field("!", description="Prefix of chat commands")

    # Operator console
    console_enabled: bool = Field(True, description="Read operator commands from stdin")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is a standard level name."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @field_validator('command_prefix')
    @classmethod
    def validate_command_prefix(cls, v: str) -> str:
        if len(v) != 1 or v.isspace():
            raise ValueError('Command prefix must be a single non-space character')
        return v

    @property
    def has_twitch_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.channel)


# Global settings instance
_settings: Optional[HostSettings] = None


def get_host_settings(env_file_path: Optional[Path] = None) -> HostSettings:
    """
    Get or create the global host settings instance.

    Args:
        env_file_path: Optional path to an environment file

    Returns:
        HostSettings: Global settings instance
    """
    global _settings
    if _settings is None:
        if env_file_path is not None and env_file_path.exists():
            _settings = HostSettings(_env_file=str(env_file_path))
        else:
            _settings = HostSettings()
    return _settings


def reset_host_settings() -> None:
    """Reset the global settings (useful for testing)."""
    global _settings
    _settings = None
