"""Application configuration from environment variables and an optional JSON file."""

import os
import re
from pathlib import Path
from typing import Optional, Tuple, Type
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from src.errors import ConfigError

APP_VERSION = "1.0.0"

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_PING_INTERVAL = 300
URL_SCHEMES = ("http://", "https://")


def config_file_path() -> Path:
    """Path of the JSON config file (CONFIG_FILE env var, else config.json)."""
    return Path(os.getenv("CONFIG_FILE", DEFAULT_CONFIG_FILE))


class Settings(BaseSettings):
    """Application settings.

    Sources, highest priority first: init kwargs, environment, .env file,
    then the JSON config file. The JSON file uses the same keys as the
    fields (target, bot_token, chat_id, ping_interval, ...).
    """

    # Target: bare host/IP (ICMP ping) or http(s) URL (HTTP reachability)
    target: str = "example.com"

    @field_validator('target')
    @classmethod
    def validate_target(cls, v: str) -> str:
        """Validate the target to prevent command injection into ping.

        URLs must use http/https and name a host. Bare hosts are checked
        against RFC 1123 hostname format and rejected on shell metacharacters.
        """
        v = v.strip()
        if not v:
            raise ValueError('target cannot be empty')

        if v.lower().startswith(URL_SCHEMES):
            parts = urlsplit(v)
            if not parts.hostname:
                raise ValueError('URL target has no host')
            return v

        # RFC 1123 hostname pattern (allows digits at start)
        hostname_pattern = r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$'
        # IPv4 pattern
        ipv4_pattern = r'^(\d{1,3}\.){3}\d{1,3}$'

        if len(v) > 253:
            raise ValueError('hostname too long (max 253 chars)')

        # Check for shell metacharacters
        dangerous_chars = set(';&|`$(){}[]<>\\\'\"!#*?~')
        if any(c in v for c in dangerous_chars):
            raise ValueError('hostname contains invalid characters')

        if not (re.match(hostname_pattern, v) or re.match(ipv4_pattern, v)):
            raise ValueError('invalid hostname format')

        return v

    # Telegram
    bot_token: Optional[str] = None
    chat_id: Optional[str] = None
    telegram_api_url: str = "https://api.telegram.org"

    @field_validator('chat_id', mode='before')
    @classmethod
    def coerce_chat_id(cls, v):
        """Chat IDs are numeric in JSON configs but handled as strings."""
        if v is None:
            return v
        return str(v)

    # Check schedule
    ping_interval: int = DEFAULT_PING_INTERVAL  # seconds

    @field_validator('ping_interval', mode='before')
    @classmethod
    def default_ping_interval(cls, v):
        """An absent or zero interval falls back to the default."""
        if v in (None, "", 0, "0"):
            return DEFAULT_PING_INTERVAL
        return v

    @field_validator('ping_interval')
    @classmethod
    def validate_ping_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError('ping_interval must be positive')
        return v

    # Probe tuning
    http_timeout: float = 10.0  # HTTP GET timeout in seconds
    ping_count: int = 3         # ICMP packets per check
    ping_timeout: float = 2.0   # Per-packet timeout in seconds

    # Command loop tuning
    poll_timeout: int = 30            # getUpdates long-poll window
    poll_error_backoff: float = 5.0   # Pause after a failed poll
    poll_idle_pause: float = 1.0      # Pause after an empty poll

    # Web server
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_file: Optional[Path] = None

    # Build metadata (set by Docker build args)
    app_build_date: Optional[str] = None
    app_git_commit: Optional[str] = None

    @property
    def telegram_configured(self) -> bool:
        """Check if Telegram bot token and default chat are configured."""
        return bool(self.bot_token and self.chat_id)

    @property
    def is_url_target(self) -> bool:
        """Whether the target is probed over HTTP rather than ICMP."""
        return self.target.lower().startswith(URL_SCHEMES)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown environment variables / JSON keys
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, json_file=config_file_path()),
            file_secret_settings,
        )


def check_config_file() -> None:
    """Fail if CONFIG_FILE was set explicitly but does not exist.

    Raises:
        ConfigError: The configured file is missing.
    """
    explicit = os.getenv("CONFIG_FILE")
    if explicit and not Path(explicit).is_file():
        raise ConfigError(f"config file not found: {explicit}")


# Global settings instance
settings = Settings()
