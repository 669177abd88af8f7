"""Exception types raised by the monitor."""

from typing import Optional


class MonitorError(Exception):
    """Base class for monitor errors."""


class ConfigError(MonitorError):
    """Configuration could not be loaded."""


class TelegramError(MonitorError):
    """A Telegram Bot API call failed (transport, HTTP status, or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
