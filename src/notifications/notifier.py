"""Status-change messages and best-effort Telegram delivery."""

import logging
from datetime import timedelta
from typing import Optional

from src.errors import TelegramError
from src.metrics import notifications_failed_total, notifications_sent_total
from src.monitor.status_store import TransitionEvent
from src.notifications.telegram import TelegramClient

logger = logging.getLogger(__name__)


def format_duration(delta: Optional[timedelta]) -> str:
    """Render a duration rounded to whole seconds, e.g. '1h 2m 3s'."""
    if delta is None:
        return "0s"
    total = max(0, int(round(delta.total_seconds())))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def transition_type(event: TransitionEvent) -> str:
    """Short label for a transition, used as the metrics 'type' label."""
    if event.is_first_observation:
        return "started_up" if event.new_state else "started_down"
    return "recovered" if event.new_state else "down"


def build_transition_message(target: str, event: TransitionEvent) -> Optional[str]:
    """Build the notification text for a transition.

    Returns:
        Message text, or None if the event is not a transition.
    """
    if not event.occurred:
        return None

    if event.new_state:
        if event.is_first_observation:
            return f"🟢 Network monitor started. {target} is UP."
        return f"🟢 {target} is back UP! (was down for {format_duration(event.downtime)})"

    if event.is_first_observation:
        return f"🔴 Network monitor started. {target} is DOWN!"
    return f"🔴 {target} is DOWN!"


class Notifier:
    """Sends messages to the configured chat or to an arbitrary sender.

    Delivery is best-effort: failures are logged and counted, never raised,
    so a notification problem cannot interrupt state recording or the
    command loop.
    """

    channel = "telegram"

    def __init__(self, client: Optional[TelegramClient], default_chat_id: Optional[str]):
        self.client = client
        self.default_chat_id = default_chat_id

    @property
    def configured(self) -> bool:
        return self.client is not None and bool(self.default_chat_id)

    async def notify_default(self, message: str, message_type: str = "status") -> bool:
        """Send a message to the configured chat.

        Args:
            message: Text to send.
            message_type: Metrics label describing the message.

        Returns:
            True if sent, False if skipped or failed.
        """
        if not self.configured:
            logger.debug("Telegram not configured, skipping notification")
            return False

        try:
            await self.client.send_message(self.default_chat_id, message)
        except TelegramError as e:
            logger.error("Failed to send Telegram message: %s", e)
            notifications_failed_total.labels(channel=self.channel, type=message_type).inc()
            return False

        notifications_sent_total.labels(channel=self.channel, type=message_type).inc()
        logger.info("Telegram notification sent (%s)", message_type)
        return True

    async def reply_to(self, chat_id: str, message: str) -> bool:
        """Reply to a command sender. Errors are logged and swallowed."""
        if self.client is None:
            logger.debug("Telegram not configured, dropping reply to %s", chat_id)
            return False

        try:
            await self.client.send_message(chat_id, message)
        except TelegramError as e:
            logger.error("Failed to reply to chat %s: %s", chat_id, e)
            notifications_failed_total.labels(channel=self.channel, type="reply").inc()
            return False

        notifications_sent_total.labels(channel=self.channel, type="reply").inc()
        return True
