"""Telegram bot command loop.

Long-polls getUpdates with an offset cursor and answers three commands:

    /status  current status report
    /start   greeting with the sender's chat ID
    /ping    immediate acknowledgement, then a fresh check and report

Anything else is ignored. The cursor is advanced past each update before
it is handled, so a crash mid-dispatch never replays a command.
"""

import asyncio
import logging
from typing import Optional

from src.errors import TelegramError
from src.metrics import command_poll_errors_total, commands_total
from src.monitor.monitor import Monitor
from src.notifications.notifier import Notifier
from src.notifications.telegram import InboundCommand, TelegramClient

logger = logging.getLogger(__name__)

PING_ACK = "Checking now..."

START_TEXT = (
    "Network Monitor Bot\n"
    "\n"
    "Your chat ID: {chat_id}\n"
    "\n"
    "Commands:\n"
    "/status - Check current status\n"
    "/ping - Run a check now"
)


def parse_command(text: str) -> Optional[str]:
    """Extract the command name from message text.

    '/status@my_bot extra' -> '/status'. Returns None for plain text.
    """
    text = (text or "").strip()
    if not text.startswith("/"):
        return None
    return text.split()[0].split("@", 1)[0].lower()


class CommandLoop:
    """Poll/dispatch cycle over an ever-increasing offset cursor."""

    def __init__(
        self,
        client: TelegramClient,
        monitor: Monitor,
        notifier: Notifier,
        poll_timeout: int = 30,
        error_backoff: float = 5.0,
        idle_pause: float = 1.0,
    ):
        self.client = client
        self.monitor = monitor
        self.notifier = notifier
        self.poll_timeout = poll_timeout
        self.error_backoff = error_backoff
        self.idle_pause = idle_pause
        self.offset = 0
        self.running = False
        self._stop = asyncio.Event()

    async def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch them in order.

        Returns:
            Number of new updates consumed.

        Raises:
            TelegramError: The poll itself failed.
        """
        updates = await self.client.get_updates(self.offset, timeout=self.poll_timeout)

        consumed = 0
        for command in updates:
            if command.sequence_token < self.offset:
                logger.debug("Skipping already consumed update %d", command.sequence_token)
                continue
            self.offset = command.sequence_token + 1
            consumed += 1

            if command.sender_id is None:
                continue
            await self.dispatch(command)

        return consumed

    async def dispatch(self, command: InboundCommand) -> None:
        """Handle one inbound message."""
        chat_id = command.sender_id
        logger.info("Received message from chat %s: %s", chat_id, command.text)

        name = parse_command(command.text)
        if name == "/status":
            commands_total.labels(command="status").inc()
            await self.notifier.reply_to(chat_id, self.monitor.status_report())
        elif name == "/start":
            commands_total.labels(command="start").inc()
            await self.notifier.reply_to(chat_id, START_TEXT.format(chat_id=chat_id))
        elif name == "/ping":
            commands_total.labels(command="ping").inc()
            await self.notifier.reply_to(chat_id, PING_ACK)
            self.monitor.spawn(self._check_and_report(chat_id), name=f"ping-{chat_id}")
        else:
            logger.debug("Ignoring unrecognized message from chat %s", chat_id)

    async def _check_and_report(self, chat_id: str) -> None:
        await self.monitor.run_check()
        await self.notifier.reply_to(chat_id, self.monitor.status_report())

    async def run(self) -> None:
        """Poll until stop() is called.

        Poll or dispatch failures pause for error_backoff and retry; empty
        polls pause for idle_pause. Neither ends the loop.
        """
        self.running = True
        logger.info("Command loop started (long-poll %ds)", self.poll_timeout)
        try:
            while not self._stop.is_set():
                try:
                    consumed = await self.poll_once()
                except TelegramError as e:
                    command_poll_errors_total.inc()
                    logger.error("Error getting updates: %s", e)
                    await self._pause(self.error_backoff)
                    continue
                except Exception:
                    command_poll_errors_total.inc()
                    logger.exception("Unexpected error in command loop")
                    await self._pause(self.error_backoff)
                    continue

                if consumed == 0:
                    await self._pause(self.idle_pause)
        finally:
            self.running = False
            logger.info("Command loop stopped")

    def stop(self) -> None:
        """Ask run() to exit after the current poll."""
        self._stop.set()

    async def _pause(self, seconds: float) -> None:
        """Sleep, returning early if stop() is called."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass


# Global command loop instance and its task
command_loop: Optional[CommandLoop] = None
_loop_task: Optional[asyncio.Task] = None


def start_command_loop(monitor: Monitor, settings) -> Optional[CommandLoop]:
    """Start polling for bot commands if Telegram is configured.

    Args:
        monitor: Monitor the commands act on.
        settings: Application settings (poll timing).

    Returns:
        The running CommandLoop, or None when there is no bot client.
    """
    global command_loop, _loop_task

    notifier = monitor.notifier
    if notifier.client is None:
        logger.info("Telegram not configured, bot commands disabled")
        return None

    command_loop = CommandLoop(
        notifier.client,
        monitor,
        notifier,
        poll_timeout=settings.poll_timeout,
        error_backoff=settings.poll_error_backoff,
        idle_pause=settings.poll_idle_pause,
    )
    _loop_task = asyncio.get_running_loop().create_task(command_loop.run(), name="command-loop")
    return command_loop


async def stop_command_loop() -> None:
    """Stop the command loop, abandoning any in-flight long-poll."""
    global command_loop, _loop_task

    if command_loop is not None:
        command_loop.stop()
    if _loop_task is not None:
        _loop_task.cancel()
        try:
            await _loop_task
        except asyncio.CancelledError:
            pass
    command_loop = None
    _loop_task = None


def get_command_loop() -> Optional[CommandLoop]:
    """Get the running command loop, if any."""
    return command_loop
