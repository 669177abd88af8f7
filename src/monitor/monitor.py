"""Monitor orchestrator: probe, record, notify on edges."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Coroutine, Optional, Set

from src.metrics import check_duration_seconds, checks_total, target_up, transitions_total
from src.monitor.status_store import StatusSnapshot, StatusStore, TransitionEvent
from src.notifications.notifier import (
    Notifier,
    build_transition_message,
    format_duration,
    transition_type,
)
from src.notifications.telegram import TelegramClient
from src.probe.prober import Prober

logger = logging.getLogger(__name__)

# Global monitor instance
monitor: Optional["Monitor"] = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Monitor:
    """Drives the prober, owns the status store, dispatches notifications.

    run_check() may be called concurrently (timer tick and a /ping). The
    probes run unsynchronized; only recording is atomic, so whichever check
    records last decides the stored state.
    """

    def __init__(
        self,
        target: str,
        prober: Prober,
        notifier: Notifier,
        store: Optional[StatusStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.target = target
        self.prober = prober
        self.notifier = notifier
        self.store = store or StatusStore()
        self.clock = clock
        self._tasks: Set[asyncio.Task] = set()

    async def run_check(self) -> TransitionEvent:
        """Probe the target once and record the result.

        Returns:
            The transition event produced by this check.
        """
        started = time.monotonic()
        is_up = await self.prober.probe()
        check_duration_seconds.labels(probe=self.prober.kind).observe(time.monotonic() - started)

        event = self.store.record_check(is_up, self.clock())

        state = "UP" if is_up else "DOWN"
        checks_total.labels(result=state.lower()).inc()
        target_up.labels(target=self.target).set(1 if is_up else 0)

        if not event.occurred:
            logger.info("Check %s: still %s", self.target, state)
            return event

        transitions_total.labels(new_state=state.lower()).inc()
        message = build_transition_message(self.target, event)
        if is_up:
            logger.info("Status change: %s", message)
        else:
            logger.warning("Status change: %s", message)

        self.spawn(
            self.notifier.notify_default(message, message_type=transition_type(event)),
            name="notify-transition",
        )
        return event

    def snapshot(self) -> StatusSnapshot:
        """Read-only copy of the current status."""
        return self.store.snapshot()

    def status_report(self, now: Optional[datetime] = None) -> str:
        """Human-readable status for the /status command."""
        snap = self.store.snapshot()
        now = now or self.clock()

        if not snap.observed:
            return (
                f"Target: {self.target}\n"
                f"Status: UNKNOWN ⚪\n"
                f"Since: startup\n"
                f"Last check: never"
            )

        status = "UP 🟢" if snap.is_up else "DOWN 🔴"
        return (
            f"Target: {self.target}\n"
            f"Status: {status}\n"
            f"Since: {format_duration(now - snap.last_change)} ago\n"
            f"Last check: {format_duration(now - snap.last_check)} ago"
        )

    def spawn(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        """Run a coroutine as a detached background task.

        The task is kept referenced until it finishes; failures are logged.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all background tasks, including ones they spawn."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def build_monitor(settings) -> Monitor:
    """Wire prober, Telegram notifier and monitor from settings.

    Args:
        settings: Application settings.

    Returns:
        Configured Monitor; also stored as the global instance.
    """
    global monitor

    client = None
    if settings.bot_token:
        client = TelegramClient(settings.bot_token, api_url=settings.telegram_api_url)
    else:
        logger.warning("Telegram bot token not configured; notifications disabled")

    prober = Prober(
        settings.target,
        http_timeout=settings.http_timeout,
        ping_count=settings.ping_count,
        ping_timeout=settings.ping_timeout,
    )
    notifier = Notifier(client, settings.chat_id)
    monitor = Monitor(settings.target, prober, notifier)
    logger.info("Monitor built for %s (%s probe)", settings.target, prober.kind)
    return monitor


def get_monitor() -> Optional[Monitor]:
    """Get the current monitor instance.

    Returns:
        The monitor or None if not built yet.
    """
    return monitor
