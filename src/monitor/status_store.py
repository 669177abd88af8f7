"""Thread-safe reachability state with edge-triggered transition detection.

The store is the only shared mutable state in the process. It is touched
from the scheduler job, the bot command loop and detached /ping tasks, so
every read and write happens under one lock. The lock never spans an
await, which keeps it safe for both asyncio tasks and worker threads.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time copy of the monitor's belief about the target."""

    is_up: bool
    last_change: Optional[datetime]
    last_check: Optional[datetime]

    @property
    def observed(self) -> bool:
        """Whether at least one check has been recorded."""
        return self.last_change is not None


@dataclass(frozen=True)
class TransitionEvent:
    """Outcome of recording one check."""

    occurred: bool
    new_state: bool
    is_first_observation: bool = False
    changed_at: Optional[datetime] = None
    previous_change: Optional[datetime] = None

    @property
    def downtime(self) -> Optional[timedelta]:
        """How long the previous state lasted, for non-initial transitions."""
        if not self.occurred or self.previous_change is None:
            return None
        return self.changed_at - self.previous_change


class StatusStore:
    """Owned state cell exposing only record_check() and snapshot()."""

    def __init__(self):
        self._lock = threading.Lock()
        self._is_up = False
        self._last_change: Optional[datetime] = None
        self._last_check: Optional[datetime] = None

    def record_check(self, is_up: bool, now: datetime) -> TransitionEvent:
        """Record a check result and report whether it is a transition.

        The first recorded result is always a transition. After that, a
        transition happens only when is_up differs from the stored state.

        A check that commits late with an older timestamp than the last
        recorded one is stamped with the last check time instead, so
        last_check never goes backwards and last_change <= last_check.

        Args:
            is_up: Probe result.
            now: Time the probe completed.

        Returns:
            TransitionEvent describing what changed.
        """
        with self._lock:
            if self._last_check is not None and now < self._last_check:
                now = self._last_check

            first_observation = self._last_change is None
            changed = is_up != self._is_up or first_observation

            self._last_check = now

            if not changed:
                return TransitionEvent(occurred=False, new_state=is_up)

            previous_change = self._last_change
            self._is_up = is_up
            self._last_change = now
            return TransitionEvent(
                occurred=True,
                new_state=is_up,
                is_first_observation=first_observation,
                changed_at=now,
                previous_change=previous_change,
            )

    def snapshot(self) -> StatusSnapshot:
        """Return a consistent copy of the current state."""
        with self._lock:
            return StatusSnapshot(
                is_up=self._is_up,
                last_change=self._last_change,
                last_check=self._last_check,
            )
