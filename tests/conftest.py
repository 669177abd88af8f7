"""Shared pytest fixtures."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# Set test environment before importing app modules
os.environ.setdefault("TARGET", "test.example.com")
os.environ["CONFIG_FILE"] = str(Path(__file__).resolve().parent / "no-such-config.json")
for var in ("BOT_TOKEN", "CHAT_ID", "PING_INTERVAL"):
    os.environ.pop(var, None)


T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeProber:
    """Prober stand-in returning scripted results."""

    kind = "fake"

    def __init__(self, results=(True,)):
        self.results = list(results)
        self.calls = 0

    async def probe(self) -> bool:
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


class StepClock:
    """Clock that advances a fixed step on every call."""

    def __init__(self, start=T0, step=timedelta(minutes=5)):
        self.now = start - step
        self.step = step

    def __call__(self):
        self.now = self.now + self.step
        return self.now


@pytest.fixture
def fake_notifier():
    """Notifier stand-in recording every message."""
    return SimpleNamespace(
        client=None,
        notify_default=AsyncMock(return_value=True),
        reply_to=AsyncMock(return_value=True),
    )


@pytest.fixture
def make_monitor(fake_notifier):
    """Factory for a Monitor with a scripted prober and stepping clock."""
    from src.monitor.monitor import Monitor

    def _make(results=(True,), target="test.example.com", clock=None):
        return Monitor(
            target,
            FakeProber(results),
            fake_notifier,
            clock=clock or StepClock(),
        )

    return _make
