"""
Shared fixtures for the timer bot tests.

Provides:
- A throwaway SQLite timer store
- A controllable millisecond clock
- A recording transport
- Message factories for direct and channel traffic
"""

import os

# bot.py reads the token at import time
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")

import pytest
from unittest.mock import AsyncMock, MagicMock

from models import InboundMessage
from orchestrator import Orchestrator
from scheduler import SchedulerState
from store import open_store
from worker import BackgroundWorker


START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "timers.db")


@pytest.fixture
def store(db_path):
    s = open_store(db_path)
    yield s
    s.close()


@pytest.fixture
def worker_store(db_path):
    """Second connection to the same database, as the worker has."""
    s = open_store(db_path)
    yield s
    s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state():
    return SchedulerState()


@pytest.fixture
def transport():
    t = MagicMock()
    t.send_notice = AsyncMock()
    t.send_privmsg = AsyncMock()
    return t


@pytest.fixture
def orchestrator(store, state, clock, transport):
    o = Orchestrator(store, state, clock=clock)
    o.set_transport(transport)
    return o


@pytest.fixture
def worker(worker_store, state, clock, transport):
    return BackgroundWorker(worker_store, state, transport, clock=clock)


@pytest.fixture
def direct_message():
    """Factory for messages sent privately to the bot."""
    def _make(text: str, sender: str = "1001") -> InboundMessage:
        return InboundMessage(sender=sender, target=sender, text=text,
                              sender_name="alice")
    return _make


@pytest.fixture
def channel_message():
    """Factory for messages sent in a group chat."""
    def _make(text: str, sender: str = "1001",
              target: str = "#-100200") -> InboundMessage:
        return InboundMessage(sender=sender, target=target, text=text,
                              sender_name="alice")
    return _make
