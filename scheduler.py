"""
Earliest-wake cache shared by the message listener and the worker.

`earliest_wake` is a lower bound on the next pending due time. It may
be stale-low (the worker then does a harmless empty query) but must
never be higher than the real minimum, or timers would fire late.
Anything that could raise it recomputes from the store instead.

Every read or write happens while holding `lock`.
"""

from __future__ import annotations
import asyncio

from models import MAX_DUE_AT
from store import TimerStore

# Sentinel for "nothing pending".
NO_PENDING = MAX_DUE_AT


class SchedulerState:
    def __init__(self, earliest_wake: int = NO_PENDING):
        self.earliest_wake = earliest_wake
        self.lock = asyncio.Lock()

    @classmethod
    def from_store(cls, store: TimerStore) -> SchedulerState:
        state = cls()
        state.refresh(store)
        return state

    def lower(self, due_at: int):
        if due_at < self.earliest_wake:
            self.earliest_wake = due_at

    def refresh(self, store: TimerStore):
        next_due = store.min_due()
        self.earliest_wake = NO_PENDING if next_due is None else next_due

    def is_due(self, now: int) -> bool:
        return self.earliest_wake <= now

    @property
    def pending(self) -> bool:
        return self.earliest_wake != NO_PENDING
