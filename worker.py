"""
Background worker: fires timers once they come due.

Runs as a repeating job every TICK_INTERVAL seconds. Each tick takes
the scheduler lock, skips cheaply if the earliest-wake cache says
nothing is due yet, and otherwise delivers, deletes and recomputes
the cache from the store.

A failed tick is logged and abandoned. The next tick starts again
from whatever is in the store, so undelivered timers are retried.
"""

import logging
from typing import Callable

from telegram.ext import CallbackContext

from models import Transport, now_ms
from scheduler import SchedulerState
from store import TimerStore

log = logging.getLogger(__name__)

TICK_INTERVAL = 2.0  # seconds


class BackgroundWorker:
    def __init__(self, store: TimerStore, state: SchedulerState,
                 transport: Transport, clock: Callable[[], int] = now_ms):
        self.store = store
        self.state = state
        self.transport = transport
        self.clock = clock

    async def tick(self) -> int:
        """Run one check. Returns the number of timers delivered."""
        async with self.state.lock:
            now = self.clock()
            if not self.state.is_due(now):
                return 0

            try:
                timers = self.store.due_before(now)
                if not timers:
                    return 0

                # Inserts wait on the lock until the whole batch is sent.
                log.info(f"Delivering {len(timers)} due timer(s)")
                for timer in timers:
                    await self.transport.send_notice(timer.recipient, timer.payload)

                self.store.delete_due(now)
                self.state.refresh(self.store)
            except Exception:
                log.exception("Timer tick failed, will retry next tick")
                return 0

        log.debug(f"Delivered {len(timers)} timer(s)")
        return len(timers)

    async def run_job(self, context: CallbackContext):
        """JobQueue callback."""
        await self.tick()
