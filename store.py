"""
SQLite persistence layer — pending timers.

Each execution context opens its own TimerStore; a connection is
never shared between the message listener and the worker.
"""

import logging
import sqlite3
from typing import Optional

from models import Timer

log = logging.getLogger(__name__)


def _init_db(conn: sqlite3.Connection):
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS timers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            due_at INTEGER NOT NULL,
            recipient TEXT NOT NULL,
            payload TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_timers_due ON timers(due_at);
    """)


class TimerStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert(self, due_at: int, recipient: str, payload: str) -> Timer:
        timer = Timer(due_at=due_at, recipient=recipient, payload=payload)
        with self.conn:
            cur = self.conn.execute("""
                INSERT INTO timers (due_at, recipient, payload)
                VALUES (:due_at, :recipient, :payload)
            """, timer.to_dict())
        timer.id = cur.lastrowid
        return timer

    def due_before(self, now: int) -> list[Timer]:
        """All timers with due_at <= now, in no particular order."""
        rows = self.conn.execute(
            "SELECT id, due_at, recipient, payload FROM timers WHERE due_at <= ?",
            (now,),
        ).fetchall()
        return [Timer.from_row(r) for r in rows]

    def delete_due(self, now: int) -> int:
        with self.conn:
            cur = self.conn.execute("DELETE FROM timers WHERE due_at <= ?", (now,))
        return cur.rowcount

    def min_due(self) -> Optional[int]:
        row = self.conn.execute("SELECT MIN(due_at) FROM timers").fetchone()
        return row[0]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM timers").fetchone()[0]

    def close(self):
        self.conn.close()


def open_store(path: str) -> TimerStore:
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    _init_db(conn)
    log.debug(f"Opened timer store at {path}")
    return TimerStore(conn)
