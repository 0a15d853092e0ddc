"""
Data models for timers and chat traffic.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Protocol
import time


# Largest value a signed 64-bit column can hold; due times must fit in it.
MAX_DUE_AT = 2**63 - 1


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass
class Timer:
    due_at: int
    recipient: str
    payload: str
    id: Optional[int] = None  # assigned by the store on insert

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_row(cls, row) -> Timer:
        return cls(**dict(row))


@dataclass
class InboundMessage:
    sender: str
    target: str
    text: str
    sender_name: str = ""

    @property
    def display_name(self) -> str:
        return self.sender_name or self.sender


class Transport(Protocol):
    """Outbound side of the chat connection."""

    async def send_notice(self, target: str, text: str) -> None: ...

    async def send_privmsg(self, target: str, text: str) -> None: ...
