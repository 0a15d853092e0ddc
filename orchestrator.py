"""
Orchestrator — turns inbound chat messages into commands and replies.

Addressing:
  - A destination starting with "#" is a channel; anything else is
    a direct conversation with the bot.
  - In a channel, only text starting with the tag marker is treated
    as a command. Untagged channel chatter is ignored.
  - Direct messages are always commands; a tag there is optional.

The first word selects a handler from the command registry. Every
handler is `async handler(ctx, args) -> str`; an empty string means
"say nothing".
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from abilities.reminders import command_in
from models import InboundMessage, Transport, now_ms
from scheduler import SchedulerState
from store import TimerStore

log = logging.getLogger(__name__)

CHANNEL_SIGIL = "#"
TAG_MARKER = "¡"


def is_channel(target: str) -> bool:
    return target.startswith(CHANNEL_SIGIL)


def split_command(message: InboundMessage) -> Optional[tuple[str, str]]:
    """
    Return (command_name, rest) for a message addressed to the bot,
    or None if the message isn't a command at all.
    """
    tagged = message.text.startswith(TAG_MARKER)
    if is_channel(message.target) and not tagged:
        return None
    line = message.text[len(TAG_MARKER):] if tagged else message.text
    name, _, rest = line.partition(" ")
    return name, rest


@dataclass
class CommandContext:
    message: InboundMessage
    store: TimerStore
    state: SchedulerState
    clock: Callable[[], int] = now_ms

    @property
    def is_channel(self) -> bool:
        return is_channel(self.message.target)


Handler = Callable[[CommandContext, str], Awaitable[str]]


class Orchestrator:
    def __init__(self, store: TimerStore, state: SchedulerState,
                 clock: Callable[[], int] = now_ms):
        self.store = store
        self.state = state
        self.clock = clock
        self.commands: dict[str, Handler] = {}
        self._transport: Optional[Transport] = None
        self.register("in", command_in)

    def set_transport(self, transport: Transport):
        """Register the outbound side used to relay responses."""
        self._transport = transport

    def register(self, name: str, handler: Handler):
        self.commands[name] = handler

    # ── Dispatch ────────────────────────────────────────────────

    async def dispatch(self, message: InboundMessage) -> str:
        """Run the command in `message` and return the response text."""
        command = split_command(message)
        if command is None:
            return ""
        name, args = command

        handler = self.commands.get(name)
        if handler is None:
            return f"unknown command: {name}"

        ctx = CommandContext(message=message, store=self.store,
                             state=self.state, clock=self.clock)
        return await handler(ctx, args)

    async def handle_message(self, message: InboundMessage):
        """Dispatch one inbound message and relay any response."""
        try:
            response = await self.dispatch(message)
        except Exception:
            log.exception(f"Failed processing message from {message.sender}")
            return

        if not response:
            return

        try:
            await self._relay(message, response)
        except Exception:
            log.exception(f"Failed sending response to {message.sender}")

    async def _relay(self, message: InboundMessage, response: str):
        if self._transport is None:
            log.warning(f"No transport set, dropping response: {response}")
            return
        if is_channel(message.target):
            await self._transport.send_notice(
                message.target, f"{message.display_name}: {response}"
            )
        else:
            await self._transport.send_privmsg(message.sender, response)
