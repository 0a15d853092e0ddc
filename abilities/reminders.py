"""
Reminders ability: `in <period> reply <text>` schedules a one-shot
delayed message. The worker delivers it once it comes due.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from durations import DurationError, parse_duration
from models import MAX_DUE_AT

if TYPE_CHECKING:
    from orchestrator import CommandContext

log = logging.getLogger(__name__)


async def command_in(ctx: CommandContext, args: str) -> str:
    # An empty period is a valid zero duration, so only a missing
    # field is a syntax error. split() always yields the period field.
    fields = args.split(" ", 2)
    if len(fields) < 2:
        return "syntax error: in requires a sub command"
    if len(fields) < 3:
        return "syntax error: in requires text"
    period, subcommand, text = fields

    try:
        duration = parse_duration(period)
    except DurationError as e:
        return f"invalid period '{period}': {e}"

    if subcommand != "reply":
        return f"subcommand must be 'reply', not '{subcommand}'"

    due_at = ctx.clock() + duration
    if due_at > MAX_DUE_AT:
        return "that's too far in the future!"

    # Group timers go back to the group: Telegram can't message a user
    # who never opened a private chat with the bot (see DESIGN.md).
    recipient = ctx.message.target if ctx.is_channel else ctx.message.sender

    # Insert under the state lock so the worker can't query and purge
    # between our insert and our cache update.
    async with ctx.state.lock:
        try:
            timer = ctx.store.insert(due_at, recipient, text)
        except Exception:
            log.exception(f"Failed to save timer for {recipient}")
            return "failed to save timer, try again later"
        ctx.state.lower(due_at)

    log.info(f"Scheduled timer {timer.id} for {recipient} at {due_at}")
    return f"Will reply '{text}' at '{due_at}'"
