"""
Telegram Bot — the user-facing interface.

Feeds Telegram messages to the orchestrator and runs the timer
worker on the application's job queue.

Group chats are channels and are addressed as "#<chat_id>"; private
chats are direct conversations addressed by the user's id.

Usage:
  python bot.py
"""

import logging
from typing import Optional

from telegram import Bot, Update
from telegram.constants import ChatType
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    MessageHandler,
    filters,
    ContextTypes,
)

from config import TELEGRAM_BOT_TOKEN, DB_PATH
from models import InboundMessage
from orchestrator import CHANNEL_SIGIL, TAG_MARKER, Orchestrator
from scheduler import SchedulerState
from store import open_store
from worker import BackgroundWorker, TICK_INTERVAL

logging.basicConfig(
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    level=logging.INFO,
)
# python-telegram-bot logs every poll request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
log = logging.getLogger("bot")

# Telegram limit is 4096
MAX_MESSAGE_LENGTH = 4000

USAGE = (
    "Schedule a delayed reply:\n\n"
    "  in <period> reply <text>\n\n"
    "Period is a run of number+unit pairs, e.g. 90s, 1h30m, 2d.\n"
    "Units: ms, s, m, h, d, w, mo.\n\n"
    f"In a group, start the command with {TAG_MARKER}"
)


# ── Orchestrator → Telegram ─────────────────────────────────────

def chat_id_for(destination: str) -> int:
    return int(destination.removeprefix(CHANNEL_SIGIL))


class TelegramTransport:
    """Sends orchestrator and worker output to Telegram chats."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_notice(self, target: str, text: str):
        await self._send(chat_id_for(target), text)

    async def send_privmsg(self, target: str, text: str):
        await self._send(chat_id_for(target), text)

    async def _send(self, chat_id: int, text: str):
        # Chunk long messages
        for i in range(0, len(text), MAX_MESSAGE_LENGTH):
            await self.bot.send_message(
                chat_id=chat_id,
                text=text[i : i + MAX_MESSAGE_LENGTH],
            )


# ── Telegram → Orchestrator ─────────────────────────────────────

def to_inbound(update: Update) -> Optional[InboundMessage]:
    """Map a Telegram update to an InboundMessage, or None if it has no text."""
    message = update.effective_message
    chat = update.effective_chat
    user = update.effective_user
    if not message or not message.text or not chat or not user:
        return None

    if chat.type == ChatType.PRIVATE:
        target = str(chat.id)
    else:
        target = f"{CHANNEL_SIGIL}{chat.id}"

    return InboundMessage(
        sender=str(user.id),
        target=target,
        text=message.text,
        sender_name=user.username or user.first_name or "",
    )


def make_message_handler(orchestrator: Orchestrator):
    async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Route plain text messages through the orchestrator."""
        inbound = to_inbound(update)
        if inbound is None:
            return
        await orchestrator.handle_message(inbound)
    return handle_message


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.effective_message.reply_text(USAGE)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE):
    log.error(f"Unhandled error: {context.error}", exc_info=context.error)


# ── Main ────────────────────────────────────────────────────────

def build_application() -> Application:
    # The listener and the worker each get their own connection.
    listener_store = open_store(DB_PATH)
    worker_store = open_store(DB_PATH)

    state = SchedulerState.from_store(listener_store)
    log.info(f"Recovered {listener_store.count()} pending timer(s) from {DB_PATH}")

    app = ApplicationBuilder().token(TELEGRAM_BOT_TOKEN).build()
    transport = TelegramTransport(app.bot)

    orchestrator = Orchestrator(listener_store, state)
    orchestrator.set_transport(transport)
    worker = BackgroundWorker(worker_store, state, transport)

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_start))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND,
                                   make_message_handler(orchestrator)))
    app.add_error_handler(on_error)

    app.job_queue.run_repeating(worker.run_job, interval=TICK_INTERVAL,
                                first=TICK_INTERVAL, name="timers")
    return app


def main():
    app = build_application()
    log.info("Bot starting (Telegram polling)...")
    app.run_polling()


if __name__ == "__main__":
    main()
