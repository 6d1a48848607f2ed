"""Echo bot built on the Teleloop SDK.

Replies to every text message with the same text, answers inline queries
with a single article echoing the query, and acknowledges callback buttons.
Configuration comes from the environment (see :mod:`config`).
"""

import asyncio

from bot.facade import Bot
from config import BOT_TOKEN, POLL_TIMEOUT
from core.logger import TeleloopLogger
from sdk.exceptions import TeleloopError
from sdk.models import (
    CallbackResponse,
    InlineQueryResultArticle,
    InputTextMessageContent,
    QueryResponse,
)

logger = TeleloopLogger.get_logger()


async def echo_messages(bot: Bot, messages: asyncio.Queue) -> None:
    """Reply to each text message with its own text."""
    while True:
        message = await messages.get()
        if not message.text:
            continue
        try:
            await bot.send_message(message.chat, message.text)
        except TeleloopError as exc:
            logger.error("Echo failed", extra={"chat_id": message.chat.id, "error": str(exc)})


async def answer_queries(bot: Bot, queries: asyncio.Queue) -> None:
    """Answer each inline query with one article repeating the query text."""
    while True:
        query = await queries.get()
        text = query.query or "…"
        article = InlineQueryResultArticle(
            id=query.id,
            title=text,
            input_message_content=InputTextMessageContent(message_text=text),
        )
        try:
            await bot.answer_inline_query(query, QueryResponse(results=[article], cache_time=0))
        except TeleloopError as exc:
            logger.error("Inline answer failed", extra={"query_id": query.id, "error": str(exc)})


async def acknowledge_callbacks(bot: Bot, callbacks: asyncio.Queue) -> None:
    """Acknowledge each callback button press."""
    while True:
        callback = await callbacks.get()
        try:
            await bot.answer_callback_query(callback, CallbackResponse(text=callback.data))
        except TeleloopError as exc:
            logger.error("Callback answer failed", extra={"callback_id": callback.id, "error": str(exc)})


async def main() -> None:
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    bot = Bot.from_env(
        messages=asyncio.Queue(maxsize=100),
        queries=asyncio.Queue(maxsize=100),
        callbacks=asyncio.Queue(maxsize=100),
    )
    logger.info("Echo bot is running. Polling for updates...", extra={"username": bot.identity.username})

    workers = [
        asyncio.create_task(echo_messages(bot, bot.messages)),
        asyncio.create_task(answer_queries(bot, bot.queries)),
        asyncio.create_task(acknowledge_callbacks(bot, bot.callbacks)),
    ]
    try:
        await bot.start(POLL_TIMEOUT)
    finally:
        bot.stop()
        for worker in workers:
            worker.cancel()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Echo bot stopped")
