"""Entry point for DebtBot when running via polling.

This module initializes the database, configures the Telegram bot, starts
the daily reminder task and runs the polling loop.  Run it with::

    python -m debtbot.main
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from aiogram import Bot, Dispatcher
from aiogram.enums.parse_mode import ParseMode
from aiogram.client.default import DefaultBotProperties
from aiogram.fsm.storage.memory import MemoryStorage

from .config import settings
from .db import init_models, make_engine, make_session_factory
from .commands import CommandDispatcher
from .handlers import chat
from .notifier import Notifier, run_daily
from .sessions import FSMSessionStore
from .storage import CreditStorage

logger = logging.getLogger(__name__)


async def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    if not settings.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN must be set in .env")

    engine = make_engine(settings.database_url)
    # Fails here if the database file cannot be opened.
    await init_models(engine)
    logger.info("Database ready at %s", settings.DB_NAME)

    storage = CreditStorage(make_session_factory(engine))

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    # Rejects a bad token before we start polling.
    me = await bot.get_me()
    logger.info("Authorized as @%s", me.username)

    # Form sessions live in the same FSM storage the dispatcher uses.
    fsm_storage = MemoryStorage()
    ttl = timedelta(minutes=settings.SESSION_TTL_MINUTES) if settings.SESSION_TTL_MINUTES > 0 else None
    sessions = FSMSessionStore(fsm_storage, bot_id=bot.id, ttl=ttl)
    commands = CommandDispatcher(storage, sessions)

    dp = Dispatcher(storage=fsm_storage, commands=commands)
    dp.include_router(chat.router)

    reminders = asyncio.create_task(run_daily(bot, Notifier(storage), settings.NOTIFY_HOUR))
    try:
        logger.info("Bot started (polling).")
        await dp.start_polling(bot)
    finally:
        reminders.cancel()
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
