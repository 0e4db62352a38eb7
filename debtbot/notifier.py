"""Daily payment reminders.

Once a day, at ``NOTIFY_HOUR`` local time, every user with a credit due the
following day gets one reminder per such credit.  Problems with a single
credit or recipient are logged and skipped; they never stop the rest of the
batch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from . import texts
from .errors import NotFound, StorageError
from .storage import CreditStorage

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A message that should be delivered to a particular chat."""

    chat_id: int
    text: str


class Notifier:
    def __init__(self, storage: CreditStorage) -> None:
        self._storage = storage

    async def collect(self, today: Optional[date] = None) -> list[Notification]:
        """Build reminders for every credit due the day after ``today``.

        ``today`` defaults to the local calendar date.
        """
        today = today or date.today()
        tomorrow = today + timedelta(days=1)
        try:
            credits = await self._storage.credits_due_on(tomorrow)
        except StorageError:
            logger.exception("Could not load credits due on %s", tomorrow)
            return []

        out: list[Notification] = []
        for credit in credits:
            try:
                user = await self._storage.get_user(credit.user_id)
            except NotFound:
                logger.warning("Skipping credit %s: user %s not found", credit.id, credit.user_id)
                continue
            except StorageError:
                logger.exception("Skipping credit %s: could not load user %s", credit.id, credit.user_id)
                continue
            out.append(Notification(chat_id=user.id, text=texts.reminder(credit)))
        return out

    async def send(self, bot: Bot, today: Optional[date] = None) -> int:
        """Collect and deliver today's reminders.  Returns how many were sent."""
        notifications = await self.collect(today)
        sent = 0
        for n in notifications:
            try:
                await bot.send_message(n.chat_id, n.text)
                sent += 1
            except TelegramAPIError:
                logger.exception("Could not send reminder to chat %s", n.chat_id)
        logger.info("Reminders sent: %d/%d", sent, len(notifications))
        return sent


def seconds_until_next_run(now: datetime, hour: int) -> float:
    """Return the delay from ``now`` until the next ``hour``:00.

    If that time has already passed today (or is exactly now), the next run
    is tomorrow.
    """
    next_run = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


async def run_daily(bot: Bot, notifier: Notifier, hour: int) -> None:
    """Send reminders every day at ``hour``:00 local time, forever."""
    while True:
        wait_seconds = seconds_until_next_run(datetime.now(), hour)
        logger.info("Next reminder run in %ds", int(wait_seconds))
        await asyncio.sleep(wait_seconds)
        logger.info("Sending daily notifications...")
        try:
            await notifier.send(bot)
        except Exception:
            logger.exception("Daily reminder run failed")
