"""Storage gateway used by the bot logic.

:class:`CreditStorage` wraps the query functions in :mod:`debtbot.repo`.
Every call opens its own session, so the message handlers and the daily
notifier can share one gateway without sharing a transaction.  Database
errors come out as :class:`~debtbot.errors.StorageError`.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import repo
from .errors import NotFound, StorageError
from .models import Credit, User

logger = logging.getLogger(__name__)


class CreditStorage:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def get_user(self, user_id: int) -> User:
        """Return the user with ``user_id``.

        Raises :class:`NotFound` if the user has never written to the bot.
        """
        try:
            async with self._session() as db:
                user = await repo.get_user(db, user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"could not load user {user_id}") from e
        if user is None:
            raise NotFound(f"user {user_id} not found")
        return user

    async def create_user_if_absent(self, user_id: int) -> User:
        try:
            async with self._session() as db:
                return await repo.get_or_create_user(db, user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"could not create user {user_id}") from e

    async def add_credit(self, user_id: int, bank_name: str, loan_amount: Decimal, due_date: date) -> Credit:
        try:
            async with self._session() as db:
                credit = await repo.add_credit(db, user_id, bank_name, loan_amount, due_date)
        except SQLAlchemyError as e:
            raise StorageError(f"could not save credit for user {user_id}") from e
        logger.info("Saved credit id=%s for user %s", credit.id, user_id)
        return credit

    async def list_credits(self, user_id: int) -> list[Credit]:
        """Return the user's credits in display order.

        Both the list and the delete flows number credits from this result,
        so the ordering here is what makes a chosen number point at the
        right row.
        """
        try:
            async with self._session() as db:
                credits = await repo.list_user_credits(db, user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"could not list credits for user {user_id}") from e
        logger.debug("Found %d credits for user %s", len(credits), user_id)
        return credits

    async def credits_due_on(self, day: date) -> list[Credit]:
        try:
            async with self._session() as db:
                return await repo.list_credits_due_on(db, day)
        except SQLAlchemyError as e:
            raise StorageError(f"could not list credits due on {day}") from e

    async def delete_credit(self, credit_id: int) -> bool:
        try:
            async with self._session() as db:
                removed = await repo.delete_credit(db, credit_id)
        except SQLAlchemyError as e:
            raise StorageError(f"could not delete credit {credit_id}") from e
        logger.info("Deleted credit id=%s (existed=%s)", credit_id, removed)
        return removed
