"""Repository layer for database access.

This module holds every query the bot runs so that the rest of the code
never builds SQL itself.  Each function takes an open :class:`AsyncSession`;
opening sessions and translating errors is the job of
:mod:`debtbot.storage`.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Credit, User


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    """Return a User instance for the given Telegram ID, or None if not found."""
    return await db.scalar(select(User).where(User.id == user_id))


async def get_or_create_user(db: AsyncSession, user_id: int) -> User:
    """Return the user with ``user_id``, inserting it first if needed.

    Calling this repeatedly for the same ID never creates a second row.
    """
    u = await get_user(db, user_id)
    if u is not None:
        return u
    u = User(id=user_id)
    db.add(u)
    await db.commit()
    # load the server-side created_at default
    await db.refresh(u)
    return u


async def add_credit(
    db: AsyncSession,
    user_id: int,
    bank_name: str,
    loan_amount: Decimal,
    due_date: date,
) -> Credit:
    """Insert a new credit and return it with its assigned ID."""
    credit = Credit(user_id=user_id, bank_name=bank_name, loan_amount=loan_amount, due_date=due_date)
    db.add(credit)
    await db.flush()  # assign credit ID
    await db.commit()
    await db.refresh(credit)
    return credit


async def list_user_credits(db: AsyncSession, user_id: int) -> list[Credit]:
    """Return the user's credits, earliest due date first.

    Credits sharing a due date keep their insertion order, so repeated calls
    list the same rows in the same positions.
    """
    result = await db.execute(
        select(Credit).where(Credit.user_id == user_id).order_by(Credit.due_date, Credit.id)
    )
    return list(result.scalars())


async def list_credits_due_on(db: AsyncSession, day: date) -> list[Credit]:
    """Return all credits, for every user, whose payment falls on ``day``."""
    result = await db.execute(select(Credit).where(Credit.due_date == day).order_by(Credit.id))
    return list(result.scalars())


async def delete_credit(db: AsyncSession, credit_id: int) -> bool:
    """Delete a credit by ID.

    Returns ``True`` if a row was removed.  Unknown IDs are not an error.
    """
    res = await db.execute(delete(Credit).where(Credit.id == credit_id))
    await db.commit()
    return res.rowcount > 0
