"""SQLAlchemy ORM models for DebtBot.

This module defines the database schema used by the bot.  It uses the
declarative mapping API provided by SQLAlchemy 2.0.  There are two
entities:

* :class:`User` describes a Telegram user who has written to the bot.
* :class:`Credit` is a loan payment a user has asked to be reminded about.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from datetime import date, datetime
from decimal import Decimal


class Base(DeclarativeBase):
    """Base class for declarative models."""
    pass


class User(Base):
    """A Telegram user who has interacted with the bot.

    Attributes
    ----------
    id : int
        Telegram user identifier.  Private chats share this id, so it is
        also where reminders are sent.
    created_at : datetime
        Timestamp of when the user record was first created.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Credit(Base):
    """A loan payment obligation recorded by a user.

    A row is only written once the bank name, amount and due date have all
    been collected and validated.  Rows are never edited; the user deletes
    and re-adds them instead.
    """

    __tablename__ = "credits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), index=True)
    bank_name: Mapped[str] = mapped_column(String(255))
    loan_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    due_date: Mapped[date] = mapped_column(Date, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
