"""Multi-step input handling.

Once a user has started adding or deleting a credit, every plain text
message they send is routed here together with their
:class:`~debtbot.sessions.ConversationSession`.  :class:`CreditInputFlow`
validates the text for the current step and either asks again, moves on to
the next step, or finishes the flow.

Rules every step follows:

* bad input gets an explanation and the same question again; nothing already
  collected is lost and the step does not change;
* a finishing step (saving or deleting a credit) always ends the session,
  even when the database call fails.  The user then starts over.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from . import texts
from .errors import StorageError
from .sessions import ConversationSession, CreditForm, DeleteForm, SessionStore
from .storage import CreditStorage

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Matches the credits.loan_amount column, Numeric(14, 2).
MAX_AMOUNT_INTEGER_DIGITS = 12
_CENTS = Decimal("0.01")


@dataclass
class Reply:
    """A message to send back to the chat the update came from.

    ``menu`` attaches the main reply keyboard; ``quote`` sends it as a reply
    to the user's message.
    """

    text: str
    menu: bool = False
    quote: bool = True


def parse_amount(text: str) -> Optional[Decimal]:
    """Parse a loan amount such as ``10000.50``.

    Returns ``None`` for anything that is not a finite, non-negative number,
    has more than two digits after the point or does not fit the column.
    Accepted amounts are stored exactly as typed.
    """
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    if value.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        return None
    if value.quantize(_CENTS) != value:
        return None
    return value


def parse_due_date(text: str) -> Optional[date]:
    """Parse a date written exactly as ``YYYY-MM-DD``."""
    text = text.strip()
    if not _DATE_RE.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_ordinal(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


class CreditInputFlow:
    def __init__(self, storage: CreditStorage, sessions: SessionStore) -> None:
        self._storage = storage
        self._sessions = sessions
        self._steps = {
            CreditForm.bank_name.state: self._on_bank_name,
            CreditForm.loan_amount.state: self._on_loan_amount,
            CreditForm.due_date.state: self._on_due_date,
            DeleteForm.choice.state: self._on_delete_choice,
        }

    async def handle(self, user_id: int, session: ConversationSession, text: str) -> Reply:
        """Feed one message into the user's current step and return the answer."""
        step = self._steps.get(session.step)
        if step is None:
            logger.warning("User %s has a session in unknown step %s, dropping it", user_id, session.step)
            await self._sessions.delete(user_id)
            return Reply(texts.GENERIC_ERROR)
        logger.debug("User %s input at step %s", user_id, session.step)
        return await step(user_id, session, text)

    async def _on_bank_name(self, user_id: int, session: ConversationSession, text: str) -> Reply:
        # any text is a valid bank name
        session.fields["bank_name"] = text
        session.step = CreditForm.loan_amount.state
        await self._sessions.put(user_id, session)
        return Reply(texts.ASK_AMOUNT)

    async def _on_loan_amount(self, user_id: int, session: ConversationSession, text: str) -> Reply:
        if parse_amount(text) is None:
            await self._sessions.put(user_id, session)
            return Reply(texts.BAD_AMOUNT)
        session.fields["loan_amount"] = text.strip()
        session.step = CreditForm.due_date.state
        await self._sessions.put(user_id, session)
        return Reply(texts.ASK_DUE_DATE)

    async def _on_due_date(self, user_id: int, session: ConversationSession, text: str) -> Reply:
        due_date = parse_due_date(text)
        if due_date is None:
            await self._sessions.put(user_id, session)
            return Reply(texts.BAD_DUE_DATE)
        session.fields["due_date"] = text.strip()
        try:
            await self._storage.add_credit(
                user_id,
                session.fields["bank_name"],
                Decimal(session.fields["loan_amount"]),
                due_date,
            )
        except StorageError:
            logger.exception("Could not save credit for user %s", user_id)
            return Reply(texts.CREDIT_SAVE_FAILED)
        finally:
            await self._sessions.delete(user_id)
        return Reply(texts.CREDIT_SAVED)

    async def _on_delete_choice(self, user_id: int, session: ConversationSession, text: str) -> Reply:
        if not session.candidates:
            logger.error("User %s is choosing a credit to delete but has no candidates", user_id)
            await self._sessions.delete(user_id)
            return Reply(texts.GENERIC_ERROR)
        number = parse_ordinal(text)
        if number is None:
            await self._sessions.put(user_id, session)
            return Reply(texts.ASK_NUMBER)
        if not 1 <= number <= len(session.candidates):
            await self._sessions.put(user_id, session)
            return Reply(texts.BAD_NUMBER)
        credit_id = session.candidates[number - 1]
        try:
            await self._storage.delete_credit(credit_id)
        except StorageError:
            logger.exception("Could not delete credit %s for user %s", credit_id, user_id)
            return Reply(texts.CREDIT_DELETE_FAILED)
        finally:
            await self._sessions.delete(user_id)
        return Reply(texts.CREDIT_DELETED)
