"""Per-user conversation state.

A user filling in a multi-step form (adding or deleting a credit) has one
:class:`ConversationSession` that remembers which step they are on and what
they have typed so far.  Sessions live in a :class:`SessionStore`; the bot
uses :class:`FSMSessionStore`, which keeps them in aiogram's FSM storage,
the same storage instance the aiogram dispatcher is given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Union

from aiogram.fsm.state import State, StatesGroup
from aiogram.fsm.storage.base import BaseStorage, StorageKey


class CreditForm(StatesGroup):
    """Steps of the add-credit form, in order."""
    bank_name = State()
    loan_amount = State()
    due_date = State()


class DeleteForm(StatesGroup):
    """Single step of the delete-credit flow."""
    choice = State()


@dataclass
class ConversationSession:
    """Progress of one user through a form.

    ``step`` is the state name, e.g. ``"CreditForm:loan_amount"``; a
    :class:`State` passed in is converted to its name.  ``fields`` maps
    field names (``bank_name``, ``loan_amount``, ``due_date``) to the raw
    text the user sent, and only ever holds values that passed validation.
    ``candidates`` holds credit IDs in the order they were shown by the
    delete flow.
    """

    step: Union[str, State]
    fields: dict[str, str] = field(default_factory=dict)
    candidates: list[int] = field(default_factory=list)
    touched_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.step, State):
            self.step = self.step.state


class SessionStore(Protocol):
    """Mapping from Telegram user ID to that user's active session."""

    async def get(self, user_id: int) -> Optional[ConversationSession]:
        """Return the user's live session, or None."""

    async def put(self, user_id: int, session: ConversationSession) -> None:
        """Save the session, replacing any previous one for the user."""

    async def delete(self, user_id: int) -> None:
        """Forget the user's session.  Missing sessions are ignored."""


class FSMSessionStore(SessionStore):
    """
    Session store on top of an aiogram FSM storage.

    The step goes into the FSM state and everything else into the FSM data
    of the user's private chat, so the records are the ones an
    ``FSMContext`` for that chat would see.  Sessions not saved for ``ttl``
    are treated as abandoned and dropped the next time they are looked up.
    A ``ttl`` of ``None`` keeps them forever.
    """

    def __init__(
        self,
        storage: BaseStorage,
        bot_id: int,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._bot_id = bot_id
        self._ttl = ttl
        self._clock = clock

    def _key(self, user_id: int) -> StorageKey:
        # private chat ids equal user ids
        return StorageKey(bot_id=self._bot_id, chat_id=user_id, user_id=user_id)

    def _expired(self, touched_at: Optional[datetime]) -> bool:
        if self._ttl is None or touched_at is None:
            return False
        return self._clock() - touched_at > self._ttl

    async def get(self, user_id: int) -> Optional[ConversationSession]:
        key = self._key(user_id)
        step = await self._storage.get_state(key)
        if step is None:
            return None
        data = await self._storage.get_data(key)
        touched_at = datetime.fromisoformat(data["touched_at"]) if data.get("touched_at") else None
        if self._expired(touched_at):
            await self.delete(user_id)
            return None
        return ConversationSession(
            step=step,
            fields=dict(data.get("fields", {})),
            candidates=list(data.get("candidates", [])),
            touched_at=touched_at,
        )

    async def put(self, user_id: int, session: ConversationSession) -> None:
        key = self._key(user_id)
        session.touched_at = self._clock()
        await self._storage.set_state(key, session.step)
        await self._storage.set_data(key, {
            "fields": dict(session.fields),
            "candidates": list(session.candidates),
            "touched_at": session.touched_at.isoformat(),
        })

    async def delete(self, user_id: int) -> None:
        key = self._key(user_id)
        await self._storage.set_state(key, None)
        await self._storage.set_data(key, {})
