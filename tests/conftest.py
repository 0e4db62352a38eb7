"""Shared fixtures: a throwaway SQLite database behind a real CreditStorage."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from aiogram.fsm.storage.memory import MemoryStorage

from debtbot.db import init_models, make_engine, make_session_factory
from debtbot.errors import StorageError
from debtbot.sessions import FSMSessionStore
from debtbot.storage import CreditStorage

BOT_ID = 42


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def storage(engine) -> CreditStorage:
    return CreditStorage(make_session_factory(engine))


@pytest.fixture
def sessions() -> FSMSessionStore:
    return FSMSessionStore(MemoryStorage(), bot_id=BOT_ID)


class BrokenStorage:
    """Storage double whose writes always fail; reads return ``credits``."""

    def __init__(self, credits=None):
        self.credits = credits or []

    async def create_user_if_absent(self, user_id: int):
        return None

    async def list_credits(self, user_id: int):
        return list(self.credits)

    async def add_credit(self, user_id: int, bank_name: str, loan_amount: Decimal, due_date: date):
        raise StorageError("disk full")

    async def delete_credit(self, credit_id: int):
        raise StorageError("disk full")


@pytest.fixture
def broken_storage() -> BrokenStorage:
    return BrokenStorage()
