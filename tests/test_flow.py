from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from debtbot import texts
from debtbot.flow import CreditInputFlow, parse_amount, parse_due_date, parse_ordinal
from debtbot.sessions import ConversationSession, CreditForm, DeleteForm


@pytest.mark.parametrize("text, expected", [
    ("10000.50", Decimal("10000.50")),
    (" 42 ", Decimal("42")),
    ("0", Decimal("0")),
    ("1e3", Decimal("1000")),
    ("1.500", Decimal("1.5")),
    ("999999999999.99", Decimal("999999999999.99")),
])
def test_parse_amount_accepts_numbers(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["not-a-number", "", "10,5", "-1", "NaN", "Infinity", "12 000"])
def test_parse_amount_rejects_bad_input(text):
    assert parse_amount(text) is None


@pytest.mark.parametrize("text", ["0.125", "10000.555", "1000000000000", "12345678901234567.89", "1e12"])
def test_parse_amount_rejects_values_the_column_cannot_hold(text):
    assert parse_amount(text) is None


def test_parse_due_date():
    assert parse_due_date("2024-12-31") == date(2024, 12, 31)
    assert parse_due_date(" 2024-02-29 ") == date(2024, 2, 29)


@pytest.mark.parametrize("text", ["31.12.2024", "2024-1-5", "2023-02-29", "2024-13-01", "tomorrow", "2024-12-31T00:00"])
def test_parse_due_date_rejects_bad_input(text):
    assert parse_due_date(text) is None


def test_parse_ordinal():
    assert parse_ordinal("2") == 2
    assert parse_ordinal(" 1 ") == 1
    assert parse_ordinal("two") is None
    assert parse_ordinal("1.5") is None


@pytest.fixture
def flow(storage, sessions) -> CreditInputFlow:
    return CreditInputFlow(storage, sessions)


async def _feed(flow, sessions, user_id, text):
    return await flow.handle(user_id, await sessions.get(user_id), text)


@pytest.mark.asyncio
async def test_full_add_flow_persists_one_credit(flow, storage, sessions):
    await storage.create_user_if_absent(7)
    await sessions.put(7, ConversationSession(step=CreditForm.bank_name))

    assert (await _feed(flow, sessions, 7, "BankA")).text == texts.ASK_AMOUNT
    assert (await _feed(flow, sessions, 7, "10000.50")).text == texts.ASK_DUE_DATE
    assert (await _feed(flow, sessions, 7, "2024-12-31")).text == texts.CREDIT_SAVED

    assert await sessions.get(7) is None
    credits = await storage.list_credits(7)
    assert len(credits) == 1
    assert credits[0].bank_name == "BankA"
    assert credits[0].loan_amount == Decimal("10000.50")
    assert credits[0].due_date == date(2024, 12, 31)


@pytest.mark.asyncio
async def test_bank_name_is_stored_verbatim(flow, sessions):
    await sessions.put(1, ConversationSession(step=CreditForm.bank_name))
    await _feed(flow, sessions, 1, "  Bank <b>& Co</b> ")
    assert (await sessions.get(1)).fields["bank_name"] == "  Bank <b>& Co</b> "


@pytest.mark.asyncio
async def test_bad_amount_keeps_state_indefinitely(flow, sessions):
    await sessions.put(1, ConversationSession(step=CreditForm.bank_name))
    await _feed(flow, sessions, 1, "BankA")

    for _ in range(5):
        reply = await _feed(flow, sessions, 1, "not-a-number")
        assert reply.text == texts.BAD_AMOUNT
        session = await sessions.get(1)
        assert session.step == CreditForm.loan_amount
        assert session.fields == {"bank_name": "BankA"}

    assert (await _feed(flow, sessions, 1, "5")).text == texts.ASK_DUE_DATE
    assert (await sessions.get(1)).fields == {"bank_name": "BankA", "loan_amount": "5"}


@pytest.mark.asyncio
async def test_bad_date_keeps_state(flow, storage, sessions):
    await sessions.put(1, ConversationSession(
        step=CreditForm.due_date,
        fields={"bank_name": "BankA", "loan_amount": "5"},
    ))
    reply = await _feed(flow, sessions, 1, "31.12.2024")
    assert reply.text == texts.BAD_DUE_DATE
    session = await sessions.get(1)
    assert session.step == CreditForm.due_date
    assert "due_date" not in session.fields
    assert await storage.list_credits(1) == []


@pytest.mark.asyncio
async def test_save_failure_still_ends_session(broken_storage, sessions):
    flow = CreditInputFlow(broken_storage, sessions)
    await sessions.put(1, ConversationSession(
        step=CreditForm.due_date,
        fields={"bank_name": "BankA", "loan_amount": "5"},
    ))
    reply = await _feed(flow, sessions, 1, "2024-12-31")
    assert reply.text == texts.CREDIT_SAVE_FAILED
    assert await sessions.get(1) is None


@pytest.mark.asyncio
async def test_delete_choice_removes_selected_credit(flow, storage, sessions):
    await storage.create_user_if_absent(1)
    a = await storage.add_credit(1, "A", Decimal("1"), date(2025, 1, 1))
    b = await storage.add_credit(1, "B", Decimal("2"), date(2025, 2, 1))
    await sessions.put(1, ConversationSession(step=DeleteForm.choice, candidates=[a.id, b.id]))

    reply = await _feed(flow, sessions, 1, "2")
    assert reply.text == texts.CREDIT_DELETED
    assert await sessions.get(1) is None
    assert [c.id for c in await storage.list_credits(1)] == [a.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("text, expected", [
    ("0", texts.BAD_NUMBER),
    ("3", texts.BAD_NUMBER),
    ("-1", texts.BAD_NUMBER),
    ("first", texts.ASK_NUMBER),
])
async def test_delete_choice_out_of_range_keeps_state(flow, storage, sessions, text, expected):
    await storage.create_user_if_absent(1)
    a = await storage.add_credit(1, "A", Decimal("1"), date(2025, 1, 1))
    b = await storage.add_credit(1, "B", Decimal("2"), date(2025, 2, 1))
    await sessions.put(1, ConversationSession(step=DeleteForm.choice, candidates=[a.id, b.id]))

    reply = await _feed(flow, sessions, 1, text)
    assert reply.text == expected
    assert (await sessions.get(1)).step == DeleteForm.choice
    assert len(await storage.list_credits(1)) == 2


@pytest.mark.asyncio
async def test_delete_failure_still_ends_session(broken_storage, sessions):
    flow = CreditInputFlow(broken_storage, sessions)
    await sessions.put(1, ConversationSession(step=DeleteForm.choice, candidates=[10]))
    reply = await _feed(flow, sessions, 1, "1")
    assert reply.text == texts.CREDIT_DELETE_FAILED
    assert await sessions.get(1) is None


@pytest.mark.asyncio
async def test_delete_choice_without_candidates_is_dropped(flow, sessions):
    await sessions.put(1, ConversationSession(step=DeleteForm.choice))
    reply = await _feed(flow, sessions, 1, "1")
    assert reply.text == texts.GENERIC_ERROR
    assert await sessions.get(1) is None


@pytest.mark.asyncio
async def test_unknown_step_is_dropped(flow, sessions):
    await sessions.put(1, ConversationSession(step="Mystery:step"))
    reply = await _feed(flow, sessions, 1, "hello")
    assert reply.text == texts.GENERIC_ERROR
    assert await sessions.get(1) is None
