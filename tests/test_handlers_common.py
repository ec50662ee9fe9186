import asyncio
from types import SimpleNamespace

import pytest

import handlers.transaction_handler as transaction_handler
from handlers.common import parse_amount, split_pipes
from handlers.recurring_handler import parse_recurring
from security import rate_limiter
from security.auth import is_allowed
from tests.conftest import USER_ID


@pytest.mark.parametrize(
    "text, expected",
    [("45000", 45000), ("45k", 45000), ("1.5m", 1500000), ("12,500", 12500), ("2jt", 2000000)],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "k", "12x"])
def test_parse_amount_rejects_garbage(text):
    assert parse_amount(text) is None


def test_split_pipes():
    assert split_pipes(["Credit", "card", "|", "4m"]) == ["Credit card", "4m"]


def test_parse_recurring_expense():
    parsed = parse_recurring("expense | Netflix | 186k | 5 | BCA | Subscriptions | 1000".split())
    assert parsed == {
        "type": "expense", "name": "Netflix", "base_amount": 186000, "day_of_month": 5,
        "wallet": "BCA", "category": "Subscriptions", "admin_fee": 1000,
    }


def test_parse_recurring_income_without_fee():
    parsed = parse_recurring("income | Salary | 8.5m | 25 | BCA".split())
    assert parsed["type"] == "income" and "category" not in parsed


def test_parse_recurring_expense_needs_category():
    assert parse_recurring("expense | Rent | 3m | 1 | BCA".split()) is None


def test_whitelist():
    assert is_allowed(5, [])
    assert is_allowed(5, [5, 6])
    assert not is_allowed(7, [5, 6])


def test_rate_limit_window(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_MESSAGES", 2)
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_WINDOW_SECONDS", 60)

    assert rate_limiter.allow(1, now=0)
    assert rate_limiter.allow(1, now=1)
    assert not rate_limiter.allow(1, now=2)
    assert rate_limiter.allow(2, now=2)
    assert rate_limiter.allow(1, now=61)


@pytest.mark.parametrize(
    "args, expected",
    [
        (["inc-x", "8m"], ("inc-x", 8000000, None, None)),
        (["inc-x", "8m", "6500"], ("inc-x", 8000000, 6500, None)),
        (["inc-x", "8m", "note"], ("inc-x", 8000000, None, "note")),
        (["inc-x", "8m", "1k", "March", "salary"], ("inc-x", 8000000, 1000, "March salary")),
    ],
)
def test_parse_edit_args(args, expected):
    assert transaction_handler.parse_edit_args(args) == expected


def test_parse_edit_args_needs_amount():
    assert transaction_handler.parse_edit_args(["inc-x"]) is None
    assert transaction_handler.parse_edit_args(["inc-x", "lots"]) is None


class FakeMessage:
    def __init__(self):
        self.replies = []

    async def reply_text(self, text, **kwargs):
        self.replies.append(text)


def run_command(handler, args):
    message = FakeMessage()
    update = SimpleNamespace(effective_user=SimpleNamespace(id=USER_ID, username="tester"), message=message)
    asyncio.run(handler(update, SimpleNamespace(args=args)))
    return message.replies


def test_edit_command_keeps_fee_when_notes_follow(ledger, monkeypatch):
    monkeypatch.setattr("security.auth.ALLOWED_USER_IDS", [])
    monkeypatch.setattr(transaction_handler, "transaction_service", ledger.transactions)
    wallet = ledger.wallets.save_wallet(USER_ID, "Bank", 0)["id"]
    income_id = ledger.transactions.add_income(USER_ID, wallet, 100000, 6500)["id"]

    replies = run_command(transaction_handler.edit_command, [income_id, "8m", "note"])

    assert "updated" in replies[0]
    [income] = ledger.current().incomes
    assert income.admin_fee == 6500
    assert income.amount == 8000000 - 6500
    assert income.notes == "note"


def test_edit_command_rejects_bad_amount(ledger, monkeypatch):
    monkeypatch.setattr("security.auth.ALLOWED_USER_IDS", [])
    monkeypatch.setattr(transaction_handler, "transaction_service", ledger.transactions)
    wallet = ledger.wallets.save_wallet(USER_ID, "Bank", 0)["id"]
    income_id = ledger.transactions.add_income(USER_ID, wallet, 100000)["id"]

    replies = run_command(transaction_handler.edit_command, [income_id, "lots"])

    assert "must be a number" in replies[0]
    assert ledger.current().incomes[0].amount == 100000
