from datetime import datetime

import pytest

from config import TRANSFER_CATEGORY_NAME
from tests.conftest import USER_ID


@pytest.fixture
def two_wallets(ledger):
    a = ledger.wallets.save_wallet(USER_ID, "Bank", 100000)["id"]
    b = ledger.wallets.save_wallet(USER_ID, "Cash", 0)["id"]
    return a, b


def test_save_wallet_requires_name(ledger):
    assert not ledger.wallets.save_wallet(USER_ID, "  ")["success"]


def test_edit_wallet_overwrites_initial_balance(ledger, two_wallets):
    a, _ = two_wallets
    result = ledger.wallets.save_wallet(USER_ID, "Main bank", 80000, wallet_id=a)

    assert result["success"]
    assert ledger.wallet(a).name == "Main bank"
    assert ledger.wallet(a).initial_balance == 80000


def test_edit_unknown_wallet_fails(ledger):
    assert not ledger.wallets.save_wallet(USER_ID, "Ghost", wallet_id="wal-missing")["success"]


def test_delete_unreferenced_wallet(ledger, two_wallets):
    a, _ = two_wallets
    result = ledger.wallets.delete_wallet(USER_ID, a)

    assert result["success"]
    assert a not in ledger.store.wallets


def test_delete_blocked_by_current_period(ledger, two_wallets):
    a, _ = two_wallets
    ledger.transactions.add_income(USER_ID, a, 1000)

    result = ledger.wallets.delete_wallet(USER_ID, a)

    assert not result["success"]
    assert "current period" in result["message"]
    assert a in ledger.store.wallets


def test_delete_blocked_by_archive(ledger, two_wallets):
    a, _ = two_wallets
    ledger.transactions.add_income(USER_ID, a, 1000)
    ledger.periods.close_period(USER_ID, now=datetime(2026, 2, 1))

    result = ledger.wallets.delete_wallet(USER_ID, a)

    assert not result["success"]
    assert "archived periods" in result["message"]
    assert a in ledger.store.wallets


def test_transfer_records_expense_and_income(ledger, two_wallets):
    a, b = two_wallets
    when = datetime(2026, 1, 15, 12, 0)

    result = ledger.wallets.transfer_funds(USER_ID, a, b, 10000, 500, date=when)

    assert result["success"], result["message"]
    period = ledger.current()
    assert len(period.expenses) == 1 and len(period.incomes) == 1
    expense, income = period.expenses[0], period.incomes[0]
    assert (expense.id, income.id) == (result["expense_id"], result["income_id"])
    assert expense.wallet_id == a and expense.amount == 10500
    assert income.wallet_id == b and income.amount == 10000
    assert expense.date == income.date == when
    assert expense.category_id == ledger.category_id(TRANSFER_CATEGORY_NAME)


def test_transfer_moves_balances(ledger, two_wallets):
    a, b = two_wallets
    ledger.wallets.transfer_funds(USER_ID, a, b, 10000, 500)

    report = ledger.balances.wallet_report(USER_ID)
    assert "Bank: 89,500.00" in report
    assert "Cash: 10,000.00" in report


def test_transfer_is_atomic(ledger, two_wallets, monkeypatch):
    a, b = two_wallets
    repo = ledger.wallets.transaction_repo
    original_add = repo.add

    def add_expense_only(record, period_id, conn=None):
        if record.kind == "income":
            raise RuntimeError("write failed")
        return original_add(record, period_id, conn=conn)

    monkeypatch.setattr(repo, "add", add_expense_only)

    result = ledger.wallets.transfer_funds(USER_ID, a, b, 10000, 500)

    assert not result["success"]
    period = ledger.current()
    assert period.expenses == [] and period.incomes == []


@pytest.mark.parametrize(
    "amount, fee, message",
    [(0, 0, "positive"), (100, -1, "negative")],
)
def test_transfer_validation(ledger, two_wallets, amount, fee, message):
    a, b = two_wallets
    result = ledger.wallets.transfer_funds(USER_ID, a, b, amount, fee)
    assert not result["success"]
    assert message in result["message"]


def test_transfer_to_same_wallet_fails(ledger, two_wallets):
    a, _ = two_wallets
    assert not ledger.wallets.transfer_funds(USER_ID, a, a, 100)["success"]


def test_transfer_to_unknown_wallet_fails(ledger, two_wallets):
    a, _ = two_wallets
    result = ledger.wallets.transfer_funds(USER_ID, a, "wal-nope", 100)
    assert not result["success"]
    assert ledger.current().expenses == []


def test_edit_keeps_custom_icon(ledger):
    wallet_id = ledger.wallets.save_wallet(USER_ID, "BCA", 1000, icon="bank")["id"]

    result = ledger.wallets.save_wallet(USER_ID, "BCA Savings", 2000, wallet_id=wallet_id)

    assert result["success"]
    wallet = ledger.wallet(wallet_id)
    assert wallet.icon == "bank" and wallet.name == "BCA Savings"
    assert wallet.initial_balance == 2000


def test_edit_can_change_icon(ledger):
    wallet_id = ledger.wallets.save_wallet(USER_ID, "BCA", 1000, icon="bank")["id"]

    ledger.wallets.save_wallet(USER_ID, "BCA", 1000, icon="card", wallet_id=wallet_id)

    assert ledger.wallet(wallet_id).icon == "card"


def test_new_wallet_gets_default_icon(ledger):
    wallet_id = ledger.wallets.save_wallet(USER_ID, "Cash")["id"]
    assert ledger.wallet(wallet_id).icon == "wallet"
