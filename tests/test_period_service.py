from datetime import datetime

import pytest

from models.period import BudgetPeriod, CategoryBudget
from models.transaction import Expense, Income
from models.wallet import Wallet
from services.period_service import build_close_plan
from tests.conftest import USER_ID

CLOSED_AT = datetime(2026, 2, 1, 9, 0)


@pytest.fixture
def month(ledger):
    """Budget 100000 on one category, a 30000 expense and a 20000 income on w1."""
    w1 = ledger.wallets.save_wallet(USER_ID, "Cash", 50000)["id"]
    cat1 = ledger.categories.save_category(USER_ID, "Food", 100000)["id"]
    expense = ledger.transactions.add_expense(USER_ID, w1, 30000, category_id=cat1)
    income = ledger.transactions.add_income(USER_ID, w1, 20000)
    assert expense["success"] and income["success"]
    return {"w1": w1, "cat1": cat1, "expense_id": expense["id"], "income_id": income["id"]}


def test_close_folds_flow_into_initial_balance(ledger, month):
    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    assert result["success"], result["message"]
    assert ledger.wallet(month["w1"]).initial_balance == 40000
    assert result["balances"][month["w1"]] == 40000


def test_close_freezes_archive_totals(ledger, month):
    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    archive = ledger.store.periods[result["archive_id"]]
    assert archive.period_end == CLOSED_AT
    assert archive.total_income == 120000
    assert archive.total_expenses == 30000
    assert archive.remaining_budget == 90000


def test_close_keeps_transactions_in_archive(ledger, month):
    before = ledger.current()
    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    archive = ledger.store.periods[result["archive_id"]]
    assert archive.expenses == before.expenses
    assert archive.incomes == before.incomes


def test_close_starts_empty_period_with_same_budgets(ledger, month):
    before = ledger.current()
    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    current = ledger.current()
    assert current.id == result["next_period_id"]
    assert current.expenses == [] and current.incomes == []
    assert current.period_start == CLOSED_AT
    assert [(cb.category_id, cb.budget) for cb in current.category_budgets] == [
        (cb.category_id, cb.budget) for cb in before.category_budgets
    ]
    assert (month["cat1"], 100000) in [(cb.category_id, cb.budget) for cb in current.category_budgets]


def test_balance_carries_across_several_closes(ledger, month):
    ledger.periods.close_period(USER_ID, now=CLOSED_AT)
    ledger.transactions.add_income(USER_ID, month["w1"], 5000)
    ledger.transactions.add_expense(USER_ID, month["w1"], 1000, category_id=month["cat1"])
    ledger.periods.close_period(USER_ID, now=datetime(2026, 3, 1))

    assert ledger.wallet(month["w1"]).initial_balance == 44000
    assert len(ledger.periods.period_repo.list_archives(USER_ID)) == 2


def test_close_without_open_period_writes_nothing(ledger, month):
    period = ledger.store.periods[ledger.current().id]
    period.period_end = CLOSED_AT

    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    assert not result["success"]
    assert "no open budget period" in result["message"]
    assert ledger.wallet(month["w1"]).initial_balance == 50000
    assert len(ledger.store.periods) == 1


def test_failed_write_rolls_back_everything(ledger, month, monkeypatch):
    def broken_create(period, conn=None):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(ledger.periods.period_repo, "create", broken_create)
    period_id = ledger.current().id

    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    assert not result["success"]
    assert result["message"].startswith("Server error")
    assert ledger.wallet(month["w1"]).initial_balance == 50000
    assert ledger.store.periods[period_id].is_current
    assert ledger.store.rollbacks == 1


def test_close_lost_to_concurrent_close_writes_nothing(ledger, month, monkeypatch):
    monkeypatch.setattr(
        ledger.periods.period_repo, "close", lambda period_id, closed_at, summary, conn=None: False
    )
    period_id = ledger.current().id

    result = ledger.periods.close_period(USER_ID, now=CLOSED_AT)

    assert not result["success"]
    assert "another request" in result["message"]
    assert ledger.wallet(month["w1"]).initial_balance == 50000
    assert ledger.store.periods[period_id].is_current
    assert len(ledger.store.periods) == 1
    assert ledger.store.rollbacks == 1


def test_close_rejects_unknown_caller(ledger, month):
    result = ledger.periods.close_period(4242, now=CLOSED_AT)

    assert not result["success"]
    assert "session" in result["message"].lower()
    assert ledger.current().is_current


def test_build_close_plan_is_pure():
    wallet = Wallet(user_id=1, name="Cash", initial_balance=50000, id="w1")
    period = BudgetPeriod(
        user_id=1,
        id=7,
        category_budgets=[CategoryBudget("cat1", 100000)],
        expenses=[Expense.create(30000, category_id="cat1", wallet_id="w1")],
        incomes=[Income.create(20000, wallet_id="w1")],
    )

    plan = build_close_plan(period, [wallet], CLOSED_AT)

    assert plan.wallet_balances == {"w1": 40000}
    assert plan.archive.id == 7 and not plan.archive.is_current
    assert plan.next_period.category_budgets[0] is not period.category_budgets[0]
    assert wallet.initial_balance == 50000
    assert period.is_current


def test_save_budget_updates_lines(ledger, month):
    result = ledger.periods.save_budget(USER_ID, {month["cat1"]: 75000})

    assert result["success"]
    lines = {cb.category_id: cb.budget for cb in ledger.current().category_budgets}
    assert lines[month["cat1"]] == 75000


def test_save_budget_rejects_negative(ledger, month):
    result = ledger.periods.save_budget(USER_ID, {month["cat1"]: -1})
    assert not result["success"]


def test_history_and_archive_reports(ledger, month):
    archive_id = ledger.periods.close_period(USER_ID, now=CLOSED_AT)["archive_id"]

    history = ledger.periods.history_report(USER_ID)
    assert f"#{archive_id}" in history

    report = ledger.periods.archive_report(USER_ID, str(archive_id))
    assert "Food" in report
    assert "120,000.00" in report


def test_archive_report_unknown_id(ledger):
    assert ledger.periods.archive_report(USER_ID, "nope").startswith("⚠️")
