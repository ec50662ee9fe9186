from models.period import BudgetPeriod, CategoryBudget
from models.transaction import Expense, Income, Split
from models.wallet import Wallet
from services.balance_service import (
    current_balances,
    net_worth,
    period_summary,
    spent_by_category,
    unassigned_flow,
    wallet_balance,
)
from tests.conftest import USER_ID


def make_period():
    w1 = Wallet(user_id=1, name="Cash", initial_balance=50000, id="w1")
    w2 = Wallet(user_id=1, name="Bank", initial_balance=1000, id="w2")
    period = BudgetPeriod(
        user_id=1,
        category_budgets=[CategoryBudget("cat1", 100000, "Food")],
        expenses=[
            Expense.create(30000, category_id="cat1", wallet_id="w1"),
            Expense.create(500, category_id="cat1"),
            Expense.create(900, 100, wallet_id="w2", splits=[Split("cat1", 600), Split("cat2", 400)]),
        ],
        incomes=[Income.create(20000, wallet_id="w1")],
    )
    return [w1, w2], period


def test_wallet_balance_adds_incomes_and_subtracts_expenses():
    wallets, period = make_period()
    assert wallet_balance(wallets[0], period.expenses, period.incomes) == 40000


def test_current_balances_per_wallet():
    wallets, period = make_period()
    assert current_balances(wallets, period) == {"w1": 40000, "w2": 0}


def test_current_balances_without_period_uses_initial_balance():
    wallets, _ = make_period()
    assert current_balances(wallets, None) == {"w1": 50000, "w2": 1000}


def test_net_worth_is_sum_of_current_balances():
    wallets, period = make_period()
    assert net_worth(wallets, period) == 40000


def test_period_summary_counts_budget_as_base_income():
    _, period = make_period()
    summary = period_summary(period)
    assert summary == {
        "total_income": 120000,
        "total_expenses": 31500,
        "remaining_budget": 88500,
    }


def test_spent_by_category_spreads_splits():
    _, period = make_period()
    assert spent_by_category(period) == {"cat1": 31100, "cat2": 400}


def test_unassigned_flow_tracks_walletless_transactions():
    _, period = make_period()
    assert unassigned_flow(period) == -500


def test_wallet_report_lists_balances(ledger):
    wallet_id = ledger.wallets.save_wallet(USER_ID, "Cash", 50000)["id"]
    food = ledger.categories.save_category(USER_ID, "Food", 100000)["id"]
    ledger.transactions.add_expense(USER_ID, wallet_id, 30000, category_id=food)

    report = ledger.balances.wallet_report(USER_ID)
    assert "Cash: 20,000.00" in report
    assert "Net worth: 20,000.00" in report


def test_budget_report_shows_unknown_category_as_uncategorized(ledger):
    ledger.transactions.add_expense(USER_ID, None, 700, category_id="cat-gone")
    report = ledger.balances.budget_report(USER_ID)
    assert "Uncategorized: 700.00" in report


def test_reports_refuse_unregistered_callers(ledger):
    assert ledger.balances.wallet_report(999).startswith("⚠️")
