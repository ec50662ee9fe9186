from datetime import date

import pytest

from models.period import BudgetPeriod, CategoryBudget
from models.recurring import RecurringTransaction
from models.transaction import Expense, Income, Split


def test_income_fee_is_deducted():
    income = Income.create(100000, 6500, wallet_id="w1")
    income.validate()
    assert income.amount == 93500
    assert income.base_amount == 100000


def test_expense_fee_is_added():
    expense = Expense.create(50000, 2000, category_id="cat1", wallet_id="w1")
    expense.validate()
    assert expense.amount == 52000


def test_split_expense_matching_total_is_valid():
    expense = Expense.create(5000, splits=[Split("catA", 3000), Split("catB", 2000)])
    expense.validate()
    assert expense.is_split
    assert expense.category_id is None
    assert expense.category_shares() == [("catA", 3000), ("catB", 2000)]


@pytest.mark.parametrize("second_share", [1999, 2001])
def test_split_expense_off_by_one_is_rejected(second_share):
    expense = Expense.create(5000, splits=[Split("catA", 3000), Split("catB", second_share)])
    with pytest.raises(ValueError, match="Split amounts"):
        expense.validate()


def test_split_shares_include_the_fee():
    expense = Expense.create(4500, 500, splits=[Split("catA", 3000), Split("catB", 2000)])
    expense.validate()
    assert expense.amount == 5000


def test_split_needs_two_categories():
    expense = Expense.create(5000, splits=[Split("catA", 5000)])
    with pytest.raises(ValueError, match="at least two"):
        expense.validate()


def test_expense_without_category_is_rejected():
    with pytest.raises(ValueError, match="category"):
        Expense.create(1000).validate()


def test_income_fee_must_be_smaller_than_amount():
    with pytest.raises(ValueError, match="smaller"):
        Income.create(1000, 1000).validate()


def test_negative_fee_is_rejected():
    with pytest.raises(ValueError, match="negative"):
        Expense.create(1000, -1, category_id="c").validate()


def test_wallet_effect_ignores_walletless_transactions():
    assert Expense.create(100, category_id="c").wallet_effect() == {}
    assert Income.create(100, wallet_id="w").wallet_effect() == {"w": 100}


def test_period_helpers():
    expense = Expense.create(100, category_id="c", id="exp-1")
    period = BudgetPeriod(
        user_id=1,
        category_budgets=[CategoryBudget("c", 700), CategoryBudget("d", 300)],
        expenses=[expense],
    )
    assert period.is_current
    assert period.base_budget == 1000
    assert period.find("expense", "exp-1") is expense
    assert period.find("income", "exp-1") is None


def test_recurring_added_in_month():
    template = RecurringTransaction(
        user_id=1, name="Rent", type="expense", amount=10, base_amount=10,
        wallet_id="w", day_of_month=1, last_added=date(2026, 3, 1),
    )
    assert template.added_in_month(date(2026, 3, 31))
    assert not template.added_in_month(date(2026, 4, 1))
    assert not template.added_in_month(date(2025, 3, 1))
