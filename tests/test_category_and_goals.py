from config import DEBT_CATEGORY_NAME, SAVINGS_CATEGORY_NAME, TRANSFER_CATEGORY_NAME
from tests.conftest import USER_ID


def test_register_creates_system_categories_and_period(ledger):
    names = {c.name for c in ledger.categories.category_repo.get_all(USER_ID)}
    assert {TRANSFER_CATEGORY_NAME, DEBT_CATEGORY_NAME, SAVINGS_CATEGORY_NAME} <= names
    assert ledger.current() is not None


def test_register_is_idempotent(ledger):
    result = ledger.onboarding.register(USER_ID, "Tester")

    assert result["success"] and not result["new_user"]
    assert result["created_categories"] == []
    assert len(ledger.store.periods) == 1


def test_new_category_gets_budget_line(ledger):
    category_id = ledger.categories.save_category(USER_ID, "Food", 200000)["id"]

    lines = {cb.category_id: cb.budget for cb in ledger.current().category_budgets}
    assert lines[category_id] == 200000


def test_duplicate_category_name_rejected(ledger):
    ledger.categories.save_category(USER_ID, "Food")
    assert not ledger.categories.save_category(USER_ID, "food")["success"]


def test_system_category_cannot_be_deleted(ledger):
    result = ledger.categories.delete_category(USER_ID, ledger.category_id(TRANSFER_CATEGORY_NAME))
    assert not result["success"]


def test_delete_category_drops_budget_line(ledger):
    category_id = ledger.categories.save_category(USER_ID, "Food", 1000)["id"]

    assert ledger.categories.delete_category(USER_ID, category_id)["success"]
    assert category_id not in {cb.category_id for cb in ledger.current().category_budgets}


def test_goals_and_debt_payment(ledger):
    wallet = ledger.wallets.save_wallet(USER_ID, "Bank", 1000000)["id"]
    debt_id = ledger.goals.add_debt(USER_ID, "Card", 4000000)["id"]
    ledger.goals.add_goal(USER_ID, "Laptop", 15000000)

    result = ledger.goals.pay_debt(USER_ID, debt_id, wallet, 400000, 2500)

    assert result["success"], result["message"]
    [expense] = ledger.current().expenses
    assert expense.debt_id == debt_id and expense.amount == 402500
    assert expense.category_id == ledger.category_id(DEBT_CATEGORY_NAME)
    report = ledger.goals.report(USER_ID)
    assert "Laptop" in report and "paid 402,500.00" in report


def test_pay_unknown_debt_fails(ledger):
    assert not ledger.goals.pay_debt(USER_ID, "debt-nope", "wal-x", 10)["success"]


def test_contribution_moves_goal_progress(ledger):
    wallet = ledger.wallets.save_wallet(USER_ID, "Bank", 1000000)["id"]
    goal_id = ledger.goals.add_goal(USER_ID, "Laptop", 15000000)["id"]
    assert "Laptop: 0.00 this period" in ledger.goals.report(USER_ID)

    result = ledger.goals.contribute(USER_ID, goal_id, wallet, 500000, 2500)

    assert result["success"], result["message"]
    [expense] = ledger.current().expenses
    assert expense.saving_goal_id == goal_id and expense.amount == 502500
    assert expense.category_id == ledger.category_id(SAVINGS_CATEGORY_NAME)
    assert "Laptop: 500,000.00 this period / 15,000,000.00" in ledger.goals.report(USER_ID)

    ledger.goals.contribute(USER_ID, goal_id, wallet, 250000)
    assert "Laptop: 750,000.00 this period" in ledger.goals.report(USER_ID)


def test_contribute_to_unknown_goal_fails(ledger):
    wallet = ledger.wallets.save_wallet(USER_ID, "Bank", 0)["id"]

    result = ledger.goals.contribute(USER_ID, "goal-nope", wallet, 10)

    assert not result["success"]
    assert "/goals" in result["message"]
    assert ledger.current().expenses == []
