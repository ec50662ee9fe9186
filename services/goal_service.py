"""
services/goal_service.py
------------------------
Saving goals and debts. The ledger only needs them as named targets that
expenses can point at; progress tracking is derived from those expenses.
"""

from config import DEBT_CATEGORY_NAME, SAVINGS_CATEGORY_NAME
from models.goal import Debt, SavingGoal
from repositories.category_repo import CategoryRepository
from repositories.goal_repo import DebtRepository, SavingGoalRepository
from repositories.period_repo import PeriodRepository
from repositories.user_repo import UserRepository
from security.session import verify_caller
from services.display import money
from services.errors import NotFoundError, ValidationError
from services.results import ok, service_action, service_report
from services.transaction_service import TransactionService


class GoalService:
    """Manages saving goals and debts, and payments toward them."""

    def __init__(self):
        self.goal_repo = SavingGoalRepository()
        self.debt_repo = DebtRepository()
        self.category_repo = CategoryRepository()
        self.period_repo = PeriodRepository()
        self.user_repo = UserRepository()
        self.transaction_service = TransactionService()

    @service_action("add the saving goal")
    def add_goal(self, user_id: int, name: str, target_amount: float) -> dict:
        if target_amount <= 0:
            raise ValidationError("The target amount must be positive.")
        verify_caller(user_id, self.user_repo)
        goal = self.goal_repo.add(SavingGoal(user_id=user_id, name=name.strip(), target_amount=target_amount))
        return ok(f"🎯 Goal \"{goal.name}\" added ({money(target_amount)}).\n🔖 `{goal.id}`", id=goal.id)

    @service_action("add the debt")
    def add_debt(
        self, user_id: int, name: str, total_amount: float,
        interest_rate: float = 0.0, minimum_payment: float = 0.0,
    ) -> dict:
        if total_amount <= 0:
            raise ValidationError("The debt amount must be positive.")
        verify_caller(user_id, self.user_repo)
        debt = self.debt_repo.add(Debt(
            user_id=user_id, name=name.strip(), total_amount=total_amount,
            interest_rate=interest_rate, minimum_payment=minimum_payment,
        ))
        return ok(f"🧾 Debt \"{debt.name}\" added ({money(total_amount)}).\n🔖 `{debt.id}`", id=debt.id)

    @service_action("record the debt payment")
    def pay_debt(self, user_id: int, debt_id: str, wallet_id: str, amount: float, admin_fee: float = 0.0) -> dict:
        """Record a repayment as an expense in the Debt Payment category."""
        verify_caller(user_id, self.user_repo)
        debts = {d.id: d for d in self.debt_repo.get_all(user_id)}
        if debt_id not in debts:
            raise NotFoundError("Debt not found. See /goals for the ids.")
        category = self._essential_category(user_id, DEBT_CATEGORY_NAME)
        return self.transaction_service.add_expense(
            user_id, wallet_id, amount, admin_fee,
            category_id=category.id, debt_id=debt_id,
            notes=f"Payment for {debts[debt_id].name}",
        )

    @service_action("record the saving")
    def contribute(
        self, user_id: int, goal_id: str, wallet_id: str, amount: float, admin_fee: float = 0.0
    ) -> dict:
        """
        Put money toward a saving goal.

        The deposit leaves the wallet as an expense in the Savings & Investments
        category carrying the goal id, so /goals counts it as progress. The fee
        is paid on top and does not count toward the goal.
        """
        verify_caller(user_id, self.user_repo)
        goals = {g.id: g for g in self.goal_repo.get_all(user_id)}
        if goal_id not in goals:
            raise NotFoundError("Saving goal not found. See /goals for the ids.")
        category = self._essential_category(user_id, SAVINGS_CATEGORY_NAME)
        return self.transaction_service.add_expense(
            user_id, wallet_id, amount, admin_fee,
            category_id=category.id, saving_goal_id=goal_id,
            notes=f"Saving for {goals[goal_id].name}",
        )

    def _essential_category(self, user_id: int, name: str):
        category = self.category_repo.get_by_name(name, user_id)
        if category is None:
            raise NotFoundError(f"The {name} category is missing. Send /start to restore it.")
        return category

    @service_report
    def report(self, user_id: int) -> str:
        """Goals and debts with what the current period put toward them."""
        verify_caller(user_id, self.user_repo)
        goals = self.goal_repo.get_all(user_id)
        debts = self.debt_repo.get_all(user_id)
        if not goals and not debts:
            return "📭 No saving goals or debts yet."

        period = self.period_repo.get_current(user_id)
        expenses = period.expenses if period else []
        lines = []
        if goals:
            lines.append("🎯 *Saving goals*")
            for g in goals:
                saved = sum(e.base_amount for e in expenses if e.saving_goal_id == g.id)
                lines.append(f"  `{g.id}` {g.name}: {money(saved)} this period / {money(g.target_amount)}")
        if debts:
            lines.append("\n🧾 *Debts*")
            for d in debts:
                paid = sum(e.amount for e in expenses if e.debt_id == d.id)
                lines.append(f"  `{d.id}` {d.name}: paid {money(paid)} this period of {money(d.total_amount)}")
        return "\n".join(lines)
