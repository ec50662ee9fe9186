"""
services/period_service.py
--------------------------
Budget periods: onboarding, category budgets, archives, and closing the
current period.

Closing a period (reconciliation) does, in one database transaction:
    1. fold each wallet's net flow for the period into its initial_balance;
    2. freeze the period's totals and set its end, turning it into an archive
       that keeps its transactions and category-budget snapshot;
    3. open a new current period that inherits the category budgets and has
       no transactions.
Either everything is committed or nothing is.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from db.connection import transaction
from models.period import BudgetPeriod, CategoryBudget
from models.wallet import Wallet
from repositories.category_repo import CategoryRepository
from repositories.goal_repo import DebtRepository, SavingGoalRepository
from repositories.period_repo import PeriodRepository
from repositories.user_repo import UserRepository
from repositories.wallet_repo import WalletRepository
from security.session import verify_caller
from services.balance_service import period_summary, wallet_balance
from services.display import describe_expense, describe_income, money, name_map
from services.errors import NotFoundError, PeriodNotFoundError, ValidationError
from services.results import ok, service_action, service_report
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ClosePlan:
    """Everything a period close will write."""
    wallet_balances: dict[str, float]
    summary: dict
    archive: BudgetPeriod
    next_period: BudgetPeriod


def build_close_plan(period: BudgetPeriod, wallets: Iterable[Wallet], closed_at: datetime) -> ClosePlan:
    """
    Compute the outcome of closing `period` without touching storage.

    Args:
        period: The current period, with its expenses and incomes loaded.
        wallets: All of the user's wallets.
        closed_at: End of the closed period and start of the next one.
    """
    balances = {
        w.id: wallet_balance(w, period.expenses, period.incomes) for w in wallets
    }
    summary = period_summary(period)

    archive = BudgetPeriod(
        id=period.id,
        user_id=period.user_id,
        category_budgets=list(period.category_budgets),
        expenses=list(period.expenses),
        incomes=list(period.incomes),
        period_start=period.period_start,
        period_end=closed_at,
        **summary,
    )
    next_period = BudgetPeriod(
        user_id=period.user_id,
        category_budgets=[
            CategoryBudget(cb.category_id, cb.budget, cb.category_name)
            for cb in period.category_budgets
        ],
        period_start=closed_at,
    )
    return ClosePlan(balances, summary, archive, next_period)


def resolve_period(
    period_repo: PeriodRepository, user_id: int, period_ref, conn=None, for_update: bool = False
) -> BudgetPeriod:
    """
    Load a period by reference: ``"current"`` or an archive id.

    Raises:
        PeriodNotFoundError: If no such period exists for the user.
    """
    if period_ref in (None, "current"):
        period = period_repo.get_current(user_id, conn=conn, for_update=for_update)
    else:
        try:
            period_id = int(period_ref)
        except (TypeError, ValueError):
            raise PeriodNotFoundError(f"Unknown period: {period_ref}")
        period = period_repo.get_by_id(period_id, user_id, conn=conn, for_update=for_update)
    if period is None:
        raise PeriodNotFoundError()
    return period


class PeriodService:
    """Business logic for budget periods."""

    def __init__(self):
        self.period_repo = PeriodRepository()
        self.wallet_repo = WalletRepository()
        self.category_repo = CategoryRepository()
        self.goal_repo = SavingGoalRepository()
        self.debt_repo = DebtRepository()
        self.user_repo = UserRepository()

    # ── Reconciliation ───────────────────────────────────

    @service_action("close the budget period")
    def close_period(self, user_id: int, now: Optional[datetime] = None) -> dict:
        """
        Close the current period and open a new one.

        Returns:
            Result dict; on success also 'archive_id', 'next_period_id',
            'summary' and 'balances'.
        """
        closed_at = now or datetime.now()
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self.period_repo.get_current(user_id, conn=conn, for_update=True)
            if period is None:
                raise PeriodNotFoundError("There is no open budget period to close.")

            wallets = self.wallet_repo.get_all(user_id, conn=conn)
            plan = build_close_plan(period, wallets, closed_at)

            for wallet_id, balance in plan.wallet_balances.items():
                self.wallet_repo.set_initial_balance(wallet_id, user_id, balance, conn=conn)
            if not self.period_repo.close(period.id, closed_at, plan.summary, conn=conn):
                raise PeriodNotFoundError("The budget period was closed by another request.")
            self.period_repo.create(plan.next_period, conn=conn)

        logger.info(
            f"User {user_id} closed period #{period.id} "
            f"({len(period.expenses)} expenses, {len(period.incomes)} incomes); "
            f"new period #{plan.next_period.id}"
        )
        s = plan.summary
        msg = (
            f"📦 Period archived and a new one started.\n"
            f"  💵 Income: {money(s['total_income'])}\n"
            f"  💸 Expenses: {money(s['total_expenses'])}\n"
            f"  📈 Remaining: {money(s['remaining_budget'])}\n"
            f"Wallet balances were carried into the new period."
        )
        return ok(
            msg,
            archive_id=period.id,
            next_period_id=plan.next_period.id,
            summary=s,
            balances=plan.wallet_balances,
        )

    # ── Onboarding & budgets ─────────────────────────────

    def ensure_current_period(self, user_id: int, conn=None) -> BudgetPeriod:
        """
        Return the open period, creating an empty one on first use with every
        master category at budget 0.
        """
        period = self.period_repo.get_current(user_id, conn=conn)
        if period is not None:
            return period
        categories = self.category_repo.get_all(user_id, conn=conn)
        period = BudgetPeriod(
            user_id=user_id,
            category_budgets=[CategoryBudget(c.id, 0.0, c.name) for c in categories],
        )
        self.period_repo.create(period, conn=conn)
        logger.info(f"Opened first budget period #{period.id} for user {user_id}")
        return period

    @service_action("save the budget")
    def save_budget(self, user_id: int, budgets: dict[str, float]) -> dict:
        """
        Set category budgets on the current period.

        Args:
            budgets: {category_id: amount}. Categories not mentioned keep
                their current budget.
        """
        if any(amount < 0 for amount in budgets.values()):
            raise ValidationError("Budgets cannot be negative.")
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is None:
                raise PeriodNotFoundError()

            lines = {cb.category_id: cb for cb in period.category_budgets}
            for category_id, amount in budgets.items():
                if category_id in lines:
                    lines[category_id].budget = float(amount)
                    continue
                category = self.category_repo.get_by_id(category_id, user_id, conn=conn)
                if category is None:
                    raise ValidationError(f"Unknown category: {category_id}")
                line = CategoryBudget(category.id, float(amount), category.name)
                period.category_budgets.append(line)
                lines[category_id] = line
            self.period_repo.replace_budgets(period.id, period.category_budgets, conn=conn)

        return ok(f"✅ Budget updated. Total: {money(period.base_budget)}")

    # ── Reads ────────────────────────────────────────────

    @service_report
    def current_period_report(self, user_id: int) -> str:
        verify_caller(user_id, self.user_repo)
        period = self.period_repo.get_current(user_id)
        if period is None:
            return "📭 No open budget period. Send /start to set one up."
        return self.format_period(period)

    @service_report
    def archive_report(self, user_id: int, archive_id) -> str:
        verify_caller(user_id, self.user_repo)
        period = resolve_period(self.period_repo, user_id, archive_id)
        if period.is_current:
            raise NotFoundError("That is the current period. Use /period to view it.")
        return self.format_period(period)

    @service_report
    def history_report(self, user_id: int) -> str:
        """List archived periods, newest first."""
        verify_caller(user_id, self.user_repo)
        archives = self.period_repo.list_archives(user_id)
        if not archives:
            return "📭 No archived periods yet."
        lines = ["🗂️ *Archived periods*\n"]
        for p in archives:
            lines.append(
                f"  {p.label()}: income {money(p.total_income or 0)}, "
                f"spent {money(p.total_expenses or 0)}, left {money(p.remaining_budget or 0)}"
            )
        lines.append("\nOpen one with /archive <id>.")
        return "\n".join(lines)

    def format_period(self, period: BudgetPeriod) -> str:
        """Full listing of a period's budgets and transactions."""
        categories = name_map(self.category_repo.get_all(period.user_id))
        # Archived budget lines keep the name they had when the period closed.
        categories.update({
            cb.category_id: cb.category_name
            for cb in period.category_budgets if cb.category_name
        })
        wallets = name_map(self.wallet_repo.get_all(period.user_id))
        goals = name_map(self.goal_repo.get_all(period.user_id))
        debts = name_map(self.debt_repo.get_all(period.user_id))

        summary = period_summary(period) if period.is_current else {
            "total_income": period.total_income or 0.0,
            "total_expenses": period.total_expenses or 0.0,
            "remaining_budget": period.remaining_budget or 0.0,
        }
        lines = [f"📅 *{period.label()}*\n"]
        if period.category_budgets:
            lines.append("*Budgets:*")
            lines.extend(
                f"  {categories.get(cb.category_id, cb.category_id)}: {money(cb.budget)}"
                for cb in period.category_budgets
            )
        lines.append(f"\n*Expenses ({len(period.expenses)}):*")
        lines.extend(describe_expense(e, categories, wallets, goals, debts) for e in period.expenses)
        lines.append(f"\n*Incomes ({len(period.incomes)}):*")
        lines.extend(describe_income(i, wallets) for i in period.incomes)
        lines.append(
            f"\n💵 {money(summary['total_income'])} | 💸 {money(summary['total_expenses'])}"
            f" | 📈 {money(summary['remaining_budget'])}"
        )
        return "\n".join(lines)
