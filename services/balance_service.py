"""
services/balance_service.py
---------------------------
Wallet balance derivation.

A wallet's balance is never stored. It is derived from the wallet's
`initial_balance` and the transactions that reference it:

    balance = initial_balance + Σ incomes.amount - Σ expenses.amount

Because closing a period folds that period's net flow into
`initial_balance`, the live balance only ever needs the *current*
period's transactions. Two named queries make the scope explicit:

- `current_balances`: per wallet, current period only.
- `net_worth`: sum of current balances. Archived transactions are
  already inside `initial_balance` and are never added again.
"""

from collections import defaultdict
from typing import Iterable, Optional

from models.period import BudgetPeriod
from models.wallet import Wallet
from repositories.period_repo import PeriodRepository
from repositories.user_repo import UserRepository
from repositories.wallet_repo import WalletRepository
from security.session import verify_caller
from services.display import NO_WALLET, UNCATEGORIZED, money
from services.results import service_report
from utils.logger import get_logger

logger = get_logger(__name__)


# ── Pure derivations ─────────────────────────────────────

def wallet_flow(wallet_id: Optional[str], expenses: Iterable, incomes: Iterable) -> float:
    """Net flow into one wallet: Σ incomes - Σ expenses for that wallet."""
    received = sum(i.amount for i in incomes if i.wallet_id == wallet_id)
    spent = sum(e.amount for e in expenses if e.wallet_id == wallet_id)
    return received - spent


def wallet_balance(wallet: Wallet, expenses: Iterable, incomes: Iterable) -> float:
    """initial_balance plus the wallet's net flow over the given transactions."""
    return wallet.initial_balance + wallet_flow(wallet.id, list(expenses), list(incomes))


def current_balances(wallets: Iterable[Wallet], period: Optional[BudgetPeriod]) -> dict[str, float]:
    """
    Live balance of every wallet, scoped to the current period.

    Args:
        wallets: The user's wallets.
        period: The open period, or None before onboarding.
    """
    expenses = period.expenses if period else []
    incomes = period.incomes if period else []
    return {w.id: wallet_balance(w, expenses, incomes) for w in wallets}


def net_worth(wallets: Iterable[Wallet], period: Optional[BudgetPeriod]) -> float:
    """Sum of all live wallet balances."""
    return sum(current_balances(wallets, period).values())


def period_summary(period: BudgetPeriod) -> dict:
    """
    Totals of a period.

    total_income counts the category budgets as the planned base income
    plus every income recorded in the period.
    """
    total_expenses = sum(e.amount for e in period.expenses)
    total_added_incomes = sum(i.amount for i in period.incomes)
    total_income = period.base_budget + total_added_incomes
    return {
        "total_income": total_income,
        "total_expenses": total_expenses,
        "remaining_budget": total_income - total_expenses,
    }


def spent_by_category(period: BudgetPeriod) -> dict[Optional[str], float]:
    """Spending per category id; split expenses count toward each share."""
    spent: dict[Optional[str], float] = defaultdict(float)
    for expense in period.expenses:
        for category_id, amount in expense.category_shares():
            spent[category_id] += amount
    return dict(spent)


def unassigned_flow(period: BudgetPeriod) -> float:
    """Net flow of transactions that reference no wallet at all."""
    return wallet_flow(None, period.expenses, period.incomes)


# ── Service ──────────────────────────────────────────────

class BalanceService:
    """Read-only wallet reports for the handlers."""

    def __init__(self):
        self.wallet_repo = WalletRepository()
        self.period_repo = PeriodRepository()
        self.user_repo = UserRepository()

    @service_report
    def wallet_report(self, user_id: int) -> str:
        """
        Formatted list of wallets with their live balances and the net worth.
        """
        verify_caller(user_id, self.user_repo)
        wallets = self.wallet_repo.get_all(user_id)
        if not wallets:
            return "📭 No wallets yet. Add one with /addwallet <name> <balance>."

        period = self.period_repo.get_current(user_id)
        balances = current_balances(wallets, period)

        lines = ["👛 *Wallets*\n"]
        for w in wallets:
            lines.append(f"  `{w.id}` {w.name}: {money(balances[w.id])}")
        loose = unassigned_flow(period) if period else 0.0
        if loose:
            lines.append(f"  ({NO_WALLET}: {money(loose)})")
        lines.append(f"\n💰 Net worth: {money(net_worth(wallets, period))}")
        return "\n".join(lines)

    @service_report
    def net_worth_report(self, user_id: int) -> str:
        verify_caller(user_id, self.user_repo)
        wallets = self.wallet_repo.get_all(user_id)
        period = self.period_repo.get_current(user_id)
        return f"💰 Net worth across {len(wallets)} wallet(s): {money(net_worth(wallets, period))}"

    @service_report
    def budget_report(self, user_id: int) -> str:
        """Budget vs spending per category for the current period."""
        verify_caller(user_id, self.user_repo)
        period = self.period_repo.get_current(user_id)
        if period is None:
            return "📭 No open budget period. Send /start to set one up."

        spent = spent_by_category(period)
        lines = [f"📊 *Budget*, {period.label()}\n"]
        for cb in period.category_budgets:
            used = spent.pop(cb.category_id, 0.0)
            left = cb.budget - used
            flag = "⚠️" if left < 0 else "✅"
            lines.append(
                f"  {flag} {cb.category_name or UNCATEGORIZED}: "
                f"{money(used)} / {money(cb.budget)} (left {money(left)})"
            )
        orphan = sum(spent.values())
        if orphan:
            lines.append(f"  ❔ {UNCATEGORIZED}: {money(orphan)}")

        summary = period_summary(period)
        lines.append(
            f"\n💵 Income: {money(summary['total_income'])}"
            f"\n💸 Expenses: {money(summary['total_expenses'])}"
            f"\n📈 Remaining: {money(summary['remaining_budget'])}"
        )
        return "\n".join(lines)
