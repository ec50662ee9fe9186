"""
models/period.py
----------------
Domain model for budget periods.

A user has exactly one open ("current") period, where `period_end` is None.
Closed periods are archives: their transactions and budget snapshot never
move, and their summary totals are frozen when they are closed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.transaction import Expense, Income


@dataclass
class CategoryBudget:
    """Budget line for one category inside a period."""
    category_id: str
    budget: float
    category_name: Optional[str] = None


@dataclass
class BudgetPeriod:
    """
    Attributes:
        id: Database primary key (None for new records).
        user_id: Telegram user ID.
        category_budgets: Planned spending per category.
        expenses / incomes: Transactions recorded in this period.
        period_start: When the period was opened.
        period_end: When it was closed; None for the current period.
        total_income / total_expenses / remaining_budget: Frozen at close.
    """
    user_id: int
    category_budgets: list[CategoryBudget] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    incomes: list[Income] = field(default_factory=list)
    period_start: datetime = field(default_factory=datetime.now)
    period_end: Optional[datetime] = None
    total_income: Optional[float] = None
    total_expenses: Optional[float] = None
    remaining_budget: Optional[float] = None
    id: Optional[int] = None

    @property
    def is_current(self) -> bool:
        return self.period_end is None

    @property
    def base_budget(self) -> float:
        """Sum of all category budgets."""
        return sum(cb.budget for cb in self.category_budgets)

    def transactions(self, kind: str) -> list:
        """The expense or income list, by kind name."""
        return self.expenses if kind == "expense" else self.incomes

    def find(self, kind: str, transaction_id: str):
        return next((t for t in self.transactions(kind) if t.id == transaction_id), None)

    def label(self) -> str:
        start = self.period_start.strftime("%Y-%m-%d")
        if self.is_current:
            return f"current period (since {start})"
        return f"#{self.id} {start} → {self.period_end.strftime('%Y-%m-%d')}"
