"""
models/recurring.py
-------------------
Domain model for recurring transactions (salary, rent, subscriptions).
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class RecurringTransaction:
    """
    A monthly template posted into the current period on `day_of_month`.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Telegram user ID.
        name: Friendly name (e.g., 'Netflix', 'Salary').
        type: 'expense' or 'income'.
        amount: Final amount, fee already applied.
        base_amount / admin_fee: Components of `amount`.
        category_id: Required for expenses, unused for incomes.
        wallet_id: Wallet to post into.
        day_of_month: 1-31; clamped to the last day of short months.
        last_added: Date of the last posting, None if never posted.
        active: Whether the template is still posted.
    """
    user_id: int
    name: str
    type: str  # 'expense' | 'income'
    amount: float
    base_amount: float
    wallet_id: str
    day_of_month: int
    admin_fee: float = 0.0
    category_id: Optional[str] = None
    notes: str = ""
    last_added: Optional[date] = None
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def added_in_month(self, day: date) -> bool:
        """True if already posted in the same calendar month as `day`."""
        return (
            self.last_added is not None
            and self.last_added.year == day.year
            and self.last_added.month == day.month
        )

    def __str__(self) -> str:
        status = "✅" if self.active else "❌"
        sign = "-" if self.type == "expense" else "+"
        return f"{status} {self.name}: {sign}{self.amount:,.2f} every day {self.day_of_month}"
