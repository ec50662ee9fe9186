"""
models/transaction.py
---------------------
Domain models for expenses and incomes recorded in a budget period.

Fee semantics:
    expense.amount = base_amount + admin_fee   (the fee is paid on top)
    income.amount  = base_amount - admin_fee   (the fee is deducted)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def make_id(prefix: str) -> str:
    """Generate a record id such as ``exp-3f9c0a1b2d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def to_cents(value: float) -> int:
    """Money compared at cent precision."""
    return int(round(float(value) * 100))


@dataclass
class Split:
    """One category share of a split expense."""
    category_id: str
    amount: float


@dataclass
class Expense:
    """
    Money leaving a wallet.

    Attributes:
        id: Record id (``exp-...``).
        amount: Final outflow, base_amount + admin_fee.
        base_amount: Price before fees.
        admin_fee: Bank/transfer fee, 0 when none.
        category_id: Single category; None when the expense is split.
        is_split: True when `splits` carries the category breakdown.
        splits: Category shares; must sum to `amount`.
        wallet_id: Wallet the money left, None for "no wallet".
        period_id: Budget period the expense belongs to.
        saving_goal_id / debt_id: Optional references, not enforced.
    """
    amount: float
    base_amount: float
    date: datetime = field(default_factory=datetime.now)
    admin_fee: float = 0.0
    category_id: Optional[str] = None
    is_split: bool = False
    splits: list[Split] = field(default_factory=list)
    wallet_id: Optional[str] = None
    notes: str = ""
    saving_goal_id: Optional[str] = None
    debt_id: Optional[str] = None
    period_id: Optional[int] = None
    id: str = field(default_factory=lambda: make_id("exp"))

    kind = "expense"

    @classmethod
    def create(
        cls,
        base_amount: float,
        admin_fee: float = 0.0,
        category_id: Optional[str] = None,
        splits: Optional[list[Split]] = None,
        **kwargs,
    ) -> "Expense":
        """Build an expense whose amount includes the admin fee."""
        fee = float(admin_fee or 0)
        return cls(
            amount=round(float(base_amount) + fee, 2),
            base_amount=float(base_amount),
            admin_fee=fee,
            category_id=None if splits else category_id,
            is_split=bool(splits),
            splits=list(splits or []),
            **kwargs,
        )

    def validate(self) -> None:
        """
        Raises:
            ValueError: If the amounts or the category assignment are inconsistent.
        """
        if self.amount <= 0:
            raise ValueError("Expense amount must be positive.")
        if self.admin_fee < 0:
            raise ValueError("Admin fee cannot be negative.")
        if to_cents(self.base_amount + self.admin_fee) != to_cents(self.amount):
            raise ValueError("Expense amount must equal base amount plus admin fee.")
        if self.is_split:
            if self.category_id is not None:
                raise ValueError("A split expense cannot also have a single category.")
            if len(self.splits) < 2:
                raise ValueError("A split expense needs at least two categories.")
            if any(s.amount <= 0 for s in self.splits):
                raise ValueError("Every split amount must be positive.")
            total = sum(to_cents(s.amount) for s in self.splits)
            if total != to_cents(self.amount):
                raise ValueError(
                    f"Split amounts add up to {total / 100:,.2f} "
                    f"but the expense is {self.amount:,.2f}."
                )
        elif not self.category_id:
            raise ValueError("An expense needs a category.")

    def category_shares(self) -> list[tuple[Optional[str], float]]:
        """(category_id, amount) pairs, one per split or a single pair."""
        if self.is_split:
            return [(s.category_id, s.amount) for s in self.splits]
        return [(self.category_id, self.amount)]

    def wallet_effect(self) -> dict[str, float]:
        """Signed effect of this expense on wallet balances."""
        return {self.wallet_id: -self.amount} if self.wallet_id else {}


@dataclass
class Income:
    """
    Money arriving in a wallet.

    `amount` is what was actually received: base_amount - admin_fee.
    """
    amount: float
    base_amount: float
    date: datetime = field(default_factory=datetime.now)
    admin_fee: float = 0.0
    wallet_id: Optional[str] = None
    notes: str = ""
    period_id: Optional[int] = None
    id: str = field(default_factory=lambda: make_id("inc"))

    kind = "income"

    @classmethod
    def create(cls, base_amount: float, admin_fee: float = 0.0, **kwargs) -> "Income":
        """Build an income whose amount has the admin fee deducted."""
        fee = float(admin_fee or 0)
        return cls(
            amount=round(float(base_amount) - fee, 2),
            base_amount=float(base_amount),
            admin_fee=fee,
            **kwargs,
        )

    def validate(self) -> None:
        if self.base_amount <= 0:
            raise ValueError("Income amount must be positive.")
        if self.admin_fee < 0:
            raise ValueError("Admin fee cannot be negative.")
        if self.admin_fee >= self.base_amount:
            raise ValueError("Admin fee must be smaller than the income amount.")
        if to_cents(self.base_amount - self.admin_fee) != to_cents(self.amount):
            raise ValueError("Income amount must equal base amount minus admin fee.")

    def wallet_effect(self) -> dict[str, float]:
        """Signed effect of this income on wallet balances."""
        return {self.wallet_id: self.amount} if self.wallet_id else {}


TRANSACTION_KINDS = {"expense": Expense, "income": Income}
