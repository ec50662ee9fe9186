"""
models/goal.py
--------------
Saving goals and debts. Expenses may reference either by id.
"""

from dataclasses import dataclass, field

from models.transaction import make_id


@dataclass
class SavingGoal:
    user_id: int
    name: str
    target_amount: float
    id: str = field(default_factory=lambda: make_id("goal"))


@dataclass
class Debt:
    user_id: int
    name: str
    total_amount: float
    interest_rate: float = 0.0
    minimum_payment: float = 0.0
    id: str = field(default_factory=lambda: make_id("debt"))
