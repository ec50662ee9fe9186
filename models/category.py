"""
models/category.py
------------------
Domain model for spending categories.
"""

from dataclasses import dataclass, field

from models.transaction import make_id


@dataclass
class Category:
    """
    A spending category from the user's master list.

    Budgets are not stored here: each budget period keeps its own
    CategoryBudget lines so archived periods retain their snapshot.

    Attributes:
        is_essential: System-reserved (e.g. wallet transfers); cannot be deleted.
        is_debt_category: Expenses in it are debt repayments.
    """
    user_id: int
    name: str
    icon: str = "tag"
    is_essential: bool = False
    is_debt_category: bool = False
    id: str = field(default_factory=lambda: make_id("cat"))
