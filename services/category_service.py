"""
services/category_service.py
----------------------------
Business logic for the master category list.
"""

from config import ESSENTIAL_CATEGORIES
from db.connection import transaction
from models.category import Category
from models.period import CategoryBudget
from repositories.category_repo import CategoryRepository
from repositories.period_repo import PeriodRepository
from repositories.user_repo import UserRepository
from security.session import verify_caller
from services.display import money
from services.errors import NotFoundError, ValidationError
from services.results import ok, service_action, service_report
from utils.logger import get_logger

logger = get_logger(__name__)


class CategoryService:
    """Manages categories and keeps the current period's budget lines in step."""

    def __init__(self):
        self.category_repo = CategoryRepository()
        self.period_repo = PeriodRepository()
        self.user_repo = UserRepository()

    def ensure_essential_categories(self, user_id: int, conn=None) -> list[Category]:
        """Create the system-reserved categories the user does not have yet."""
        created = []
        for name, icon, is_debt in ESSENTIAL_CATEGORIES:
            if self.category_repo.get_by_name(name, user_id, conn=conn) is None:
                category = Category(
                    user_id=user_id, name=name, icon=icon,
                    is_essential=True, is_debt_category=is_debt,
                )
                self.category_repo.add(category, conn=conn)
                created.append(category)
        return created

    @service_action("add the category")
    def save_category(
        self,
        user_id: int,
        name: str,
        budget: float = 0.0,
        icon: str = "tag",
        is_debt_category: bool = False,
    ) -> dict:
        """Add a category to the master list and to the current period's budget."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("A category needs a name.")
        if budget < 0:
            raise ValidationError("Budgets cannot be negative.")
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            if self.category_repo.get_by_name(name, user_id, conn=conn) is not None:
                raise ValidationError(f"A category named \"{name}\" already exists.")
            category = Category(
                user_id=user_id, name=name, icon=icon, is_debt_category=is_debt_category,
            )
            self.category_repo.add(category, conn=conn)

            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is not None:
                period.category_budgets.append(CategoryBudget(category.id, float(budget), category.name))
                self.period_repo.replace_budgets(period.id, period.category_budgets, conn=conn)

        return ok(
            f"🏷️ Category \"{category.name}\" added (budget {money(budget)}).\n🔖 `{category.id}`",
            id=category.id,
        )

    @service_action("delete the category")
    def delete_category(self, user_id: int, category_id: str) -> dict:
        """
        Delete a non-essential category and its budget line in the current
        period. Archived periods keep their snapshot, and transactions that
        used it show as uncategorized.
        """
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            category = self.category_repo.get_by_id(category_id, user_id, conn=conn)
            if category is None:
                raise NotFoundError("Category not found.")
            if category.is_essential:
                raise ValidationError(f"\"{category.name}\" is a system category and cannot be deleted.")

            self.category_repo.delete(category_id, user_id, conn=conn)
            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is not None:
                remaining = [cb for cb in period.category_budgets if cb.category_id != category_id]
                if len(remaining) != len(period.category_budgets):
                    self.period_repo.replace_budgets(period.id, remaining, conn=conn)

        return ok(f"🗑️ Category \"{category.name}\" deleted.")

    @service_report
    def list_categories(self, user_id: int) -> str:
        verify_caller(user_id, self.user_repo)
        categories = self.category_repo.get_all(user_id)
        if not categories:
            return "📭 No categories yet. Add one with /addcategory <name> [budget]."
        lines = ["🏷️ *Categories*\n"]
        for c in categories:
            marker = " 🔒" if c.is_essential else ""
            lines.append(f"  `{c.id}` {c.name}{marker}")
        return "\n".join(lines)
