"""
services/onboarding_service.py
------------------------------
First contact with a user: register them, create the system categories
and open their first budget period.
"""

from typing import Optional

from db.connection import transaction
from repositories.user_repo import UserRepository
from services.category_service import CategoryService
from services.period_service import PeriodService
from services.results import ok, service_action
from utils.logger import get_logger

logger = get_logger(__name__)


class OnboardingService:
    """Sets up everything a new user needs, in one transaction."""

    def __init__(self):
        self.user_repo = UserRepository()
        self.category_service = CategoryService()
        self.period_service = PeriodService()

    @service_action("set up your account")
    def register(self, telegram_id: int, first_name: Optional[str] = None) -> dict:
        """
        Idempotent: returning users keep their data; anything missing
        (system categories, an open period) is created.
        """
        with transaction() as conn:
            user = self.user_repo.ensure_user(telegram_id, first_name, conn=conn)
            created = self.category_service.ensure_essential_categories(telegram_id, conn=conn)
            period = self.period_service.ensure_current_period(telegram_id, conn=conn)

        if user.get("created"):
            logger.info(f"Registered new user {telegram_id} ({first_name})")
        greeting = "Welcome" if user.get("created") else "Welcome back"
        return ok(
            f"{greeting}, {first_name or 'there'}! 👋",
            new_user=bool(user.get("created")),
            period_id=period.id,
            created_categories=[c.name for c in created],
        )
