"""
services/recurring_service.py
------------------------------
Business logic for recurring transactions: monthly templates that are
posted into the current period once their day of the month has come.
"""

from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from db.connection import transaction
from models.recurring import RecurringTransaction
from models.transaction import Expense, Income, make_id
from repositories.period_repo import PeriodRepository
from repositories.recurring_repo import RecurringRepository
from repositories.transaction_repo import TransactionRepository
from repositories.user_repo import UserRepository
from security.session import verify_caller
from services.display import money
from services.errors import NotFoundError, PeriodNotFoundError, ValidationError
from services.results import ok, service_action, service_report
from utils.logger import get_logger

logger = get_logger(__name__)


def is_due(template: RecurringTransaction, today: date) -> bool:
    """Due once `today` reaches the template's day and it was not posted this month."""
    scheduled = scheduled_date(template, today)
    return template.active and today >= scheduled and not template.added_in_month(today)


def scheduled_date(template: RecurringTransaction, today: date) -> date:
    """This month's posting date; day 31 falls on the last day of short months."""
    return today + relativedelta(day=template.day_of_month)


def build_transaction(template: RecurringTransaction, today: date):
    """The Expense or Income a template posts for the month of `today`."""
    posted_on = datetime.combine(scheduled_date(template, today), datetime.min.time())
    notes = f"(Auto) {template.name}"
    if template.type == "expense":
        return Expense.create(
            template.base_amount, template.admin_fee,
            id=make_id(f"rec-exp-{template.id}"),
            category_id=template.category_id,
            wallet_id=template.wallet_id,
            date=posted_on,
            notes=notes,
        )
    return Income.create(
        template.base_amount, template.admin_fee,
        id=make_id(f"rec-inc-{template.id}"),
        wallet_id=template.wallet_id,
        date=posted_on,
        notes=notes,
    )


class RecurringService:
    """
    Handles all business logic for recurring transactions.

    Responsibilities:
        - Create, list and delete templates.
        - Post due templates into the current period (daily job).
    """

    def __init__(self):
        self.repo = RecurringRepository()
        self.period_repo = PeriodRepository()
        self.transaction_repo = TransactionRepository()
        self.user_repo = UserRepository()

    @service_action("add the recurring transaction")
    def add_recurring(
        self,
        user_id: int,
        name: str,
        type: str,
        base_amount: float,
        wallet_id: str,
        day_of_month: int,
        admin_fee: float = 0.0,
        category_id: Optional[str] = None,
        notes: str = "",
    ) -> dict:
        """Create a monthly template. Expenses need a category."""
        if type not in ("expense", "income"):
            raise ValidationError("Type must be 'expense' or 'income'.")
        if not 1 <= int(day_of_month) <= 31:
            raise ValidationError("Day of month must be between 1 and 31.")
        if type == "expense" and not category_id:
            raise ValidationError("A recurring expense needs a category.")

        if type == "expense":
            sample = Expense.create(base_amount, admin_fee, category_id=category_id)
        else:
            sample = Income.create(base_amount, admin_fee)
        sample.validate()

        verify_caller(user_id, self.user_repo)
        template = self.repo.add(RecurringTransaction(
            user_id=user_id,
            name=name.strip(),
            type=type,
            amount=sample.amount,
            base_amount=sample.base_amount,
            admin_fee=sample.admin_fee,
            category_id=category_id if type == "expense" else None,
            wallet_id=wallet_id,
            day_of_month=int(day_of_month),
            notes=notes,
        ))
        return ok(
            f"🔁 Recurring {template.type} added:\n"
            f"  📌 {template.name}: {money(template.amount)}\n"
            f"  📅 Every day {template.day_of_month} of the month\n"
            f"  🔖 #{template.id}",
            id=template.id,
        )

    @service_report
    def list_active(self, user_id: int) -> str:
        """
        Get a formatted list of all active recurring transactions.

        Returns:
            Formatted string or "no templates" message.
        """
        verify_caller(user_id, self.user_repo)
        templates = self.repo.get_all(user_id, active_only=True)
        if not templates:
            return "📭 No recurring transactions yet."

        lines = ["🔁 *Recurring transactions*\n"]
        monthly_out = 0.0
        monthly_in = 0.0
        for t in templates:
            lines.append(f"  #{t.id} {t}")
            if t.type == "expense":
                monthly_out += t.amount
            else:
                monthly_in += t.amount
        lines.append(f"\n💸 Monthly out: {money(monthly_out)} | 💰 Monthly in: {money(monthly_in)}")
        return "\n".join(lines)

    @service_action("delete the recurring transaction")
    def delete_recurring(self, user_id: int, template_id: int) -> dict:
        verify_caller(user_id, self.user_repo)
        if not self.repo.delete(template_id, user_id):
            raise NotFoundError(f"Recurring transaction #{template_id} not found.")
        return ok(f"🗑️ Recurring transaction #{template_id} deleted.")

    @service_action("post recurring transactions")
    def apply_due(self, user_id: int, today: Optional[date] = None) -> dict:
        """
        Post every due template into the current period and stamp it as
        added, all in one transaction.

        Returns:
            Result dict with 'posted': list of (template name, transaction id).
        """
        today = today or date.today()
        posted = []
        with transaction() as conn:
            templates = [t for t in self.repo.get_all(user_id, conn=conn) if is_due(t, today)]
            if not templates:
                return ok("Nothing due.", posted=posted)
            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is None:
                raise PeriodNotFoundError()

            for template in templates:
                if template.type == "expense" and not template.category_id:
                    logger.warning(f"Skipping recurring expense #{template.id} without category")
                    continue
                record = build_transaction(template, today)
                self.transaction_repo.add(record, period.id, conn=conn)
                self.repo.mark_added(template.id, today, conn=conn)
                posted.append((template.name, record.id))

        if not posted:
            return ok("Nothing due.", posted=posted)
        lines = [f"🔁 Posted {len(posted)} recurring transaction(s):"]
        lines.extend(f"  • {name}" for name, _ in posted)
        logger.info(f"Posted {len(posted)} recurring transactions for user {user_id}")
        return ok("\n".join(lines), posted=posted)

    def apply_due_for_all(self, today: Optional[date] = None) -> dict[int, dict]:
        """Run `apply_due` for every registered user. Used by the daily job."""
        return {uid: self.apply_due(uid, today) for uid in self.user_repo.get_all_ids()}
