"""
repositories/period_repo.py
---------------------------
Data access layer for budget periods and their category budgets.
"""

from datetime import datetime
from typing import Optional

from db.connection import connection_scope
from models.period import BudgetPeriod, CategoryBudget
from repositories.transaction_repo import TransactionRepository
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, user_id, period_start, period_end, total_income, total_expenses, remaining_budget"
)


class PeriodRepository:
    """Repository for the budget_periods and period_category_budgets tables."""

    def __init__(self):
        self.transaction_repo = TransactionRepository()

    # ── CREATE ────────────────────────────────────────────

    def create(self, period: BudgetPeriod, conn=None) -> BudgetPeriod:
        """
        Insert a new period together with its category budgets.

        Returns:
            The same BudgetPeriod with its `id` populated.
        """
        sql = """
            INSERT INTO budget_periods (user_id, period_start, period_end,
                                        total_income, total_expenses, remaining_budget)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            with connection_scope(conn) as c:
                with c.cursor() as cur:
                    cur.execute(sql, (
                        period.user_id, period.period_start, period.period_end,
                        period.total_income, period.total_expenses, period.remaining_budget,
                    ))
                    period.id = cur.fetchone()[0]
                self.replace_budgets(period.id, period.category_budgets, conn=c)
            logger.info(f"Created budget period #{period.id} for user {period.user_id}")
            return period
        except Exception as e:
            logger.error(f"Failed to create budget period for user {period.user_id}: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_current(
        self, user_id: int, conn=None, for_update: bool = False, with_transactions: bool = True
    ) -> Optional[BudgetPeriod]:
        """
        Fetch the user's open period.

        Args:
            for_update: Lock the period row until the caller's transaction ends.
            with_transactions: Also load its expenses and incomes.
        """
        sql = f"SELECT {_COLUMNS} FROM budget_periods WHERE user_id = %s AND period_end IS NULL"
        if for_update:
            sql += " FOR UPDATE"
        return self._fetch_one(sql + ";", (user_id,), conn, with_transactions)

    def get_by_id(
        self, period_id: int, user_id: int, conn=None, for_update: bool = False,
        with_transactions: bool = True,
    ) -> Optional[BudgetPeriod]:
        """Fetch any period (current or archived) by id, scoped to a user."""
        sql = f"SELECT {_COLUMNS} FROM budget_periods WHERE id = %s AND user_id = %s"
        if for_update:
            sql += " FOR UPDATE"
        return self._fetch_one(sql + ";", (period_id, user_id), conn, with_transactions)

    def list_archives(self, user_id: int, conn=None) -> list[BudgetPeriod]:
        """Closed periods, newest first, without their transactions."""
        sql = f"""
            SELECT {_COLUMNS} FROM budget_periods
            WHERE user_id = %s AND period_end IS NOT NULL
            ORDER BY period_end DESC;
        """
        with connection_scope(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (user_id,))
                periods = [self._row_to_period(r) for r in cur.fetchall()]
            for period in periods:
                period.category_budgets = self.get_budgets(period.id, conn=c)
        return periods

    def get_budgets(self, period_id: int, conn=None) -> list[CategoryBudget]:
        sql = """
            SELECT category_id, budget, category_name FROM period_category_budgets
            WHERE period_id = %s ORDER BY position, category_id;
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (period_id,))
            return [CategoryBudget(r[0], float(r[1]), r[2]) for r in cur.fetchall()]

    # ── UPDATE ────────────────────────────────────────────

    def replace_budgets(self, period_id: int, budgets: list[CategoryBudget], conn=None) -> None:
        """Replace all category budget lines of a period."""
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute("DELETE FROM period_category_budgets WHERE period_id = %s;", (period_id,))
            for position, cb in enumerate(budgets):
                cur.execute(
                    "INSERT INTO period_category_budgets "
                    "(period_id, category_id, category_name, budget, position) "
                    "VALUES (%s, %s, %s, %s, %s);",
                    (period_id, cb.category_id, cb.category_name, cb.budget, position),
                )

    def close(self, period_id: int, period_end: datetime, summary: dict, conn=None) -> bool:
        """
        Turn the open period into an archive by setting its end and totals.

        Returns:
            True if the period was open and is now closed.
        """
        sql = """
            UPDATE budget_periods
            SET period_end = %s, total_income = %s, total_expenses = %s, remaining_budget = %s
            WHERE id = %s AND period_end IS NULL;
        """
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (
                    period_end, summary["total_income"], summary["total_expenses"],
                    summary["remaining_budget"], period_id,
                ))
                closed = cur.rowcount > 0
            if closed:
                logger.info(f"Closed budget period #{period_id}")
            return closed
        except Exception as e:
            logger.error(f"Failed to close budget period #{period_id}: {e}")
            raise

    def update_summary(self, period_id: int, summary: dict, conn=None) -> None:
        """Recompute the frozen totals of an archived period."""
        sql = """
            UPDATE budget_periods
            SET total_income = %s, total_expenses = %s, remaining_budget = %s
            WHERE id = %s AND period_end IS NOT NULL;
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (
                summary["total_income"], summary["total_expenses"],
                summary["remaining_budget"], period_id,
            ))

    # ── HELPERS ───────────────────────────────────────────

    def _fetch_one(self, sql: str, params: tuple, conn, with_transactions: bool) -> Optional[BudgetPeriod]:
        with connection_scope(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
            if row is None:
                return None
            period = self._row_to_period(row)
            period.category_budgets = self.get_budgets(period.id, conn=c)
            if with_transactions:
                period.expenses = self.transaction_repo.get_expenses(period.id, conn=c)
                period.incomes = self.transaction_repo.get_incomes(period.id, conn=c)
            return period

    @staticmethod
    def _row_to_period(row: tuple) -> BudgetPeriod:
        """Convert a database row tuple to a BudgetPeriod domain object."""
        return BudgetPeriod(
            id=row[0],
            user_id=row[1],
            period_start=row[2],
            period_end=row[3],
            total_income=float(row[4]) if row[4] is not None else None,
            total_expenses=float(row[5]) if row[5] is not None else None,
            remaining_budget=float(row[6]) if row[6] is not None else None,
        )
