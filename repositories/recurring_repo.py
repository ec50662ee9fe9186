"""
repositories/recurring_repo.py
-------------------------------
Data access layer for recurring transaction templates.
All SQL queries related to the `recurring_transactions` table live here.
"""

from datetime import date
from typing import Optional

from db.connection import connection_scope
from models.recurring import RecurringTransaction
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, user_id, name, type, amount, base_amount, admin_fee, category_id, "
    "wallet_id, day_of_month, notes, last_added, active, created_at"
)


class RecurringRepository:
    """Repository for CRUD operations on recurring_transactions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, template: RecurringTransaction, conn=None) -> RecurringTransaction:
        """
        Insert a new recurring transaction.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO recurring_transactions
                (user_id, name, type, amount, base_amount, admin_fee, category_id,
                 wallet_id, day_of_month, notes, last_added, active)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (
                    template.user_id, template.name, template.type, template.amount,
                    template.base_amount, template.admin_fee, template.category_id,
                    template.wallet_id, template.day_of_month, template.notes,
                    template.last_added, template.active,
                ))
                row = cur.fetchone()
                template.id = row[0]
                template.created_at = row[1]
            logger.info(f"Added recurring transaction '{template.name}' #{template.id}")
            return template
        except Exception as e:
            logger.error(f"Failed to add recurring transaction: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_all(self, user_id: int, active_only: bool = True, conn=None) -> list[RecurringTransaction]:
        """
        Get all recurring transactions for a user, ordered by day of month.

        Args:
            user_id: Telegram user ID.
            active_only: If True, only return active templates.
        """
        sql = f"SELECT {_COLUMNS} FROM recurring_transactions WHERE user_id = %s"
        if active_only:
            sql += " AND active = TRUE"
        sql += " ORDER BY day_of_month ASC, id ASC;"

        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id,))
            return [self._row_to_template(r) for r in cur.fetchall()]

    def get_by_id(self, template_id: int, user_id: int, conn=None) -> Optional[RecurringTransaction]:
        """Fetch a single recurring transaction by ID, scoped to user."""
        sql = f"SELECT {_COLUMNS} FROM recurring_transactions WHERE id = %s AND user_id = %s;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (template_id, user_id))
            row = cur.fetchone()
            return self._row_to_template(row) if row else None

    # ── UPDATE ────────────────────────────────────────────

    def mark_added(self, template_id: int, day: date, conn=None) -> None:
        """Record that the template was posted on `day`."""
        sql = "UPDATE recurring_transactions SET last_added = %s WHERE id = %s;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (day, template_id))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, template_id: int, user_id: int, conn=None) -> bool:
        """Delete a recurring transaction by ID, scoped to user."""
        sql = "DELETE FROM recurring_transactions WHERE id = %s AND user_id = %s;"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (template_id, user_id))
                deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted recurring transaction #{template_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete recurring #{template_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_template(row: tuple) -> RecurringTransaction:
        """Convert a database row tuple to a RecurringTransaction domain object."""
        return RecurringTransaction(
            id=row[0],
            user_id=row[1],
            name=row[2],
            type=row[3],
            amount=float(row[4]),
            base_amount=float(row[5]),
            admin_fee=float(row[6]),
            category_id=row[7],
            wallet_id=row[8],
            day_of_month=row[9],
            notes=row[10] or "",
            last_added=row[11],
            active=row[12],
            created_at=row[13],
        )
