"""
repositories/transaction_repo.py
--------------------------------
Data access layer for expenses and incomes.
Each transaction is its own row keyed by id and linked to its period.
"""

from typing import Optional

from db.connection import connection_scope
from models.transaction import Expense, Income, Split
from utils.logger import get_logger

logger = get_logger(__name__)

_EXPENSE_COLUMNS = (
    "id, period_id, wallet_id, amount, base_amount, admin_fee, category_id, "
    "is_split, date, notes, saving_goal_id, debt_id"
)
_INCOME_COLUMNS = "id, period_id, wallet_id, amount, base_amount, admin_fee, date, notes"


class TransactionRepository:
    """Repository for the expenses, expense_splits and incomes tables."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, transaction, period_id: int, conn=None):
        """
        Insert an expense or income into a period.

        Args:
            transaction: Expense or Income domain object.
            period_id: Owning budget period.

        Returns:
            The same object with `period_id` set.
        """
        transaction.period_id = period_id
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                if transaction.kind == "expense":
                    self._insert_expense(cur, transaction)
                else:
                    self._insert_income(cur, transaction)
            logger.info(f"Added {transaction.kind} {transaction.id} to period #{period_id}")
            return transaction
        except Exception as e:
            logger.error(f"Failed to add {transaction.kind} {transaction.id}: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_expenses(self, period_id: int, conn=None) -> list[Expense]:
        """All expenses of a period, oldest first, with their splits."""
        sql = f"SELECT {_EXPENSE_COLUMNS} FROM expenses WHERE period_id = %s ORDER BY date, id;"
        splits_sql = """
            SELECT s.expense_id, s.category_id, s.amount
            FROM expense_splits s JOIN expenses e ON e.id = s.expense_id
            WHERE e.period_id = %s
            ORDER BY s.expense_id, s.position;
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (period_id,))
            expenses = [self._row_to_expense(r) for r in cur.fetchall()]
            cur.execute(splits_sql, (period_id,))
            splits: dict[str, list[Split]] = {}
            for expense_id, category_id, amount in cur.fetchall():
                splits.setdefault(expense_id, []).append(Split(category_id, float(amount)))
        for expense in expenses:
            expense.splits = splits.get(expense.id, [])
        return expenses

    def get_incomes(self, period_id: int, conn=None) -> list[Income]:
        """All incomes of a period, oldest first."""
        sql = f"SELECT {_INCOME_COLUMNS} FROM incomes WHERE period_id = %s ORDER BY date, id;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (period_id,))
            return [self._row_to_income(r) for r in cur.fetchall()]

    def count_wallet_references(self, wallet_id: str, user_id: int, conn=None) -> dict:
        """
        Count transactions that point at a wallet.

        Returns:
            Dict with keys 'current' and 'archive'.
        """
        sql = """
            SELECT bp.period_end IS NULL AS is_current, COUNT(*)
            FROM (
                SELECT period_id FROM expenses WHERE wallet_id = %s
                UNION ALL
                SELECT period_id FROM incomes WHERE wallet_id = %s
            ) t
            JOIN budget_periods bp ON bp.id = t.period_id
            WHERE bp.user_id = %s
            GROUP BY 1;
        """
        counts = {"current": 0, "archive": 0}
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (wallet_id, wallet_id, user_id))
            for is_current, n in cur.fetchall():
                counts["current" if is_current else "archive"] = int(n)
        return counts

    # ── UPDATE ────────────────────────────────────────────

    def replace(self, transaction, period_id: int, conn=None) -> bool:
        """
        Overwrite the stored transaction with the same id in `period_id`.

        Returns:
            True if a row was replaced, False if no such id exists there.
        """
        transaction.period_id = period_id
        table = "expenses" if transaction.kind == "expense" else "incomes"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(
                    f"DELETE FROM {table} WHERE id = %s AND period_id = %s;",
                    (transaction.id, period_id),
                )
                if cur.rowcount == 0:
                    return False
                if transaction.kind == "expense":
                    self._insert_expense(cur, transaction)
                else:
                    self._insert_income(cur, transaction)
            logger.info(f"Replaced {transaction.kind} {transaction.id} in period #{period_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to replace {transaction.kind} {transaction.id}: {e}")
            raise

    # ── DELETE ────────────────────────────────────────────

    def delete(self, kind: str, transaction_id: str, period_id: int, conn=None) -> bool:
        """Delete an expense or income by id within a period."""
        table = "expenses" if kind == "expense" else "incomes"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(
                    f"DELETE FROM {table} WHERE id = %s AND period_id = %s;",
                    (transaction_id, period_id),
                )
                deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted {kind} {transaction_id} from period #{period_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete {kind} {transaction_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _insert_expense(cur, expense: Expense) -> None:
        cur.execute(
            f"INSERT INTO expenses ({_EXPENSE_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s);",
            (
                expense.id, expense.period_id, expense.wallet_id, expense.amount,
                expense.base_amount, expense.admin_fee, expense.category_id,
                expense.is_split, expense.date, expense.notes,
                expense.saving_goal_id, expense.debt_id,
            ),
        )
        for position, split in enumerate(expense.splits):
            cur.execute(
                "INSERT INTO expense_splits (expense_id, position, category_id, amount) "
                "VALUES (%s, %s, %s, %s);",
                (expense.id, position, split.category_id, split.amount),
            )

    @staticmethod
    def _insert_income(cur, income: Income) -> None:
        cur.execute(
            f"INSERT INTO incomes ({_INCOME_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s);",
            (
                income.id, income.period_id, income.wallet_id, income.amount,
                income.base_amount, income.admin_fee, income.date, income.notes,
            ),
        )

    @staticmethod
    def _row_to_expense(row: tuple) -> Expense:
        """Convert a database row tuple to an Expense domain object."""
        return Expense(
            id=row[0],
            period_id=row[1],
            wallet_id=row[2],
            amount=float(row[3]),
            base_amount=float(row[4]),
            admin_fee=float(row[5]),
            category_id=row[6],
            is_split=bool(row[7]),
            date=row[8],
            notes=row[9] or "",
            saving_goal_id=row[10],
            debt_id=row[11],
        )

    @staticmethod
    def _row_to_income(row: tuple) -> Income:
        """Convert a database row tuple to an Income domain object."""
        return Income(
            id=row[0],
            period_id=row[1],
            wallet_id=row[2],
            amount=float(row[3]),
            base_amount=float(row[4]),
            admin_fee=float(row[5]),
            date=row[6],
            notes=row[7] or "",
        )
