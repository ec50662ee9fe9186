"""
repositories/goal_repo.py
-------------------------
Data access layer for saving goals and debts.
Expenses reference these by id; they are only read back for display.
"""

from db.connection import connection_scope
from models.goal import Debt, SavingGoal
from utils.logger import get_logger

logger = get_logger(__name__)


class SavingGoalRepository:
    """Repository for the saving_goals table."""

    def add(self, goal: SavingGoal, conn=None) -> SavingGoal:
        sql = "INSERT INTO saving_goals (id, user_id, name, target_amount) VALUES (%s, %s, %s, %s);"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (goal.id, goal.user_id, goal.name, goal.target_amount))
        logger.info(f"Added saving goal '{goal.name}' {goal.id}")
        return goal

    def get_all(self, user_id: int, conn=None) -> list[SavingGoal]:
        sql = "SELECT id, user_id, name, target_amount FROM saving_goals WHERE user_id = %s ORDER BY name;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id,))
            return [
                SavingGoal(id=r[0], user_id=r[1], name=r[2], target_amount=float(r[3]))
                for r in cur.fetchall()
            ]


class DebtRepository:
    """Repository for the debts table."""

    def add(self, debt: Debt, conn=None) -> Debt:
        sql = """
            INSERT INTO debts (id, user_id, name, total_amount, interest_rate, minimum_payment)
            VALUES (%s, %s, %s, %s, %s, %s);
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (
                debt.id, debt.user_id, debt.name, debt.total_amount,
                debt.interest_rate, debt.minimum_payment,
            ))
        logger.info(f"Added debt '{debt.name}' {debt.id}")
        return debt

    def get_all(self, user_id: int, conn=None) -> list[Debt]:
        sql = """
            SELECT id, user_id, name, total_amount, interest_rate, minimum_payment
            FROM debts WHERE user_id = %s ORDER BY name;
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id,))
            return [
                Debt(
                    id=r[0], user_id=r[1], name=r[2], total_amount=float(r[3]),
                    interest_rate=float(r[4] or 0), minimum_payment=float(r[5] or 0),
                )
                for r in cur.fetchall()
            ]
