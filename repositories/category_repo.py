"""
repositories/category_repo.py
-----------------------------
Data access layer for the master category list.
"""

from typing import Optional

from db.connection import connection_scope
from models.category import Category
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, name, icon, is_essential, is_debt_category"


class CategoryRepository:
    """Repository for CRUD operations on the categories table."""

    def add(self, category: Category, conn=None) -> Category:
        sql = f"INSERT INTO categories ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s);"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (
                    category.id, category.user_id, category.name, category.icon,
                    category.is_essential, category.is_debt_category,
                ))
            logger.info(f"Added category '{category.name}' {category.id} for user {category.user_id}")
            return category
        except Exception as e:
            logger.error(f"Failed to add category '{category.name}': {e}")
            raise

    def get_all(self, user_id: int, conn=None) -> list[Category]:
        sql = f"SELECT {_COLUMNS} FROM categories WHERE user_id = %s ORDER BY is_essential, name;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id,))
            return [self._row_to_category(r) for r in cur.fetchall()]

    def get_by_id(self, category_id: str, user_id: int, conn=None) -> Optional[Category]:
        sql = f"SELECT {_COLUMNS} FROM categories WHERE id = %s AND user_id = %s;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (category_id, user_id))
            row = cur.fetchone()
            return self._row_to_category(row) if row else None

    def get_by_name(self, name: str, user_id: int, conn=None) -> Optional[Category]:
        """Case-insensitive lookup by display name."""
        sql = f"SELECT {_COLUMNS} FROM categories WHERE user_id = %s AND LOWER(name) = LOWER(%s) LIMIT 1;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id, name))
            row = cur.fetchone()
            return self._row_to_category(row) if row else None

    def delete(self, category_id: str, user_id: int, conn=None) -> bool:
        sql = "DELETE FROM categories WHERE id = %s AND user_id = %s;"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (category_id, user_id))
                deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted category {category_id} for user {user_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise

    @staticmethod
    def _row_to_category(row: tuple) -> Category:
        """Convert a database row tuple to a Category domain object."""
        return Category(
            id=row[0],
            user_id=row[1],
            name=row[2],
            icon=row[3],
            is_essential=bool(row[4]),
            is_debt_category=bool(row[5]),
        )
