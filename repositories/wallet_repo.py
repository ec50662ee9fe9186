"""
repositories/wallet_repo.py
---------------------------
Data access layer for wallets.
"""

from typing import Optional

from db.connection import connection_scope
from models.wallet import Wallet
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, name, icon, initial_balance, created_at"


class WalletRepository:
    """Repository for CRUD operations on the wallets table."""

    # ── CREATE / UPDATE ───────────────────────────────────

    def save(self, wallet: Wallet, conn=None) -> Wallet:
        """
        Insert a wallet, or overwrite name/icon/balance of an existing one.

        Returns:
            The same Wallet with `created_at` populated.
        """
        sql = f"""
            INSERT INTO wallets (id, user_id, name, icon, initial_balance)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE
                SET name = EXCLUDED.name,
                    icon = EXCLUDED.icon,
                    initial_balance = EXCLUDED.initial_balance
                WHERE wallets.user_id = EXCLUDED.user_id
            RETURNING created_at;
        """
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (
                    wallet.id, wallet.user_id, wallet.name,
                    wallet.icon, wallet.initial_balance,
                ))
                row = cur.fetchone()
                if row is None:
                    raise ValueError(f"Wallet {wallet.id} belongs to another user.")
                wallet.created_at = row[0]
            logger.info(f"Saved wallet {wallet.id} for user {wallet.user_id}")
            return wallet
        except Exception as e:
            logger.error(f"Failed to save wallet {wallet.id}: {e}")
            raise

    def set_initial_balance(self, wallet_id: str, user_id: int, balance: float, conn=None) -> bool:
        """Overwrite a wallet's initial balance. Returns True if a row changed."""
        sql = "UPDATE wallets SET initial_balance = %s WHERE id = %s AND user_id = %s;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (balance, wallet_id, user_id))
            return cur.rowcount > 0

    def adjust_initial_balance(self, wallet_id: str, user_id: int, delta: float, conn=None) -> bool:
        """Add `delta` to a wallet's initial balance. Returns True if a row changed."""
        sql = """
            UPDATE wallets SET initial_balance = initial_balance + %s
            WHERE id = %s AND user_id = %s;
        """
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (delta, wallet_id, user_id))
            return cur.rowcount > 0

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, wallet_id: str, user_id: int, conn=None) -> Optional[Wallet]:
        sql = f"SELECT {_COLUMNS} FROM wallets WHERE id = %s AND user_id = %s;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (wallet_id, user_id))
            row = cur.fetchone()
            return self._row_to_wallet(row) if row else None

    def get_all(self, user_id: int, conn=None) -> list[Wallet]:
        sql = f"SELECT {_COLUMNS} FROM wallets WHERE user_id = %s ORDER BY created_at, name;"
        with connection_scope(conn) as c, c.cursor() as cur:
            cur.execute(sql, (user_id,))
            return [self._row_to_wallet(r) for r in cur.fetchall()]

    # ── DELETE ────────────────────────────────────────────

    def delete(self, wallet_id: str, user_id: int, conn=None) -> bool:
        sql = "DELETE FROM wallets WHERE id = %s AND user_id = %s;"
        try:
            with connection_scope(conn) as c, c.cursor() as cur:
                cur.execute(sql, (wallet_id, user_id))
                deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted wallet {wallet_id} for user {user_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete wallet {wallet_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_wallet(row: tuple) -> Wallet:
        """Convert a database row tuple to a Wallet domain object."""
        return Wallet(
            id=row[0],
            user_id=row[1],
            name=row[2],
            icon=row[3],
            initial_balance=float(row[4]),
            created_at=row[5],
        )
