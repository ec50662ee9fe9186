"""
db/connection.py
----------------
Manages the PostgreSQL connection pool and transaction scopes.
Uses psycopg2's SimpleConnectionPool for efficient connection reuse.

Every multi-row write in the ledger (closing a period, transfers,
recurring postings) runs inside a single `transaction()` so that either
all of its statements are committed or none are.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool
from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.SimpleConnectionPool | None = None


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> None:
    """
    Initialize the database connection pool.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.SimpleConnectionPool(min_conn, max_conn, DATABASE_URL)
        logger.info("Database connection pool initialized successfully.")
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise


def get_connection():
    """
    Get a connection from the pool.

    Returns:
        A psycopg2 connection object.

    Raises:
        RuntimeError: If the pool has not been initialized.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool.getconn()


def release_connection(conn) -> None:
    """
    Return a connection back to the pool.

    Args:
        conn: The psycopg2 connection to release.
    """
    if _pool is not None:
        _pool.putconn(conn)


@contextmanager
def transaction() -> Iterator:
    """
    Borrow a connection for one atomic unit of work.

    Commits when the block exits normally, rolls back when it raises,
    and always returns the connection to the pool.

    Usage:
        with transaction() as conn:
            wallet_repo.set_initial_balance(..., conn=conn)
            period_repo.close(..., conn=conn)
    """
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        release_connection(conn)


@contextmanager
def connection_scope(conn: Optional[object] = None) -> Iterator:
    """
    Yield `conn` unchanged when the caller already owns a transaction,
    otherwise open (and commit) a transaction of our own.
    """
    if conn is not None:
        yield conn
        return
    with transaction() as own:
        yield own


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database connection pool closed.")
