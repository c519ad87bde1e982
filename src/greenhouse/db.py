"""
Database connection and query utilities.

Provides a simple interface for executing queries with psycopg,
returning results as dictionaries.

The web application opens one shared connection pool at startup with
open_pool() and closes it at shutdown with close_pool(). Without an open
pool (scripts, the CLI) every operation opens its own connection.

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

import logging
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from greenhouse.config import config

logger = logging.getLogger(__name__)

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Pool
# =============================================================================

_pool: ConnectionPool | None = None


def open_pool() -> ConnectionPool:
    """
    Open the shared connection pool.

    Calling it again while a pool is open returns the existing pool.
    """
    global _pool
    if _pool is None:
        logger.info(
            "Opening connection pool (min_size=%s, max_size=%s)",
            config.pool_min_size,
            config.pool_max_size,
        )
        _pool = ConnectionPool(
            config.database_url,
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
            open=False,
        )
        _pool.open()
    return _pool


def close_pool() -> None:
    """Close the shared connection pool if one is open."""
    global _pool
    if _pool is None:
        return
    logger.info("Closing connection pool")
    _pool.close()
    _pool = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection():
    """
    Context manager for database connections.

    With the pool open:
        - Borrows a connection from the pool
        - Commits on successful exit, rolls back on exception
        - Returns the connection to the pool

    Without a pool:
        - Opens a new connection
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction
    """
    if _connection_override is not None:
        yield _connection_override
        return

    if _pool is not None:
        with _pool.connection() as conn:
            yield conn
        return

    conn = psycopg.connect(config.database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction():
    """
    Context manager for a dict-row cursor inside a transaction block.

    Statements run atomically: the block commits on success and rolls
    back on exception. Inside an outer transaction (e.g. the test
    override) it becomes a savepoint, so a failed statement does not
    poison the connection.

    Usage:
        with transaction() as cur:
            cur.execute("INSERT ...")
            cur.execute("UPDATE ...")
    """
    with get_connection() as conn:
        with conn.transaction():
            with conn.cursor(row_factory=dict_row) as cur:
                yield cur


# =============================================================================
# Query Helpers
# =============================================================================


def execute(query, params: tuple = None) -> int:
    """
    Execute a query without returning results.

    Use for INSERT, UPDATE, DELETE when you don't need the affected rows.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Number of rows affected
    """
    with transaction() as cur:
        cur.execute(query, params)
        return cur.rowcount


def fetch_one(query, params: tuple = None) -> dict[str, Any] | None:
    """
    Execute a query and return a single row as dict.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Dict of column names to values, or None if no row found
    """
    with transaction() as cur:
        cur.execute(query, params)
        return cur.fetchone()


def fetch_all(query, params: tuple = None) -> list[dict[str, Any]]:
    """
    Execute a query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        List of dicts, empty list if no rows found
    """
    with transaction() as cur:
        cur.execute(query, params)
        return cur.fetchall()
