"""Shared database connection handling for the etherscan indexer."""

import logging
import os
import threading
from contextlib import contextmanager
from psycopg2.pool import ThreadedConnectionPool

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "sql", "schema.sql")

# One pool per connection target (min=1, max=5 connections)
_pools = {}
_pools_lock = threading.Lock()


def init_pool(connection_string):
    """Return the pool for connection_string, creating it on first use."""
    with _pools_lock:
        pool = _pools.get(connection_string)
        if pool is None:
            pool = ThreadedConnectionPool(minconn=1, maxconn=5, dsn=connection_string)
            _pools[connection_string] = pool
        return pool


def shutdown_pool():
    """Close all pool connections. Call before exit."""
    with _pools_lock:
        for pool in _pools.values():
            pool.closeall()
        _pools.clear()


@contextmanager
def get_db_cursor(connection_string, cursor_factory=None):
    """Context manager for getting a DB cursor from the pool for connection_string.
    The transaction is committed when the block exits cleanly and rolled back otherwise.
    Usage:
        with get_db_cursor(dsn) as cur:
            cur.execute("SELECT ...")
    The connection will be returned to pool automatically.
    """
    pool = init_pool(connection_string)
    conn = None
    try:
        conn = pool.getconn()
        with conn:  # transaction management
            with conn.cursor(cursor_factory=cursor_factory) as cur:
                yield cur
    finally:
        if conn is not None:
            pool.putconn(conn)


def schema_init(connection_string):
    """Create the indexer tables if they don't exist."""
    with open(SCHEMA_PATH, "r") as sf:
        schema_sql = sf.read()
    with get_db_cursor(connection_string) as cur:
        cur.execute(schema_sql)
    logger.info("Database schema is ready")
