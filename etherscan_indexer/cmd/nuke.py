#!/usr/bin/env python3
"""
Nuke all schema objects created by the indexer (tables and their indexes)
"""
import logging

from etherscan_indexer import config, db
from etherscan_indexer.logging_setup import setup_logging

logger = logging.getLogger(__name__)

# Children first; CASCADE covers anything else that depends on them
TABLES = [
    "transactions",
    "blocks",
]


def nuke_schema(connection_string=None):
    """Drop every table the indexer creates."""
    connection_string = connection_string or config.CONNECTION_STRING
    with db.get_db_cursor(connection_string) as cur:
        for table in TABLES:
            logger.info(f"Dropping table: {table}")
            cur.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")

    logger.info("All schema objects dropped.")


if __name__ == "__main__":
    setup_logging()
    try:
        nuke_schema()
    finally:
        db.shutdown_pool()
