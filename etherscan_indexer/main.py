#!/usr/bin/env python3
"""
Etherscan block indexer - sweeps a block range through the Etherscan proxy API
and stores blocks and transactions in PostgreSQL.

Usage:
  python -m etherscan_indexer.main
  INDEX_START=100 BLOCK_TO_PROCESS=2 etherscan-indexer --once
"""
import argparse
import logging
import signal
import sys

from . import config, db
from .client import EtherscanClient
from .indexer import BlockIndexer
from .logging_setup import setup_logging
from .store import PostgresStore

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Index Etherscan blocks and transactions into PostgreSQL")
    parser.add_argument("--index-start", type=int, help="First block number of every sweep (default: INDEX_START)")
    parser.add_argument("--block-to-process", type=int, help="Blocks per sweep (default: BLOCK_TO_PROCESS)")
    parser.add_argument("--grace-period", type=float, help="Seconds between sweeps (default: GRACE_PERIOD)")
    parser.add_argument("--once", action="store_true", help="Run a single sweep and exit")
    parser.add_argument("--skip-schema", action="store_true", help="Do not create tables at startup")
    return parser.parse_args(argv)


def install_signal_handlers(indexer: BlockIndexer):
    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        indexer.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main(argv=None):
    args = parse_args(argv)
    setup_logging()

    try:
        settings = config.load_settings(
            index_start=args.index_start,
            block_to_process=args.block_to_process,
            grace_period=args.grace_period,
        )
    except config.ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    logger.info(f"Starting indexer. Blocks {settings.index_start} → "
                f"{settings.index_start + settings.block_to_process - 1}, "
                f"grace period {settings.grace_period}s, API {settings.api_server}")

    client = EtherscanClient(settings.api_server, settings.api_key, timeout=settings.http_timeout)
    indexer = BlockIndexer(settings, client, PostgresStore())
    install_signal_handlers(indexer)

    try:
        if not args.skip_schema:
            db.schema_init(settings.connection_string)
        sweeps = indexer.run(max_sweeps=1 if args.once else None)
        logger.info(f"Shutdown complete after {sweeps} sweep(s).")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1
    finally:
        client.close()
        db.shutdown_pool()


if __name__ == "__main__":
    sys.exit(main())
