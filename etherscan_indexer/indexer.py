#!/usr/bin/env python3
"""
Block indexer loop - walks the configured block range, fetches each block and
its transactions from the Etherscan proxy API and stores them in PostgreSQL.
The same range is swept again after every grace period until a stop is requested.
"""
import logging
import threading
import time
from dataclasses import dataclass

from .client import EtherscanClient
from .config import Settings
from .store import BlockStore

logger = logging.getLogger(__name__)


@dataclass
class SweepSummary:
    blocks_seen: int = 0
    blocks_inserted: int = 0
    blocks_skipped: int = 0
    count_failures: int = 0
    transactions_inserted: int = 0
    transactions_skipped: int = 0


class BlockIndexer:
    def __init__(self, settings: Settings, client: EtherscanClient, store: BlockStore, stop_event=None):
        self.settings = settings
        self.client = client
        self.store = store
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    def stop(self):
        """Request shutdown; an in-flight fetch or insert is allowed to finish."""
        self.stop_event.set()

    @property
    def stopping(self) -> bool:
        return self.stop_event.is_set()

    def block_range(self) -> range:
        start = self.settings.index_start
        return range(start, start + self.settings.block_to_process)

    def process_block(self, block_number: int, summary: SweepSummary):
        """
        Fetch, store and link one block and all of its transactions.
        Fetch failures skip the block (or a single transaction); decode and
        database errors propagate to the caller.
        """
        connection_string = self.settings.connection_string
        summary.blocks_seen += 1

        block = self.client.get_block_by_number(block_number)
        if block is None:
            logger.warning(f"Block {block_number} not available, skipping until next sweep")
            summary.blocks_skipped += 1
            return

        self.store.insert_block(block, connection_string)
        summary.blocks_inserted += 1
        block_id = self.store.get_block_id_by_number(block_number, connection_string)
        block.id = block_id

        tx_count = self.client.get_transaction_count(block_number)
        if tx_count.failed:
            logger.warning(f"Transaction count for block {block_number} could not be fetched, "
                           f"transactions will be retried next sweep")
            summary.count_failures += 1
            return
        if tx_count.count <= 0:
            logger.debug(f"Block {block_number} has no transactions")
            return

        for index in range(tx_count.count):
            tx = self.client.get_transaction_by_index(block_number, index)
            if tx is None:
                logger.warning(f"Transaction {index} of block {block_number} not available, skipping")
                summary.transactions_skipped += 1
                continue
            tx.block_id = block_id
            self.store.insert_transaction(tx, connection_string)
            summary.transactions_inserted += 1

    def perform_sweep(self) -> SweepSummary:
        """Process every block number in the configured range, in ascending order."""
        summary = SweepSummary()
        block_range = self.block_range()
        if not block_range:
            logger.info("Nothing to sweep (BLOCK_TO_PROCESS is 0)")
            return summary

        sweep_start = time.time()
        logger.info(f"Sweeping blocks {block_range.start} → {block_range.stop - 1}")

        for block_number in block_range:
            if self.stopping:
                logger.info(f"Stop requested, ending sweep before block {block_number}")
                break
            logger.debug(f"Start perform block {block_number}")
            self.process_block(block_number, summary)

        elapsed = time.time() - sweep_start
        logger.info(
            f"Sweep {block_range.start} → {block_range.stop - 1} done in {elapsed:.3f}s: "
            f"{summary.blocks_inserted}/{summary.blocks_seen} blocks stored, "
            f"{summary.blocks_skipped} skipped, {summary.count_failures} count failures, "
            f"{summary.transactions_inserted} transactions stored, "
            f"{summary.transactions_skipped} skipped"
        )
        return summary

    def run(self, max_sweeps=None) -> int:
        """
        Sweep, wait the grace period, repeat until stop() is called.
        max_sweeps bounds the number of sweeps (None runs forever). Returns the sweeps completed.
        """
        logger.debug("Block indexer is starting.")
        sweeps = 0

        while not self.stopping:
            logger.debug("Block indexer is doing background work.")
            self.perform_sweep()
            sweeps += 1

            if max_sweeps is not None and sweeps >= max_sweeps:
                break

            # wait() returns True as soon as the stop event is set
            if self.stop_event.wait(self.settings.grace_period):
                logger.info("Stop requested during grace period, not starting another sweep")
                break

        logger.debug("Block indexer is stopping.")
        return sweeps
