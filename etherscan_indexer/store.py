"""
Persistence port for indexed blocks and transactions.
Every call runs in its own pooled transaction, so a block insert is committed
before the caller looks up its id and writes the block's transactions.
"""
from typing import Protocol

from . import db
from .models import Block, Transaction


class BlockNotFoundError(LookupError):
    pass


class BlockStore(Protocol):
    """Write side of the indexer's storage; connection_string is passed through from config."""

    def insert_block(self, block: Block, connection_string: str) -> int:
        ...

    def get_block_id_by_number(self, block_number: int, connection_string: str) -> int:
        ...

    def insert_transaction(self, tx: Transaction, connection_string: str) -> int:
        ...


# Re-sweeps hit the same keys, so inserts update in place instead of duplicating rows
INSERT_BLOCK_SQL = """
    INSERT INTO blocks (
        block_number,
        hash,
        parent_hash,
        miner,
        block_reward,
        gas_limit,
        gas_used
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s)
    ON CONFLICT (block_number) DO UPDATE SET
        hash = EXCLUDED.hash,
        parent_hash = EXCLUDED.parent_hash,
        miner = EXCLUDED.miner,
        block_reward = EXCLUDED.block_reward,
        gas_limit = EXCLUDED.gas_limit,
        gas_used = EXCLUDED.gas_used,
        indexed_at = now()
"""

SELECT_BLOCK_ID_SQL = "SELECT id FROM blocks WHERE block_number = %s"

INSERT_TRANSACTION_SQL = """
    INSERT INTO transactions (
        block_id,
        transaction_index,
        hash,
        from_address,
        to_address,
        value,
        gas,
        gas_price
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
    ON CONFLICT (block_id, transaction_index) DO UPDATE SET
        hash = EXCLUDED.hash,
        from_address = EXCLUDED.from_address,
        to_address = EXCLUDED.to_address,
        value = EXCLUDED.value,
        gas = EXCLUDED.gas,
        gas_price = EXCLUDED.gas_price,
        indexed_at = now()
"""


class PostgresStore:
    """BlockStore backed by the pooled PostgreSQL connections in db.py."""

    def insert_block(self, block: Block, connection_string: str) -> int:
        with db.get_db_cursor(connection_string) as cur:
            cur.execute(INSERT_BLOCK_SQL, (
                block.block_number,
                block.hash,
                block.parent_hash,
                block.miner,
                block.block_reward,
                block.gas_limit,
                block.gas_used,
            ))
            return cur.rowcount

    def get_block_id_by_number(self, block_number: int, connection_string: str) -> int:
        with db.get_db_cursor(connection_string) as cur:
            cur.execute(SELECT_BLOCK_ID_SQL, (block_number,))
            row = cur.fetchone()
        if row is None:
            raise BlockNotFoundError(f"No stored block with number {block_number}")
        return row[0]

    def insert_transaction(self, tx: Transaction, connection_string: str) -> int:
        if tx.block_id is None:
            raise ValueError(f"Transaction {tx.hash} has no block_id")
        with db.get_db_cursor(connection_string) as cur:
            cur.execute(INSERT_TRANSACTION_SQL, (
                tx.block_id,
                tx.transaction_index,
                tx.hash,
                tx.from_address,
                tx.to_address,
                tx.value,
                tx.gas,
                tx.gas_price,
            ))
            return cur.rowcount
