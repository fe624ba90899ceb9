"""
Persistence-ready entities produced by the mappers and written by the store.
"""
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class Block:
    block_number: int
    hash: str
    parent_hash: str
    miner: str
    block_reward: int
    gas_limit: int
    gas_used: int
    id: Optional[int] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class Transaction:
    hash: str
    from_address: str
    to_address: Optional[str]
    value: int
    gas: int
    gas_price: int
    transaction_index: int
    block_id: Optional[int] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class TransactionCount:
    """
    Outcome of a transaction-count fetch.
    A failed fetch is kept apart from a block that genuinely holds no transactions.
    """
    count: int = 0
    failed: bool = False

    @classmethod
    def fetch_failed(cls) -> "TransactionCount":
        return cls(count=0, failed=True)
