"""
Wire-format -> entity mapping (no network or DB dependency).
Payloads are the `result` objects of eth_getBlockByNumber and
eth_getTransactionByBlockNumberAndIndex, as returned by the Etherscan proxy.
"""
from typing import Dict, Any

from .hexcodec import from_hex, from_hex_big
from .models import Block, Transaction


def map_block(payload: Dict[str, Any], block_number: int) -> Block:
    """
    Build a Block from an eth_getBlockByNumber result.
    block_number is the queried number; the payload's own number field is not trusted for it.
    Raises HexDecodeError on malformed quantities.
    """
    return Block(
        block_number=block_number,
        hash=payload.get("hash"),
        parent_hash=payload.get("parentHash"),
        miner=payload.get("miner"),
        # proxy payload has no reward field; the hex number fills this column
        block_reward=from_hex_big(payload.get("number")),
        gas_limit=from_hex_big(payload.get("gasLimit")),
        gas_used=from_hex_big(payload.get("gasUsed")),
    )


def map_transaction(payload: Dict[str, Any]) -> Transaction:
    """Build a Transaction (block_id unset) from an eth_getTransactionByBlockNumberAndIndex result."""
    return Transaction(
        hash=payload.get("hash"),
        from_address=payload.get("from"),
        to_address=payload.get("to"),
        value=from_hex_big(payload.get("value")),
        gas=from_hex_big(payload.get("gas")),
        gas_price=from_hex_big(payload.get("gasPrice")),
        transaction_index=from_hex(payload.get("transactionIndex")),
    )
