"""
Etherscan proxy API client (module=proxy).
Each call is a single GET with no retry; failed calls yield an absent result
and the block is picked up again by the next sweep.
"""
import json
import logging
import time
from typing import Any, Dict, Optional

import requests

from .hexcodec import to_hex, from_hex
from .mappers import map_block, map_transaction
from .models import Block, Transaction, TransactionCount

logger = logging.getLogger(__name__)

GET_BLOCK_BY_NUMBER = "eth_getBlockByNumber"
GET_BLOCK_TRANSACTION_COUNT = "eth_getBlockTransactionCountByNumber"
GET_TRANSACTION_BY_INDEX = "eth_getTransactionByBlockNumberAndIndex"


class ApiDecodeError(ValueError):
    """The API answered with a body that is not a JSON envelope."""

    def __init__(self, message, action=None, block_number=None):
        super().__init__(message)
        self.action = action
        self.block_number = block_number


class EtherscanClient:
    """
    Read-only access to the three proxy actions the indexer needs.
    The HTTP session is injectable so one transport can be reused (or faked in tests).
    """

    def __init__(self, api_server: str, api_key: str, session=None, timeout: float = 30.0):
        self.api_server = api_server
        self.api_key = api_key
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _proxy_call(self, action: str, block_number: int, **params) -> Optional[Any]:
        """
        Perform one proxy GET and return the envelope's `result`.
        Returns None on transport errors, non-2xx statuses and error envelopes.
        Raises ApiDecodeError if the body is not a JSON object.
        """
        query: Dict[str, Any] = {
            "module": "proxy",
            "action": action,
            "tag": to_hex(block_number),
        }
        query.update(params)
        query["apikey"] = self.api_key

        try:
            resp = self.session.get(self.api_server, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{action} for block {block_number} failed: {e}")
            return None

        if not resp.ok:
            logger.warning(f"{action} for block {block_number} returned HTTP {resp.status_code}")
            return None

        try:
            envelope = resp.json()
        except ValueError as e:
            raise ApiDecodeError(f"{action} for block {block_number}: invalid JSON body: {e}",
                                 action=action, block_number=block_number) from e
        if not isinstance(envelope, dict):
            raise ApiDecodeError(f"{action} for block {block_number}: expected a JSON object, "
                                 f"got {type(envelope).__name__}",
                                 action=action, block_number=block_number)

        if envelope.get("error"):
            logger.warning(f"{action} for block {block_number} returned error: {envelope['error']}")
            return None
        # rate limiting and bad keys come back as {"status": "0", "message": "NOTOK", "result": "<reason>"}
        if envelope.get("status") == "0":
            logger.warning(f"{action} for block {block_number} rejected: "
                           f"{envelope.get('message')} ({envelope.get('result')})")
            return None

        return envelope.get("result")

    def get_block_by_number(self, block_number: int) -> Optional[Block]:
        result = self._proxy_call(GET_BLOCK_BY_NUMBER, block_number, boolean="false")
        if not result or not isinstance(result, dict):
            return None
        return map_block(result, block_number)

    def get_transaction_count(self, block_number: int) -> TransactionCount:
        result = self._proxy_call(GET_BLOCK_TRANSACTION_COUNT, block_number)
        if result is None:
            return TransactionCount.fetch_failed()
        return TransactionCount(count=from_hex(result))

    def get_transaction_by_index(self, block_number: int, index: int) -> Optional[Transaction]:
        start = time.time()
        result = self._proxy_call(GET_TRANSACTION_BY_INDEX, block_number, index=to_hex(index))
        tx = map_transaction(result) if result and isinstance(result, dict) else None
        elapsed = time.time() - start
        logger.info(f"Get transaction block {block_number} index {index} from API server "
                    f"in {elapsed:.3f}s {json.dumps(tx.to_dict() if tx else None)}")
        return tx
