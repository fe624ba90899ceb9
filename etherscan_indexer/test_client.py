"""
Etherscan client tests against a fake HTTP session (no network).

Run:
  pytest etherscan_indexer/test_client.py -v
"""
import json

import pytest
import requests

from .client import (
    ApiDecodeError,
    EtherscanClient,
    GET_BLOCK_BY_NUMBER,
    GET_BLOCK_TRANSACTION_COUNT,
    GET_TRANSACTION_BY_INDEX,
)
from .hexcodec import HexDecodeError
from .test_mappers import BLOCK_PAYLOAD, TX_PAYLOAD

API_SERVER = "https://api.etherscan.test/api"
API_KEY = "test-key"


class _FakeResponse:
    def __init__(self, body=None, status_code=200, text=None):
        self.status_code = status_code
        self._text = text if text is not None else json.dumps(body)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self._text)


class _FakeSession:
    """
    Stand-in for requests.Session.
    handler(params) returns a _FakeResponse or raises; every call is recorded.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        return self.handler(dict(params or {}))

    def close(self):
        self.closed = True


def _envelope(result):
    return _FakeResponse({"jsonrpc": "2.0", "id": 1, "result": result})


def _client(handler):
    session = _FakeSession(handler)
    return EtherscanClient(API_SERVER, API_KEY, session=session, timeout=5), session


def test_get_block_by_number_sends_proxy_query():
    client, session = _client(lambda params: _envelope(BLOCK_PAYLOAD))

    block = client.get_block_by_number(100)

    assert block.block_number == 100
    assert block.hash == "0xaa"
    assert block.gas_limit == 21000
    assert session.calls == [{
        "url": API_SERVER,
        "params": {
            "module": "proxy",
            "action": GET_BLOCK_BY_NUMBER,
            "tag": "0x64",
            "boolean": "false",
            "apikey": API_KEY,
        },
        "timeout": 5,
    }]


def test_session_is_reused_across_calls():
    client, session = _client(lambda params: _envelope(BLOCK_PAYLOAD))
    client.get_block_by_number(1)
    client.get_block_by_number(2)
    assert [c["params"]["tag"] for c in session.calls] == ["0x1", "0x2"]


@pytest.mark.parametrize("response", [
    _FakeResponse({"result": None}, status_code=500),
    _FakeResponse({"result": None}, status_code=404),
    _envelope(None),
    _envelope({}),
    _FakeResponse({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}),
    _FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "invalid argument"}}),
])
def test_get_block_by_number_absent_on_failure(response):
    client, _ = _client(lambda params: response)
    assert client.get_block_by_number(100) is None


@pytest.mark.parametrize("exc", [
    requests.exceptions.ConnectionError("refused"),
    requests.exceptions.Timeout("slow"),
])
def test_get_block_by_number_absent_on_transport_error(exc):
    def handler(params):
        raise exc

    client, _ = _client(handler)
    assert client.get_block_by_number(100) is None


def test_invalid_json_body_is_a_decode_failure():
    client, _ = _client(lambda params: _FakeResponse(text="<html>bad gateway</html>"))
    with pytest.raises(ApiDecodeError) as excinfo:
        client.get_block_by_number(100)
    assert excinfo.value.action == GET_BLOCK_BY_NUMBER
    assert excinfo.value.block_number == 100


def test_non_object_json_body_is_a_decode_failure():
    client, _ = _client(lambda params: _FakeResponse(["unexpected"]))
    with pytest.raises(ApiDecodeError):
        client.get_transaction_count(100)


def test_malformed_block_quantity_propagates():
    client, _ = _client(lambda params: _envelope(dict(BLOCK_PAYLOAD, gasUsed="0x")))
    with pytest.raises(HexDecodeError):
        client.get_block_by_number(100)


def test_get_transaction_count_decodes_result():
    client, session = _client(lambda params: _envelope("0x1a"))

    count = client.get_transaction_count(100)

    assert count.count == 26
    assert not count.failed
    assert session.calls[0]["params"]["action"] == GET_BLOCK_TRANSACTION_COUNT
    assert "index" not in session.calls[0]["params"]


def test_get_transaction_count_zero_is_not_a_failure():
    client, _ = _client(lambda params: _envelope("0x0"))
    count = client.get_transaction_count(100)
    assert count.count == 0
    assert not count.failed


@pytest.mark.parametrize("response", [
    _FakeResponse(None, status_code=503),
    _envelope(None),
    _FakeResponse({"status": "0", "message": "NOTOK", "result": "Invalid API Key"}),
])
def test_get_transaction_count_failure_is_distinguishable_from_empty(response):
    client, _ = _client(lambda params: response)
    count = client.get_transaction_count(100)
    assert count.failed
    assert count.count == 0


def test_get_transaction_count_transport_error_is_a_failure():
    def handler(params):
        raise requests.exceptions.ConnectionError("refused")

    client, _ = _client(handler)
    assert client.get_transaction_count(100).failed


def test_get_transaction_count_malformed_result_propagates():
    client, _ = _client(lambda params: _envelope("0xnope"))
    with pytest.raises(HexDecodeError):
        client.get_transaction_count(100)


def test_get_transaction_by_index_sends_hex_index():
    client, session = _client(lambda params: _envelope(TX_PAYLOAD))

    tx = client.get_transaction_by_index(100, 10)

    assert tx.hash == "0xbb"
    assert tx.value == 31337
    params = session.calls[0]["params"]
    assert params["action"] == GET_TRANSACTION_BY_INDEX
    assert params["tag"] == "0x64"
    assert params["index"] == "0xa"
    assert params["apikey"] == API_KEY


def test_get_transaction_by_index_absent_on_failure():
    client, _ = _client(lambda params: _FakeResponse(None, status_code=502))
    assert client.get_transaction_by_index(100, 0) is None


def test_close_closes_session():
    client, session = _client(lambda params: _envelope(None))
    with client:
        pass
    assert session.closed
