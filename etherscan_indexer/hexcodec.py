"""
Hex <-> integer conversion for the quantities returned by the Etherscan proxy API.
The API encodes every numeric field as a lowercase, 0x-prefixed, minimal-width
hex string (e.g. "0x5208").
"""
import re

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class HexDecodeError(ValueError):
    """Raised when a hex quantity is empty, malformed or out of range."""


def to_hex(value: int) -> str:
    """Encode an unsigned integer as a block tag / quantity (0 -> '0x0')."""
    if value < 0:
        raise ValueError(f"Cannot hex-encode negative value {value}")
    return hex(value)


def _parse(text, limit: int) -> int:
    if not isinstance(text, str):
        raise HexDecodeError(f"Expected a hex string, got {type(text).__name__}")

    digits = text[2:] if text[:2] in ("0x", "0X") else text
    # int(x, 16) also accepts whitespace, signs and underscores; the API never sends those
    if not _HEX_DIGITS.fullmatch(digits):
        raise HexDecodeError(f"Malformed hex quantity: {text!r}")

    value = int(digits, 16)
    if value > limit:
        raise HexDecodeError(f"Hex quantity {text!r} exceeds {limit.bit_length()}-bit range")
    return value


def from_hex(text: str) -> int:
    """Decode a hex quantity that fits in an unsigned machine word (counts, indexes)."""
    return _parse(text, UINT64_MAX)


def from_hex_big(text: str) -> int:
    """Decode a hex quantity up to uint256 (gas, wei values, rewards)."""
    return _parse(text, UINT256_MAX)
