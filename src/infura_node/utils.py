from __future__ import annotations

import base64
import json
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from eth_hash.auto import keccak

BLOCK_TAGS = ("latest", "earliest", "pending")

BlockIdentifier = Union[int, str]


class _InvalidJson:
    """Sentinel returned by validate_json for unparsable input."""

    _instance: "_InvalidJson | None" = None

    def __new__(cls) -> "_InvalidJson":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INVALID_JSON"

    def __bool__(self) -> bool:
        return False


INVALID_JSON = _InvalidJson()


def validate_json(text: str | None) -> Any:
    """Parse text as JSON, returning INVALID_JSON instead of raising."""
    if text is None:
        return INVALID_JSON
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return INVALID_JSON


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    addr = address.lower().replace("0x", "")
    if len(addr) != 40 or any(c not in "0123456789abcdef" for c in addr):
        raise ValueError(f"Invalid address: {address}")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def basic_auth_key(secret: str) -> str:
    return base64.b64encode(secret.encode("utf-8")).decode("ascii")


def to_quantity(value: int) -> str:
    """Encode an int as a JSON-RPC hex quantity."""
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def from_quantity(value: str | int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


def normalize_block_identifier(block: BlockIdentifier) -> str:
    """
    Turn a block number or tag into its JSON-RPC form.

    Accepts "latest", "earliest", "pending", ints, decimal strings and
    0x-prefixed hex strings.
    """
    if isinstance(block, bool):
        raise ValueError(f"Invalid block identifier: {block!r}")
    if isinstance(block, int):
        return to_quantity(block)
    tag = block.strip()
    if tag.lower() in BLOCK_TAGS:
        return tag.lower()
    if tag.lower().startswith("0x"):
        return to_quantity(int(tag, 16))
    if tag.isdigit():
        return to_quantity(int(tag))
    raise ValueError(
        f"Invalid block identifier: {block!r}. "
        f"Expected an integer or one of {', '.join(BLOCK_TAGS)}."
    )


def to_wei(amount: Union[int, float, str, Decimal], decimals: int = 18) -> int:
    """Convert a decimal amount (e.g. ETH or gwei) to its smallest unit."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if value < 0:
        raise ValueError(f"Amount must be non-negative: {amount!r}")
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount!r} has more than {decimals} decimals")
    return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """Format an integer amount with the given decimals, e.g. "45.0"."""
    negative = value < 0
    whole, frac = divmod(abs(value), 10 ** decimals)
    frac_text = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{'-' if negative else ''}{whole}.{frac_text}"


def to_jsonable(value: Any) -> Any:
    """Convert decoded ABI values into JSON-compatible data."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value
