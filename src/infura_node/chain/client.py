"""
JSON-RPC client for Infura.

Lightweight alternative to web3.py: uses httpx for HTTP. Every call is a
single POST of a fresh JSON-RPC 2.0 envelope; there are no retries.
Transport errors and JSON-RPC error payloads are raised as RpcError with
the original exception chained.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..config import AuthScheme, Credentials, Network
from ..errors import RpcError
from ..utils import BlockIdentifier, basic_auth_key, from_quantity, normalize_block_identifier

logger = logging.getLogger(__name__)

BLOCK_QUANTITY_FIELDS = (
    "number",
    "gasLimit",
    "gasUsed",
    "timestamp",
    "size",
    "difficulty",
    "totalDifficulty",
    "baseFeePerGas",
)
TRANSACTION_QUANTITY_FIELDS = (
    "blockNumber",
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "nonce",
    "transactionIndex",
    "value",
    "type",
    "chainId",
    "v",
)
RECEIPT_QUANTITY_FIELDS = (
    "blockNumber",
    "cumulativeGasUsed",
    "effectiveGasPrice",
    "gasUsed",
    "status",
    "transactionIndex",
    "type",
)


def _decode_fields(payload: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    result = dict(payload)
    for name in fields:
        if isinstance(result.get(name), str) and result[name].startswith("0x"):
            result[name] = from_quantity(result[name])
    return result


def format_block(block: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Decode the numeric fields of a block (and of full transactions)."""
    if block is None:
        return None
    result = _decode_fields(block, BLOCK_QUANTITY_FIELDS)
    result["transactions"] = [
        _decode_fields(tx, TRANSACTION_QUANTITY_FIELDS) if isinstance(tx, dict) else tx
        for tx in block.get("transactions", [])
    ]
    return result


def format_receipt(receipt: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if receipt is None:
        return None
    result = _decode_fields(receipt, RECEIPT_QUANTITY_FIELDS)
    result["logs"] = [
        _decode_fields(log, ("blockNumber", "logIndex", "transactionIndex"))
        for log in receipt.get("logs", [])
    ]
    return result


@runtime_checkable
class EthereumClient(Protocol):
    """Capability shared by the direct JSON-RPC client and the web3 client."""

    def block_number(self) -> int: ...

    def get_block(self, block: BlockIdentifier, full_transactions: bool = False) -> Optional[dict[str, Any]]: ...

    def get_transaction_count(self, address: str, tag: BlockIdentifier = "pending") -> int: ...

    def gas_price(self) -> int: ...

    def chain_id(self) -> int: ...

    def call(self, tx: dict[str, Any], block: BlockIdentifier = "latest") -> str: ...

    def send_raw_transaction(self, raw_tx: str) -> str: ...

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]: ...

    def close(self) -> None: ...


class InfuraRpcClient:
    """
    Direct JSON-RPC over HTTPS.

    Args:
        network: Ethereum network served by Infura
        credentials: Infura project id and secret
        auth: "header" sends ``Authorization: Basic base64(secret)``,
            "basic" uses HTTP basic auth with an empty user name
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        network: Network | str,
        credentials: Credentials,
        auth: AuthScheme = AuthScheme.HEADER,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = credentials.endpoint(network)
        headers: dict[str, str] = {}
        basic: Optional[httpx.BasicAuth] = None
        if credentials.project_secret:
            if AuthScheme(auth) is AuthScheme.BASIC:
                basic = httpx.BasicAuth("", credentials.project_secret)
            else:
                headers["Authorization"] = f"Basic {basic_auth_key(credentials.project_secret)}"
        self._client = httpx.Client(headers=headers, auth=basic, transport=transport)

    def __enter__(self) -> "InfuraRpcClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: If the request fails or the node returns an error
        """
        payload = {
            "method": method,
            "id": 1,
            "jsonrpc": "2.0",
            "params": params,
        }
        logger.debug("RPC request %s", method)

        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"RPC request {method} failed: {exc}", method=method) from exc
        except ValueError as exc:
            raise RpcError(f"RPC request {method} returned a non-JSON response", method=method) from exc

        if not isinstance(data, dict):
            raise RpcError(f"RPC request {method} returned an unexpected payload", method=method)

        if "error" in data:
            error = data["error"] or {}
            message = error.get("message", error) if isinstance(error, dict) else error
            code = error.get("code") if isinstance(error, dict) else None
            raise RpcError(f"RPC error: {message}", method=method, code=code)

        return data.get("result")

    def block_number(self) -> int:
        return from_quantity(self.request("eth_blockNumber", []))

    def get_block(self, block: BlockIdentifier, full_transactions: bool = False) -> Optional[dict[str, Any]]:
        result = self.request(
            "eth_getBlockByNumber",
            [normalize_block_identifier(block), full_transactions],
        )
        return format_block(result)

    def get_transaction_count(self, address: str, tag: BlockIdentifier = "pending") -> int:
        result = self.request(
            "eth_getTransactionCount",
            [address, normalize_block_identifier(tag)],
        )
        return from_quantity(result)

    def gas_price(self) -> int:
        return from_quantity(self.request("eth_gasPrice", []))

    def chain_id(self) -> int:
        return from_quantity(self.request("eth_chainId", []))

    def call(self, tx: dict[str, Any], block: BlockIdentifier = "latest") -> str:
        return self.request("eth_call", [tx, normalize_block_identifier(block)])

    def send_raw_transaction(self, raw_tx: str) -> str:
        return self.request("eth_sendRawTransaction", [raw_tx])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return format_receipt(self.request("eth_getTransactionReceipt", [tx_hash]))
