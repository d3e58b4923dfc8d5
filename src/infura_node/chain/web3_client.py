"""
Library-mediated Infura client built on web3.py.

Offers the same EthereumClient surface as InfuraRpcClient; results are
normalized through ``Web3.to_json`` so both clients return the same
shapes (ints for quantities, 0x hex for byte strings).
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from web3 import Web3
from web3.exceptions import BlockNotFound, TransactionNotFound, Web3Exception

from ..config import AuthScheme, Credentials, Network
from ..errors import RpcError
from ..utils import BlockIdentifier, basic_auth_key, normalize_block_identifier, to_checksum_address

logger = logging.getLogger(__name__)


def _block_param(block: BlockIdentifier) -> int | str:
    normalized = normalize_block_identifier(block)
    return int(normalized, 16) if normalized.startswith("0x") else normalized


def _plain(value: Any) -> Any:
    return json.loads(Web3.to_json(value))


def _hex(value: Any) -> str:
    return "0x" + bytes(value).hex()


class Web3Client:
    def __init__(
        self,
        network: Network | str,
        credentials: Credentials,
        auth: AuthScheme = AuthScheme.HEADER,
        w3: Optional[Web3] = None,
    ) -> None:
        if w3 is None:
            request_kwargs: dict[str, Any] = {}
            if credentials.project_secret:
                if AuthScheme(auth) is AuthScheme.BASIC:
                    request_kwargs["auth"] = ("", credentials.project_secret)
                else:
                    request_kwargs["headers"] = {
                        "Authorization": f"Basic {basic_auth_key(credentials.project_secret)}"
                    }
            w3 = Web3(Web3.HTTPProvider(credentials.endpoint(network), request_kwargs=request_kwargs))
        self.w3 = w3

    @contextmanager
    def _guard(self, method: str) -> Iterator[None]:
        logger.debug("web3 request %s", method)
        try:
            yield
        except (Web3Exception, OSError) as exc:
            raise RpcError(f"RPC request {method} failed: {exc}", method=method) from exc

    def close(self) -> None:
        """No-op; the HTTPProvider owns and reuses its own HTTP session."""

    def block_number(self) -> int:
        with self._guard("eth_blockNumber"):
            return int(self.w3.eth.block_number)

    def get_block(self, block: BlockIdentifier, full_transactions: bool = False) -> Optional[dict[str, Any]]:
        with self._guard("eth_getBlockByNumber"):
            try:
                block_data = self.w3.eth.get_block(_block_param(block), full_transactions=full_transactions)
            except BlockNotFound:
                return None
            return _plain(block_data)

    def get_transaction_count(self, address: str, tag: BlockIdentifier = "pending") -> int:
        with self._guard("eth_getTransactionCount"):
            return int(self.w3.eth.get_transaction_count(to_checksum_address(address), _block_param(tag)))

    def gas_price(self) -> int:
        with self._guard("eth_gasPrice"):
            return int(self.w3.eth.gas_price)

    def chain_id(self) -> int:
        with self._guard("eth_chainId"):
            return int(self.w3.eth.chain_id)

    def call(self, tx: dict[str, Any], block: BlockIdentifier = "latest") -> str:
        params = dict(tx)
        for key in ("to", "from"):
            if params.get(key):
                params[key] = to_checksum_address(params[key])
        with self._guard("eth_call"):
            return _hex(self.w3.eth.call(params, _block_param(block)))

    def send_raw_transaction(self, raw_tx: str) -> str:
        with self._guard("eth_sendRawTransaction"):
            return _hex(self.w3.eth.send_raw_transaction(raw_tx))

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        with self._guard("eth_getTransactionReceipt"):
            try:
                receipt = self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None
            return _plain(receipt)
