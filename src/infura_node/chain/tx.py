"""
Transaction Builder - Build, sign, and send Ethereum transactions.

Uses eth-account for signing and an EthereumClient for sending. Legacy
(gasPrice) transactions only. The nonce is the sender's pending
transaction count read right before signing, so two invocations signing
for the same account at the same time can pick the same nonce.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from eth_account.signers.local import LocalAccount

from ..config import (
    DEFAULT_CONTRACT_GAS_LIMIT,
    DEFAULT_GAS_PRICE_GWEI,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_TRANSFER_GAS_LIMIT,
)
from ..errors import ConfirmationTimeoutError
from ..utils import to_checksum_address, to_wei
from .client import EthereumClient

logger = logging.getLogger(__name__)

GWEI_DECIMALS = 9


@dataclass(frozen=True)
class GasSettings:
    gas_limit: int
    gas_price: int  # wei

    @classmethod
    def manual(cls, gas_limit: int, gas_price_gwei: int | float) -> "GasSettings":
        return cls(gas_limit=int(gas_limit), gas_price=to_wei(gas_price_gwei, GWEI_DECIMALS))

    @classmethod
    def transfer_default(cls) -> "GasSettings":
        return cls.manual(DEFAULT_TRANSFER_GAS_LIMIT, DEFAULT_GAS_PRICE_GWEI)

    @classmethod
    def contract_default(cls) -> "GasSettings":
        return cls.manual(DEFAULT_CONTRACT_GAS_LIMIT, DEFAULT_GAS_PRICE_GWEI)


def build_tx(
    client: EthereumClient,
    account: LocalAccount,
    to: str,
    chain_id: int,
    gas: GasSettings,
    value: int = 0,
    data: str = "0x",
) -> dict[str, Any]:
    """
    Build an unsigned legacy transaction.

    Args:
        client: Client used for the nonce lookup
        account: Sending wallet
        to: Recipient or contract address
        chain_id: Chain id for replay protection
        gas: Gas limit and price
        value: ETH value in wei
        data: 0x-prefixed calldata

    Returns:
        Unsigned transaction dict
    """
    nonce = client.get_transaction_count(account.address, "pending")
    return {
        "to": to_checksum_address(to),
        "data": data,
        "value": value,
        "nonce": nonce,
        "gas": gas.gas_limit,
        "gasPrice": gas.gas_price,
        "chainId": chain_id,
    }


def sign_and_send(client: EthereumClient, account: LocalAccount, tx: dict[str, Any]) -> dict[str, Any]:
    """
    Sign a transaction and submit it.

    Returns:
        Summary of the submitted transaction, including its hash
    """
    signed = account.sign_transaction(tx)
    raw_tx = "0x" + bytes(signed.raw_transaction).hex()

    tx_hash = client.send_raw_transaction(raw_tx)
    logger.debug("Submitted transaction nonce=%s", tx["nonce"])

    return {
        "hash": tx_hash,
        "from": account.address,
        "to": tx["to"],
        "nonce": tx["nonce"],
        "gasLimit": tx["gas"],
        "gasPrice": tx["gasPrice"],
        "value": tx["value"],
        "data": tx["data"],
        "chainId": tx["chainId"],
    }


def wait_for_receipt(
    client: EthereumClient,
    tx_hash: str,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> dict[str, Any]:
    """
    Wait for a transaction receipt.

    Args:
        client: Client to poll
        tx_hash: Transaction hash
        timeout: Maximum wait time in seconds
        poll_interval: Polling interval in seconds

    Returns:
        Transaction receipt dict

    Raises:
        ConfirmationTimeoutError: If receipt not found within timeout
    """
    start = time.monotonic()
    while True:
        receipt = client.get_transaction_receipt(tx_hash)
        if receipt is not None:
            return receipt
        if time.monotonic() - start >= timeout:
            raise ConfirmationTimeoutError(tx_hash, timeout)
        time.sleep(poll_interval)


def send_value(
    client: EthereumClient,
    account: LocalAccount,
    to: str,
    value: int,
    chain_id: int,
    gas: Optional[GasSettings] = None,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> dict[str, Any]:
    """Transfer ETH and wait for the receipt."""
    tx = build_tx(client, account, to, chain_id, gas or GasSettings.transfer_default(), value=value)
    sent = sign_and_send(client, account, tx)
    return wait_for_receipt(client, sent["hash"], timeout=timeout, poll_interval=poll_interval)
