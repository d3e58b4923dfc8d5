"""
Wallet access for signing transactions.

A wallet is opened from either a hex private key or a BIP-39 mnemonic
phrase (first account on the default Ethereum path m/44'/60'/0'/0/0).
Key material is only held for the duration of one operation; nothing is
written to disk.

Errors from eth-account (malformed key, invalid mnemonic) are propagated
unchanged.
"""

from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"


def from_private_key(private_key: str) -> LocalAccount:
    """
    Open a wallet from a hex private key.

    Args:
        private_key: hex private key, with or without 0x prefix

    Returns:
        LocalAccount instance for signing transactions
    """
    private_key = private_key.strip()
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return Account.from_key(private_key)


def from_mnemonic(mnemonic: str, account_path: str = DEFAULT_DERIVATION_PATH) -> LocalAccount:
    """
    Derive a wallet from a mnemonic phrase.

    Args:
        mnemonic: space separated BIP-39 phrase
        account_path: HD derivation path

    Returns:
        LocalAccount instance for signing transactions
    """
    Account.enable_unaudited_hdwallet_features()
    return Account.from_mnemonic(" ".join(mnemonic.split()), account_path=account_path)


def open_wallet(
    use_mnemonic: bool,
    private_key: str | None = None,
    mnemonic: str | None = None,
) -> LocalAccount:
    """Open the wallet selected by the mnemonic-access flag."""
    if use_mnemonic:
        return from_mnemonic(mnemonic or "")
    return from_private_key(private_key or "")
