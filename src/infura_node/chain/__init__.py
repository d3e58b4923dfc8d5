"""
Chain - On-chain interaction layer for the Infura node.

Provides the EthereumClient capability with two implementations (direct
JSON-RPC over httpx, or web3.py), ABI call encoding, and transaction
utilities. One client strategy is picked per deployment.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ..config import ClientKind, Credentials, Network, NodeConfig
from .client import EthereumClient, InfuraRpcClient


def create_client(
    network: Network | str,
    credentials: Credentials,
    config: Optional[NodeConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> EthereumClient:
    """Build the client strategy selected by ``config.client``."""
    config = config or NodeConfig()
    if config.client is ClientKind.WEB3:
        from .web3_client import Web3Client

        return Web3Client(network, credentials, auth=config.auth)
    return InfuraRpcClient(network, credentials, auth=config.auth, transport=transport)


__all__ = ["EthereumClient", "InfuraRpcClient", "create_client"]
