"""
Configuration for the Infura node.

Credentials are read from the environment, after loading
~/.infura-node/.env when it exists:

    INFURA_PROJECT_ID=...
    INFURA_PROJECT_SECRET=...

Deployment knobs (which client strategy, which auth scheme) are read from
INFURA_NODE_CLIENT and INFURA_NODE_AUTH.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

__all__ = [
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "ClientKind",
    "AuthScheme",
    "Credentials",
    "NodeConfig",
    "get_network_config",
    "load_credentials",
]

# Default config directory
INFURA_NODE_DIR = Path.home() / ".infura-node"
INFURA_NODE_ENV = INFURA_NODE_DIR / ".env"

INFURA_URL_TEMPLATE = "https://{network}.infura.io/v3/{project_id}"

# Gas defaults used when the user does not configure gas manually
DEFAULT_TRANSFER_GAS_LIMIT = 21_000
DEFAULT_CONTRACT_GAS_LIMIT = 500_000
DEFAULT_GAS_PRICE_GWEI = 45

DEFAULT_RECEIPT_TIMEOUT = 120
DEFAULT_POLL_INTERVAL = 2.0


class Network(str, Enum):
    MAINNET = "mainnet"
    ROPSTEN = "ropsten"
    RINKEBY = "rinkeby"
    KOVAN = "kovan"
    GOERLI = "goerli"


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    display_name: str
    chain_id: int


NETWORKS: dict[Network, NetworkConfig] = {
    Network.MAINNET: NetworkConfig(Network.MAINNET, "Main net", 1),
    Network.ROPSTEN: NetworkConfig(Network.ROPSTEN, "Ropsten", 3),
    Network.RINKEBY: NetworkConfig(Network.RINKEBY, "Rinkeby", 4),
    Network.KOVAN: NetworkConfig(Network.KOVAN, "Kovan", 42),
    Network.GOERLI: NetworkConfig(Network.GOERLI, "Görli", 5),
}


def get_network_config(network: Network | str) -> NetworkConfig:
    try:
        return NETWORKS[Network(network)]
    except ValueError:
        supported = ", ".join(n.value for n in Network)
        raise ValueError(f"Unsupported network: {network}. Expected one of {supported}") from None


class ClientKind(str, Enum):
    RPC = "rpc"
    WEB3 = "web3"


class AuthScheme(str, Enum):
    HEADER = "header"
    BASIC = "basic"


@dataclass(frozen=True)
class Credentials:
    """Infura project credentials. The secret never appears in repr."""

    project_id: str
    project_secret: str = field(default="", repr=False)

    @classmethod
    def from_dict(cls, payload: dict) -> "Credentials":
        return cls(
            project_id=str(payload.get("projectID") or payload.get("projectId") or ""),
            project_secret=str(payload.get("projectSecret") or ""),
        )

    def endpoint(self, network: Network | str) -> str:
        return INFURA_URL_TEMPLATE.format(
            network=get_network_config(network).name.value,
            project_id=self.project_id,
        )


def load_credentials(env_path: Optional[Path] = None) -> Optional[Credentials]:
    """
    Load credentials from .env file or environment.

    Args:
        env_path: Path to .env file (default: ~/.infura-node/.env)

    Returns:
        Credentials, or None when no project id is configured
    """
    env_path = env_path or INFURA_NODE_ENV

    if env_path.exists():
        load_dotenv(env_path, override=False)

    project_id = os.environ.get("INFURA_PROJECT_ID", "").strip()
    if not project_id:
        return None
    return Credentials(
        project_id=project_id,
        project_secret=os.environ.get("INFURA_PROJECT_SECRET", "").strip(),
    )


@dataclass(frozen=True)
class NodeConfig:
    client: ClientKind = ClientKind.RPC
    auth: AuthScheme = AuthScheme.HEADER
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls) -> "NodeConfig":
        return cls(
            client=ClientKind(os.environ.get("INFURA_NODE_CLIENT", ClientKind.RPC.value)),
            auth=AuthScheme(os.environ.get("INFURA_NODE_AUTH", AuthScheme.HEADER.value)),
        )
