__all__ = [
    # Configuration
    "Credentials",
    "Network",
    "NodeConfig",
    "load_credentials",
    # Errors
    "InfuraNodeError",
    "InvalidJsonError",
    "MissingCredentialsError",
    "ParameterError",
    "RpcError",
    "ConfirmationTimeoutError",
    # JSON validation
    "INVALID_JSON",
    "validate_json",
    # Model
    "ContractAbi",
    "NodeParameters",
    "Operation",
    "parse_abi",
    "DESCRIPTION",
    # Clients
    "EthereumClient",
    "InfuraRpcClient",
    "create_client",
    # ABI introspection
    "list_methods",
    "list_inputs",
    # Operations
    "execute",
    "get_contract_methods",
    "get_contract_inputs",
    "load_options",
]

__version__ = "1.0.0"

from .config import Credentials, Network, NodeConfig, load_credentials
from .errors import (
    ConfirmationTimeoutError,
    InfuraNodeError,
    InvalidJsonError,
    MissingCredentialsError,
    ParameterError,
    RpcError,
)
from .utils import INVALID_JSON, validate_json
from .model import ContractAbi, NodeParameters, Operation, parse_abi
from .model.descriptor import DESCRIPTION
from .chain import EthereumClient, InfuraRpcClient, create_client
from .chain.codec import list_inputs, list_methods
from .operations.dispatcher import execute
from .operations.load_options import get_contract_inputs, get_contract_methods, load_options
