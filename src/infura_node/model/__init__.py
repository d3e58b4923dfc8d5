"""
Model - Typed node parameters, contract ABI and node description.
"""

from .abi import (
    AbiEntry,
    AbiParameter,
    ConstructorEntry,
    ContractAbi,
    ErrorEntry,
    EventEntry,
    FallbackEntry,
    FunctionEntry,
    ReceiveEntry,
    StateMutability,
    parse_abi,
)
from .params import NodeParameters, Operation
from .schemas import SchemaRegistry, SchemaValidationError

__all__ = [
    "AbiEntry",
    "AbiParameter",
    "ConstructorEntry",
    "ContractAbi",
    "ErrorEntry",
    "EventEntry",
    "FallbackEntry",
    "FunctionEntry",
    "ReceiveEntry",
    "StateMutability",
    "parse_abi",
    "NodeParameters",
    "Operation",
    "SchemaRegistry",
    "SchemaValidationError",
]
