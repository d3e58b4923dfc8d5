"""
Error types raised by the Infura node.

Every failure aborts the whole invocation. The dispatcher attaches the
operation name and the index of the failing item before re-raising, so the
host can report where the run stopped. Signing errors from eth-account are
not wrapped.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "InfuraNodeError",
    "InvalidJsonError",
    "MissingCredentialsError",
    "ParameterError",
    "RpcError",
    "ConfirmationTimeoutError",
]


class InfuraNodeError(RuntimeError):
    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation: Optional[str] = None
        self.item_index: Optional[int] = None

    def attach(self, operation: str, item_index: int) -> "InfuraNodeError":
        """Record where in the invocation the error happened."""
        self.operation = operation
        self.item_index = item_index
        return self

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        return f"{self.message} [operation={self.operation}, item={self.item_index}]"


class InvalidJsonError(InfuraNodeError):
    exit_code = 2

    def __init__(self, message: str = "Invalid JSON", errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class MissingCredentialsError(InfuraNodeError):
    exit_code = 3

    def __init__(self, message: str = "No credentials got returned!") -> None:
        super().__init__(message)


class ParameterError(InfuraNodeError):
    exit_code = 4

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class RpcError(InfuraNodeError):
    """Transport failure or JSON-RPC error payload.

    Attributes:
        method: JSON-RPC method that failed (if known)
        code: JSON-RPC error code (if the node returned one)
    """

    exit_code = 5

    def __init__(self, message: str, method: str | None = None, code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.code = code


class ConfirmationTimeoutError(InfuraNodeError):
    exit_code = 6

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout
