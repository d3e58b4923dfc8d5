from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from ..config import Network
from ..errors import ParameterError
from .descriptor import defaults
from .schemas import PARAMETERS_SCHEMA, SchemaRegistry, SchemaValidationError


class Operation(str, Enum):
    GET_BLOCK_NUMBER = "getBlockNumber"
    GET_BLOCK_BY_NUMBER = "getBlockByNumber"
    CALL = "call"
    SEND_TRANSACTION = "sendTransaction"
    SEND_RAW_TRANSACTION = "sendRawTransaction"
    GET_TRANSACTION_COUNT = "getTransactionCount"
    ESTIMATE_GAS = "estimateGas"

    @classmethod
    def parse(cls, value: str) -> "Operation":
        """Accept both current names and the legacy ``operationXxx`` names."""
        try:
            return cls(value)
        except ValueError:
            pass
        if value in _LEGACY_OPERATIONS:
            return _LEGACY_OPERATIONS[value]
        raise ParameterError(f"Unknown operation: {value}")


_LEGACY_OPERATIONS = {
    "operationGetBlockNumber": Operation.GET_BLOCK_NUMBER,
    "operationGetBlockByNumber": Operation.GET_BLOCK_BY_NUMBER,
    "operationCallContract": Operation.CALL,
    "operationSendTransaction": Operation.SEND_TRANSACTION,
    "operationSendRawTransaction": Operation.SEND_RAW_TRANSACTION,
    "operationGetTransactionCount": Operation.GET_TRANSACTION_COUNT,
    "operationEstimateGas": Operation.ESTIMATE_GAS,
}


@dataclass(frozen=True)
class NodeParameters:
    """
    Every option the node understands, resolved once per item.

    Host values use the camelCase names of the node description; missing
    values fall back to the description defaults. Wallet secrets are kept
    out of repr.
    """

    operation: Operation
    network: Network
    recipient_address: str = ""
    wallet_address: str = ""
    contract_abi: str = ""
    state_mutability: str = "pureOrView"
    access_wallet_by_mnemonic: bool = False
    wallet_private_key: str = field(default="", repr=False)
    wallet_mnemonic: str = field(default="", repr=False)
    configure_gas_manually: bool = False
    gas_limit: int = 21000
    gas_price: Union[int, float] = 45
    pay_value: Union[int, float, str] = 0
    contract_method: str = ""
    contract_inputs: Optional[str] = None
    custom_fields: tuple[tuple[str, Any], ...] = ()
    block_number: Union[int, str] = "latest"
    show_transaction_details: bool = False
    transaction_tag: Union[int, str] = "pending"
    signed_transaction: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any], registry: SchemaRegistry | None = None) -> "NodeParameters":
        """
        Resolve host parameter values.

        Raises:
            ParameterError: If a value has the wrong type or is not allowed
        """
        merged = {**defaults(), **values}
        registry = registry or SchemaRegistry.default()
        try:
            registry.validate(merged, PARAMETERS_SCHEMA)
        except SchemaValidationError as exc:
            raise ParameterError("Invalid node parameters", errors=exc.errors) from exc

        contract_abi = merged["contractABI"]
        if not isinstance(contract_abi, str):
            contract_abi = json.dumps(contract_abi)

        contract_inputs = merged.get("contractInputs")
        if contract_inputs is not None and not isinstance(contract_inputs, str):
            contract_inputs = json.dumps(contract_inputs)

        custom = merged.get("customFields") or {}
        custom_fields = tuple(
            (entry["field"], entry.get("value", "")) for entry in custom.get("customFieldsUi", [])
        )

        return cls(
            operation=Operation.parse(merged["operation"]),
            network=Network(merged["ethNetwork"]),
            recipient_address=merged["recipientAddress"].strip(),
            wallet_address=merged["walletAddress"].strip(),
            contract_abi=contract_abi,
            state_mutability=merged["stateMutability"],
            access_wallet_by_mnemonic=merged["accessWalletByMnemonic"],
            wallet_private_key=merged["walletPrivateKey"],
            wallet_mnemonic=merged["walletMnemonic"],
            configure_gas_manually=merged["configureGasManually"],
            gas_limit=merged["gasLimit"],
            gas_price=merged["gasPrice"],
            pay_value=merged["payValue"],
            contract_method=merged["contractMethod"],
            contract_inputs=contract_inputs,
            custom_fields=custom_fields,
            block_number=merged["blockNumber"],
            show_transaction_details=merged["showTransactionDetails"],
            transaction_tag=merged["transactionTag"],
            signed_transaction=merged["signedTransaction"].strip(),
            raw=dict(values),
        )

    def merged(self, overrides: Mapping[str, Any]) -> "NodeParameters":
        """Parameters for one item: these values with the item's overrides applied."""
        if not overrides:
            return self
        return NodeParameters.from_dict({**self.raw, **overrides})
