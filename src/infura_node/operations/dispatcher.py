"""
Operation dispatcher.

The operation and network are taken from the invocation parameters once;
each input item may override the remaining parameters. Items are
processed in order, one at a time, and the first failure aborts the run.
A handler returning a list contributes each element as its own record.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

import httpx
from eth_abi.exceptions import DecodingError, EncodingError, ParseError

from ..chain import create_client
from ..chain.client import EthereumClient
from ..chain.codec import PURE_OR_VIEW, decode_function_result, encode_function_call
from ..chain.tx import GWEI_DECIMALS, GasSettings, build_tx, send_value, sign_and_send
from ..config import Credentials, NodeConfig, get_network_config
from ..errors import InfuraNodeError, InvalidJsonError, MissingCredentialsError, ParameterError, RpcError
from ..model.abi import FunctionEntry, parse_abi
from ..model.params import NodeParameters, Operation
from ..utils import (
    INVALID_JSON,
    format_units,
    normalize_block_identifier,
    to_checksum_address,
    to_wei,
    validate_json,
)
from ..wallet import open_wallet

logger = logging.getLogger(__name__)

Handler = Callable[[EthereumClient, NodeParameters, NodeConfig], Any]

_READ_ONLY = (PURE_OR_VIEW, "pure", "view")

# Selected once per invocation; items cannot override them
_INVOCATION_KEYS = ("operation", "ethNetwork")


def _address(value: str, field: str) -> str:
    if not value:
        raise ParameterError(f"{field} is required")
    try:
        return to_checksum_address(value)
    except ValueError as exc:
        raise ParameterError(f"{field}: {exc}") from exc


def _block(value: int | str, field: str) -> str:
    try:
        return normalize_block_identifier(value)
    except ValueError as exc:
        raise ParameterError(f"{field}: {exc}") from exc


def _wei(value: Any, field: str) -> int:
    try:
        return to_wei(value)
    except ValueError as exc:
        raise ParameterError(f"{field}: {exc}") from exc


def _gas(params: NodeParameters, default: Callable[[], GasSettings]) -> GasSettings:
    if params.configure_gas_manually:
        try:
            return GasSettings.manual(params.gas_limit, params.gas_price)
        except ValueError as exc:
            raise ParameterError(f"gasPrice: {exc}") from exc
    return default()


def _wallet(params: NodeParameters):
    return open_wallet(
        params.access_wallet_by_mnemonic,
        private_key=params.wallet_private_key,
        mnemonic=params.wallet_mnemonic,
    )


def contract_arguments(params: NodeParameters, entry: FunctionEntry) -> list:
    """
    Arguments for the contract call.

    ``contractInputs`` (a JSON array) wins; without it the custom fields are
    arranged in the function's input order. No inputs at all means no
    arguments.

    Raises:
        InvalidJsonError: If contractInputs is not a JSON array
    """
    text = params.contract_inputs
    if text is None or not text.strip():
        if not params.custom_fields:
            return []
        by_name = dict(params.custom_fields)
        missing = [p.name for p in entry.inputs if p.name not in by_name]
        if missing:
            raise ParameterError(f"Missing contract inputs: {', '.join(missing)}")
        args = []
        for p in entry.inputs:
            value = by_name[p.name]
            if isinstance(value, str) and (p.canonical_type.endswith("]") or p.canonical_type.startswith("(")):
                value = validate_json(value)
                if value is INVALID_JSON:
                    raise InvalidJsonError()
            args.append(value)
        return args

    value = validate_json(text)
    if value is INVALID_JSON:
        raise InvalidJsonError()
    if not value:
        return []
    if not isinstance(value, list):
        raise InvalidJsonError(errors=["contractInputs must be a JSON array"])
    return value


def get_block_number(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    return {"blockNumber": client.block_number()}


def get_block_by_number(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    block = client.get_block(_block(params.block_number, "blockNumber"), params.show_transaction_details)
    if block is None:
        return {"block": None}
    return block


def call_contract(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    abi = parse_abi(params.contract_abi)
    entry = abi.find_function(params.contract_method)
    if entry is None:
        raise ParameterError(f"Function {params.contract_method} not found in ABI")
    args = contract_arguments(params, entry)
    to = _address(params.recipient_address, "recipientAddress")

    try:
        calldata = encode_function_call(entry, args)
    except (EncodingError, ParseError, TypeError, ValueError) as exc:
        raise ParameterError(f"Cannot encode inputs for {entry.signature}: {exc}") from exc

    if params.state_mutability in _READ_ONLY:
        result = client.call({"to": to, "data": calldata})
        try:
            return {"response": decode_function_result(entry, result)}
        except (ParseError, ValueError) as exc:
            raise ParameterError(f"Cannot decode outputs of {entry.signature}: {exc}") from exc
        except DecodingError as exc:
            raise RpcError(f"Cannot decode eth_call result for {entry.signature}: {exc}", method="eth_call") from exc

    account = _wallet(params)
    gas = _gas(params, GasSettings.contract_default)
    value = _wei(params.pay_value, "payValue") if params.state_mutability == "payable" else 0
    chain_id = get_network_config(params.network).chain_id

    tx = build_tx(client, account, to, chain_id, gas, value=value, data=calldata)
    return {"response": sign_and_send(client, account, tx)}


def send_transaction(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    to = _address(params.recipient_address, "recipientAddress")
    value = _wei(params.pay_value, "payValue")
    account = _wallet(params)
    gas = _gas(params, GasSettings.transfer_default)
    return send_value(
        client,
        account,
        to,
        value,
        chain_id=get_network_config(params.network).chain_id,
        gas=gas,
        timeout=config.receipt_timeout,
        poll_interval=config.poll_interval,
    )


def send_raw_transaction(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    raw_tx = params.signed_transaction
    if not raw_tx:
        raise ParameterError("signedTransaction is required")
    if not raw_tx.startswith("0x"):
        raw_tx = "0x" + raw_tx
    try:
        bytes.fromhex(raw_tx[2:])
    except ValueError as exc:
        raise ParameterError("signedTransaction must be hex encoded") from exc
    return {"transactionHash": client.send_raw_transaction(raw_tx)}


def get_transaction_count(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    address = _address(params.wallet_address, "walletAddress")
    tag = _block(params.transaction_tag, "transactionTag")
    return {"transactionCount": client.get_transaction_count(address, tag)}


def estimate_gas(client: EthereumClient, params: NodeParameters, config: NodeConfig) -> dict:
    return {"gasPrice": format_units(client.gas_price(), GWEI_DECIMALS)}


HANDLERS: dict[Operation, Handler] = {
    Operation.GET_BLOCK_NUMBER: get_block_number,
    Operation.GET_BLOCK_BY_NUMBER: get_block_by_number,
    Operation.CALL: call_contract,
    Operation.SEND_TRANSACTION: send_transaction,
    Operation.SEND_RAW_TRANSACTION: send_raw_transaction,
    Operation.GET_TRANSACTION_COUNT: get_transaction_count,
    Operation.ESTIMATE_GAS: estimate_gas,
}


def execute(
    parameters: Mapping[str, Any],
    items: Optional[Sequence[Mapping[str, Any]]] = None,
    credentials: Optional[Credentials] = None,
    config: Optional[NodeConfig] = None,
    client: Optional[EthereumClient] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> list[dict[str, Any]]:
    """
    Run the selected operation once per input item.

    Args:
        parameters: Host parameter values (camelCase names)
        items: Per-item parameter overrides; one empty item when omitted
        credentials: Infura project credentials
        config: Client strategy, auth scheme and receipt polling
        client: Pre-built client (the caller keeps ownership)
        transport: httpx transport for the direct JSON-RPC client

    Returns:
        Flat list of result records

    Raises:
        MissingCredentialsError: If no credentials were supplied
        InfuraNodeError: On the first failing item, with operation and
            item index attached
    """
    config = config or NodeConfig()
    base = NodeParameters.from_dict(parameters)
    operation = base.operation
    handler = HANDLERS[operation]

    if credentials is None or not credentials.project_id:
        raise MissingCredentialsError().attach(operation.value, 0)

    owns_client = client is None
    if client is None:
        client = create_client(base.network, credentials, config, transport=transport)

    results: list[dict[str, Any]] = []
    try:
        for index, overrides in enumerate(items if items is not None else [{}]):
            logger.debug("Running %s for item %d", operation.value, index)
            try:
                params = base.merged(
                    {k: v for k, v in overrides.items() if k not in _INVOCATION_KEYS}
                )
                response = handler(client, params, config)
            except InfuraNodeError as exc:
                exc.attach(operation.value, index)
                raise
            if isinstance(response, list):
                results.extend(response)
            else:
                results.append(response)
    finally:
        if owns_client:
            client.close()
    return results
