"""
ABI introspection and call encoding.

Lists callable functions and their inputs for the host's dropdowns, and
encodes/decodes function calls with eth-abi.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from eth_abi import decode, encode

from ..errors import ParameterError
from ..model.abi import AbiParameter, ContractAbi, FunctionEntry, StateMutability
from ..utils import keccak256, to_checksum_address, to_jsonable

# Host value for the merged pure/view category
PURE_OR_VIEW = "pureOrView"

_ARRAY_SUFFIX = re.compile(r"^(.*)\[(\d*)\]$")


def _mutability_category(value: str) -> set[StateMutability]:
    if value in (PURE_OR_VIEW, StateMutability.PURE.value, StateMutability.VIEW.value):
        return {StateMutability.PURE, StateMutability.VIEW}
    try:
        return {StateMutability(value)}
    except ValueError:
        raise ParameterError(f"Unknown state mutability: {value}") from None


def list_methods(abi: ContractAbi, mutability: Optional[str] = None) -> list[str]:
    """
    Distinct function names, in declaration order.

    Args:
        abi: Parsed contract ABI
        mutability: "pureOrView" (or "pure"/"view"), "nonpayable", "payable";
            None lists every function
    """
    allowed = _mutability_category(mutability) if mutability else None
    names: list[str] = []
    for entry in abi.functions:
        if allowed is not None and entry.state_mutability not in allowed:
            continue
        if entry.name not in names:
            names.append(entry.name)
    return names


def list_inputs(abi: ContractAbi, method: str) -> list[str]:
    """Input names of ``method``; empty when the ABI has no such function."""
    entry = abi.find_function(method)
    if entry is None:
        return []
    return [p.name for p in entry.inputs]


def function_selector(entry: FunctionEntry) -> bytes:
    return keccak256(entry.signature.encode("utf-8"))[:4]


def _coerce(abi_type: str, param: Optional[AbiParameter], value: Any) -> Any:
    match = _ARRAY_SUFFIX.match(abi_type)
    if match:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Expected a list for {abi_type}, got {value!r}")
        inner = match.group(1)
        inner_param = None
        if param is not None:
            inner_param = AbiParameter(
                name=param.name,
                type=param.type[: param.type.rindex("[")],
                components=param.components,
            )
        return [_coerce(inner, inner_param, v) for v in value]

    if abi_type.startswith("("):
        components = param.components if param is not None else ()
        if isinstance(value, dict):
            value = [value[c.name] for c in components]
        if not isinstance(value, (list, tuple)) or len(value) != len(components):
            raise ValueError(f"Expected {len(components)} values for tuple, got {value!r}")
        return tuple(_coerce(c.canonical_type, c, v) for c, v in zip(components, value))

    if abi_type.startswith(("uint", "int")):
        if isinstance(value, str):
            text = value.strip()
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        return value

    if abi_type == "address" and isinstance(value, str):
        return to_checksum_address(value)

    if abi_type.startswith("bytes") and isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        return bytes.fromhex(text)

    if abi_type == "bool" and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"

    return value


def coerce_arguments(entry: FunctionEntry, args: list) -> list:
    """Convert JSON-friendly arguments into the values eth-abi expects."""
    if len(args) != len(entry.inputs):
        raise ValueError(
            f"Function {entry.name} expects {len(entry.inputs)} arguments, got {len(args)}"
        )
    return [_coerce(p.canonical_type, p, v) for p, v in zip(entry.inputs, args)]


def encode_function_call(entry: FunctionEntry, args: list) -> str:
    """
    ABI-encode a function call.

    Args:
        entry: Function to call
        args: Function arguments, in input order

    Returns:
        0x-prefixed hex encoded calldata
    """
    selector = function_selector(entry)
    if entry.inputs:
        encoded_args = encode(entry.input_types, coerce_arguments(entry, args))
    else:
        if args:
            raise ValueError(f"Function {entry.name} takes no arguments")
        encoded_args = b""
    return "0x" + selector.hex() + encoded_args.hex()


def decode_function_result(entry: FunctionEntry, data: Optional[str]) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        None for functions without outputs or empty data, the value for a
        single output, a list otherwise. Bytes are rendered as 0x hex.
    """
    output_types = entry.output_types
    if not output_types or data is None or data in ("0x", ""):
        return None

    raw = bytes.fromhex(data[2:]) if data.startswith("0x") else bytes.fromhex(data)
    decoded = decode(output_types, raw)

    if len(decoded) == 1:
        return to_jsonable(decoded[0])
    return to_jsonable(list(decoded))
