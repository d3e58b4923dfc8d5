"""
Dynamic option lists for the host's dropdowns.

``getContractMethods`` fills the Contract Function choice from the ABI and
the selected function type; ``getContractInputs`` fills the Field choice
of the custom input fields from the selected function.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..chain.codec import list_inputs, list_methods
from ..errors import ParameterError
from ..model.abi import ContractAbi, parse_abi
from ..model.descriptor import defaults


def _abi(parameters: Mapping[str, Any]) -> ContractAbi:
    text = parameters.get("contractABI")
    if text is not None and not isinstance(text, str):
        text = json.dumps(text)
    return parse_abi(text)


def _options(names: list[str]) -> list[dict[str, str]]:
    return [{"name": name, "value": name} for name in names]


def get_contract_methods(parameters: Mapping[str, Any]) -> list[dict[str, str]]:
    """Functions of the ABI matching the selected state mutability."""
    abi = _abi(parameters)
    mutability = parameters.get("stateMutability", defaults()["stateMutability"])
    return _options(list_methods(abi, mutability))


def get_contract_inputs(parameters: Mapping[str, Any]) -> list[dict[str, str]]:
    """Input names of the selected contract function."""
    abi = _abi(parameters)
    return _options(list_inputs(abi, parameters.get("contractMethod", "")))


LOAD_OPTIONS = {
    "getContractMethods": get_contract_methods,
    "getContractInputs": get_contract_inputs,
}


def load_options(method: str, parameters: Mapping[str, Any]) -> list[dict[str, str]]:
    """Run the load-options method the host asked for by name."""
    try:
        handler = LOAD_OPTIONS[method]
    except KeyError:
        raise ParameterError(f"Unknown load options method: {method}") from None
    return handler(parameters)
