"""
Static node description consumed by the workflow host.

The host renders ``DESCRIPTION["properties"]`` as the node's form. Each
property may carry ``displayOptions`` with ``show`` and ``hide`` rules:
a property is shown when every ``show`` key matches one of its listed
values and no ``hide`` key does. Property defaults here are also the
defaults NodeParameters falls back to.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..config import NETWORKS, Network

_TX_OPERATIONS = ["call", "sendTransaction"]
_READ_ONLY = ["pureOrView"]

DESCRIPTION: dict[str, Any] = {
    "displayName": "Infura",
    "name": "infura",
    "icon": "file:Infura.svg",
    "group": ["transform"],
    "version": 1,
    "description": "Infura API",
    "defaults": {"name": "Infura", "color": "#1A82e2"},
    "inputs": ["main"],
    "outputs": ["main"],
    "credentials": [{"name": "InfuraAPI", "required": False}],
    "properties": [
        {
            "displayName": "Ethereum Network",
            "name": "ethNetwork",
            "type": "options",
            "options": [
                {"name": NETWORKS[n].display_name, "value": n.value} for n in Network
            ],
            "default": "mainnet",
            "required": True,
            "description": "Network of Ethereum client provider.",
        },
        {
            "displayName": "Operation",
            "name": "operation",
            "type": "options",
            "options": [
                {"name": "Get latest block number", "value": "getBlockNumber"},
                {"name": "Get block by number", "value": "getBlockByNumber"},
                {"name": "Estimate gas price", "value": "estimateGas"},
                {"name": "Call smart contract function", "value": "call"},
                {"name": "Send transaction", "value": "sendTransaction"},
                {"name": "Send raw transaction", "value": "sendRawTransaction"},
                {"name": "Get transaction count", "value": "getTransactionCount"},
            ],
            "default": "getBlockNumber",
            "required": True,
            "description": "Operation to execute.",
        },
        {
            "displayName": "Recipient Address",
            "name": "recipientAddress",
            "type": "string",
            "displayOptions": {"show": {"operation": _TX_OPERATIONS}},
            "required": True,
            "default": "",
            "description": "Address of smart contract or recipient wallet.",
        },
        {
            "displayName": "Wallet Public Address",
            "name": "walletAddress",
            "type": "string",
            "displayOptions": {"show": {"operation": ["getTransactionCount"]}},
            "required": True,
            "default": "",
            "description": "Public address of wallet.",
        },
        {
            "displayName": "Contract ABI",
            "name": "contractABI",
            "type": "json",
            "displayOptions": {"show": {"operation": ["call"]}},
            "required": True,
            "default": "",
            "description": "Contract ABI in JSON format.",
        },
        {
            "displayName": "Function Type",
            "name": "stateMutability",
            "type": "options",
            "displayOptions": {"show": {"operation": ["call"]}},
            "options": [
                {"name": "Pure/View", "value": "pureOrView"},
                {"name": "Non-payable", "value": "nonpayable"},
                {"name": "Payable", "value": "payable"},
            ],
            "default": "pureOrView",
            "description": "State mutability of function",
        },
        {
            "displayName": "Mnemonic Access",
            "name": "accessWalletByMnemonic",
            "type": "boolean",
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "default": False,
            "description": "If wallet is accessed by mnemonic phrase or private key.",
        },
        {
            "displayName": "Wallet Private Key",
            "name": "walletPrivateKey",
            "type": "string",
            "typeOptions": {"password": True},
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS, "accessWalletByMnemonic": [False]},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "required": True,
            "default": "",
            "description": "Private key associated to the wallet",
        },
        {
            "displayName": "Wallet Mnemonic",
            "name": "walletMnemonic",
            "type": "string",
            "typeOptions": {"password": True},
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS, "accessWalletByMnemonic": [True]},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "required": True,
            "default": "",
            "description": "Mnemonic associated to the wallet",
        },
        {
            "displayName": "Setup Gas",
            "name": "configureGasManually",
            "type": "boolean",
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "default": False,
            "description": (
                "If true, the user can set up the value for gas limit and price. "
                "Otherwise, use default values for gas limit and price."
            ),
        },
        {
            "displayName": "Gas Limit",
            "name": "gasLimit",
            "type": "number",
            "typeOptions": {"minValue": 0, "numberStepSize": 1},
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS, "configureGasManually": [True]},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "required": True,
            "default": 21000,
            "description": "Gas limit for transaction",
        },
        {
            "displayName": "Gas Price (Gwei)",
            "name": "gasPrice",
            "type": "number",
            "typeOptions": {"minValue": 0, "numberStepSize": 1},
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS, "configureGasManually": [True]},
                "hide": {"stateMutability": _READ_ONLY},
            },
            "required": True,
            "default": 45,
            "description": "Gas price for transaction",
        },
        {
            "displayName": "Value (ETH)",
            "name": "payValue",
            "type": "number",
            "typeOptions": {"minValue": 0},
            "displayOptions": {
                "show": {"operation": _TX_OPERATIONS},
                "hide": {"stateMutability": ["pureOrView", "nonpayable"]},
            },
            "required": True,
            "default": 0,
            "description": "Value to send for transaction",
        },
        {
            "displayName": "Contract Function",
            "name": "contractMethod",
            "type": "options",
            "displayOptions": {"show": {"operation": ["call"]}},
            "typeOptions": {
                "loadOptionsDependsOn": ["contractABI", "stateMutability"],
                "loadOptionsMethod": "getContractMethods",
            },
            "required": True,
            "default": "",
            "description": "Smart contract function to called.",
        },
        {
            "displayName": "Inputs",
            "name": "contractInputs",
            "type": "json",
            "displayOptions": {"show": {"operation": ["call"]}},
            "required": False,
            "default": "",
            "description": "Inputs for the selected smart contract function.",
        },
        {
            "displayName": "Custom Fields",
            "name": "customFields",
            "type": "fixedCollection",
            "default": {},
            "typeOptions": {"multipleValues": True},
            "placeholder": "Add Contract Input",
            "displayOptions": {"show": {"operation": ["call"]}},
            "options": [
                {
                    "name": "customFieldsUi",
                    "displayName": "Smart Contract Function Inputs",
                    "values": [
                        {
                            "displayName": "Field",
                            "name": "field",
                            "type": "options",
                            "typeOptions": {
                                "loadOptionsDependsOn": ["contractMethod"],
                                "loadOptionsMethod": "getContractInputs",
                            },
                            "default": "",
                        },
                        {
                            "displayName": "Value",
                            "name": "value",
                            "type": "string",
                            "default": "",
                        },
                    ],
                },
            ],
        },
        {
            "displayName": "Block Number",
            "name": "blockNumber",
            "displayOptions": {"show": {"operation": ["getBlockByNumber"]}},
            "required": True,
            "default": "latest",
            "type": "string",
            "description": 'Block number to get information, or "latest", "earliest" or "pending".',
        },
        {
            "displayName": "Show Transaction Details",
            "name": "showTransactionDetails",
            "displayOptions": {"show": {"operation": ["getBlockByNumber"]}},
            "default": False,
            "type": "boolean",
            "description": "If true, return full transaction objects instead of hashes.",
        },
        {
            "displayName": "Tag",
            "name": "transactionTag",
            "displayOptions": {"show": {"operation": ["getTransactionCount"]}},
            "required": True,
            "default": "pending",
            "type": "string",
            "description": 'An integer block number, or the string "latest", "earliest" or "pending".',
        },
        {
            "displayName": "Signed Transaction",
            "name": "signedTransaction",
            "displayOptions": {"show": {"operation": ["sendRawTransaction"]}},
            "required": True,
            "default": "",
            "type": "string",
            "description": "Signed transaction data, hex encoded.",
        },
    ],
}


def properties() -> list[dict[str, Any]]:
    return DESCRIPTION["properties"]


def defaults() -> dict[str, Any]:
    """Default value of every property, keyed by property name."""
    return {prop["name"]: prop["default"] for prop in properties()}


def _matches(rules: Mapping[str, list], values: Mapping[str, Any]) -> list[bool]:
    return [values.get(key) in allowed for key, allowed in rules.items()]


def is_visible(prop: Mapping[str, Any], values: Mapping[str, Any]) -> bool:
    options = prop.get("displayOptions") or {}
    show = options.get("show") or {}
    hide = options.get("hide") or {}
    if show and not all(_matches(show, values)):
        return False
    if hide and any(_matches(hide, values)):
        return False
    return True


def visible_properties(values: Mapping[str, Any]) -> list[str]:
    """
    Names of the properties the host shows for the current values.

    Hidden properties do not take part in later display rules, so a
    default stateMutability does not hide the wallet of a plain transfer.
    """
    shown: dict[str, Any] = {}
    for prop in properties():
        if is_visible(prop, shown):
            shown[prop["name"]] = values.get(prop["name"], prop["default"])
    return list(shown)
