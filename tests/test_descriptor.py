"""Tests for the node description, parameter resolution and configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from infura_node.config import (
    AuthScheme,
    ClientKind,
    Credentials,
    Network,
    NodeConfig,
    get_network_config,
    load_credentials,
)
from infura_node.errors import ParameterError
from infura_node.model.descriptor import DESCRIPTION, defaults, is_visible, visible_properties
from infura_node.model.params import NodeParameters, Operation
from infura_node.wallet import from_mnemonic, from_private_key, open_wallet

from tests.fakes import DEV_ADDRESS, DEV_MNEMONIC, DEV_PRIVATE_KEY, ERC20_ABI


class TestDescription:
    """Test the static node description."""

    def test_operations(self) -> None:
        operation = next(p for p in DESCRIPTION["properties"] if p["name"] == "operation")
        assert [o["value"] for o in operation["options"]] == [
            "getBlockNumber",
            "getBlockByNumber",
            "estimateGas",
            "call",
            "sendTransaction",
            "sendRawTransaction",
            "getTransactionCount",
        ]

    def test_networks(self) -> None:
        network = next(p for p in DESCRIPTION["properties"] if p["name"] == "ethNetwork")
        assert {o["value"] for o in network["options"]} == {n.value for n in Network}

    def test_defaults(self) -> None:
        values = defaults()
        assert values["ethNetwork"] == "mainnet"
        assert values["operation"] == "getBlockNumber"
        assert values["stateMutability"] == "pureOrView"
        assert values["gasLimit"] == 21000
        assert values["gasPrice"] == 45
        assert values["blockNumber"] == "latest"
        assert values["transactionTag"] == "pending"


class TestVisibility:
    """Test the show/hide rules of the form."""

    def test_hide_wins_over_show(self) -> None:
        prop = {"displayOptions": {"show": {"operation": ["call"]}, "hide": {"stateMutability": ["pureOrView"]}}}
        assert is_visible(prop, {"operation": "call", "stateMutability": "payable"})
        assert not is_visible(prop, {"operation": "call", "stateMutability": "pureOrView"})
        assert not is_visible(prop, {"operation": "sendTransaction", "stateMutability": "payable"})

    def test_block_number_operation(self) -> None:
        assert visible_properties({"operation": "getBlockNumber"}) == ["ethNetwork", "operation"]

    def test_read_only_call_hides_wallet(self) -> None:
        names = visible_properties({"operation": "call"})
        assert "contractABI" in names
        assert "contractMethod" in names
        assert "walletPrivateKey" not in names
        assert "payValue" not in names

    def test_payable_call(self) -> None:
        names = visible_properties({"operation": "call", "stateMutability": "payable"})
        assert {"walletPrivateKey", "payValue", "configureGasManually"} <= set(names)
        assert "walletMnemonic" not in names
        assert "gasLimit" not in names

    def test_transfer_shows_wallet_and_value(self) -> None:
        names = visible_properties({"operation": "sendTransaction", "accessWalletByMnemonic": True})
        assert "stateMutability" not in names
        assert "walletMnemonic" in names
        assert "walletPrivateKey" not in names
        assert "payValue" in names

    def test_manual_gas(self) -> None:
        names = visible_properties({"operation": "sendTransaction", "configureGasManually": True})
        assert "gasLimit" in names
        assert "gasPrice" in names


class TestNodeParameters:
    """Test resolution of host parameter values."""

    def test_defaults_applied(self) -> None:
        params = NodeParameters.from_dict({})
        assert params.operation is Operation.GET_BLOCK_NUMBER
        assert params.network is Network.MAINNET
        assert params.block_number == "latest"

    def test_legacy_names(self) -> None:
        params = NodeParameters.from_dict({"operation": "operationCallContract"})
        assert params.operation is Operation.CALL

    def test_abi_and_inputs_as_structures(self) -> None:
        params = NodeParameters.from_dict({"contractABI": ERC20_ABI, "contractInputs": [DEV_ADDRESS]})
        assert json.loads(params.contract_abi) == ERC20_ABI
        assert json.loads(params.contract_inputs or "") == [DEV_ADDRESS]

    def test_custom_fields(self) -> None:
        params = NodeParameters.from_dict(
            {"customFields": {"customFieldsUi": [{"field": "to", "value": DEV_ADDRESS}, {"field": "amount"}]}}
        )
        assert params.custom_fields == (("to", DEV_ADDRESS), ("amount", ""))

    @pytest.mark.parametrize(
        "values",
        [
            {"operation": "mint"},
            {"ethNetwork": "sepolia"},
            {"stateMutability": "sometimes"},
            {"gasLimit": -1},
            {"showTransactionDetails": "yes"},
        ],
    )
    def test_invalid_values(self, values: dict) -> None:
        with pytest.raises(ParameterError) as exc_info:
            NodeParameters.from_dict(values)
        assert exc_info.value.errors

    def test_secrets_not_in_repr(self) -> None:
        params = NodeParameters.from_dict({"walletPrivateKey": DEV_PRIVATE_KEY, "walletMnemonic": DEV_MNEMONIC})
        assert DEV_PRIVATE_KEY not in repr(params)
        assert "junk" not in repr(params)

    def test_merged(self) -> None:
        base = NodeParameters.from_dict({"operation": "getTransactionCount", "walletAddress": DEV_ADDRESS})
        assert base.merged({}) is base
        item = base.merged({"transactionTag": "latest"})
        assert item.wallet_address == DEV_ADDRESS
        assert item.transaction_tag == "latest"


class TestConfig:
    def test_chain_ids(self) -> None:
        assert {n.value: get_network_config(n).chain_id for n in Network} == {
            "mainnet": 1,
            "ropsten": 3,
            "rinkeby": 4,
            "goerli": 5,
            "kovan": 42,
        }

    def test_unknown_network(self) -> None:
        with pytest.raises(ValueError, match="Unsupported network"):
            get_network_config("sepolia")

    def test_endpoint(self) -> None:
        creds = Credentials(project_id="abc123", project_secret="s3cret")
        assert creds.endpoint("kovan") == "https://kovan.infura.io/v3/abc123"
        assert "s3cret" not in repr(creds)

    def test_credentials_from_dict(self) -> None:
        creds = Credentials.from_dict({"projectID": "abc", "projectSecret": "xyz"})
        assert creds == Credentials("abc", "xyz")

    def test_load_credentials_from_env_file(self, tmp_path: Path) -> None:
        env = tmp_path / ".env"
        env.write_text("INFURA_PROJECT_ID=fromfile\nINFURA_PROJECT_SECRET=filesecret\n", encoding="utf-8")
        clean = {k: v for k, v in os.environ.items() if not k.startswith("INFURA_")}
        with patch.dict(os.environ, clean, clear=True):
            assert load_credentials(env) == Credentials("fromfile", "filesecret")

    def test_environment_wins_over_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFURA_PROJECT_ID", "fromenv")
        monkeypatch.setenv("INFURA_PROJECT_SECRET", "")
        env = tmp_path / ".env"
        env.write_text("INFURA_PROJECT_ID=fromfile\n", encoding="utf-8")
        assert load_credentials(env) == Credentials("fromenv", "")

    def test_no_credentials(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INFURA_PROJECT_ID", raising=False)
        assert load_credentials(tmp_path / "missing.env") is None

    def test_node_config_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFURA_NODE_CLIENT", "web3")
        monkeypatch.setenv("INFURA_NODE_AUTH", "basic")
        config = NodeConfig.from_env()
        assert config.client is ClientKind.WEB3
        assert config.auth is AuthScheme.BASIC
        assert config.receipt_timeout == 120
        assert config.poll_interval == 2.0


class TestWallet:
    """Test wallet access by private key or mnemonic."""

    def test_private_key(self) -> None:
        assert from_private_key(DEV_PRIVATE_KEY).address == DEV_ADDRESS
        assert from_private_key(DEV_PRIVATE_KEY[2:]).address == DEV_ADDRESS

    def test_mnemonic(self) -> None:
        assert from_mnemonic(DEV_MNEMONIC).address == DEV_ADDRESS
        assert from_mnemonic("  " + DEV_MNEMONIC.replace(" ", "   ") + "\n").address == DEV_ADDRESS

    def test_open_wallet(self) -> None:
        assert open_wallet(False, private_key=DEV_PRIVATE_KEY).address == DEV_ADDRESS
        assert open_wallet(True, mnemonic=DEV_MNEMONIC).address == DEV_ADDRESS
