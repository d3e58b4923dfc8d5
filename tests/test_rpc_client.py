"""Tests for the direct JSON-RPC client, using httpx.MockTransport."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from infura_node.chain import create_client
from infura_node.chain.client import EthereumClient, InfuraRpcClient, format_block, format_receipt
from infura_node.chain.etherscan import ETHERSCAN_API_URL, fetch_abi
from infura_node.config import AuthScheme, ClientKind, Credentials, Network, NodeConfig
from infura_node.errors import RpcError

from tests.fakes import DEV_ADDRESS, ERC20_ABI, TX_HASH, FakeNode


def _client(node: FakeNode, credentials: Credentials, **kwargs) -> InfuraRpcClient:
    return InfuraRpcClient(Network.MAINNET, credentials, transport=node.transport, **kwargs)


class TestEnvelope:
    """Test the request sent to Infura."""

    def test_url_and_payload(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_blockNumber"] = "0x10"
        with _client(node, credentials) as client:
            assert client.block_number() == 16

        request = node.requests[0]
        assert str(request.url) == "https://mainnet.infura.io/v3/abc123"
        assert request.method == "POST"
        assert json.loads(request.content) == {
            "method": "eth_blockNumber",
            "id": 1,
            "jsonrpc": "2.0",
            "params": [],
        }

    def test_network_in_url(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_gasPrice"] = "0x1"
        with InfuraRpcClient("goerli", credentials, transport=node.transport) as client:
            client.gas_price()
        assert node.requests[0].url.host == "goerli.infura.io"

    def test_header_auth(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_chainId"] = "0x1"
        with _client(node, credentials) as client:
            client.chain_id()
        expected = base64.b64encode(b"s3cret").decode("ascii")
        assert node.requests[0].headers["Authorization"] == f"Basic {expected}"

    def test_basic_auth(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_chainId"] = "0x1"
        with _client(node, credentials, auth=AuthScheme.BASIC) as client:
            client.chain_id()
        expected = base64.b64encode(b":s3cret").decode("ascii")
        assert node.requests[0].headers["Authorization"] == f"Basic {expected}"

    def test_no_secret_no_auth(self, node: FakeNode) -> None:
        node.results["eth_chainId"] = "0x1"
        with _client(node, Credentials(project_id="abc123")) as client:
            client.chain_id()
        assert "Authorization" not in node.requests[0].headers


class TestTypedCalls:
    """Test parameter encoding and result decoding of each call."""

    def test_transaction_count(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_getTransactionCount"] = "0x2a"
        with _client(node, credentials) as client:
            assert client.get_transaction_count(DEV_ADDRESS) == 42
            assert client.get_transaction_count(DEV_ADDRESS, 100) == 42
        assert node.calls[0]["params"] == [DEV_ADDRESS, "pending"]
        assert node.calls[1]["params"] == [DEV_ADDRESS, "0x64"]

    def test_get_block(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_getBlockByNumber"] = {
            "number": "0x10",
            "hash": "0x" + "11" * 32,
            "timestamp": "0x5f5e100",
            "gasUsed": "0x5208",
            "transactions": [
                {"hash": TX_HASH, "nonce": "0x3", "value": "0xde0b6b3a7640000", "blockNumber": "0x10"}
            ],
        }
        with _client(node, credentials) as client:
            block = client.get_block("16", full_transactions=True)

        assert node.calls[0]["params"] == ["0x10", True]
        assert block is not None
        assert block["number"] == 16
        assert block["hash"] == "0x" + "11" * 32
        assert block["timestamp"] == 100_000_000
        assert block["gasUsed"] == 21000
        assert block["transactions"][0]["nonce"] == 3
        assert block["transactions"][0]["value"] == 10 ** 18
        assert block["transactions"][0]["hash"] == TX_HASH

    def test_missing_block(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_getBlockByNumber"] = None
        with _client(node, credentials) as client:
            assert client.get_block("latest") is None
        assert node.calls[0]["params"] == ["latest", False]

    def test_call(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_call"] = "0x"
        tx = {"to": DEV_ADDRESS, "data": "0x70a08231"}
        with _client(node, credentials) as client:
            assert client.call(tx) == "0x"
        assert node.calls[0]["params"] == [tx, "latest"]

    def test_send_raw_transaction(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_sendRawTransaction"] = TX_HASH
        with _client(node, credentials) as client:
            assert client.send_raw_transaction("0xf86c") == TX_HASH
        assert node.calls[0]["params"] == ["0xf86c"]

    def test_receipt(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_getTransactionReceipt"] = {
            "transactionHash": TX_HASH,
            "status": "0x1",
            "blockNumber": "0x10",
            "gasUsed": "0x5208",
            "logs": [{"logIndex": "0x0", "data": "0x"}],
        }
        with _client(node, credentials) as client:
            receipt = client.get_transaction_receipt(TX_HASH)
        assert receipt is not None
        assert receipt["status"] == 1
        assert receipt["blockNumber"] == 16
        assert receipt["logs"] == [{"logIndex": 0, "data": "0x"}]

    def test_pending_receipt(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_getTransactionReceipt"] = None
        with _client(node, credentials) as client:
            assert client.get_transaction_receipt(TX_HASH) is None

    def test_implements_protocol(self, node: FakeNode, credentials: Credentials) -> None:
        with _client(node, credentials) as client:
            assert isinstance(client, EthereumClient)


class TestErrors:
    """Test failures surfacing as RpcError."""

    def test_error_payload(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_sendRawTransaction"] = httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}},
        )
        with _client(node, credentials) as client:
            with pytest.raises(RpcError, match="nonce too low") as exc_info:
                client.send_raw_transaction("0xf86c")
        assert exc_info.value.code == -32000
        assert exc_info.value.method == "eth_sendRawTransaction"

    def test_http_status(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_blockNumber"] = httpx.Response(401, text="invalid project id")
        with _client(node, credentials) as client:
            with pytest.raises(RpcError) as exc_info:
                client.block_number()
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    def test_non_json_response(self, node: FakeNode, credentials: Credentials) -> None:
        node.results["eth_blockNumber"] = httpx.Response(200, text="<html>")
        with _client(node, credentials) as client:
            with pytest.raises(RpcError, match="non-JSON"):
                client.block_number()

    def test_connection_error(self, credentials: Credentials) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = InfuraRpcClient(Network.MAINNET, credentials, transport=httpx.MockTransport(refuse))
        with client:
            with pytest.raises(RpcError, match="connection refused"):
                client.block_number()

    def test_error_exit_code(self) -> None:
        assert RpcError("boom").exit_code == 5


class TestFormatting:
    def test_format_block_none(self) -> None:
        assert format_block(None) is None

    def test_format_block_keeps_hash_only_transactions(self) -> None:
        block = format_block({"number": "0x1", "transactions": [TX_HASH]})
        assert block == {"number": 1, "transactions": [TX_HASH]}

    def test_format_receipt_none(self) -> None:
        assert format_receipt(None) is None


class TestCreateClient:
    def test_default_is_direct_rpc(self, credentials: Credentials) -> None:
        client = create_client(Network.MAINNET, credentials)
        try:
            assert isinstance(client, InfuraRpcClient)
        finally:
            client.close()

    def test_web3_strategy(self, credentials: Credentials) -> None:
        from infura_node.chain.web3_client import Web3Client

        client = create_client(Network.KOVAN, credentials, NodeConfig(client=ClientKind.WEB3))
        assert isinstance(client, Web3Client)
        assert isinstance(client, EthereumClient)


class TestEtherscan:
    """Test ABI download from Etherscan."""

    @staticmethod
    def _transport(payload: dict, seen: list[httpx.Request]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=payload)

        return httpx.MockTransport(handler)

    def test_fetch_abi(self) -> None:
        seen: list[httpx.Request] = []
        payload = {"status": "1", "message": "OK", "result": json.dumps(ERC20_ABI)}
        abi = fetch_abi(DEV_ADDRESS, api_key="KEY", transport=self._transport(payload, seen))

        assert abi == ERC20_ABI
        url = seen[0].url
        assert str(url).startswith(ETHERSCAN_API_URL)
        assert url.params["module"] == "contract"
        assert url.params["action"] == "getabi"
        assert url.params["address"] == DEV_ADDRESS
        assert url.params["apikey"] == "KEY"

    def test_unverified_contract(self) -> None:
        payload = {"status": "0", "message": "NOTOK", "result": "Contract source code not verified"}
        with pytest.raises(RpcError, match="not verified"):
            fetch_abi(DEV_ADDRESS, transport=self._transport(payload, []))

    def test_invalid_abi_text(self) -> None:
        payload = {"status": "1", "message": "OK", "result": "{not json"}
        with pytest.raises(RpcError, match="invalid ABI"):
            fetch_abi(DEV_ADDRESS, transport=self._transport(payload, []))
