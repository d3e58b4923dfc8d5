"""
Infura node CLI

Command-line host for the Infura node: resolves parameters from options,
runs one operation and prints the result records as JSON.

Commands:
  block-number  - Latest block number
  block         - Block by number or tag
  tx-count      - Transaction count of an address
  gas-price     - Current gas price in gwei
  call          - Call a contract function (read or transaction)
  send          - Send ETH and wait for the receipt
  send-raw      - Submit a signed transaction
  methods       - List contract functions from an ABI
  inputs        - List the inputs of a contract function
  fetch-abi     - Download a verified ABI from Etherscan
  describe      - Print the node description
  run           - Execute a parameter file over a list of items
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .chain.etherscan import fetch_abi
from .config import AuthScheme, ClientKind, Credentials, Network, NodeConfig, load_credentials
from .errors import InfuraNodeError
from .model.descriptor import DESCRIPTION, visible_properties
from .operations.dispatcher import execute
from .operations.load_options import load_options


# ============ Helpers ============


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _fail(exc: Exception, exit_code: int) -> None:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    errors = getattr(exc, "errors", None)
    for line in errors or []:
        click.secho(f"  - {line}", fg="red", err=True)
    sys.exit(exit_code)


def _read_abi(abi: Optional[str], abi_file: Optional[Path]) -> str:
    if abi_file is not None:
        return abi_file.read_text(encoding="utf-8")
    return abi or ""


def _run(ctx: click.Context, parameters: dict[str, Any], items: Optional[list] = None) -> None:
    obj = ctx.obj
    parameters = {"ethNetwork": obj["network"], **parameters}
    try:
        results = execute(
            parameters,
            items=items,
            credentials=obj["credentials"],
            config=obj["config"],
            transport=obj.get("transport"),
        )
    except InfuraNodeError as exc:
        _fail(exc, exc.exit_code)
    except ValueError as exc:
        # Malformed private key or mnemonic
        _fail(exc, 1)
    _echo_json(results)


def _wallet_parameters(private_key: Optional[str], mnemonic: Optional[str]) -> dict[str, Any]:
    if mnemonic:
        return {"accessWalletByMnemonic": True, "walletMnemonic": mnemonic}
    return {"accessWalletByMnemonic": False, "walletPrivateKey": private_key or ""}


def _gas_parameters(gas_limit: Optional[int], gas_price: Optional[float]) -> dict[str, Any]:
    if gas_limit is None and gas_price is None:
        return {"configureGasManually": False}
    params: dict[str, Any] = {"configureGasManually": True}
    if gas_limit is not None:
        params["gasLimit"] = gas_limit
    if gas_price is not None:
        params["gasPrice"] = gas_price
    return params


wallet_options = [
    click.option("--private-key", envvar="WALLET_PRIVATE_KEY", default=None, help="Wallet private key"),
    click.option("--mnemonic", envvar="WALLET_MNEMONIC", default=None, help="Wallet mnemonic phrase"),
    click.option("--gas-limit", type=int, default=None, help="Gas limit (enables manual gas)"),
    click.option("--gas-price", type=float, default=None, help="Gas price in gwei (enables manual gas)"),
]


def with_wallet_options(func):
    for option in reversed(wallet_options):
        func = option(func)
    return func


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=__version__, prog_name="infura-node")
@click.option(
    "--network",
    type=click.Choice([n.value for n in Network]),
    default=Network.MAINNET.value,
    show_default=True,
    help="Ethereum network",
)
@click.option("--project-id", envvar="INFURA_PROJECT_ID", default=None, help="Infura project id")
@click.option("--project-secret", envvar="INFURA_PROJECT_SECRET", default=None, help="Infura project secret")
@click.option(
    "--client",
    type=click.Choice([c.value for c in ClientKind]),
    envvar="INFURA_NODE_CLIENT",
    default=ClientKind.RPC.value,
    show_default=True,
    help="Client strategy",
)
@click.option(
    "--auth",
    type=click.Choice([a.value for a in AuthScheme]),
    envvar="INFURA_NODE_AUTH",
    default=AuthScheme.HEADER.value,
    show_default=True,
    help="How the project secret is sent",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    network: str,
    project_id: Optional[str],
    project_secret: Optional[str],
    client: str,
    auth: str,
    verbose: bool,
) -> None:
    """Infura - Ethereum JSON-RPC operations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    if project_id:
        credentials: Optional[Credentials] = Credentials(project_id, project_secret or "")
    else:
        credentials = load_credentials()

    ctx.ensure_object(dict)
    ctx.obj.update(
        network=network,
        credentials=credentials,
        config=NodeConfig(client=ClientKind(client), auth=AuthScheme(auth)),
    )


# ============ Chain Queries ============


@cli.command("block-number")
@click.pass_context
def block_number(ctx: click.Context) -> None:
    """Show the latest block number."""
    _run(ctx, {"operation": "getBlockNumber"})


@cli.command()
@click.argument("block", default="latest")
@click.option("--full", is_flag=True, help="Include full transaction objects")
@click.pass_context
def block(ctx: click.Context, block: str, full: bool) -> None:
    """Show a block by number or tag."""
    _run(ctx, {"operation": "getBlockByNumber", "blockNumber": block, "showTransactionDetails": full})


@cli.command("tx-count")
@click.argument("address")
@click.option("--tag", default="pending", show_default=True, help="Block number or latest/earliest/pending")
@click.pass_context
def tx_count(ctx: click.Context, address: str, tag: str) -> None:
    """Show the transaction count of an address."""
    _run(ctx, {"operation": "getTransactionCount", "walletAddress": address, "transactionTag": tag})


@cli.command("gas-price")
@click.pass_context
def gas_price(ctx: click.Context) -> None:
    """Show the current gas price in gwei."""
    _run(ctx, {"operation": "estimateGas"})


# ============ Contracts & Transactions ============


@cli.command()
@click.option("--contract", required=True, help="Contract address")
@click.option("--function", "func_name", required=True, help="Function name to call")
@click.option("--abi", default=None, help="Contract ABI as JSON text")
@click.option("--abi-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--inputs", default="", help="Function inputs as a JSON array")
@click.option(
    "--mutability",
    type=click.Choice(["pureOrView", "nonpayable", "payable"]),
    default="pureOrView",
    show_default=True,
)
@click.option("--value", default="0", help="ETH value for payable functions")
@with_wallet_options
@click.pass_context
def call(
    ctx: click.Context,
    contract: str,
    func_name: str,
    abi: Optional[str],
    abi_file: Optional[Path],
    inputs: str,
    mutability: str,
    value: str,
    private_key: Optional[str],
    mnemonic: Optional[str],
    gas_limit: Optional[int],
    gas_price: Optional[float],
) -> None:
    """Call a smart contract function."""
    parameters = {
        "operation": "call",
        "recipientAddress": contract,
        "contractABI": _read_abi(abi, abi_file),
        "contractMethod": func_name,
        "contractInputs": inputs,
        "stateMutability": mutability,
        "payValue": value,
    }
    if mutability != "pureOrView":
        parameters.update(_wallet_parameters(private_key, mnemonic))
        parameters.update(_gas_parameters(gas_limit, gas_price))
    _run(ctx, parameters)


@cli.command()
@click.option("--to", "recipient", required=True, help="Recipient address")
@click.option("--value", required=True, help="Amount in ETH")
@with_wallet_options
@click.pass_context
def send(
    ctx: click.Context,
    recipient: str,
    value: str,
    private_key: Optional[str],
    mnemonic: Optional[str],
    gas_limit: Optional[int],
    gas_price: Optional[float],
) -> None:
    """Send ETH and wait for the receipt."""
    parameters = {
        "operation": "sendTransaction",
        "recipientAddress": recipient,
        "payValue": value,
        **_wallet_parameters(private_key, mnemonic),
        **_gas_parameters(gas_limit, gas_price),
    }
    _run(ctx, parameters)


@cli.command("send-raw")
@click.argument("signed_tx")
@click.pass_context
def send_raw(ctx: click.Context, signed_tx: str) -> None:
    """Submit a signed raw transaction."""
    _run(ctx, {"operation": "sendRawTransaction", "signedTransaction": signed_tx})


# ============ ABI Helpers ============


@cli.command()
@click.option("--abi", default=None, help="Contract ABI as JSON text")
@click.option("--abi-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option(
    "--mutability",
    type=click.Choice(["pureOrView", "nonpayable", "payable"]),
    default=None,
    help="Only functions of this type",
)
def methods(abi: Optional[str], abi_file: Optional[Path], mutability: Optional[str]) -> None:
    """List the functions of a contract ABI."""
    parameters = {"contractABI": _read_abi(abi, abi_file), "stateMutability": mutability}
    try:
        options = load_options("getContractMethods", parameters)
    except InfuraNodeError as exc:
        _fail(exc, exc.exit_code)
    for option in options:
        click.echo(option["value"])


@cli.command()
@click.option("--abi", default=None, help="Contract ABI as JSON text")
@click.option("--abi-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--function", "func_name", required=True, help="Function name")
def inputs(abi: Optional[str], abi_file: Optional[Path], func_name: str) -> None:
    """List the input names of a contract function."""
    parameters = {"contractABI": _read_abi(abi, abi_file), "contractMethod": func_name}
    try:
        options = load_options("getContractInputs", parameters)
    except InfuraNodeError as exc:
        _fail(exc, exc.exit_code)
    for option in options:
        click.echo(option["value"])


@cli.command("fetch-abi")
@click.argument("address")
@click.option("--api-key", envvar="ETHERSCAN_API_KEY", default=None, help="Etherscan API key")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_context
def fetch_abi_command(ctx: click.Context, address: str, api_key: Optional[str], output: Optional[Path]) -> None:
    """Download the ABI of a verified contract from Etherscan."""
    try:
        abi = fetch_abi(address, api_key=api_key, transport=ctx.obj.get("transport"))
    except InfuraNodeError as exc:
        _fail(exc, exc.exit_code)
    if output is not None:
        output.write_text(json.dumps(abi, indent=2) + "\n", encoding="utf-8")
        click.echo(f"ABI written to {output}")
    else:
        _echo_json(abi)


# ============ Host Emulation ============


@cli.command()
@click.option("--visible-for", default=None, help="Parameter values (JSON) to evaluate display rules")
def describe(visible_for: Optional[str]) -> None:
    """Print the node description, or the fields visible for given values."""
    if visible_for is None:
        _echo_json(DESCRIPTION)
        return
    try:
        values = json.loads(visible_for)
    except json.JSONDecodeError as exc:
        _fail(exc, 2)
    for name in visible_properties(values):
        click.echo(name)


@cli.command()
@click.argument("params_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--items",
    "items_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON array of per-item parameter overrides",
)
@click.pass_context
def run(ctx: click.Context, params_file: Path, items_file: Optional[Path]) -> None:
    """Execute the parameters in PARAMS_FILE, once per item."""
    try:
        parameters = json.loads(params_file.read_text(encoding="utf-8"))
        items = json.loads(items_file.read_text(encoding="utf-8")) if items_file else None
    except json.JSONDecodeError as exc:
        _fail(exc, 2)
    if not isinstance(parameters, dict) or (items is not None and not isinstance(items, list)):
        click.secho("ERROR: parameters must be an object and items an array", fg="red", err=True)
        sys.exit(2)
    _run(ctx, parameters, items)


# ============ Entry Points ============


def main() -> None:
    """Infura node CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
