"""Fetch verified contract ABIs from Etherscan."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..errors import RpcError
from ..utils import INVALID_JSON, validate_json

logger = logging.getLogger(__name__)

ETHERSCAN_API_URL = "https://api.etherscan.io/api"


def fetch_abi(
    contract_address: str,
    api_key: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> list[dict[str, Any]]:
    """
    Download the ABI of a verified contract.

    Args:
        contract_address: 0x-prefixed contract address
        api_key: Etherscan API key (optional, rate limited without)
        transport: Optional httpx transport

    Returns:
        ABI as a list of dicts

    Raises:
        RpcError: If the request fails or Etherscan has no ABI
    """
    params = {"module": "contract", "action": "getabi", "address": contract_address}
    if api_key:
        params["apikey"] = api_key

    logger.debug("Fetching ABI for %s", contract_address)
    try:
        with httpx.Client(transport=transport) as client:
            response = client.get(ETHERSCAN_API_URL, params=params)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as exc:
        raise RpcError(f"Etherscan request failed: {exc}") from exc
    except ValueError as exc:
        raise RpcError("Etherscan returned a non-JSON response") from exc

    if str(data.get("status")) != "1":
        raise RpcError(f"Etherscan error: {data.get('result') or data.get('message')}")

    abi = validate_json(data.get("result"))
    if abi is INVALID_JSON or not isinstance(abi, list):
        raise RpcError("Etherscan returned an invalid ABI")
    return abi
