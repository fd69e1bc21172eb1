"""
Pact API Client for Chainweb.

Thin httpx wrapper over the three Pact endpoints a deployment needs:
``/api/v1/send``, ``/api/v1/local`` and ``/api/v1/listen``.  One attempt
per call; failures surface as NetworkError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..errors import NetworkError, SigningError
from .command import SignedCommand

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "https://api.testnet.chainweb.com"
DEFAULT_API_VERSION = "0.0"
DEFAULT_TIMEOUT = 30.0


def endpoint_url(
    network_id: str,
    chain_id: str,
    api_host: str = DEFAULT_API_HOST,
    api_version: str = DEFAULT_API_VERSION,
) -> str:
    """Build the Pact endpoint URL for one chain of a network."""
    host = api_host.rstrip("/")
    if "://" not in host:
        host = f"https://{host}"
    return f"{host}/chainweb/{api_version}/{network_id}/chain/{chain_id}/pact"


def _post(
    url: str,
    payload: dict[str, Any],
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    POST a JSON payload and decode the JSON response.

    Args:
        url: Full endpoint URL
        payload: JSON body
        client: Pre-configured httpx client (default: a fresh one per call)
        timeout: Request timeout in seconds when no client is given

    Returns:
        Decoded JSON body

    Raises:
        NetworkError: On transport failure, non-2xx status or non-JSON body
    """
    logger.debug("POST %s", url)
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as own_client:
                response = own_client.post(url, json=payload)
        else:
            response = client.post(url, json=payload)
    except httpx.HTTPError as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc

    if response.is_error:
        body = response.text
        raise NetworkError(
            f"{url} returned HTTP {response.status_code}: {body.strip() or response.reason_phrase}",
            status_code=response.status_code,
            body=body,
        )

    try:
        return response.json()
    except ValueError as exc:
        raise NetworkError(
            f"{url} returned a non-JSON response.",
            status_code=response.status_code,
            body=response.text,
        ) from exc


def _require_complete(signed: SignedCommand) -> None:
    if not signed.is_complete:
        raise SigningError(f"Command {signed.hash} is missing signatures; refusing to submit.")


def send(
    signed: SignedCommand,
    endpoint: str,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Submit a signed command.

    Args:
        signed: Fully signed command
        endpoint: Pact endpoint URL (see :func:`endpoint_url`)

    Returns:
        The endpoint's JSON response, unmodified (``{"requestKeys": [...]}``)
    """
    _require_complete(signed)
    logger.info("Sending command %s", signed.hash)
    return _post(f"{endpoint}/api/v1/send", {"cmds": [signed.to_dict()]}, client, timeout)


def local(
    signed: SignedCommand,
    endpoint: str,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Execute a signed command locally on the node without committing it.

    Returns:
        The command result (``{"result": {"status": ...}, ...}``)
    """
    _require_complete(signed)
    logger.info("Preflight for command %s", signed.hash)
    return _post(f"{endpoint}/api/v1/local", signed.to_dict(), client, timeout)


def listen(
    request_key: str,
    endpoint: str,
    client: Optional[httpx.Client] = None,
    timeout: float = 180.0,
) -> dict:
    """
    Block until the result of a submitted command is available.

    Args:
        request_key: Request key returned by :func:`send`
        endpoint: Pact endpoint URL
        timeout: How long the node may hold the request open

    Returns:
        The command result
    """
    logger.info("Listening for %s", request_key)
    return _post(f"{endpoint}/api/v1/listen", {"listen": request_key}, client, timeout)
