"""
Theurgy Listen - Fetch the result of a sent command.

Blocks on the chain's /listen endpoint until the command identified by
REQUEST_KEY has been mined, then prints the result JSON.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import click

from ..config import load_endpoint
from ..errors import DeployError
from ..pneuma.client import listen as pact_listen

logger = logging.getLogger(__name__)


@click.command()
@click.argument("request_key")
@click.option("--network-id", default=None, help="Network id, e.g. testnet04")
@click.option("--chain-id", default=None, help="Chain the command was sent to")
@click.option("--api-host", default=None, help="Chainweb API host")
@click.option("--timeout", type=float, default=180.0, show_default=True, help="Seconds to wait")
def listen(
    request_key: str,
    network_id: Optional[str],
    chain_id: Optional[str],
    api_host: Optional[str],
    timeout: float,
) -> None:
    """Wait for and print the result of REQUEST_KEY."""
    try:
        endpoint = load_endpoint(network_id=network_id, chain_id=chain_id, api_host=api_host)
        result = pact_listen(request_key, endpoint, timeout=timeout)
    except DeployError as exc:
        logger.debug("Listen failed", exc_info=True)
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)

    click.echo(json.dumps(result, indent=2))
