"""
Theurgy Deploy - Deploy a Pact contract.

Flow (one attempt, all-or-nothing):
1. Load the contract source from disk
2. Build the unsigned exec command (meta, coin.GAS grant, keyset data)
3. Sign it through the configured backend (Chainweaver or local key)
4. Optionally run it through /local as a preflight
5. Send it to the chain's Pact endpoint and print the response
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click
import httpx

from ..config import DeployConfig, SIGNERS, load_config
from ..errors import DeployError, NetworkError, SigningError
from ..pneuma import client as pact_client
from ..pneuma.command import SignedCommand, UnsignedCommand, build_command
from ..pneuma.source import load_contract
from ..sigil.backends import ChainweaverBackend, LocalKeyBackend, SigningBackend, sign_command
from ..sigil.keys import load_secret_key
from ..utils import short_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployResult:
    request_key: str
    signed: SignedCommand
    response: dict[str, Any]
    preflight: Optional[dict[str, Any]] = None


def prepare_command(config: DeployConfig) -> UnsignedCommand:
    """Load the contract and build the unsigned command for ``config``."""
    code = load_contract(config.contract_path)
    return build_command(
        code=code,
        meta=config.meta(),
        network_id=config.network_id,
        capabilities=config.capabilities(),
        data=config.data_payload(),
    )


def backend_for(config: DeployConfig) -> SigningBackend:
    """Instantiate the signing backend named by ``config.signer``."""
    if config.signer == "local":
        try:
            secret = load_secret_key()
        except ValueError as exc:
            raise SigningError(str(exc)) from exc
        return LocalKeyBackend(secret)
    return ChainweaverBackend(url=config.chainweaver_url)


def run_deploy(
    config: DeployConfig,
    backend: SigningBackend,
    client: Optional[httpx.Client] = None,
    preflight: bool = False,
) -> DeployResult:
    """
    Run the deployment pipeline once.

    Args:
        config: Resolved deployment configuration
        backend: Signing backend
        client: httpx client for the Pact API (default: one per request)
        preflight: Run the signed command through /local before sending

    Returns:
        DeployResult with the request key and the raw endpoint response

    Raises:
        DeployError: From whichever step failed; later steps do not run
    """
    command = prepare_command(config)
    logger.info("Built command %s for %s", command.hash, config.endpoint_url)

    signed = sign_command(backend, command)

    preflight_result = None
    if preflight:
        preflight_result = pact_client.local(signed, config.endpoint_url, client, config.timeout)
        status = (preflight_result.get("result") or {}).get("status")
        if status != "success":
            error = (preflight_result.get("result") or {}).get("error")
            raise NetworkError(f"Preflight failed: {json.dumps(error) if error else status}")

    response = pact_client.send(signed, config.endpoint_url, client, config.timeout)
    return DeployResult(
        request_key=signed.hash,
        signed=signed,
        response=response,
        preflight=preflight_result,
    )


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.command()
@click.option(
    "--contract",
    "contract_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Pact source file to deploy [env: PACT_CONTRACT_PATH]",
)
@click.option("--network-id", default=None, help="Network id, e.g. testnet04")
@click.option("--chain-id", default=None, help="Target chain id, e.g. 0")
@click.option("--api-host", default=None, help="Chainweb API host")
@click.option("--account", "sender", default=None, help="Gas payer account (default: k:<public key>)")
@click.option("--public-key", default=None, help="Signer / keyset public key")
@click.option("--ttl", type=int, default=None, help="Time-to-live in seconds")
@click.option("--gas-limit", type=int, default=None, help="Gas limit")
@click.option("--gas-price", type=float, default=None, help="Gas price in KDA")
@click.option("--keyset-name", default=None, help="Data key of the admin keyset")
@click.option("--upgrade/--no-upgrade", default=None, help="Set the 'upgrade' data flag")
@click.option("--signer", type=click.Choice(SIGNERS), default=None, help="Signing backend")
@click.option("--chainweaver-url", default=None, help="Chainweaver signing API URL")
@click.option("--preflight", is_flag=True, help="Run the command through /local before sending")
@click.option("--listen", "wait", is_flag=True, help="Wait for the result after sending")
@click.option("--dry-run", is_flag=True, help="Print the unsigned command; do not sign or send")
def deploy(
    contract_path: Optional[Path],
    network_id: Optional[str],
    chain_id: Optional[str],
    api_host: Optional[str],
    sender: Optional[str],
    public_key: Optional[str],
    ttl: Optional[int],
    gas_limit: Optional[int],
    gas_price: Optional[float],
    keyset_name: Optional[str],
    upgrade: Optional[bool],
    signer: Optional[str],
    chainweaver_url: Optional[str],
    preflight: bool,
    wait: bool,
    dry_run: bool,
) -> None:
    """
    Deploy a Pact contract.

    Signs the exec command with the configured backend and sends it to the
    chain.  The raw JSON response is printed to stdout.
    """
    try:
        config = load_config(
            contract_path=contract_path,
            network_id=network_id,
            chain_id=chain_id,
            api_host=api_host,
            sender=sender,
            public_key=public_key,
            ttl=ttl,
            gas_limit=gas_limit,
            gas_price=gas_price,
            keyset_name=keyset_name,
            upgrade=upgrade,
            signer=signer,
            chainweaver_url=chainweaver_url,
        )

        click.echo("=== pactship deploy ===", err=True)
        click.echo(f"  Contract: {config.contract_path}", err=True)
        click.echo(f"  Endpoint: {config.endpoint_url}", err=True)
        click.echo(f"  Sender:   {config.sender}", err=True)
        click.echo(f"  Key:      {short_key(config.public_key)}", err=True)
        click.echo("", err=True)

        if dry_run:
            command = prepare_command(config)
            _echo_json({"hash": command.hash, "cmd": command.to_payload()})
            return

        if config.signer == "chainweaver":
            click.echo("  Confirm the signing request in Chainweaver...", err=True)

        result = run_deploy(config, backend_for(config), preflight=preflight)
        _echo_json(result.response)

        if wait:
            click.echo(f"  Waiting for {result.request_key}...", err=True)
            _echo_json(pact_client.listen(result.request_key, config.endpoint_url))

    except DeployError as exc:
        logger.debug("Deploy failed", exc_info=True)
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)
