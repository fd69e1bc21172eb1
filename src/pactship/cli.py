"""
pactship CLI

Command-line interface for deploying Pact contracts to Kadena Chainweb.

Commands:
  deploy  - Sign and send a contract to a chain
  listen  - Wait for the result of a sent command
  keygen  - Create a local Ed25519 key and default config
  whoami  - Show the configured public key and account
  info    - Show resolved configuration
"""

from __future__ import annotations

import logging
import sys

import click

from .config import load_config
from .errors import ValidationError
from .sigil.keys import PACTSHIP_ENV, account_for, load_secret_key, public_key_for
from .sigil.crypto import CryptoError


# ============ Constants ============

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo(
        click.style("        P A C T S H I P", fg="bright_white", bold=True)
        + click.style(f"    v{VERSION}", dim=True)
    )
    click.secho("        ─── Pact contract deployer ───", fg="cyan")
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="pactship")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """pactship — deploy Pact contracts to Kadena Chainweb."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.deploy import deploy
from .theurgy.keygen import keygen
from .theurgy.listen import listen

cli.add_command(deploy)
cli.add_command(listen)
cli.add_command(keygen)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show the configured public key and account."""
    try:
        config = load_config()
    except ValidationError:
        try:
            public_key = public_key_for(load_secret_key())
        except (ValueError, CryptoError):
            click.echo("No key configured.")
            click.echo("Run 'pactship keygen' or set PACT_PUBLIC_KEY.")
            sys.exit(1)
        click.echo(f"Public key: {public_key}")
        click.echo(f"Account:    {account_for(public_key)}")
        return

    click.echo(f"Public key: {config.public_key}")
    click.echo(f"Account:    {config.sender}")


# ============ Info ============


@cli.command()
def info() -> None:
    """Show resolved configuration."""
    _print_banner()

    click.secho("  Config ─────────────────────────────────", fg="cyan")
    click.echo()
    click.echo(click.style("  Env file:    ", dim=True) + str(PACTSHIP_ENV))

    try:
        config = load_config()
    except ValidationError as exc:
        click.echo(
            click.style("  Status:      ", dim=True)
            + click.style("incomplete", fg="yellow")
        )
        for problem in exc.errors:
            click.echo(click.style("    - ", dim=True) + problem)
        click.echo()
        return

    rows = [
        ("Endpoint:    ", config.endpoint_url),
        ("Contract:    ", str(config.contract_path)),
        ("Sender:      ", config.sender),
        ("Public key:  ", config.public_key),
        ("Gas:         ", f"limit {config.gas_limit} @ {config.gas_price}"),
        ("TTL:         ", f"{config.ttl}s"),
        ("Keyset:      ", config.keyset_name),
        ("Upgrade:     ", str(config.upgrade).lower()),
        ("Signer:      ", config.signer),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label}", dim=True) + click.style(value, fg="bright_white"))
    click.echo()
