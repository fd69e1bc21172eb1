"""
Keygen - Create a local signing identity.

Generates an Ed25519 key unless one already exists, stores it in
~/.pactship/.env together with its k: account, and fills in default
configuration values (network, chain, gas settings) that are not set yet.
"""

from __future__ import annotations

import click

from ..config import DEFAULTS
from ..sigil.keys import (
    PACTSHIP_DIR,
    PACTSHIP_ENV,
    account_for,
    generate_keypair,
    load_secret_key,
    public_key_for,
    read_env_file,
    save_secret_key,
    write_env_file,
)
from ..utils import is_hex_key


def _ensure_identity(force: bool = False) -> tuple[str, bool]:
    """Ensure a secret key exists.  Returns (public_key, created)."""
    PACTSHIP_DIR.mkdir(parents=True, exist_ok=True)

    if not force:
        try:
            secret = load_secret_key(PACTSHIP_ENV)
        except ValueError:
            secret = None
        if secret and is_hex_key(secret):
            return public_key_for(secret), False

    secret, public_key = generate_keypair()
    save_secret_key(secret, PACTSHIP_ENV)
    return public_key, True


def _ensure_defaults() -> list[str]:
    """Add missing default keys to ~/.pactship/.env.  Returns the added keys."""
    existing = read_env_file(PACTSHIP_ENV)
    added = [key for key in DEFAULTS if key not in existing]
    if added:
        for key in added:
            existing[key] = DEFAULTS[key]
        write_env_file(PACTSHIP_ENV, existing)
    return added


@click.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Create a local Ed25519 key and default configuration."""
    public_key, created = _ensure_identity(force=force)
    added = _ensure_defaults()

    if created:
        click.secho("Key created.", fg="green")
    else:
        click.echo("Existing key kept (use --force to replace).")
    click.echo(f"  Public key: {public_key}")
    click.echo(f"  Account:    {account_for(public_key)}")
    click.echo(f"  Config:     {PACTSHIP_ENV}")
    if added:
        click.echo(f"  Defaults added: {', '.join(added)}")
    click.echo("")
    click.echo("Fund the account on the target chain before deploying.")
