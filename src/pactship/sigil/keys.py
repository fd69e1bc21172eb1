"""
Ed25519 Key Management for pactship.

Kadena accounts are controlled by Ed25519 keys.  A single-key account is
named ``k:<public key hex>``.  This module handles the local key used by
the ``local`` signing backend.

Keys are stored in ~/.pactship/.env as PACT_SECRET_KEY (hex format),
next to PACT_PUBLIC_KEY and PACT_ACCOUNT.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from dotenv import load_dotenv

from .crypto import private_key_from_hex


# Default config directory
PACTSHIP_DIR = Path.home() / ".pactship"
PACTSHIP_ENV = PACTSHIP_DIR / ".env"


def generate_keypair() -> tuple[str, str]:
    """
    Generate a new Ed25519 keypair.

    Returns:
        Tuple of (secret_key_hex, public_key_hex), 64 hex chars each.
    """
    private_key = ed25519.Ed25519PrivateKey.generate()
    secret = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return secret.hex(), public_key_for(secret.hex())


def public_key_for(secret_key_hex: str) -> str:
    """Derive the hex public key for a hex secret key."""
    private_key = private_key_from_hex(secret_key_hex)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    ).hex()


def account_for(public_key_hex: str) -> str:
    """Return the single-key ``k:`` account name for a public key."""
    return f"k:{public_key_hex}"


def read_env_file(env_path: Path) -> dict[str, str]:
    """Parse KEY=VALUE lines, skipping blanks and comments."""
    existing: dict[str, str] = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k, v = stripped.split("=", 1)
                existing[k.strip()] = v.strip()
    return existing


def write_env_file(env_path: Path, values: dict[str, str]) -> None:
    env_path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{k}={v}" for k, v in values.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)


def save_secret_key(secret_key_hex: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a secret key (and its derived public key and account) to .env.

    Args:
        secret_key_hex: 64-char hex Ed25519 secret key
        env_path: Path to .env file (default: ~/.pactship/.env)

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or PACTSHIP_ENV
    public_key = public_key_for(secret_key_hex)

    existing = read_env_file(env_path)
    existing["PACT_SECRET_KEY"] = secret_key_hex
    existing["PACT_PUBLIC_KEY"] = public_key
    existing["PACT_ACCOUNT"] = account_for(public_key)
    write_env_file(env_path, existing)

    return env_path


def load_secret_key(env_path: Optional[Path] = None) -> str:
    """
    Load the secret key from .env file or environment.

    Args:
        env_path: Path to .env file (default: ~/.pactship/.env)

    Returns:
        64-char hex secret key

    Raises:
        ValueError: If PACT_SECRET_KEY is not set
    """
    env_path = env_path or PACTSHIP_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    secret_key = os.environ.get("PACT_SECRET_KEY")
    if not secret_key:
        raise ValueError(
            f"PACT_SECRET_KEY not found. Run 'pactship keygen' or set "
            f"PACT_SECRET_KEY in {env_path}"
        )

    return secret_key.removeprefix("0x").lower()
