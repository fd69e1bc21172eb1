"""
Deployment configuration.

Values are resolved once at process start, in increasing priority:
built-in defaults (Kadena testnet04, chain 0), ~/.pactship/.env and the
process environment, then explicit overrides (CLI options).  The result
is an immutable DeployConfig passed into the workflow.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

from .errors import ValidationError
from .pneuma.client import DEFAULT_API_HOST, DEFAULT_API_VERSION, DEFAULT_TIMEOUT, endpoint_url
from .pneuma.command import Capability, PublicMeta
from .sigil.backends import DEFAULT_CHAINWEAVER_URL
from .sigil.keys import PACTSHIP_ENV, account_for

GAS_CAPABILITY = "coin.GAS"

# ---- Defaults (Kadena testnet04) ----
# Written into ~/.pactship/.env by `pactship keygen` so users can see and
# edit them.  Only PACT_PUBLIC_KEY has no default.
DEFAULTS: dict[str, str] = {
    "PACT_NETWORK_ID": "testnet04",
    "PACT_CHAIN_ID": "0",
    "PACT_API_HOST": DEFAULT_API_HOST,
    "PACT_API_VERSION": DEFAULT_API_VERSION,
    "PACT_CONTRACT_PATH": "../pact/name.pact",
    "PACT_TTL": "28000",
    "PACT_GAS_LIMIT": "100000",
    "PACT_GAS_PRICE": "0.000001",
    # Must match the keyset name the contract reads with (read-keyset ...).
    "PACT_KEYSET_NAME": "doamin-admin-gov-keyset",
    "PACT_UPGRADE": "false",
    "PACT_SIGNER": "chainweaver",
    "CHAINWEAVER_URL": DEFAULT_CHAINWEAVER_URL,
}

SIGNERS = ("chainweaver", "local")

# config field -> environment variable
_ENV_FIELDS: dict[str, str] = {
    "network_id": "PACT_NETWORK_ID",
    "chain_id": "PACT_CHAIN_ID",
    "api_host": "PACT_API_HOST",
    "api_version": "PACT_API_VERSION",
    "contract_path": "PACT_CONTRACT_PATH",
    "sender": "PACT_ACCOUNT",
    "public_key": "PACT_PUBLIC_KEY",
    "ttl": "PACT_TTL",
    "gas_limit": "PACT_GAS_LIMIT",
    "gas_price": "PACT_GAS_PRICE",
    "keyset_name": "PACT_KEYSET_NAME",
    "upgrade": "PACT_UPGRADE",
    "signer": "PACT_SIGNER",
    "chainweaver_url": "CHAINWEAVER_URL",
}


@dataclass(frozen=True)
class DeployConfig:
    """Everything one deployment needs to know, fixed for the process lifetime."""
    public_key: str
    sender: str
    network_id: str = "testnet04"
    chain_id: str = "0"
    api_host: str = DEFAULT_API_HOST
    api_version: str = DEFAULT_API_VERSION
    contract_path: Path = Path("../pact/name.pact")
    ttl: int = 28000
    gas_limit: int = 100000
    gas_price: float = 0.000001
    keyset_name: str = "doamin-admin-gov-keyset"
    upgrade: bool = False
    signer: str = "chainweaver"
    chainweaver_url: str = DEFAULT_CHAINWEAVER_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def endpoint_url(self) -> str:
        return endpoint_url(self.network_id, self.chain_id, self.api_host, self.api_version)

    def meta(self) -> PublicMeta:
        return PublicMeta(
            ttl=self.ttl,
            gas_limit=self.gas_limit,
            gas_price=self.gas_price,
            chain_id=self.chain_id,
            sender=self.sender,
        )

    def capabilities(self) -> list[Capability]:
        return [Capability(GAS_CAPABILITY, self.public_key)]

    def data_payload(self) -> dict[str, Any]:
        return {self.keyset_name: [self.public_key], "upgrade": self.upgrade}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


_PARSERS: dict[str, Callable[[str], Any]] = {
    "ttl": int,
    "gas_limit": int,
    "gas_price": float,
    "upgrade": _parse_bool,
    "contract_path": Path,
}


def _resolve_env(env_path: Optional[Path]) -> dict[str, Any]:
    """Raw string values from defaults, the .env file and the environment."""
    env_path = env_path or PACTSHIP_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    raw: dict[str, Any] = {}
    for name, env_var in _ENV_FIELDS.items():
        value = os.environ.get(env_var, DEFAULTS.get(env_var))
        if value is not None and value != "":
            raw[name] = value
    return raw


def load_config(env_path: Optional[Path] = None, **overrides: Any) -> DeployConfig:
    """
    Resolve the deployment configuration.

    Args:
        env_path: .env file to load (default: ~/.pactship/.env)
        **overrides: DeployConfig field values; ``None`` means "not given"

    Returns:
        Immutable DeployConfig

    Raises:
        ValidationError: If a value cannot be parsed or the public key is missing
    """
    raw = _resolve_env(env_path)

    errors: list[str] = []
    values: dict[str, Any] = {}
    for name, value in raw.items():
        parser = _PARSERS.get(name)
        try:
            values[name] = parser(value) if parser else value
        except ValueError as exc:
            errors.append(f"{_ENV_FIELDS[name]}: {exc}")

    for name, value in overrides.items():
        if value is not None:
            values[name] = value

    if not values.get("public_key"):
        errors.append(
            "PACT_PUBLIC_KEY: required (run 'pactship keygen' or pass --public-key)"
        )
    if values.get("signer", "chainweaver") not in SIGNERS:
        errors.append(f"PACT_SIGNER: must be one of {', '.join(SIGNERS)}")
    if errors:
        raise ValidationError("Invalid configuration.", errors=errors)

    values.setdefault("sender", account_for(values["public_key"]))
    return DeployConfig(**values)


def load_endpoint(
    env_path: Optional[Path] = None,
    network_id: Optional[str] = None,
    chain_id: Optional[str] = None,
    api_host: Optional[str] = None,
    api_version: Optional[str] = None,
) -> str:
    """Resolve the Pact API endpoint alone; no key is needed to read results."""
    raw = _resolve_env(env_path)
    return endpoint_url(
        network_id or raw.get("network_id", DEFAULTS["PACT_NETWORK_ID"]),
        chain_id or raw.get("chain_id", DEFAULTS["PACT_CHAIN_ID"]),
        api_host or raw.get("api_host", DEFAULTS["PACT_API_HOST"]),
        api_version or raw.get("api_version", DEFAULTS["PACT_API_VERSION"]),
    )
