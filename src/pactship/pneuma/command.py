"""
Command Builder - Assemble unsigned Pact ``exec`` commands.

Pure data assembly: no I/O.  The command is serialized with RFC 8785
canonical JSON so the hash is deterministic and numbers print the way
Chainweb clients print them (``gasPrice`` 0.000001 stays ``0.000001``).
"""

from __future__ import annotations

import math
import numbers
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Optional

import rfc8785

from ..errors import ValidationError
from ..sigil.crypto import hash_command
from ..spec.schemas import PACT_COMMAND_SCHEMA, SchemaRegistry
from ..utils import is_hex_key, utc_now_rfc3339


@dataclass(frozen=True)
class PublicMeta:
    """
    Public metadata of a Pact command.

    Attributes:
        ttl: Time-to-live in seconds
        gas_limit: Maximum gas units the command may consume
        gas_price: Price per gas unit in KDA
        chain_id: Target chain within the network (e.g. "0")
        sender: Account paying for gas (e.g. "k:<pubkey>")
    """
    ttl: int
    gas_limit: int
    gas_price: float
    chain_id: str
    sender: str

    def to_dict(self, creation_time: int) -> dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "creationTime": creation_time,
            "ttl": self.ttl,
            "gasLimit": self.gas_limit,
            "gasPrice": self.gas_price,
            "sender": self.sender,
        }


@dataclass(frozen=True)
class Capability:
    """A capability granted to the holder of ``public_key``."""
    name: str
    public_key: str
    args: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "args": list(self.args)}


@dataclass(frozen=True)
class UnsignedCommand:
    code: str
    data: dict[str, Any]
    meta: PublicMeta
    network_id: str
    capabilities: tuple[Capability, ...]
    nonce: str
    creation_time: int

    def signers(self) -> list[dict[str, Any]]:
        """Group capability grants by public key, in first-seen order."""
        grouped: dict[str, list[dict[str, Any]]] = {}
        for cap in self.capabilities:
            grouped.setdefault(cap.public_key, []).append(cap.to_dict())
        return [{"pubKey": key, "clist": clist} for key, clist in grouped.items()]

    @property
    def signer_keys(self) -> list[str]:
        return [signer["pubKey"] for signer in self.signers()]

    def to_payload(self) -> dict[str, Any]:
        return {
            "networkId": self.network_id,
            "payload": {"exec": {"code": self.code, "data": dict(self.data)}},
            "signers": self.signers(),
            "meta": self.meta.to_dict(self.creation_time),
            "nonce": self.nonce,
        }

    @cached_property
    def cmd(self) -> str:
        return rfc8785.dumps(self.to_payload()).decode("utf-8")

    @cached_property
    def hash(self) -> str:
        return hash_command(self.cmd)


@dataclass(frozen=True)
class SignedCommand:
    """An unsigned command plus one signature slot per signer."""
    command: UnsignedCommand
    cmd: str
    hash: str
    sigs: tuple[Optional[str], ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return len(self.sigs) == len(self.command.signer_keys) and all(self.sigs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "sigs": [{"sig": sig} for sig in self.sigs],
            "cmd": self.cmd,
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _meta_errors(meta: Any) -> list[str]:
    if not isinstance(meta, PublicMeta):
        return ["meta: expected PublicMeta"]
    errors: list[str] = []
    for name in ("ttl", "gas_limit"):
        value = getattr(meta, name)
        if value is None:
            errors.append(f"meta.{name}: required")
        elif not _is_int(value) or value <= 0:
            errors.append(f"meta.{name}: must be a positive integer")
    if meta.gas_price is None:
        errors.append("meta.gas_price: required")
    elif (
        isinstance(meta.gas_price, bool)
        or not isinstance(meta.gas_price, numbers.Real)
        or not math.isfinite(meta.gas_price)
        or meta.gas_price <= 0
    ):
        errors.append("meta.gas_price: must be a positive finite number")
    for name in ("chain_id", "sender"):
        value = getattr(meta, name)
        if value is None:
            errors.append(f"meta.{name}: required")
        elif not isinstance(value, str) or not value:
            errors.append(f"meta.{name}: must be a non-empty string")
    return errors


def _json_errors(label: str, value: Any) -> list[str]:
    try:
        rfc8785.dumps(value)
    except (rfc8785.CanonicalizationError, TypeError, ValueError) as exc:
        return [f"{label}: not JSON-compatible ({exc})"]
    return []


def _capability_errors(capabilities: Any) -> list[str]:
    if not isinstance(capabilities, (list, tuple)):
        return ["capabilities: expected a list of Capability"]
    errors: list[str] = []
    for i, cap in enumerate(capabilities):
        if not isinstance(cap, Capability):
            errors.append(f"capabilities[{i}]: expected Capability")
            continue
        if not isinstance(cap.name, str) or not cap.name:
            errors.append(f"capabilities[{i}].name: must be a non-empty string")
        if not is_hex_key(cap.public_key):
            errors.append(f"capabilities[{i}].public_key: must be 64 hex characters")
        if not isinstance(cap.args, (list, tuple)):
            errors.append(f"capabilities[{i}].args: expected a tuple")
        else:
            errors.extend(_json_errors(f"capabilities[{i}].args", list(cap.args)))
    return errors


def _data_errors(data: Any) -> list[str]:
    if not isinstance(data, Mapping):
        return ["data: expected a mapping"]
    errors = [f"data: key {key!r} is not a string" for key in data if not isinstance(key, str)]
    if errors:
        return errors
    return _json_errors("data", dict(data))


def build_command(
    code: str,
    meta: PublicMeta,
    network_id: str,
    capabilities: list[Capability],
    data: Mapping[str, Any],
    nonce: Optional[str] = None,
    creation_time: Optional[int] = None,
    registry: Optional[SchemaRegistry] = None,
) -> UnsignedCommand:
    """
    Build an unsigned Pact exec command.

    Args:
        code: Pact source to execute (the contract module)
        meta: Public metadata; every field is required
        network_id: Network identifier (e.g. "testnet04")
        capabilities: Capability grants scoping the signatures
        data: JSON-compatible data payload (keysets, flags)
        nonce: Command nonce (default: current UTC timestamp)
        creation_time: UNIX seconds (default: now)
        registry: Schema registry for the final structural check

    Returns:
        UnsignedCommand carrying exactly the given inputs

    Raises:
        ValidationError: If any input is missing or malformed
    """
    errors: list[str] = []
    if not isinstance(code, str) or not code:
        errors.append("code: must be a non-empty string")
    if not isinstance(network_id, str) or not network_id:
        errors.append("network_id: must be a non-empty string")
    errors.extend(_meta_errors(meta))
    errors.extend(_capability_errors(capabilities))
    errors.extend(_data_errors(data))
    if creation_time is not None and (not _is_int(creation_time) or creation_time < 0):
        errors.append("creation_time: must be a non-negative integer")
    if errors:
        raise ValidationError("Invalid command input.", errors=errors)

    command = UnsignedCommand(
        code=code,
        data=dict(data),
        meta=meta,
        network_id=network_id,
        capabilities=tuple(capabilities),
        nonce=nonce if nonce is not None else utc_now_rfc3339(),
        creation_time=creation_time if creation_time is not None else int(time.time()),
    )

    registry = registry or SchemaRegistry.default()
    registry.validate_instance(command.to_payload(), PACT_COMMAND_SCHEMA)
    # Serialize now so canonicalization failures surface here, not at signing.
    try:
        command.cmd
    except (rfc8785.CanonicalizationError, TypeError, ValueError) as exc:
        raise ValidationError("Command is not serializable.", errors=[str(exc)]) from exc
    return command
