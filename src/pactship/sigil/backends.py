"""
Signing Backends - Turn an unsigned Pact command into a signed one.

Two backends:
- ChainweaverBackend: asks the Chainweaver wallet over its local quicksign
  API; blocks until the user approves or rejects in the wallet.
- LocalKeyBackend: signs with an Ed25519 key from ~/.pactship/.env.

``sign_command`` is the single entry point the deploy workflow uses.  It
never retries: a rejected or incomplete signature is a SigningError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from ..errors import SigningError
from ..pneuma.command import SignedCommand, UnsignedCommand
from ..utils import short_key
from .crypto import CryptoError, SignatureError, hash_command, sign_hash, verify_signature
from .keys import public_key_for

logger = logging.getLogger(__name__)

DEFAULT_CHAINWEAVER_URL = "http://127.0.0.1:9467"
# The user confirms in the wallet UI; leave them time.
DEFAULT_SIGNING_TIMEOUT = 300.0


class SigningBackend(Protocol):
    def sign(self, command: UnsignedCommand) -> list[SignedCommand]:
        ...


class ChainweaverBackend:
    """Sign through Chainweaver's ``/v1/quicksign`` endpoint."""

    def __init__(
        self,
        url: str = DEFAULT_CHAINWEAVER_URL,
        timeout: float = DEFAULT_SIGNING_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self.url}/v1/quicksign"
        if self._client is not None:
            return self._client.post(url, json=payload)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, json=payload)

    def sign(self, command: UnsignedCommand) -> list[SignedCommand]:
        payload = {
            "cmdSigDatas": [
                {
                    "cmd": command.cmd,
                    "sigs": [{"pubKey": key, "sig": None} for key in command.signer_keys],
                }
            ]
        }
        logger.info("Waiting for Chainweaver to sign %s", command.hash)
        try:
            response = self._post(payload)
        except httpx.TimeoutException as exc:
            raise SigningError("Timed out waiting for Chainweaver to sign.") from exc
        except httpx.HTTPError as exc:
            raise SigningError(f"Cannot reach Chainweaver at {self.url}: {exc}") from exc

        if response.is_error:
            raise SigningError(
                f"Chainweaver rejected the request (HTTP {response.status_code}): "
                f"{response.text.strip()}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise SigningError("Chainweaver returned a non-JSON response.") from exc

        responses = body.get("responses") if isinstance(body, dict) else None
        if not isinstance(responses, list):
            raise SigningError("Chainweaver response has no 'responses' list.")

        return [self._to_signed(command, item) for item in responses]

    @staticmethod
    def _to_signed(command: UnsignedCommand, item: Any) -> SignedCommand:
        if not isinstance(item, dict):
            raise SigningError("Malformed Chainweaver response entry.")
        outcome = item.get("outcome") or {}
        result = outcome.get("result")
        if result != "success":
            reason = outcome.get("msg") or result or "unknown outcome"
            raise SigningError(f"Chainweaver did not sign the command: {reason}")

        sig_data = item.get("commandSigData") or {}
        cmd = sig_data.get("cmd")
        if not isinstance(cmd, str):
            raise SigningError("Chainweaver response is missing the signed cmd.")

        by_key = {
            entry.get("pubKey"): entry.get("sig")
            for entry in sig_data.get("sigs", [])
            if isinstance(entry, dict)
        }
        if any(sig is not None and not isinstance(sig, str) for sig in by_key.values()):
            raise SigningError("Chainweaver returned a malformed signature.")
        return SignedCommand(
            command=command,
            cmd=cmd,
            hash=hash_command(cmd),
            sigs=tuple(by_key.get(key) for key in command.signer_keys),
        )


class LocalKeyBackend:
    """Sign with a locally held Ed25519 secret key."""

    def __init__(self, secret_key_hex: str) -> None:
        try:
            self.public_key = public_key_for(secret_key_hex)
        except CryptoError as exc:
            raise SigningError(f"Invalid local secret key: {exc}") from exc
        self._secret_key_hex = secret_key_hex

    def sign(self, command: UnsignedCommand) -> list[SignedCommand]:
        keys = command.signer_keys
        if self.public_key not in keys:
            raise SigningError(
                f"Local key {short_key(self.public_key)} is not a signer of this command."
            )
        sig = sign_hash(command.hash, self._secret_key_hex)
        sigs = tuple(sig if key == self.public_key else None for key in keys)
        return [SignedCommand(command=command, cmd=command.cmd, hash=command.hash, sigs=sigs)]


def sign_command(backend: SigningBackend, command: UnsignedCommand) -> SignedCommand:
    """
    Have ``backend`` sign ``command`` and check the result.

    Exactly one returned command must match the unsigned command's hash;
    every signer slot must be filled and every signature must verify.

    Raises:
        SigningError: If the backend fails or the result does not check out
    """
    try:
        results = backend.sign(command)
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError(f"Signing backend failed: {exc}") from exc

    if not results:
        raise SigningError("Signing backend returned no signed commands.")

    matching = [s for s in results if s.hash == command.hash and s.cmd == command.cmd]
    if len(results) > len(matching):
        logger.warning(
            "Ignoring %d signed command(s) that do not match %s",
            len(results) - len(matching),
            command.hash,
        )
    if len(matching) != 1:
        raise SigningError(
            f"Expected one signed command for {command.hash}, got {len(matching)}."
        )

    signed = matching[0]
    keys = command.signer_keys
    if not signed.is_complete:
        missing = [
            short_key(key)
            for key, sig in zip(keys, signed.sigs + (None,) * len(keys))
            if not sig
        ]
        raise SigningError(f"Missing signatures for: {', '.join(missing)}")

    for key, sig in zip(keys, signed.sigs):
        try:
            verify_signature(signed.hash, sig, key)
        except SignatureError as exc:
            raise SigningError(str(exc)) from exc

    logger.info("Command %s signed by %d key(s)", signed.hash, len(keys))
    return signed
