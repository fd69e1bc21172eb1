"""
Pact Cryptographic Primitives.

Provides:
- Blake2b-256 command hashing (the request key of a Pact command)
- Ed25519 signing of the raw hash bytes
- Signature verification against a hex public key
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from ..utils import base64url_decode, base64url_encode, blake2b_256


class CryptoError(ValueError):
    pass


class SignatureError(CryptoError):
    pass


def hash_command(cmd: str) -> str:
    """Compute the Pact hash of a serialized command (base64url, unpadded)."""
    return base64url_encode(blake2b_256(cmd.encode("utf-8")))


def private_key_from_hex(secret_key_hex: str) -> ed25519.Ed25519PrivateKey:
    try:
        raw = bytes.fromhex(secret_key_hex)
    except (ValueError, TypeError) as exc:
        raise CryptoError("Secret key must be hex encoded.") from exc
    if len(raw) != 32:
        raise CryptoError("Secret key must be 32 bytes (64 hex characters).")
    return ed25519.Ed25519PrivateKey.from_private_bytes(raw)


def sign_hash(command_hash: str, secret_key_hex: str) -> str:
    """Sign a Pact command hash with an Ed25519 secret key.

    Args:
        command_hash: base64url hash as returned by :func:`hash_command`.
        secret_key_hex: 64-character hex Ed25519 seed.

    Returns:
        128-character hex signature.
    """
    private_key = private_key_from_hex(secret_key_hex)
    return private_key.sign(base64url_decode(command_hash)).hex()


def verify_signature(command_hash: str, sig_hex: str, public_key_hex: str) -> None:
    """Verify a hex signature over a command hash.

    Raises:
        SignatureError: If the key, the signature or the verification is invalid.
    """
    try:
        public_key = ed25519.Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        sig_bytes = bytes.fromhex(sig_hex)
    except (ValueError, TypeError) as exc:
        raise SignatureError("Malformed public key or signature.") from exc
    try:
        public_key.verify(sig_bytes, base64url_decode(command_hash))
    except InvalidSignature as exc:
        raise SignatureError(f"Invalid signature for {public_key_hex[:8]}…") from exc
