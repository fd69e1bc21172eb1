__all__ = [
    # Config
    "DeployConfig",
    "load_config",
    # Errors
    "DeployError",
    "ReadError",
    "ContractNotFoundError",
    "ValidationError",
    "SigningError",
    "NetworkError",
    # Loader / builder
    "load_contract",
    "PublicMeta",
    "Capability",
    "UnsignedCommand",
    "SignedCommand",
    "build_command",
    # Signing
    "SigningBackend",
    "ChainweaverBackend",
    "LocalKeyBackend",
    "sign_command",
    "generate_keypair",
    "hash_command",
    # Submitting
    "endpoint_url",
    "send",
    "local",
    "listen",
    # Workflow
    "DeployResult",
    "run_deploy",
]

from .errors import (
    ContractNotFoundError,
    DeployError,
    NetworkError,
    ReadError,
    SigningError,
    ValidationError,
)
from .pneuma.source import load_contract
from .pneuma.command import Capability, PublicMeta, SignedCommand, UnsignedCommand, build_command
from .pneuma.client import endpoint_url, listen, local, send
from .sigil.crypto import hash_command
from .sigil.keys import generate_keypair
from .sigil.backends import ChainweaverBackend, LocalKeyBackend, SigningBackend, sign_command
from .config import DeployConfig, load_config
from .theurgy.deploy import DeployResult, run_deploy
