from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest

from pactship.config import DeployConfig
from pactship.sigil.keys import public_key_for

SECRET_KEY = "9f" * 32
CONTRACT_SOURCE = "(module test GOVERNANCE\n  (defcap GOVERNANCE () (enforce-keyset \"admin\")))\n"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path):
    """Keep tests away from the real ~/.pactship and PACT_* variables."""
    home = tmp_path / ".pactship"
    env_path = home / ".env"
    clean = {
        k: v
        for k, v in os.environ.items()
        if not k.startswith("PACT_") and k != "CHAINWEAVER_URL"
    }
    with patch.dict(os.environ, clean, clear=True), \
            patch("pactship.sigil.keys.PACTSHIP_DIR", home), \
            patch("pactship.sigil.keys.PACTSHIP_ENV", env_path), \
            patch("pactship.config.PACTSHIP_ENV", env_path), \
            patch("pactship.cli.PACTSHIP_ENV", env_path), \
            patch("pactship.theurgy.keygen.PACTSHIP_DIR", home), \
            patch("pactship.theurgy.keygen.PACTSHIP_ENV", env_path):
        yield env_path


@pytest.fixture()
def secret_key() -> str:
    return SECRET_KEY


@pytest.fixture()
def public_key(secret_key: str) -> str:
    return public_key_for(secret_key)


@pytest.fixture()
def contract_file(tmp_path: Path) -> Path:
    path = tmp_path / "pact" / "name.pact"
    path.parent.mkdir(parents=True)
    path.write_text(CONTRACT_SOURCE, encoding="utf-8")
    return path


@pytest.fixture()
def config(public_key: str, contract_file: Path) -> DeployConfig:
    return DeployConfig(
        public_key=public_key,
        sender=f"k:{public_key}",
        contract_path=contract_file,
    )


class RecordingTransport:
    """httpx MockTransport wrapper that records every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def bodies(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests]


def pact_api_handler(request: httpx.Request) -> httpx.Response:
    """Minimal stand-in for a Chainweb node's Pact API."""
    body = json.loads(request.content)
    path = request.url.path
    if path.endswith("/api/v1/send"):
        return httpx.Response(200, json={"requestKeys": [cmd["hash"] for cmd in body["cmds"]]})
    if path.endswith("/api/v1/local"):
        return httpx.Response(
            200,
            json={"reqKey": body["hash"], "result": {"status": "success", "data": "Loaded module test"}},
        )
    if path.endswith("/api/v1/listen"):
        return httpx.Response(
            200,
            json={"reqKey": body["listen"], "result": {"status": "success", "data": "Loaded module test"}},
        )
    return httpx.Response(404, text="not found")


@pytest.fixture()
def pact_api() -> RecordingTransport:
    return RecordingTransport(pact_api_handler)
