"""Tests for the Pact command builder."""

from __future__ import annotations

import json

import pytest

from pactship.errors import ValidationError
from pactship.pneuma.command import (
    Capability,
    PublicMeta,
    SignedCommand,
    UnsignedCommand,
    build_command,
)
from pactship.sigil.crypto import hash_command

PUB = "ab" * 32
OTHER = "cd" * 32
CODE = "(module test GOVERNANCE ...)"


def _meta(**changes) -> PublicMeta:
    fields = dict(ttl=28000, gas_limit=100000, gas_price=0.000001, chain_id="0", sender=f"k:{PUB}")
    fields.update(changes)
    return PublicMeta(**fields)


def _build(**changes) -> UnsignedCommand:
    args = dict(
        code=CODE,
        meta=_meta(),
        network_id="testnet04",
        capabilities=[Capability("coin.GAS", PUB)],
        data={"keyset": [PUB], "upgrade": False},
        nonce="2026-10-19T00:00:00Z",
        creation_time=1_700_000_000,
    )
    args.update(changes)
    return build_command(**args)


class TestBuildCommand:
    def test_fields_equal_inputs(self) -> None:
        meta = _meta()
        caps = [Capability("coin.GAS", PUB)]
        data = {"keyset": [PUB], "upgrade": False}
        command = build_command(CODE, meta, "testnet04", caps, data, nonce="n", creation_time=1)

        assert command.code == CODE
        assert command.meta == meta
        assert command.network_id == "testnet04"
        assert command.capabilities == tuple(caps)
        assert command.data == data
        assert command.nonce == "n"
        assert command.creation_time == 1

    def test_data_is_copied(self) -> None:
        data = {"upgrade": False}
        command = _build(data=data)
        data["upgrade"] = True
        assert command.data == {"upgrade": False}

    def test_payload_shape(self) -> None:
        payload = _build().to_payload()
        assert payload == {
            "networkId": "testnet04",
            "payload": {"exec": {"code": CODE, "data": {"keyset": [PUB], "upgrade": False}}},
            "signers": [{"pubKey": PUB, "clist": [{"name": "coin.GAS", "args": []}]}],
            "meta": {
                "chainId": "0",
                "creationTime": 1_700_000_000,
                "ttl": 28000,
                "gasLimit": 100000,
                "gasPrice": 0.000001,
                "sender": f"k:{PUB}",
            },
            "nonce": "2026-10-19T00:00:00Z",
        }

    def test_cmd_is_canonical_json(self) -> None:
        command = _build()
        assert json.loads(command.cmd) == command.to_payload()
        # Keys sorted, no whitespace, gas price in plain decimal notation
        assert command.cmd.startswith('{"meta":{"chainId":"0"')
        assert '"gasPrice":0.000001' in command.cmd
        assert ": " not in command.cmd

    def test_hash_is_blake2b_of_cmd(self) -> None:
        command = _build()
        assert command.hash == hash_command(command.cmd)
        assert len(command.hash) == 43

    def test_hash_changes_with_code(self) -> None:
        assert _build().hash != _build(code=CODE + " ").hash

    def test_defaults_nonce_and_creation_time(self) -> None:
        command = _build(nonce=None, creation_time=None)
        assert command.nonce.endswith("Z")
        assert command.creation_time > 1_600_000_000

    def test_capabilities_grouped_by_key(self) -> None:
        caps = [
            Capability("coin.GAS", PUB),
            Capability("coin.TRANSFER", OTHER, (f"k:{OTHER}", f"k:{PUB}", 1.0)),
            Capability("free.test.GOV", PUB),
        ]
        command = _build(capabilities=caps)
        assert command.signer_keys == [PUB, OTHER]
        assert command.signers()[0]["clist"] == [
            {"name": "coin.GAS", "args": []},
            {"name": "free.test.GOV", "args": []},
        ]
        assert command.signers()[1]["clist"][0]["args"] == [f"k:{OTHER}", f"k:{PUB}", 1.0]

    def test_no_capabilities_means_no_signers(self) -> None:
        command = _build(capabilities=[])
        assert command.signers() == []


class TestBuildCommandValidation:
    @pytest.mark.parametrize("field", ["ttl", "gas_limit", "gas_price", "chain_id", "sender"])
    def test_missing_meta_field(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(meta=_meta(**{field: None}))
        assert any(f"meta.{field}" in e for e in exc_info.value.errors)

    def test_meta_must_be_public_meta(self) -> None:
        with pytest.raises(ValidationError):
            _build(meta={"ttl": 28000})

    def test_negative_gas_limit(self) -> None:
        with pytest.raises(ValidationError):
            _build(meta=_meta(gas_limit=-1))

    def test_bool_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _build(meta=_meta(ttl=True))

    def test_string_gas_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _build(meta=_meta(gas_price="0.000001"))

    def test_empty_code(self) -> None:
        with pytest.raises(ValidationError):
            _build(code="")

    def test_empty_network_id(self) -> None:
        with pytest.raises(ValidationError):
            _build(network_id="")

    def test_bad_public_key(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(capabilities=[Capability("coin.GAS", "not-a-key")])
        assert "capabilities[0].public_key" in str(exc_info.value)

    def test_unqualified_capability_name_fails_schema(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(capabilities=[Capability("GAS", PUB)])
        assert any("signers/0/clist/0/name" in e for e in exc_info.value.errors)

    def test_non_numeric_chain_id_fails_schema(self) -> None:
        with pytest.raises(ValidationError):
            _build(meta=_meta(chain_id="zero"))

    def test_data_must_be_json_compatible(self) -> None:
        with pytest.raises(ValidationError):
            _build(data={"when": object()})

    def test_data_keys_must_be_strings(self) -> None:
        with pytest.raises(ValidationError):
            _build(data={1: "x"})

    @pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_gas_price_rejected(self, price: float) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(meta=_meta(gas_price=price))
        assert any("meta.gas_price" in e for e in exc_info.value.errors)

    def test_capability_args_must_be_json_compatible(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(capabilities=[Capability("coin.GAS", PUB, (object(),))])
        assert any("capabilities[0].args" in e for e in exc_info.value.errors)

    def test_capabilities_must_be_a_list(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(capabilities=None)
        assert exc_info.value.errors == ["capabilities: expected a list of Capability"]

    def test_collects_all_errors(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build(code="", meta=_meta(ttl=None, sender=""))
        assert len(exc_info.value.errors) == 3
        assert exc_info.value.exit_code == 3


class TestSignedCommand:
    def test_to_dict(self) -> None:
        command = _build()
        signed = SignedCommand(command=command, cmd=command.cmd, hash=command.hash, sigs=("aa",))
        assert signed.to_dict() == {"hash": command.hash, "sigs": [{"sig": "aa"}], "cmd": command.cmd}

    def test_is_complete(self) -> None:
        command = _build()
        assert SignedCommand(command, command.cmd, command.hash, ("aa",)).is_complete
        assert not SignedCommand(command, command.cmd, command.hash, (None,)).is_complete
        assert not SignedCommand(command, command.cmd, command.hash, ()).is_complete
