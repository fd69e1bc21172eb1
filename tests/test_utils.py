"""Unit tests for utils.py functions."""

from __future__ import annotations

import re

from pactship.utils import (
    base64url_decode,
    base64url_encode,
    blake2b_256,
    is_hex_key,
    short_key,
    utc_now_rfc3339,
)


class TestBlake2b256:
    """Tests for blake2b_256 function."""

    def test_digest_size(self) -> None:
        assert len(blake2b_256(b"")) == 32

    def test_empty_bytes(self) -> None:
        result = blake2b_256(b"").hex()
        assert result == "0e5751c026e543b2e8ab2eb06099daa1d1e5df47778f7787faab45cdf12fe3a8"

    def test_deterministic(self) -> None:
        assert blake2b_256(b"pact") == blake2b_256(b"pact")
        assert blake2b_256(b"pact") != blake2b_256(b"Pact")


class TestBase64Url:
    """Tests for base64url_encode / base64url_decode."""

    def test_simple_input(self) -> None:
        assert base64url_encode(b"hello") == "aGVsbG8"
        assert base64url_decode("aGVsbG8") == b"hello"

    def test_no_padding(self) -> None:
        assert "=" not in base64url_encode(b"a")

    def test_url_safe_characters(self) -> None:
        result = base64url_encode(bytes([0xFB, 0xFF, 0xFE]))
        assert "+" not in result
        assert "/" not in result

    def test_handles_missing_padding(self) -> None:
        assert base64url_decode("YQ") == b"a"

    def test_hash_length_encoding(self) -> None:
        # A 32-byte hash always encodes to 43 characters without padding
        assert len(base64url_encode(bytes(32))) == 43


class TestUtcNowRfc3339:
    """Tests for utc_now_rfc3339 function."""

    def test_format_ends_with_z(self) -> None:
        assert utc_now_rfc3339().endswith("Z")

    def test_valid_rfc3339_format(self) -> None:
        result = utc_now_rfc3339()
        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"
        assert re.match(pattern, result), f"Invalid format: {result}"


class TestIsHexKey:
    def test_accepts_64_hex(self) -> None:
        assert is_hex_key("ab" * 32)

    def test_rejects_wrong_length(self) -> None:
        assert not is_hex_key("ab" * 31)

    def test_rejects_non_hex(self) -> None:
        assert not is_hex_key("zz" * 32)

    def test_rejects_non_string(self) -> None:
        assert not is_hex_key(None)
        assert not is_hex_key(b"ab" * 32)


class TestShortKey:
    def test_truncates(self) -> None:
        key = "0123456789abcdef" * 4
        assert short_key(key) == "012345…cdef"

    def test_short_values_unchanged(self) -> None:
        assert short_key("abc") == "abc"
