"""Tests for signature and timestamp generation."""

import base64

import pytest

from bpjs_relay.common.hmac import (
    build_message,
    generate_signature,
    generate_timestamp,
    verify_signature,
)

GOLDEN_SIGNATURE = "Uye0GEjt0faa3D1kCmw9kd0ZvL0X4qnPR5iQ28wUado="


class TestGenerateSignature:
    """Tests for the consumer signature."""

    def test_golden_value(self):
        """Known inputs produce the pinned signature."""
        assert generate_signature("12345", "1700000000", "secret") == GOLDEN_SIGNATURE

    def test_deterministic(self):
        """Same inputs always produce the same signature."""
        first = generate_signature("12345", "1700000000", "secret")
        for _ in range(5):
            assert generate_signature("12345", "1700000000", "secret") == first

    @pytest.mark.parametrize(
        ("data", "timestamp", "secret_key"),
        [
            ("12346", "1700000000", "secret"),
            ("12345", "1700000001", "secret"),
            ("12345", "1700000000", "secreT"),
        ],
    )
    def test_sensitive_to_each_input(self, data, timestamp, secret_key):
        """Changing any single input changes the signature."""
        assert generate_signature(data, timestamp, secret_key) != GOLDEN_SIGNATURE

    def test_is_base64_sha256(self):
        """Signature decodes to a 32-byte digest."""
        raw = base64.b64decode(generate_signature("a", "b", "c"))
        assert len(raw) == 32

    def test_message_layout(self):
        """Payload is data and timestamp joined by an ampersand."""
        assert build_message("12345", "1700000000") == b"12345&1700000000"

    def test_utf8_inputs(self):
        """Non-ASCII input is signed over its UTF-8 bytes."""
        sig = generate_signature("rumah-sakit-é", "1700000000", "kunci-ü")
        assert verify_signature("rumah-sakit-é", "1700000000", "kunci-ü", sig)

    def test_verify_rejects_tampered(self):
        """Verification fails for a different timestamp."""
        assert verify_signature("12345", "1700000000", "secret", GOLDEN_SIGNATURE)
        assert not verify_signature("12345", "1700000001", "secret", GOLDEN_SIGNATURE)


class TestGenerateTimestamp:
    """Tests for the epoch timestamp."""

    def test_exact_second(self):
        """Whole-second clock reading is rendered without a fraction."""
        assert generate_timestamp(lambda: 1700000000.000) == "1700000000"

    def test_truncates_fraction(self):
        """Fractional seconds are dropped, never rounded up."""
        assert generate_timestamp(lambda: 1700000000.999) == "1700000000"

    def test_uses_wall_clock_by_default(self):
        """Default clock yields a plausible current timestamp."""
        value = generate_timestamp()
        assert value.isdigit()
        assert int(value) > 1700000000
