"""Tests for signed header assembly."""

from bpjs_relay.common.hmac import generate_signature
from bpjs_relay.relay.headers import Credentials, SignedRequest, build_headers, sign_request


def test_header_set_is_exact(fixed_clock):
    """Header names, casing and values match the VClaim contract."""
    creds = Credentials(consumer_id="12345", user_key="user-key", secret_key="secret")

    headers = build_headers(creds, fixed_clock)

    assert headers == {
        "Content-Type": "application/json; charset=utf-8",
        "X-cons-id": "12345",
        "X-timestamp": "1700000000",
        "X-signature": "Uye0GEjt0faa3D1kCmw9kd0ZvL0X4qnPR5iQ28wUado=",
        "user_key": "user-key",
    }


def test_signature_covers_consumer_id_only(fixed_clock):
    """User key does not influence the signature."""
    a = build_headers(Credentials("12345", "key-a", "secret"), fixed_clock)
    b = build_headers(Credentials("12345", "key-b", "secret"), fixed_clock)

    assert a["X-signature"] == b["X-signature"]
    assert a["X-signature"] == generate_signature("12345", "1700000000", "secret")


def test_secret_never_in_headers(fixed_clock):
    """Secret key is not sent upstream."""
    headers = build_headers(Credentials("12345", "user-key", "top-secret"), fixed_clock)
    assert "top-secret" not in headers.values()


def test_credentials_repr_masks_secret():
    """Secret key is left out of the dataclass repr."""
    assert "top-secret" not in repr(Credentials("12345", "user-key", "top-secret"))


def test_sign_request(fixed_clock):
    """Signed request exposes timestamp and signature."""
    signed = sign_request(Credentials("12345", "u", "secret"), fixed_clock)
    assert signed == SignedRequest(
        timestamp="1700000000",
        signature="Uye0GEjt0faa3D1kCmw9kd0ZvL0X4qnPR5iQ28wUado=",
    )
