"""HMAC signing utilities for the VClaim consumer signature."""

from __future__ import annotations

import base64
import hashlib
import hmac
import math
import time
from collections.abc import Callable

Clock = Callable[[], float]


def build_message(data: str, timestamp: str) -> bytes:
    """Build the signed payload ``{data}&{timestamp}``."""
    return f"{data}&{timestamp}".encode("utf-8")


def generate_signature(data: str, timestamp: str, secret_key: str) -> str:
    """Create a base64-encoded HMAC-SHA256 signature."""
    digest = hmac.new(
        secret_key.encode("utf-8"),
        build_message(data, timestamp),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(data: str, timestamp: str, secret_key: str, signature: str) -> bool:
    """Verify a signature in constant time."""
    expected = generate_signature(data, timestamp, secret_key)
    return hmac.compare_digest(expected, signature)


def generate_timestamp(clock: Clock = time.time) -> str:
    """Whole seconds since the Unix epoch as a decimal string."""
    return str(math.floor(clock()))
