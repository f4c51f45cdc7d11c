"""Consumer credentials and signed header assembly."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from bpjs_relay.common.hmac import Clock, generate_signature, generate_timestamp

CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class Credentials:
    """Credential triple issued by BPJS to a consumer."""

    consumer_id: str
    user_key: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class SignedRequest:
    """Timestamp and signature valid for a single upstream call."""

    timestamp: str
    signature: str


def sign_request(credentials: Credentials, clock: Clock = time.time) -> SignedRequest:
    """Sign the consumer id at the current clock reading."""
    timestamp = generate_timestamp(clock)
    signature = generate_signature(credentials.consumer_id, timestamp, credentials.secret_key)
    return SignedRequest(timestamp=timestamp, signature=signature)


def build_headers(credentials: Credentials, clock: Clock = time.time) -> dict[str, str]:
    """
    Build the header set the VClaim API expects on every call.

    Header names and casing are fixed by the upstream contract.
    """
    signed = sign_request(credentials, clock)
    return {
        "Content-Type": CONTENT_TYPE,
        "X-cons-id": credentials.consumer_id,
        "X-timestamp": signed.timestamp,
        "X-signature": signed.signature,
        "user_key": credentials.user_key,
    }
