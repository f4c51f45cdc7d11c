"""Common utilities for bpjs-relay."""

from bpjs_relay.common.hmac import generate_signature, generate_timestamp
from bpjs_relay.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "generate_signature",
    "generate_timestamp",
]
