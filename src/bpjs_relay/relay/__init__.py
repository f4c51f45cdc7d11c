"""VClaim relay: signing, endpoint resolution and forwarding."""

from bpjs_relay.relay.endpoints import Operation, resolve_path, resolve_url
from bpjs_relay.relay.handler import RelayFailure, RelayHandler, RelayRequest, RelaySuccess
from bpjs_relay.relay.headers import Credentials, build_headers

__all__ = [
    "Credentials",
    "Operation",
    "RelayFailure",
    "RelayHandler",
    "RelayRequest",
    "RelaySuccess",
    "build_headers",
    "resolve_path",
    "resolve_url",
]
