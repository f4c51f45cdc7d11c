"""Relay error taxonomy and JSON error rendering."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse


class RelayError(Exception):
    """Base error for a failed relay call."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(RelayError):
    """Client-supplied input is incomplete; retrying will not help."""

    status_code = 400

    def __init__(self, message: str, missing: list[str]):
        super().__init__(message, details={"missing": list(missing)})
        self.missing = list(missing)


class UpstreamError(RelayError):
    """The VClaim API answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, details: Any = None):
        super().__init__(
            f"BPJS API Error: {status_code} {reason}".rstrip(),
            status_code=status_code,
            details=details,
        )
        self.reason = reason


class TransportError(RelayError):
    """Network, DNS or TLS failure before any upstream status was received."""

    status_code = 500


def error_response(
    message: str,
    status_code: int,
    details: Any = None,
) -> JSONResponse:
    payload: dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return JSONResponse(payload, status_code=status_code)
