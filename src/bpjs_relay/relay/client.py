"""HTTP client for the VClaim REST API."""

import asyncio
import json
from typing import Any

import aiohttp

from bpjs_relay.common.errors import TransportError, UpstreamError
from bpjs_relay.common.logging import get_logger
from bpjs_relay.common.settings import Settings

logger = get_logger(__name__)


def decode_body(raw: bytes, charset: str | None) -> str:
    """Decode upstream bytes leniently, falling back to UTF-8 for unknown charsets."""
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def parse_body(text: str) -> Any:
    """Decode a response body as JSON, keeping raw text when it is not JSON."""
    try:
        return json.loads(text)
    except ValueError:
        return text


class VClaimClient:
    """
    Thin aiohttp wrapper issuing signed GET requests to VClaim.

    One request per call: no retries, no caching. The session is shared
    across calls and owned by the client.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the client.

        Args:
            settings: Application settings
        """
        self._timeout = (
            aiohttp.ClientTimeout(total=settings.http_timeout)
            if settings.http_timeout is not None
            else None
        )
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "VClaimClient":
        """Enter async context."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session exists."""
        if not self._session:
            if self._timeout is not None:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def get(self, url: str, headers: dict[str, str]) -> Any:
        """
        Issue a single GET and return the decoded body.

        Args:
            url: Fully resolved VClaim URL
            headers: Signed request headers

        Returns:
            Parsed JSON body, or raw text when the body is not JSON

        Raises:
            UpstreamError: On a non-2xx upstream status
            TransportError: On network, DNS or TLS failure
        """
        session = self._ensure_session()
        logger.info("Making BPJS API call", url=url)

        try:
            async with session.get(url, headers=headers) as response:
                text = decode_body(await response.read(), response.charset)
                status = response.status
                reason = response.reason or ""
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("BPJS API unreachable", url=url, error=str(e))
            raise TransportError(f"Request failed: {e}") from e

        body = parse_body(text)
        if not 200 <= status < 300:
            logger.error("BPJS API error", url=url, status=status, details=body)
            raise UpstreamError(status, reason, body)

        logger.debug("BPJS API success", url=url, status=status)
        return body
