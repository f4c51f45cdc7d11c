"""Connectivity checks against individual VClaim endpoints."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from bpjs_relay.common.logging import get_logger
from bpjs_relay.relay.endpoints import ENDPOINTS, Operation
from bpjs_relay.relay.handler import RelayFailure, RelayHandler, RelayRequest

logger = get_logger(__name__)

CONNECTED = "connected"
DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class ConnectionCheck:
    """Outcome of probing one endpoint."""

    operation: Operation
    status: str
    status_code: int
    response_time_ms: int
    checked_at: datetime
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "operation": self.operation.value,
            "name": ENDPOINTS[self.operation].name,
            "status": self.status,
            "statusCode": self.status_code,
            "responseTimeMs": self.response_time_ms,
            "checkedAt": self.checked_at.isoformat(),
        }
        if self.error:
            payload["error"] = self.error
        return payload


class ConnectionMonitor:
    """Runs one relay call per endpoint and reports reachability and latency."""

    def __init__(self, handler: RelayHandler):
        self._handler = handler

    async def check(self, operation: Operation, request: RelayRequest) -> ConnectionCheck:
        """Probe a single endpoint using the credentials in ``request``."""
        probe = replace(request, test_endpoint=operation.value)
        start = time.perf_counter()
        result = await self._handler.relay(probe)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        if isinstance(result, RelayFailure):
            logger.warning(
                "Endpoint check failed",
                operation=operation.value,
                status_code=result.status_code,
                error=result.message,
            )
            return ConnectionCheck(
                operation=operation,
                status=DISCONNECTED,
                status_code=result.status_code,
                response_time_ms=elapsed_ms,
                checked_at=datetime.now(timezone.utc),
                error=result.message,
            )

        logger.info("Endpoint check passed", operation=operation.value, response_time_ms=elapsed_ms)
        return ConnectionCheck(
            operation=operation,
            status=CONNECTED,
            status_code=result.status_code,
            response_time_ms=elapsed_ms,
            checked_at=datetime.now(timezone.utc),
        )

    async def check_all(
        self,
        request: RelayRequest,
        operations: Iterable[Operation] | None = None,
    ) -> list[ConnectionCheck]:
        """Probe several endpoints concurrently, in catalog order."""
        targets = list(operations) if operations is not None else list(Operation)
        return list(await asyncio.gather(*(self.check(op, request) for op in targets)))
