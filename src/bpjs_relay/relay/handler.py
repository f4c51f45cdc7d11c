"""Relay handler: validate, sign, resolve and forward one lookup."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from bpjs_relay.common.errors import (
    RelayError,
    TransportError,
    UpstreamError,
    ValidationError,
)
from bpjs_relay.common.hmac import Clock
from bpjs_relay.common.logging import get_logger
from bpjs_relay.common.metrics import record_relay_call, record_upstream_latency
from bpjs_relay.common.settings import Settings
from bpjs_relay.common.tracing import span
from bpjs_relay.relay.endpoints import (
    EndpointParams,
    Operation,
    parse_operation,
    resolve_url,
)
from bpjs_relay.relay.headers import Credentials, build_headers

logger = get_logger(__name__)

MISSING_CREDENTIALS = "Missing BPJS credentials. Please provide consId, userKey, and secretKey."
MISSING_PARAMETERS = "Missing required parameters: cardNumber and serviceDate"


class Transport(Protocol):
    """Anything that can perform the signed upstream GET."""

    async def get(self, url: str, headers: dict[str, str]) -> Any: ...


@dataclass
class RelayRequest:
    """Lookup request as submitted by the dashboard."""

    card_number: str | None = None
    service_date: str | None = None
    cons_id: str | None = None
    user_key: str | None = None
    secret_key: str | None = field(default=None, repr=False)
    test_endpoint: str | None = None
    doctor_type: str | None = None
    diagnosis_keyword: str | None = None
    drug_keyword: str | None = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> RelayRequest:
        """Build a request from the camelCase JSON body."""

        def text(key: str) -> str | None:
            value = payload.get(key)
            if value is None:
                return None
            return str(value)

        return cls(
            card_number=text("cardNumber"),
            service_date=text("serviceDate"),
            cons_id=text("consId"),
            user_key=text("userKey"),
            secret_key=text("secretKey"),
            test_endpoint=text("testEndpoint"),
            doctor_type=text("doctorType"),
            diagnosis_keyword=text("diagnosisKeyword"),
            drug_keyword=text("drugKeyword"),
        )


@dataclass(frozen=True)
class RelaySuccess:
    """Upstream answered 2xx; body is passed through unchanged."""

    body: Any
    status_code: int = 200


@dataclass(frozen=True)
class RelayFailure:
    """A relay call failed before or at the upstream."""

    error: RelayError

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def details(self) -> Any:
        return self.error.details


RelayResult = RelaySuccess | RelayFailure


def merge_credentials(settings: Settings, request: RelayRequest) -> Credentials:
    """
    Take each credential from the request, falling back to configured defaults.

    Raises:
        ValidationError: Any of the three credentials is missing from both sources
    """
    cons_id = request.cons_id or settings.cons_id
    user_key = request.user_key or settings.user_key
    secret_key = request.secret_key or settings.secret_key_value

    missing = [
        name
        for name, value in (
            ("consId", cons_id),
            ("userKey", user_key),
            ("secretKey", secret_key),
        )
        if not value
    ]
    if missing:
        raise ValidationError(MISSING_CREDENTIALS, missing)

    return Credentials(consumer_id=cons_id, user_key=user_key, secret_key=secret_key)


class RelayHandler:
    """
    Orchestrates header signing, endpoint resolution and the upstream call.

    Holds no per-call state: concurrent calls each compute their own
    timestamp and signature.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Transport,
        clock: Clock = time.time,
    ):
        """
        Initialize the handler.

        Args:
            settings: Application settings providing default credentials and fillers
            transport: Upstream transport (normally a VClaimClient)
            clock: Wall clock used for request timestamps
        """
        self._settings = settings
        self._transport = transport
        self._clock = clock

    def resolve_credentials(self, request: RelayRequest) -> Credentials:
        """Merge request credentials over the configured defaults."""
        return merge_credentials(self._settings, request)

    def endpoint_params(self, request: RelayRequest) -> EndpointParams:
        """Validate path parameters and fill reference-lookup defaults."""
        missing = [
            name
            for name, value in (
                ("cardNumber", request.card_number),
                ("serviceDate", request.service_date),
            )
            if not value
        ]
        if missing:
            raise ValidationError(MISSING_PARAMETERS, missing)

        return EndpointParams(
            card_number=request.card_number or "",
            service_date=request.service_date or "",
            doctor_type=request.doctor_type or self._settings.default_doctor_type,
            diagnosis_keyword=request.diagnosis_keyword or self._settings.default_diagnosis_keyword,
            drug_keyword=request.drug_keyword or self._settings.default_drug_keyword,
        )

    async def fetch(self, request: RelayRequest) -> Any:
        """
        Perform the lookup and return the upstream body.

        Raises:
            ValidationError: Credentials or parameters missing
            UpstreamError: Non-2xx upstream status
            TransportError: Network failure
        """
        return await self._fetch(request, parse_operation(request.test_endpoint))

    async def _fetch(self, request: RelayRequest, operation: Operation) -> Any:
        credentials = self.resolve_credentials(request)
        params = self.endpoint_params(request)
        url = resolve_url(self._settings.base_url, operation, params)
        headers = build_headers(credentials, self._clock)

        start = time.perf_counter()
        try:
            with span("vclaim_request", {"vclaim.operation": operation.value}):
                return await self._transport.get(url, headers)
        finally:
            record_upstream_latency(operation.value, time.perf_counter() - start)

    async def relay(self, request: RelayRequest) -> RelayResult:
        """Run one relay call and normalize the outcome."""
        operation = parse_operation(request.test_endpoint)
        try:
            body = await self._fetch(request, operation)
        except ValidationError as e:
            logger.warning("Rejected relay request", error=e.message, missing=e.missing)
            record_relay_call(operation.value, "validation_error")
            return RelayFailure(e)
        except UpstreamError as e:
            record_relay_call(operation.value, "upstream_error")
            return RelayFailure(e)
        except TransportError as e:
            record_relay_call(operation.value, "transport_error")
            return RelayFailure(e)

        record_relay_call(operation.value, "success")
        return RelaySuccess(body)
