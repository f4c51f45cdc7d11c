"""Relay server - Signs and forwards dashboard lookups to VClaim."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from bpjs_relay.common.errors import TransportError, error_response
from bpjs_relay.common.http import RequestIdMiddleware
from bpjs_relay.common.logging import get_logger, setup_logging
from bpjs_relay.common.metrics import MetricsMiddleware, metrics_endpoint
from bpjs_relay.common.settings import Settings, get_settings
from bpjs_relay.common.tracing import setup_tracing
from bpjs_relay.relay.client import VClaimClient
from bpjs_relay.relay.endpoints import ENDPOINTS, Operation
from bpjs_relay.relay.handler import (
    RelayFailure,
    RelayHandler,
    RelayRequest,
    RelayResult,
    Transport,
)
from bpjs_relay.relay.monitor import ConnectionMonitor

logger = get_logger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware answering preflight requests with an empty body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        response.body = b""
        response.headers["content-length"] = "0"
        if "content-type" in response.headers:
            del response.headers["content-type"]
        return response


class RelayServer:
    """HTTP server for the relay."""

    def __init__(self, settings: Settings, transport: Transport | None = None):
        """Initialize server."""
        self._settings = settings
        self._owned_client = None if transport is not None else VClaimClient(settings)
        self._transport: Transport = transport if transport is not None else self._owned_client
        self._handler = RelayHandler(settings, self._transport)
        self._monitor = ConnectionMonitor(self._handler)

    @property
    def handler(self) -> RelayHandler:
        return self._handler

    async def startup(self) -> None:
        """Initialize components."""
        logger.info("Starting relay", base_url=self._settings.base_url)

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._owned_client is not None:
            await self._owned_client.close()

    def _cors_headers(self, origin: str | None) -> dict[str, str]:
        allowed = self._settings.cors_allow_origins
        headers = {"Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS)}
        if "*" in allowed:
            headers["Access-Control-Allow-Origin"] = "*"
        elif origin is not None and origin in allowed:
            # Single origin per response; caches must key on it.
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
        return headers

    async def _read_request(self, request: Request) -> RelayRequest | JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError on non UTF-8 bodies
            return error_response("Invalid JSON", status_code=400)
        if not isinstance(body, dict):
            return error_response("Request body must be a JSON object", status_code=400)
        return RelayRequest.from_json(body)

    def _render(self, result: RelayResult) -> JSONResponse:
        if isinstance(result, RelayFailure):
            if isinstance(result.error, TransportError):
                return error_response(
                    "Internal server error",
                    status_code=500,
                    details=result.message,
                )
            return error_response(
                result.message,
                status_code=result.status_code,
                details=result.details,
            )
        return JSONResponse(result.body, status_code=result.status_code)

    async def handle_relay(self, request: Request) -> Response:
        """Relay one lookup to VClaim."""
        if request.method == "OPTIONS":
            return Response(headers=self._cors_headers(request.headers.get("origin")))

        parsed = await self._read_request(request)
        if isinstance(parsed, JSONResponse):
            return parsed

        try:
            result = await self._handler.relay(parsed)
            return self._render(result)
        except Exception as e:
            logger.exception("Relay failed", error=str(e))
            return error_response("Internal server error", status_code=500, details=str(e))

    async def handle_list_endpoints(self, _request: Request) -> JSONResponse:
        """List the operations the relay can forward."""
        return JSONResponse({
            "endpoints": [
                {
                    "id": operation.value,
                    "name": spec.name,
                    "endpoint": spec.template,
                    "description": spec.description,
                }
                for operation, spec in ENDPOINTS.items()
            ]
        })

    async def handle_check_endpoint(self, request: Request) -> Response:
        """Probe one endpoint and report reachability and latency."""
        key = request.path_params.get("operation", "")
        try:
            operation = Operation(key)
        except ValueError:
            return error_response(f"Unknown endpoint: {key}", status_code=404)

        parsed = await self._read_request(request)
        if isinstance(parsed, JSONResponse):
            return parsed

        try:
            check = await self._monitor.check(operation, parsed)
        except Exception as e:
            logger.exception("Endpoint check failed", operation=key, error=str(e))
            return error_response("Internal server error", status_code=500, details=str(e))

        return JSONResponse(check.to_dict())

    async def handle_health(self, _request: Request) -> JSONResponse:
        """Health check."""
        return JSONResponse({"status": "healthy"})


def create_app(
    settings: Settings | None = None,
    transport: Transport | None = None,
) -> Starlette:
    """Create the Starlette application."""
    settings = settings or get_settings()
    server = RelayServer(settings, transport)

    @asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        await server.startup()
        yield
        await server.shutdown()

    routes = [
        Route("/", server.handle_relay, methods=["POST", "OPTIONS"]),
        Route("/bpjs-api", server.handle_relay, methods=["POST", "OPTIONS"]),
        Route("/endpoints", server.handle_list_endpoints, methods=["GET"]),
        Route(
            "/endpoints/{operation}/check",
            server.handle_check_endpoint,
            methods=["POST"],
        ),
        Route("/health", server.handle_health, methods=["GET"]),
        Route("/metrics", metrics_endpoint, methods=["GET"]),
    ]

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.server = server

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        MetricsMiddleware,
        exclude_paths=["/health", "/metrics"],
    )
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


def serve(settings: Settings, host: str | None = None, port: int | None = None) -> None:
    """Run the relay with uvicorn."""
    if settings.tracing_enabled or settings.tracing_otlp_endpoint or settings.tracing_console:
        setup_tracing(
            service_name=settings.tracing_service_name,
            otlp_endpoint=settings.tracing_otlp_endpoint,
            enable_console=settings.tracing_console,
        )
    app = create_app(settings)

    uvicorn.run(
        app,
        host=host or settings.relay_host,
        port=port or settings.relay_port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """Entry point for the relay server."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    serve(settings)


if __name__ == "__main__":
    main()
