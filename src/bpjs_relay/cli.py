"""bpjs-relay CLI - Run the relay and exercise VClaim endpoints."""

import asyncio
import json
import sys
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.table import Table

from bpjs_relay.common.errors import ValidationError
from bpjs_relay.common.logging import setup_logging
from bpjs_relay.common.settings import Settings, get_settings
from bpjs_relay.relay.client import VClaimClient
from bpjs_relay.relay.endpoints import ENDPOINTS, Operation
from bpjs_relay.relay.handler import (
    RelayFailure,
    RelayHandler,
    RelayRequest,
    merge_credentials,
)
from bpjs_relay.relay.headers import build_headers
from bpjs_relay.relay.main import serve
from bpjs_relay.relay.monitor import CONNECTED, ConnectionMonitor

console = Console()

P = ParamSpec("P")
R = TypeVar("R")

OPERATION_CHOICE = click.Choice([op.value for op in Operation])


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Decorator to run async commands."""

    @wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def credential_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Attach --cons-id/--user-key/--secret-key options."""
    f = click.option("--secret-key", help="Secret key (default: BPJS_SECRET_KEY)")(f)
    f = click.option("--user-key", help="User key (default: BPJS_USER_KEY)")(f)
    f = click.option("--cons-id", help="Consumer ID (default: BPJS_CONS_ID)")(f)
    return f


@click.group()
@click.option("--base-url", default=None, help="VClaim base URL")
@click.option("--log-level", default=None, help="Log level (default: BPJS_LOG_LEVEL)")
@click.pass_context
def cli(ctx: click.Context, base_url: str | None, log_level: str | None) -> None:
    """bpjs-relay CLI - Signed access to the BPJS VClaim API."""
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if base_url:
        overrides["base_url"] = base_url
    if log_level:
        overrides["log_level"] = log_level
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings.log_level, settings.log_format)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("serve")
@click.option("--host", default=None, help="Bind host (default: BPJS_RELAY_HOST)")
@click.option("--port", type=int, default=None, help="Bind port (default: BPJS_RELAY_PORT)")
@click.pass_context
def serve_cmd(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the relay HTTP server."""
    serve(ctx.obj["settings"], host=host, port=port)


@cli.command("endpoints")
def list_endpoints() -> None:
    """List the VClaim operations the relay can forward."""
    table = Table(title="VClaim Endpoints")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Path")
    table.add_column("Description")

    for operation, spec in ENDPOINTS.items():
        table.add_row(operation.value, spec.name, spec.template, spec.description)

    console.print(table)


@cli.command("headers")
@credential_options
@click.pass_context
def show_headers(
    ctx: click.Context,
    cons_id: str | None,
    user_key: str | None,
    secret_key: str | None,
) -> None:
    """Print a freshly signed header set."""
    settings: Settings = ctx.obj["settings"]
    try:
        credentials = merge_credentials(
            settings,
            RelayRequest(cons_id=cons_id, user_key=user_key, secret_key=secret_key),
        )
    except ValidationError as e:
        console.print(f"[red]{e.message} Missing: {', '.join(e.missing)}[/red]")
        sys.exit(1)

    console.print_json(json.dumps(build_headers(credentials)))


@cli.command("lookup")
@click.argument("card_number")
@click.argument("service_date")
@click.option("--endpoint", "-e", type=OPERATION_CHOICE, default=Operation.PESERTA.value)
@credential_options
@click.pass_context
@async_command
async def lookup(
    ctx: click.Context,
    card_number: str,
    service_date: str,
    endpoint: str,
    cons_id: str | None,
    user_key: str | None,
    secret_key: str | None,
) -> None:
    """Run one lookup against VClaim and print the response."""
    settings: Settings = ctx.obj["settings"]
    request = RelayRequest(
        card_number=card_number,
        service_date=service_date,
        cons_id=cons_id,
        user_key=user_key,
        secret_key=secret_key,
        test_endpoint=endpoint,
    )

    async with VClaimClient(settings) as client:
        result = await RelayHandler(settings, client).relay(request)

    if isinstance(result, RelayFailure):
        console.print(f"[red]{result.status_code}: {result.message}[/red]")
        if result.details is not None:
            console.print_json(json.dumps(result.details))
        sys.exit(1)

    console.print_json(json.dumps(result.body))


@cli.command("check")
@click.option("--card-number", required=True, help="Card number used for participant endpoints")
@click.option("--service-date", required=True, help="Service date (YYYY-MM-DD)")
@click.option(
    "--endpoint",
    "-e",
    "endpoints",
    type=OPERATION_CHOICE,
    multiple=True,
    help="Endpoint to check (repeatable, default: all)",
)
@credential_options
@click.pass_context
@async_command
async def check(
    ctx: click.Context,
    card_number: str,
    service_date: str,
    endpoints: tuple[str, ...],
    cons_id: str | None,
    user_key: str | None,
    secret_key: str | None,
) -> None:
    """Check connectivity and latency of VClaim endpoints."""
    settings: Settings = ctx.obj["settings"]
    request = RelayRequest(
        card_number=card_number,
        service_date=service_date,
        cons_id=cons_id,
        user_key=user_key,
        secret_key=secret_key,
    )
    operations = [Operation(key) for key in endpoints] or list(Operation)

    async with VClaimClient(settings) as client:
        monitor = ConnectionMonitor(RelayHandler(settings, client))
        results = await monitor.check_all(request, operations)

    table = Table(title="Endpoint Status")
    table.add_column("Endpoint", style="cyan")
    table.add_column("Status")
    table.add_column("HTTP")
    table.add_column("Response Time")
    table.add_column("Error")

    for result in results:
        style = "green" if result.status == CONNECTED else "red"
        table.add_row(
            ENDPOINTS[result.operation].name,
            f"[{style}]{result.status}[/{style}]",
            str(result.status_code),
            f"{result.response_time_ms} ms",
            result.error or "",
        )

    console.print(table)

    connected = sum(1 for r in results if r.status == CONNECTED)
    console.print(f"{connected}/{len(results)} endpoints connected")
    if connected < len(results):
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
