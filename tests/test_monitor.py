"""Tests for endpoint connection checks."""

from unittest.mock import AsyncMock

import pytest

from bpjs_relay.common.errors import TransportError
from bpjs_relay.relay.endpoints import Operation
from bpjs_relay.relay.handler import RelayHandler, RelayRequest
from bpjs_relay.relay.monitor import CONNECTED, DISCONNECTED, ConnectionMonitor

REQUEST = RelayRequest(card_number="0001122334455", service_date="2024-01-01")


@pytest.mark.asyncio
async def test_check_connected(settings, mock_transport):
    """Successful call is reported as connected."""
    monitor = ConnectionMonitor(RelayHandler(settings, mock_transport))

    result = await monitor.check(Operation.DOKTER, REQUEST)

    assert result.status == CONNECTED
    assert result.status_code == 200
    assert result.error is None
    assert mock_transport.get.await_args.args[0].endswith("/referensi/dokter/1")


@pytest.mark.asyncio
async def test_check_does_not_mutate_request(settings, mock_transport):
    """Probing overrides the endpoint on a copy only."""
    monitor = ConnectionMonitor(RelayHandler(settings, mock_transport))

    await monitor.check(Operation.POLI, REQUEST)

    assert REQUEST.test_endpoint is None


@pytest.mark.asyncio
async def test_check_disconnected(settings):
    """Transport failure is reported as disconnected."""
    transport = AsyncMock()
    transport.get = AsyncMock(side_effect=TransportError("Request failed: refused"))
    monitor = ConnectionMonitor(RelayHandler(settings, transport))

    result = await monitor.check(Operation.PESERTA, REQUEST)

    assert result.status == DISCONNECTED
    assert result.status_code == 500
    assert result.error == "Request failed: refused"
    assert result.to_dict()["error"] == "Request failed: refused"


@pytest.mark.asyncio
async def test_check_all_defaults_to_every_operation(settings, mock_transport):
    """All operations are probed in catalog order."""
    monitor = ConnectionMonitor(RelayHandler(settings, mock_transport))

    results = await monitor.check_all(REQUEST)

    assert [r.operation for r in results] == list(Operation)
    assert mock_transport.get.await_count == len(Operation)


@pytest.mark.asyncio
async def test_to_dict(settings, mock_transport):
    """Serialized check uses dashboard field names."""
    monitor = ConnectionMonitor(RelayHandler(settings, mock_transport))

    payload = (await monitor.check(Operation.RUJUKAN, REQUEST)).to_dict()

    assert payload["operation"] == "rujukan"
    assert payload["name"] == "Get Rujukan"
    assert payload["status"] == "connected"
    assert "error" not in payload
    assert set(payload) >= {"statusCode", "responseTimeMs", "checkedAt"}
