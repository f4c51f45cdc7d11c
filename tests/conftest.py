"""Pytest configuration and fixtures."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from bpjs_relay.common.settings import Settings

FIXED_NOW = 1700000000.0


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host BPJS_* variables out of test settings."""
    for name in ("BPJS_CONS_ID", "BPJS_USER_KEY", "BPJS_SECRET_KEY", "BPJS_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    """Settings with default credentials configured."""
    return Settings(
        _env_file=None,
        cons_id="12345",
        user_key="user-key",
        secret_key="secret",
        base_url="https://vclaim.test/vclaim-rest",
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings with no credential fallback."""
    return Settings(_env_file=None, base_url="https://vclaim.test/vclaim-rest")


@pytest.fixture
def fixed_clock():
    """Clock frozen at 1700000000 seconds."""
    return lambda: FIXED_NOW


@pytest.fixture
def peserta_body() -> dict[str, Any]:
    """Sample VClaim participant response."""
    return {
        "metaData": {"code": "200", "message": "OK"},
        "response": {
            "peserta": {
                "noKartu": "0001122334455",
                "nama": "BUDI SANTOSO",
                "statusPeserta": {"kode": "0", "keterangan": "AKTIF"},
            }
        },
    }


@pytest.fixture
def mock_transport(peserta_body: dict[str, Any]) -> AsyncMock:
    """Transport stub returning a participant body."""
    transport = AsyncMock()
    transport.get = AsyncMock(return_value=peserta_body)
    return transport
