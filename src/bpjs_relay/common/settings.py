"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BPJS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Default credentials (used when a request omits them)
    cons_id: str | None = Field(
        default=None,
        description="Consumer ID issued by BPJS",
    )
    user_key: str | None = Field(
        default=None,
        description="User key issued by BPJS",
    )
    secret_key: SecretStr | None = Field(
        default=None,
        description="Secret key used to sign requests",
    )

    # Upstream
    base_url: str = Field(
        default="https://apijkn.bpjs-kesehatan.go.id/vclaim-rest",
        description="Base URL of the VClaim REST service",
    )
    http_timeout: float | None = Field(
        default=None,
        description="Total upstream request timeout in seconds (None = transport default)",
    )
    default_doctor_type: str = Field(
        default="1",
        description="Service type used by the dokter reference lookup",
    )
    default_diagnosis_keyword: str = Field(
        default="A00",
        description="Keyword used by the diagnosa reference lookup",
    )
    default_drug_keyword: str = Field(
        default="paracetamol",
        description="Keyword used by the obat reference lookup",
    )

    # Relay server
    relay_host: str = Field(
        default="0.0.0.0",
        description="Host for the relay HTTP server",
    )
    relay_port: int = Field(
        default=8000,
        description="Port for the relay HTTP server",
    )
    cors_allow_origins: tuple[str, ...] = Field(
        default=("*",),
        description="Origins allowed to call the relay",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )

    # Tracing
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    tracing_otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint (e.g. http://localhost:4317)",
    )
    tracing_console: bool = Field(
        default=False,
        description="Emit traces to console (debug only)",
    )
    tracing_service_name: str = Field(
        default="bpjs-relay",
        description="Service name for tracing",
    )

    @property
    def secret_key_value(self) -> str | None:
        """Get the configured secret key as plain text."""
        return self.secret_key.get_secret_value() if self.secret_key else None


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
