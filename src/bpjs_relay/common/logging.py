"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

# Event keys whose values must never reach a log sink.
SECRET_FIELDS = frozenset({"secret_key", "secretKey", "secret", "x-signature", "X-signature"})

REDACTED = "***"


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask secret values, including those nested one level inside dicts."""
    for key, value in list(event_dict.items()):
        if key in SECRET_FIELDS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict) and SECRET_FIELDS.intersection(value):
            event_dict[key] = {
                k: (REDACTED if k in SECRET_FIELDS else v) for k, v in value.items()
            }
    return event_dict


def setup_logging(level: str = "INFO", log_format: str = "console") -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name
        log_format: "console" for human-readable output, "json" for log shipping
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]
    if log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(),
        ]

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(format="%(message)s", handlers=[logging.StreamHandler(sys.stdout)])
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger bound to a module name."""
    return structlog.get_logger(name)
