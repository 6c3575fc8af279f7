from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

BEARER_TOKEN_RE = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")
TOKEN_KEYS = frozenset({"accessToken", "access_token", "token", "authorization"})


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return BEARER_TOKEN_RE.sub("Bearer [REDACTED]", value)
    if isinstance(value, dict):
        return {
            key: "[REDACTED]" if key in TOKEN_KEYS else _redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def redact_token_processor(_, __, event_dict):
    """Processor to redact CEK access tokens from log events."""
    for key in list(event_dict):
        if key in TOKEN_KEYS:
            event_dict[key] = "[REDACTED]"
        else:
            event_dict[key] = _redact_value(event_dict[key])
    return event_dict


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def setup_logging(*, debug: bool = False) -> None:
    """Configure structlog with console output and token redaction."""

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_token_processor,
            structlog.dev.ConsoleRenderer(colors=True)
            if debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stdlib_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=stdlib_level,
        force=True,
    )
