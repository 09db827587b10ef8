from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace

from courier.api.middleware.request_id import get_request_id

_configured = False

# Structured attributes passed through ``extra=`` that end up in the JSON line.
_EXTRA_FIELDS = frozenset(
    {
        "method",
        "path",
        "status_code",
        "duration_ms",
        "order_id",
        "restaurant_id",
        "rider_id",
        "user_id",
        "party_id",
        "actor_id",
        "role",
        "event",
        "connection_id",
        "displaced_connection_id",
        "from_status",
        "to_status",
        "reason",
        "message_id",
        "title",
        "push_data",
        "client_total_cents",
        "computed_total_cents",
        "delivered",
    }
)

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, correlated with the request and active span."""

    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self._service = service
        self._environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self._service,
            "env": self._environment,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
        }

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            payload["trace_id"] = format(span_context.trace_id, "032x")
            payload["span_id"] = format(span_context.span_id, "016x")

        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key in _EXTRA_FIELDS and value is not None
        )

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging() -> None:
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(
            service=os.getenv("OTEL_SERVICE_NAME", "courier-backend"),
            environment=os.getenv("APP_ENV", "dev"),
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    # Request logging is emitted by the access middleware instead.
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
