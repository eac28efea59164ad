from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from app.context import get_correlation_id
from app.core.config import Settings, get_settings


_BASE_RECORD_KEYS = set(logging.makeLogRecord({}).__dict__.keys())

# Structured fields copied from ``extra`` into the JSON payload.
FIELD_NAMES = frozenset(
    {
        "method",
        "path",
        "status_code",
        "duration_ms",
        "operation",
        "subscription_id",
        "user_id",
        "service_name",
        "count",
        "total_cost",
        "error",
    }
)
MAX_ERROR_LENGTH = 500

# Request logging middleware already emits one record per request.
_QUIET_LOGGERS = ("uvicorn.access",)

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(correlation_id)s] %(message)s"
_DEFAULT_RECORD_FACTORY = logging.getLogRecordFactory()


def _stamp_correlation_id(record: logging.LogRecord) -> None:
    if not getattr(record, "correlation_id", None):
        record.correlation_id = get_correlation_id()


def _record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
    record = _DEFAULT_RECORD_FACTORY(*args, **kwargs)
    _stamp_correlation_id(record)
    return record


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        _stamp_correlation_id(record)
        return True


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: envelope keys plus whitelisted ``fields``."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None),
        }
        if self.service:
            payload["service"] = self.service

        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key in FIELD_NAMES and key not in _BASE_RECORD_KEYS
        }
        if isinstance(fields.get("error"), str):
            fields["error"] = fields["error"][:MAX_ERROR_LENGTH]
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        payload["fields"] = fields
        return json.dumps(payload, default=str)


def build_formatter(log_format: str, service: str | None = None) -> logging.Formatter:
    if log_format.lower() == "text":
        return logging.Formatter(_TEXT_FORMAT)
    return JsonLogFormatter(service)


def configure_logging(settings: Settings | None = None) -> None:
    """Route every logger through a single stdout handler. Safe to call twice."""
    root_logger = logging.getLogger()
    if getattr(root_logger, "_subscriptions_configured", False):
        return

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(build_formatter(settings.log_format, settings.app_name))
    handler.addFilter(CorrelationIdFilter())

    root_logger.handlers.clear()
    root_logger.filters.clear()
    root_logger.setLevel(level)
    logging.setLogRecordFactory(_record_factory)
    root_logger.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    root_logger._subscriptions_configured = True  # type: ignore[attr-defined]
