from __future__ import annotations

import json
import logging
import sys
from logging import LogRecord
from typing import Any, Dict

from loguru import logger
from opentelemetry import trace


# Attributes every stdlib record carries; anything else was passed via ``extra=``.
_STDLIB_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}

# Fields the courtesy audit trail binds; grouped so log queries can filter on them.
_AUDIT_FIELDS = ("component", "courtesy_id", "event_id", "person_id", "speaker_id")

_NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "celery.app.trace": logging.INFO,
}

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | {message} | {extra}"
)


class InterceptHandler(logging.Handler):
    """Route stdlib records (uvicorn, sqlalchemy, celery) into Loguru."""

    def emit(self, record: LogRecord) -> None:  # pragma: no cover - bridging glue
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)

        extra = {key: value for key, value in record.__dict__.items() if key not in _STDLIB_RECORD_ATTRS}
        extra.setdefault("component", record.name)

        logger.bind(**extra).opt(depth=6, exception=record.exc_info).log(
            level, message.replace("{", "{{").replace("}", "}}")
        )


def _trace_fields() -> Dict[str, str]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": f"{span_context.trace_id:032x}",
        "span_id": f"{span_context.span_id:016x}",
    }


def _serialize_log(message: "logger.Message", metadata: Dict[str, Any]) -> None:
    record = message.record
    extra = dict(record["extra"])

    payload: Dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name.lower(),
        "message": record["message"],
        "logger": record["name"],
        **metadata,
        **_trace_fields(),
    }

    audit = {field: extra.pop(field) for field in _AUDIT_FIELDS if field in extra}
    if audit:
        payload["audit"] = audit
    if extra:
        payload["context"] = extra
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)

    sys.stdout.write(json.dumps(payload, default=str) + "\n")


def configure_logging(*, service_name: str, environment: str, version: str) -> None:
    """Send Loguru and stdlib logging to one sink.

    Development gets a colourised console line; every other environment gets
    one JSON object per line carrying service metadata and the active trace.
    """

    logger.remove()
    logger.configure(extra={"component": service_name})
    if environment == "development":
        logger.add(sys.stderr, format=_CONSOLE_FORMAT, backtrace=False, diagnose=False)
    else:
        metadata = {"service": service_name, "environment": environment, "version": version}
        logger.add(lambda message: _serialize_log(message, metadata), backtrace=False, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


__all__ = ["InterceptHandler", "configure_logging"]
