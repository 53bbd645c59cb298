# logging_utils.py
# JSON-per-line logging to stdout, with a per-request correlation id

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Set by the HTTP middleware in api.py
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

SERVICE_NAME = os.getenv("SERVICE_NAME", "tripzip")
ENV = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Attributes every LogRecord already carries
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "env": ENV,
            "message": record.getMessage(),
        }

        rid = _request_id.get()
        if rid:
            payload["request_id"] = rid

        for key, value in vars(record).items():
            if key.startswith("_") or key in _RECORD_ATTRS or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging() -> None:
    """Install the JSON stdout handler on the root logger, once per process."""
    root = logging.getLogger()
    if getattr(root, "_tripzip_configured", False):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONLineFormatter())
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
    root._tripzip_configured = True  # type: ignore[attr-defined]


def new_request_id() -> str:
    rid = uuid.uuid4().hex
    _request_id.set(rid)
    return rid


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log `event` with structured fields; names clashing with LogRecord get a `field_` prefix."""
    safe_fields = {
        (f"field_{key}" if key in _RECORD_ATTRS else key): value
        for key, value in fields.items()
    }
    logger.log(level, event, extra={"event": event, **safe_fields})
