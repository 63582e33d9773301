from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..middlewares import principal_ctx_var, request_id_ctx_var

# Keys whose values never reach the log stream, whatever a caller passes in extra_data.
REDACTED_KEYS = frozenset({"password", "new_password", "newPassword", "token", "api_key", "authorization"})
REDACTED = "[redacted]"


def _scrub(extra: Mapping[str, Any]) -> dict[str, Any]:
    return {key: (REDACTED if key in REDACTED_KEYS else value) for key, value in extra.items()}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, tagged with the current request and principal."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field, var in (("request_id", request_id_ctx_var), ("principal", principal_ctx_var)):
            value = var.get()
            if value:
                payload[field] = value
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            payload.update(_scrub(extra))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level.upper())
    # RequestIdMiddleware already writes one line per request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
