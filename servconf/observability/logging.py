from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


# Attributes every LogRecord carries; anything else arrived through `extra=`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, event and any `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(
            (k, v) for k, v in vars(record).items() if k not in _STANDARD_ATTRS and not k.startswith("_")
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # Paths and other non-JSON values fall back to str().
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(*, level: str = "INFO") -> None:
    """Send servconf's config events to stderr as JSON; repeated calls replace the handler."""

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers[:] = [handler]
