"""JSON log formatting for stickerfit.

One JSON object per record. Conversion records are shaped so that a log
pipeline can follow a single sticker request through its attempts:

    {"timestamp": "...", "level": "DEBUG", "message": "State -> size_checked",
     "logger": "stickerfit.transcoder.driver", "request_id": "1a2b...",
     "conversion": {"state": "size_checked", "size_bytes": 812034,
                    "budget_bytes": 1536000}}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Extras emitted by the driver and codec that describe the search itself
CONVERSION_FIELDS: frozenset[str] = frozenset(
    {
        "state",
        "attempt",
        "pair",
        "input_bytes",
        "size_bytes",
        "budget_bytes",
        "returncode",
        "timed_out",
        "fallback",
    }
)

# LogRecord attributes that are never treated as extras
_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id", "request_tag"}


def _json_default(value: object) -> object:
    """Serialize values json cannot: media payloads are summarized, not dumped."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(value)} bytes>"
    return str(value)


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Fields: timestamp (ISO-8601 UTC), level, message, logger, request_id
    (inside a conversion), conversion (search fields from CONVERSION_FIELDS),
    context (any other extras) and exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if record.name and record.name != "root":
            log_entry["logger"] = record.name

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id

        conversion: dict[str, Any] = {}
        context: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            if key in CONVERSION_FIELDS:
                conversion[key] = value
            else:
                context[key] = value

        if conversion:
            log_entry["conversion"] = conversion
        if context:
            log_entry["context"] = context

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=_json_default)
