"""Conversion context for structured logging.

Every conversion runs under a request id held in a contextvar, so log
records emitted by the driver, the codec and the scratch manager can be
correlated even when conversions run concurrently on threads or tasks.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

# Characters of the request id shown in text-format tags
TAG_LENGTH = 8

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def get_request_id() -> str | None:
    """Get the request id of the conversion running in this context."""
    return _request_id.get()


@contextmanager
def conversion_context(request_id: str) -> Generator[None, None, None]:
    """Context manager binding a request id for the duration of a conversion.

    Restores the previous id on exit. Thread-safe via contextvars.

    Args:
        request_id: Unique token of the conversion.

    Example:
        with conversion_context(token):
            logger.info("Encoding")  # record carries request_id
    """
    reset_token = _request_id.set(request_id)
    try:
        yield
    finally:
        _request_id.reset(reset_token)


class ConversionContextFilter(logging.Filter):
    """Logging filter that injects the request id into log records.

    Adds request_id for JSON output and a compact request_tag such as
    "[req:1a2b3c4d] " for text output (empty outside a conversion).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _request_id.get()
        record.request_id = request_id
        record.request_tag = f"[req:{request_id[:TAG_LENGTH]}] " if request_id else ""
        return True
