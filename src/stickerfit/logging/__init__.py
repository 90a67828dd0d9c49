"""Structured logging module for stickerfit.

Provides configurable logging with JSON format support and file rotation,
plus per-conversion request context.
"""

from stickerfit.logging.config import configure_logging
from stickerfit.logging.context import (
    ConversionContextFilter,
    conversion_context,
    get_request_id,
)
from stickerfit.logging.handlers import JSONFormatter

__all__ = [
    "ConversionContextFilter",
    "JSONFormatter",
    "configure_logging",
    "conversion_context",
    "get_request_id",
]
