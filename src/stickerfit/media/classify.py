"""Media type classification."""

from __future__ import annotations

from enum import Enum


class MediaKind(Enum):
    """How a piece of media becomes a sticker."""

    IMAGE = "image"
    """Still image, sent as-is for the platform to convert."""

    ANIMATED = "animated"
    """Video or GIF, transcoded to animated WebP."""

    UNSUPPORTED = "unsupported"


def normalize_mime(mime: str | None) -> str:
    """Strip parameters and case: "Image/GIF; q=1" -> "image/gif"."""
    return (mime or "").split(";", 1)[0].strip().lower()


def classify_mime(mime: str | None) -> MediaKind:
    """Classify a MIME type or Content-Type header value.

    WebP images are already stickers and are rejected.
    """
    # Fetched URLs use this rule as well. Earlier bot versions sent every
    # image/* URL (gif and webp included) as a still image; animated GIF
    # links are now transcoded like attachments.
    value = normalize_mime(mime)
    if value == "image/gif" or value.startswith("video/"):
        return MediaKind.ANIMATED
    if value == "image/webp":
        return MediaKind.UNSUPPORTED
    if value.startswith("image/"):
        return MediaKind.IMAGE
    return MediaKind.UNSUPPORTED
