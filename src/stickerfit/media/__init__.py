"""Message-side helpers: commands, media classification and URL fetching."""

from stickerfit.media.classify import MediaKind, classify_mime, normalize_mime
from stickerfit.media.commands import (
    STICKER_COMMANDS,
    find_url,
    is_sticker_command,
    parse_command,
)
from stickerfit.media.fetch import FetchError, FetchedMedia, MediaFetcher

__all__ = [
    "FetchError",
    "FetchedMedia",
    "MediaFetcher",
    "MediaKind",
    "STICKER_COMMANDS",
    "classify_mime",
    "find_url",
    "is_sticker_command",
    "normalize_mime",
    "parse_command",
]
