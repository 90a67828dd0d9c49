"""Chat command parsing.

A message asks for a sticker when its first word is one of the sticker
commands, either in the message body or in a media caption.
"""

from __future__ import annotations

import re

STICKER_COMMANDS: frozenset[str] = frozenset({"/s", "/sticker"})

# Loose URL match: scheme optional, so "example.com/cat.gif" counts
_URL_PATTERN = re.compile(
    r"""
    ^(?:https?://)?
    (?:localhost
    |\d{1,3}(?:\.\d{1,3}){3}
    |(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,})
    (?::\d{1,5})?
    (?:[/?#]\S*)?$
    """,
    re.IGNORECASE | re.VERBOSE,
)
_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:!?)]}>\"'"


def parse_command(text: str | None) -> str:
    """Return the first word of text, lower-cased ("" for empty text)."""
    words = (text or "").split()
    return words[0].lower() if words else ""


def is_sticker_command(text: str | None) -> bool:
    return parse_command(text) in STICKER_COMMANDS


def find_url(text: str | None) -> str | None:
    """Find the first URL-looking word in text.

    Bare addresses such as "example.com/a.gif" are accepted and returned
    with an https:// scheme.

    Returns:
        Absolute http(s) URL, or None if no word looks like one.
    """
    for word in (text or "").split():
        candidate = word.strip("<(").rstrip(_TRAILING_PUNCTUATION)
        if not candidate or not _URL_PATTERN.match(candidate):
            continue
        if not _SCHEME_PATTERN.match(candidate):
            candidate = f"https://{candidate}"
        return candidate
    return None
