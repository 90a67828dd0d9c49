"""Chat message handling: decides whether and how to answer with a sticker.

The handler is transport-agnostic. A bot adapter translates platform
messages into IncomingMessage, calls StickerHandler.handle(), and sends the
returned StickerReply (a sticker payload or an error to reply with).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from stickerfit.executor.exceptions import ConversionFailure, EncodeFailure
from stickerfit.media.classify import MediaKind, classify_mime, normalize_mime
from stickerfit.media.commands import find_url, is_sticker_command
from stickerfit.media.fetch import FetchError

if TYPE_CHECKING:
    from stickerfit.media.fetch import MediaFetcher
    from stickerfit.transcoder.driver import SizeFittingTranscoder

logger = logging.getLogger(__name__)

WEBP_MIMETYPE = "image/webp"


class ReplyError(Enum):
    """Reasons a sticker request is answered with an error."""

    DOWNLOAD_FAILED = "download_failed"
    UNSUPPORTED_MEDIA = "unsupported_media"
    USAGE = "usage"
    INVALID_URL = "invalid_url"
    CONVERSION_FAILED = "conversion_failed"

    @property
    def message(self) -> str:
        return _REPLY_MESSAGES[self]


_REPLY_MESSAGES: dict[ReplyError, str] = {
    ReplyError.DOWNLOAD_FAILED: "Could not download the media.",
    ReplyError.UNSUPPORTED_MEDIA: "Unsupported media type.",
    ReplyError.USAGE: "Send /s as a media caption OR reply to a media with /s.",
    ReplyError.INVALID_URL: "Invalid URL.",
    ReplyError.CONVERSION_FAILED: "Could not create the sticker.",
}


@dataclass(frozen=True)
class MediaPayload:
    """Downloaded media attached to a message. data is None if unavailable."""

    data: bytes | None = field(repr=False)
    mimetype: str = ""


@dataclass(frozen=True)
class IncomingMessage:
    """A chat message as seen by the handler."""

    body: str = ""
    caption: str = ""
    media: MediaPayload | None = None
    quoted_media: MediaPayload | None = None


@dataclass(frozen=True)
class StickerReply:
    """Outcome of handling a sticker request."""

    ok: bool
    sticker: bytes | None = field(default=None, repr=False)
    mimetype: str | None = None
    error: ReplyError | None = None

    @classmethod
    def success(cls, sticker: bytes, mimetype: str) -> StickerReply:
        return cls(ok=True, sticker=sticker, mimetype=mimetype)

    @classmethod
    def failure(cls, error: ReplyError) -> StickerReply:
        return cls(ok=False, error=error)


class StickerHandler:
    """Turns sticker commands into sticker replies."""

    def __init__(
        self,
        transcoder: SizeFittingTranscoder,
        fetcher: MediaFetcher,
    ) -> None:
        self.transcoder = transcoder
        self.fetcher = fetcher

    def handle(self, message: IncomingMessage) -> StickerReply | None:
        """Handle one message.

        A command in the body targets the quoted message's media when there
        is one, otherwise the message's own media; a command in the caption
        targets the message's own media. Without media, the first URL in
        the body is downloaded instead.

        Returns:
            StickerReply, or None when the message carries no sticker command.
        """
        in_body = is_sticker_command(message.body)
        if not in_body and not is_sticker_command(message.caption.strip()):
            return None

        if in_body and message.quoted_media is not None:
            target = message.quoted_media
        else:
            target = message.media

        if target is not None:
            return self._from_media(target)
        return self._from_url(message.body)

    def _from_media(self, media: MediaPayload) -> StickerReply:
        if not media.data:
            return StickerReply.failure(ReplyError.DOWNLOAD_FAILED)
        kind = classify_mime(media.mimetype)
        if kind is MediaKind.UNSUPPORTED:
            logger.info("Unsupported media type %r", media.mimetype)
            return StickerReply.failure(ReplyError.UNSUPPORTED_MEDIA)
        return self._reply_for(kind, media.data, media.mimetype)

    def _from_url(self, body: str) -> StickerReply:
        url = find_url(body)
        if url is None:
            return StickerReply.failure(ReplyError.USAGE)

        try:
            fetched = self.fetcher.fetch(url)
        except FetchError:
            logger.exception("Failed to download %s", url)
            return StickerReply.failure(ReplyError.DOWNLOAD_FAILED)

        kind = classify_mime(fetched.content_type)
        if kind is MediaKind.UNSUPPORTED or not fetched.data:
            logger.info(
                "URL %s is not usable media (content type %r)",
                url,
                fetched.content_type,
            )
            return StickerReply.failure(ReplyError.INVALID_URL)
        return self._reply_for(kind, fetched.data, fetched.content_type)

    def _reply_for(self, kind: MediaKind, data: bytes, mimetype: str) -> StickerReply:
        if kind is MediaKind.IMAGE:
            return StickerReply.success(data, normalize_mime(mimetype))

        try:
            webp = self.transcoder.convert(data)
        except (ConversionFailure, EncodeFailure):
            logger.exception("Sticker conversion failed")
            return StickerReply.failure(ReplyError.CONVERSION_FAILED)
        return StickerReply.success(webp, WEBP_MIMETYPE)
