"""Execution layer: scratch artifacts and the ffmpeg sticker codec."""

from stickerfit.executor.codec import (
    StickerCodec,
    WebpStickerCodec,
    build_filter_chain,
    webp_quality_for,
)
from stickerfit.executor.exceptions import (
    CleanupFailure,
    ConversionFailure,
    EncodeFailure,
    StickerfitError,
)
from stickerfit.executor.scratch import ScratchManager, ScratchPair, new_token

__all__ = [
    # Codec
    "StickerCodec",
    "WebpStickerCodec",
    "build_filter_chain",
    "webp_quality_for",
    # Exceptions
    "CleanupFailure",
    "ConversionFailure",
    "EncodeFailure",
    "StickerfitError",
    # Scratch
    "ScratchManager",
    "ScratchPair",
    "new_token",
]
