"""External tool resolution and detection.

stickerfit depends on one external tool, ffmpeg. This package finds it and
reports the capabilities the sticker codec needs.
"""

from stickerfit.tools.detection import (
    FFMPEG_ENV_VAR,
    ToolNotFoundError,
    detect_ffmpeg,
    find_ffmpeg,
    parse_version_string,
    require_ffmpeg,
)
from stickerfit.tools.models import FFmpegInfo, ToolSource, ToolStatus

__all__ = [
    # Models
    "FFmpegInfo",
    "ToolSource",
    "ToolStatus",
    # Detection
    "FFMPEG_ENV_VAR",
    "ToolNotFoundError",
    "detect_ffmpeg",
    "find_ffmpeg",
    "parse_version_string",
    "require_ffmpeg",
]
