"""Data models for external tool detection."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class ToolStatus(Enum):
    """Status of an external tool."""

    AVAILABLE = "available"  # Tool found and version detected
    MISSING = "missing"  # Tool not found anywhere
    ERROR = "error"  # Tool found but detection failed


class ToolSource(Enum):
    """Where a tool path was resolved from, in priority order."""

    EXPLICIT = "explicit"  # CLI flag or config file
    ENV = "env"  # STICKERFIT_FFMPEG_PATH
    BUNDLED = "bundled"  # imageio-ffmpeg binary
    PATH = "path"  # shutil.which lookup


@dataclass
class FFmpegInfo:
    """Detected ffmpeg executable and the capabilities stickerfit needs."""

    path: Path | None = None
    source: ToolSource | None = None
    version: str | None = None
    version_tuple: tuple[int, ...] | None = None  # Parsed version for comparison
    status: ToolStatus = ToolStatus.MISSING
    status_message: str | None = None
    detected_at: datetime | None = None
    encoders: set[str] = field(default_factory=set)

    # Version-gated behavioral flag: -fps_mode replaces -vsync (FFmpeg 5.1+)
    supports_fps_mode: bool = False

    def is_available(self) -> bool:
        """Return True if the tool is available and usable."""
        return self.status == ToolStatus.AVAILABLE

    @property
    def has_libwebp(self) -> bool:
        """True if the build can encode animated WebP."""
        return bool({"libwebp", "libwebp_anim"} & self.encoders)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "status_message": self.status_message,
            "path": str(self.path) if self.path else None,
            "source": self.source.value if self.source else None,
            "version": self.version,
            "supports_fps_mode": self.supports_fps_mode,
            "has_libwebp": self.has_libwebp,
        }
