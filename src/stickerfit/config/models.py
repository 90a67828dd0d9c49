"""Configuration data models.

This module defines dataclasses for stickerfit configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# Sticker platform constraints
DEFAULT_DURATIONS: tuple[int, ...] = (10, 8, 6, 5, 4, 3)
DEFAULT_BUDGET_BYTES = 1500 * 1024

FallbackPolicy = Literal["last", "smallest"]


def _is_int(value: object) -> bool:
    """True for real integers; bool is rejected even though it subclasses int."""
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class TranscoderConfig:
    """Settings for the size-fitting transcoder.

    The search grid is durations (outer, descending) by compression levels
    quality_start + k * quality_step for k < max_attempts_per_duration
    (inner, ascending).
    """

    durations: tuple[int, ...] = DEFAULT_DURATIONS
    """Duration caps in seconds, tried longest first."""

    quality_start: int = 50
    """Compression level of the first attempt at each duration."""

    quality_step: int = 10
    """Compression increase between attempts at the same duration."""

    max_attempts_per_duration: int = 4

    budget_bytes: int = DEFAULT_BUDGET_BYTES
    """Soft ceiling on output size."""

    codec_path: Path | None = None
    """Explicit ffmpeg path. None falls back to env, bundled, then PATH."""

    fps: int = 30
    max_dimension: int = 512
    canvas_size: int = 512
    compression_level: int = 6
    """libwebp effort (0-6), constant across attempts."""

    encode_timeout: float = 120.0
    """Wall-clock limit per ffmpeg invocation, in seconds."""

    scratch_dir: Path = field(default_factory=lambda: Path("tmp"))
    """Scratch directory, relative paths resolve against the working dir."""

    fallback: FallbackPolicy = "last"
    """Candidate returned when nothing fits: the last result or the smallest."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        durations = tuple(self.durations)
        object.__setattr__(self, "durations", durations)
        if not durations:
            raise ValueError("durations must not be empty")
        if not all(_is_int(d) for d in durations):
            raise ValueError(f"durations must be integers, got {durations}")
        for name in ("quality_start", "quality_step", "max_attempts_per_duration"):
            if not _is_int(getattr(self, name)):
                raise ValueError(
                    f"{name} must be an integer, got {getattr(self, name)!r}"
                )
        if not _is_int(self.budget_bytes):
            raise ValueError(
                f"budget_bytes must be an integer, got {self.budget_bytes!r}"
            )
        if any(d <= 0 for d in durations):
            raise ValueError(f"durations must be positive, got {durations}")
        if list(durations) != sorted(durations, reverse=True):
            raise ValueError(f"durations must be descending, got {durations}")
        if self.max_attempts_per_duration < 1:
            raise ValueError("max_attempts_per_duration must be at least 1")
        if self.quality_step < 0:
            raise ValueError("quality_step must not be negative")
        if not 0 <= self.quality_start <= 100:
            raise ValueError("quality_start must be between 0 and 100")
        if self.budget_bytes <= 0:
            raise ValueError("budget_bytes must be positive")
        if self.fps <= 0:
            raise ValueError("fps must be positive")
        if self.max_dimension <= 0 or self.canvas_size < self.max_dimension:
            raise ValueError("canvas_size must be at least max_dimension (> 0)")
        if not 0 <= self.compression_level <= 6:
            raise ValueError("compression_level must be between 0 and 6")
        if self.encode_timeout <= 0:
            raise ValueError("encode_timeout must be positive")
        if self.fallback not in ("last", "smallest"):
            raise ValueError(
                f"fallback must be 'last' or 'smallest', got {self.fallback}"
            )

    @property
    def grid_size(self) -> int:
        """Number of encoder invocations when nothing fits."""
        return len(self.durations) * self.max_attempts_per_duration


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, ffmpeg is resolved from the environment, the bundled
    imageio-ffmpeg binary, or PATH.
    """

    ffmpeg: Path | None = None


@dataclass(frozen=True)
class FetchConfig:
    """Settings for downloading media from URLs."""

    timeout_seconds: float = 30.0
    max_bytes: int = 50 * 1024 * 1024
    user_agent: str = "stickerfit/0.1"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class StickerfitConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    transcoder: TranscoderConfig = field(default_factory=TranscoderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
