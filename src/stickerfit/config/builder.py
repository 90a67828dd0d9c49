"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building StickerfitConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from stickerfit.config.env import EnvReader
from stickerfit.config.models import (
    FetchConfig,
    LoggingConfig,
    StickerfitConfig,
    ToolPathsConfig,
    TranscoderConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Tool paths
    ffmpeg_path: Path | None = None

    # Transcoder
    budget_bytes: int | None = None
    durations: list[int] | None = None
    quality_start: int | None = None
    quality_step: int | None = None
    max_attempts: int | None = None
    fps: int | None = None
    compression_level: int | None = None
    encode_timeout: float | None = None
    scratch_dir: Path | None = None
    fallback: str | None = None

    # Fetch
    fetch_timeout: float | None = None
    fetch_max_bytes: int | None = None

    # Logging
    log_level: str | None = None
    log_file: Path | None = None
    log_format: str | None = None
    log_include_stderr: bool | None = None


class ConfigBuilder:
    """Builds StickerfitConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config), source_name="file")
        builder.apply(source_from_env(reader), source_name="env")
        builder.apply(cli_source, source_name="cli")
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}
        self._origins: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
            source_name: Label recorded for each value this source sets.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value
                self._origins[field_obj.name] = source_name

    def origin(self, key: str) -> str:
        """Return which source set a key, or "default"."""
        return self._origins.get(key, "default")

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> StickerfitConfig:
        """Build the final StickerfitConfig with defaults for unset values.

        Returns:
            Complete StickerfitConfig with all values resolved.

        Raises:
            ValueError: If a resolved value fails model validation.
        """
        tools = ToolPathsConfig(ffmpeg=self._get("ffmpeg_path", None))

        transcoder_defaults = TranscoderConfig()
        transcoder = TranscoderConfig(
            durations=tuple(self._get("durations", transcoder_defaults.durations)),
            quality_start=self._get(
                "quality_start", transcoder_defaults.quality_start
            ),
            quality_step=self._get("quality_step", transcoder_defaults.quality_step),
            max_attempts_per_duration=self._get(
                "max_attempts", transcoder_defaults.max_attempts_per_duration
            ),
            budget_bytes=self._get("budget_bytes", transcoder_defaults.budget_bytes),
            codec_path=tools.ffmpeg,
            fps=self._get("fps", transcoder_defaults.fps),
            compression_level=self._get(
                "compression_level", transcoder_defaults.compression_level
            ),
            encode_timeout=self._get(
                "encode_timeout", transcoder_defaults.encode_timeout
            ),
            scratch_dir=self._get("scratch_dir", transcoder_defaults.scratch_dir),
            fallback=self._get("fallback", transcoder_defaults.fallback),
        )

        fetch_defaults = FetchConfig()
        fetch = FetchConfig(
            timeout_seconds=self._get("fetch_timeout", fetch_defaults.timeout_seconds),
            max_bytes=self._get("fetch_max_bytes", fetch_defaults.max_bytes),
        )

        logging_config = LoggingConfig(
            level=self._get("log_level", "info"),
            file=self._get("log_file", None),
            format=self._get("log_format", "text"),
            include_stderr=self._get("log_include_stderr", False),
        )

        if self._values:
            logger.debug(
                "Configuration overrides applied",
                extra={"origins": dict(self._origins)},
            )

        return StickerfitConfig(
            tools=tools,
            transcoder=transcoder,
            fetch=fetch,
            logging=logging_config,
        )


def _optional_path(value: Any) -> Path | None:
    if not value:
        return None
    return Path(str(value)).expanduser()


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from parsed TOML config file.

    Expected layout:

        [tools]
        ffmpeg = "/usr/bin/ffmpeg"

        [transcoder]
        budget_bytes = 1536000
        durations = [10, 8, 6, 5, 4, 3]

        [fetch]
        timeout_seconds = 30

        [logging]
        level = "debug"

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    tools = file_config.get("tools", {})
    transcoder = file_config.get("transcoder", {})
    fetch = file_config.get("fetch", {})
    logging_conf = file_config.get("logging", {})

    durations = transcoder.get("durations")

    return ConfigSource(
        ffmpeg_path=_optional_path(tools.get("ffmpeg")),
        budget_bytes=transcoder.get("budget_bytes"),
        durations=list(durations) if durations is not None else None,
        quality_start=transcoder.get("quality_start"),
        quality_step=transcoder.get("quality_step"),
        max_attempts=transcoder.get("max_attempts_per_duration"),
        fps=transcoder.get("fps"),
        compression_level=transcoder.get("compression_level"),
        encode_timeout=transcoder.get("encode_timeout"),
        scratch_dir=_optional_path(transcoder.get("scratch_dir")),
        fallback=transcoder.get("fallback"),
        fetch_timeout=fetch.get("timeout_seconds"),
        fetch_max_bytes=fetch.get("max_bytes"),
        log_level=logging_conf.get("level"),
        log_file=_optional_path(logging_conf.get("file")),
        log_format=logging_conf.get("format"),
        log_include_stderr=logging_conf.get("include_stderr"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        # Existence is checked during ffmpeg resolution, not here
        ffmpeg_path=reader.get_path("STICKERFIT_FFMPEG_PATH", must_exist=False),
        budget_bytes=reader.get_int("STICKERFIT_BUDGET_BYTES"),
        durations=reader.get_int_list("STICKERFIT_DURATIONS"),
        quality_start=reader.get_int("STICKERFIT_QUALITY_START"),
        quality_step=reader.get_int("STICKERFIT_QUALITY_STEP"),
        max_attempts=reader.get_int("STICKERFIT_MAX_ATTEMPTS"),
        fps=reader.get_int("STICKERFIT_FPS"),
        encode_timeout=reader.get_float("STICKERFIT_ENCODE_TIMEOUT"),
        scratch_dir=reader.get_path("STICKERFIT_SCRATCH_DIR", must_exist=False),
        fallback=reader.get_str("STICKERFIT_FALLBACK"),
        fetch_timeout=reader.get_float("STICKERFIT_FETCH_TIMEOUT"),
        fetch_max_bytes=reader.get_int("STICKERFIT_FETCH_MAX_BYTES"),
        log_level=reader.get_str("STICKERFIT_LOG_LEVEL"),
        log_file=reader.get_path("STICKERFIT_LOG_FILE", must_exist=False),
        log_format=reader.get_str("STICKERFIT_LOG_FORMAT"),
        log_include_stderr=reader.get_bool("STICKERFIT_LOG_INCLUDE_STDERR"),
    )
