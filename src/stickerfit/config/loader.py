"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (STICKERFIT_*)
3. Config file (~/.stickerfit/config.toml)
4. Default values

Environment variables:
- STICKERFIT_FFMPEG_PATH: Path to ffmpeg executable
- STICKERFIT_BUDGET_BYTES: Output size budget in bytes
- STICKERFIT_DURATIONS: Comma-separated duration caps, longest first
- STICKERFIT_QUALITY_START / STICKERFIT_QUALITY_STEP: Compression schedule
- STICKERFIT_MAX_ATTEMPTS: Compression attempts per duration
- STICKERFIT_FPS: Output frame rate
- STICKERFIT_ENCODE_TIMEOUT: Per-invocation timeout in seconds
- STICKERFIT_SCRATCH_DIR: Directory for temporary artifacts
- STICKERFIT_FALLBACK: "last" or "smallest"
- STICKERFIT_FETCH_TIMEOUT / STICKERFIT_FETCH_MAX_BYTES: URL download limits
- STICKERFIT_LOG_LEVEL / STICKERFIT_LOG_FILE / STICKERFIT_LOG_FORMAT: Logging
- STICKERFIT_LOG_INCLUDE_STDERR: Also log to stderr when a log file is set
- STICKERFIT_CONFIG_PATH: Path to config file (overrides default location)
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from stickerfit.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from stickerfit.config.env import EnvReader
from stickerfit.config.models import StickerfitConfig
from stickerfit.executor.exceptions import StickerfitError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".stickerfit"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigError(StickerfitError):
    """Raised when configuration cannot be loaded or is invalid."""


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by STICKERFIT_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("STICKERFIT_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(
    path: Path | None = None, *, strict: bool = False
) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigError on parse failures.
                If False (default), return empty dict on errors.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigError: When strict=True and the file cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def get_config(
    config_path: Path | None = None,
    *,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    budget_bytes: int | None = None,
    scratch_dir: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    strict: bool = False,
) -> StickerfitConfig:
    """Get stickerfit configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides STICKERFIT_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        budget_bytes: CLI override for the output size budget.
        scratch_dir: CLI override for the scratch directory.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigError on config file parse failures.

    Returns:
        StickerfitConfig with merged configuration.

    Raises:
        ConfigError: When a resolved value is invalid, or when strict=True
            and the config file cannot be parsed.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        ffmpeg_path=ffmpeg_path,
        budget_bytes=budget_bytes,
        scratch_dir=scratch_dir,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), source_name="file")
    builder.apply(source_from_env(reader), source_name="env")
    builder.apply(cli_source, source_name="cli")

    try:
        return builder.build()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
