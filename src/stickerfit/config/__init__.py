"""Configuration loading and models."""

from stickerfit.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from stickerfit.config.env import EnvReader
from stickerfit.config.loader import (
    ConfigError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from stickerfit.config.models import (
    DEFAULT_BUDGET_BYTES,
    DEFAULT_DURATIONS,
    FetchConfig,
    LoggingConfig,
    StickerfitConfig,
    ToolPathsConfig,
    TranscoderConfig,
)

__all__ = [
    "ConfigBuilder",
    "ConfigError",
    "ConfigSource",
    "DEFAULT_BUDGET_BYTES",
    "DEFAULT_DURATIONS",
    "EnvReader",
    "FetchConfig",
    "LoggingConfig",
    "StickerfitConfig",
    "ToolPathsConfig",
    "TranscoderConfig",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
