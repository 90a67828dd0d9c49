"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion and validation. It supports dependency injection
for testing by accepting an optional env mapping.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion and validation.

    Provides methods to read environment variables with automatic type
    conversion (str, int, float, bool, Path, int list) and defaults.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        budget = reader.get_int("STICKERFIT_BUDGET_BYTES", 1536000)

        # Testing usage (inject custom env)
        reader = EnvReader(env={"STICKERFIT_BUDGET_BYTES": "900000"})
        budget = reader.get_int("STICKERFIT_BUDGET_BYTES")  # Returns 900000
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from environment variable.

        Returns:
            The environment variable value, or default if not set.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer from environment variable.

        Returns:
            Parsed integer value, or default if not set or invalid.
            Logs a warning if the value is set but cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float from environment variable.

        Returns:
            Parsed float value, or default if not set or invalid.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from environment variable.

        "true", "1", "yes", "on" (case-insensitive) are true; any other
        value is false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Get a path from environment variable.

        Args:
            var: Environment variable name.
            must_exist: If True, log a warning and return default when the
                path does not exist.
            default: Default value if not set or path doesn't exist.

        Returns:
            Path object (tilde-expanded), or default.
        """
        value = self._env.get(var)
        if value is None:
            return default

        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return default
        return path

    def get_int_list(
        self, var: str, default: list[int] | None = None
    ) -> list[int] | None:
        """Get a comma-separated list of integers.

        Example: STICKERFIT_DURATIONS="10,8,6" -> [10, 8, 6]

        Returns:
            List of integers, or default if not set, empty, or invalid.
        """
        value = self._env.get(var)
        if value is None:
            return default
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts:
            return default
        try:
            return [int(p) for p in parts]
        except ValueError:
            logger.warning("Invalid integer list for %s: %s", var, value)
            return default
