"""ffmpeg resolution and version detection.

Resolution order (first match wins):
1. Explicit path (CLI flag or config file)
2. STICKERFIT_FFMPEG_PATH environment variable
3. Binary bundled with imageio-ffmpeg
4. ffmpeg on PATH
"""

import logging
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for tool detection
from datetime import datetime, timezone
from pathlib import Path

import imageio_ffmpeg

from stickerfit.config.env import EnvReader
from stickerfit.core.subprocess_utils import run_command
from stickerfit.executor.exceptions import StickerfitError
from stickerfit.tools.models import FFmpegInfo, ToolSource, ToolStatus

logger = logging.getLogger(__name__)

FFMPEG_ENV_VAR = "STICKERFIT_FFMPEG_PATH"

# Timeout for version/capability detection commands (seconds)
DETECTION_TIMEOUT = 10


class ToolNotFoundError(StickerfitError):
    """Raised when ffmpeg cannot be resolved from any source."""


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles various version formats:
    - "6.1.1" -> (6, 1, 1)
    - "n6.1.1" -> (6, 1, 1)  (ffmpeg nightlies)
    - "7.0.2-static" -> (7, 0, 2)  (static builds)

    Args:
        version_str: Version string to parse.

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    version_str = version_str.lstrip("nv")

    match = re.match(r"(\d+(?:\.\d+)*)", version_str)
    if not match:
        return None

    return tuple(int(p) for p in match.group(1).split("."))


def _check_file(path: Path, source: ToolSource) -> bool:
    if path.is_file():
        return True
    logger.warning("ffmpeg path from %s is not a file: %s", source.value, path)
    return False


def _bundled_ffmpeg() -> Path | None:
    """Return the imageio-ffmpeg binary, or None if the wheel ships none."""
    try:
        exe = imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as e:
        logger.debug("No bundled ffmpeg available: %s", e)
        return None
    return Path(exe)


def find_ffmpeg(
    configured_path: Path | None = None,
    env_reader: EnvReader | None = None,
) -> tuple[Path, ToolSource] | None:
    """Resolve the ffmpeg executable.

    Args:
        configured_path: Explicit path from the CLI or config file.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        Tuple of (path, source), or None if ffmpeg cannot be found.
    """
    reader = env_reader or EnvReader()

    if configured_path and _check_file(configured_path, ToolSource.EXPLICIT):
        return configured_path, ToolSource.EXPLICIT

    env_path = reader.get_path(FFMPEG_ENV_VAR, must_exist=False)
    if env_path and _check_file(env_path, ToolSource.ENV):
        return env_path, ToolSource.ENV

    bundled = _bundled_ffmpeg()
    if bundled and bundled.is_file():
        return bundled, ToolSource.BUNDLED

    which_result = shutil.which("ffmpeg")
    if which_result:
        return Path(which_result), ToolSource.PATH

    return None


def require_ffmpeg(
    configured_path: Path | None = None,
    env_reader: EnvReader | None = None,
) -> Path:
    """Resolve ffmpeg or raise.

    Raises:
        ToolNotFoundError: If no source yields an ffmpeg executable.
    """
    found = find_ffmpeg(configured_path, env_reader)
    if found is None:
        raise ToolNotFoundError(
            "ffmpeg not found. Install ffmpeg, install imageio-ffmpeg, "
            f"or set {FFMPEG_ENV_VAR}."
        )
    path, source = found
    logger.debug("Using ffmpeg from %s: %s", source.value, path)
    return path


def _parse_codec_list(output: str) -> set[str]:
    """Parse ffmpeg -encoders output."""
    # Format: " V....D libwebp_anim    libwebp WebP image (codec webp)"
    compiled = re.compile(r"\s+[VASFXBDI.]{6}\s+(\w[\w-]*)")
    return {
        match.group(1).casefold()
        for line in output.split("\n")
        if (match := compiled.match(line))
    }


def _run_detection(args: list[str]) -> tuple[str, str, int]:
    """Run a detection command, folding every failure into a return code."""
    try:
        return run_command(args, timeout=DETECTION_TIMEOUT)
    except subprocess.TimeoutExpired:
        return "", "timeout", -1
    except OSError as e:
        return "", str(e), -1


def detect_ffmpeg(
    configured_path: Path | None = None,
    env_reader: EnvReader | None = None,
) -> FFmpegInfo:
    """Detect ffmpeg, its version, and its WebP support.

    Args:
        configured_path: Explicit path from the CLI or config file.
        env_reader: Optional EnvReader for testing.

    Returns:
        FFmpegInfo describing the resolved executable.
    """
    info = FFmpegInfo(detected_at=datetime.now(timezone.utc))

    found = find_ffmpeg(configured_path, env_reader)
    if found is None:
        info.status = ToolStatus.MISSING
        info.status_message = "ffmpeg not found"
        return info

    info.path, info.source = found

    stdout, stderr, rc = _run_detection([str(info.path), "-version"])
    if rc != 0:
        info.status = ToolStatus.ERROR
        info.status_message = f"Failed to get ffmpeg version: {stderr.strip()}"
        return info

    version_match = re.search(r"ffmpeg version (\S+)", stdout)
    if version_match:
        info.version = version_match.group(1)
        info.version_tuple = parse_version_string(info.version)
        if info.version_tuple is None:
            logger.warning("Could not parse ffmpeg version '%s'", info.version)

    if info.version_tuple:
        info.supports_fps_mode = info.version_tuple >= (5, 1)

    stdout, stderr, rc = _run_detection([str(info.path), "-hide_banner", "-encoders"])
    if rc == 0:
        info.encoders = _parse_codec_list(stdout)
    else:
        logger.warning("Failed to enumerate ffmpeg encoders: %s", stderr)

    info.status = ToolStatus.AVAILABLE
    logger.debug(
        "FFmpeg %s: fps_mode=%s, libwebp=%s",
        info.version,
        info.supports_fps_mode,
        info.has_libwebp,
    )
    return info
