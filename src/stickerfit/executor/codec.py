"""Animated WebP sticker encoding via FFmpeg.

One invocation runs ffmpeg to completion for a single parameter pair and
returns the encoded bytes, or raises EncodeFailure. The argument list is a
pure function of the pair and the codec settings.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - needed for TimeoutExpired
import time
from pathlib import Path
from typing import Protocol

from stickerfit.core.subprocess_utils import run_command
from stickerfit.domain import AttemptResult, ParameterPair
from stickerfit.executor.exceptions import EncodeFailure

logger = logging.getLogger(__name__)

# libwebp -q:v range
WEBP_QUALITY_MIN = 0
WEBP_QUALITY_MAX = 100


class StickerCodec(Protocol):
    """Encoder interface consumed by the transcoder driver."""

    def invoke(
        self, input_path: Path, output_path: Path, pair: ParameterPair
    ) -> AttemptResult:
        """Encode input_path into output_path using one parameter pair.

        Raises:
            EncodeFailure: If the encoder terminates abnormally or produces
                no output.
        """
        ...


def webp_quality_for(compression: int) -> int:
    """Map a compression level onto libwebp's -q:v.

    libwebp treats higher -q:v as higher fidelity, so the scale is inverted:
    compression 50 -> q 50, compression 80 -> q 20.
    """
    return max(WEBP_QUALITY_MIN, min(WEBP_QUALITY_MAX, 100 - compression))


def build_filter_chain(fps: int, max_dimension: int, canvas_size: int) -> str:
    """Build the -vf chain: bounded downscale, fixed fps, square padding.

    Args:
        fps: Output frame rate.
        max_dimension: Longest side after aspect-preserving downscale.
        canvas_size: Side of the transparent square canvas.

    Returns:
        Filter graph string for -vf.
    """
    return ",".join(
        [
            f"scale={max_dimension}:{max_dimension}"
            ":force_original_aspect_ratio=decrease:flags=lanczos",
            f"fps={fps}",
            f"pad={canvas_size}:{canvas_size}:(ow-iw)/2:(oh-ih)/2:color=0x00000000",
            "format=yuva420p",
        ]
    )


class WebpStickerCodec:
    """Encodes video/animation into a looping, silent, square animated WebP."""

    DEFAULT_TIMEOUT: float = 120.0

    def __init__(
        self,
        ffmpeg_path: Path,
        *,
        fps: int = 30,
        max_dimension: int = 512,
        canvas_size: int = 512,
        compression_level: int = 6,
        timeout: float | None = None,
        use_fps_mode: bool = True,
    ) -> None:
        """Initialize the codec.

        Args:
            ffmpeg_path: Path to the ffmpeg executable.
            fps: Fixed output frame rate.
            max_dimension: Longest side of the scaled frame.
            canvas_size: Side of the padded square canvas.
            compression_level: libwebp effort (0-6), constant across attempts.
            timeout: Wall-clock limit per invocation. None uses DEFAULT_TIMEOUT.
            use_fps_mode: Emit -fps_mode (FFmpeg 5.1+) instead of -vsync.
        """
        self.ffmpeg_path = Path(ffmpeg_path)
        self.fps = fps
        self.max_dimension = max_dimension
        self.canvas_size = canvas_size
        self.compression_level = compression_level
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self.use_fps_mode = use_fps_mode

    def build_command(
        self, input_path: Path, output_path: Path, pair: ParameterPair
    ) -> list[str]:
        """Build the ffmpeg argument list for one attempt.

        Args:
            input_path: Persisted input media.
            output_path: Destination, overwritten if present.
            pair: Duration cap and compression level for this attempt.

        Returns:
            Complete command line, executable first.
        """
        sync_args = (
            ["-fps_mode", "passthrough"] if self.use_fps_mode else ["-vsync", "0"]
        )
        return [
            str(self.ffmpeg_path),
            "-hide_banner",
            "-loglevel",
            "error",
            "-y",
            "-i",
            str(input_path),
            "-t",
            str(pair.duration_seconds),
            "-an",
            "-vf",
            build_filter_chain(self.fps, self.max_dimension, self.canvas_size),
            "-c:v",
            "libwebp",
            "-lossless",
            "0",
            "-compression_level",
            str(self.compression_level),
            "-q:v",
            str(webp_quality_for(pair.quality)),
            "-preset",
            "picture",
            "-loop",
            "0",
            *sync_args,
            "-f",
            "webp",
            str(output_path),
        ]

    def invoke(
        self, input_path: Path, output_path: Path, pair: ParameterPair
    ) -> AttemptResult:
        """Run ffmpeg for one parameter pair and read back the artifact.

        Args:
            input_path: Persisted input media.
            output_path: Scratch output location, overwritten in place.
            pair: Duration cap and compression level.

        Returns:
            AttemptResult with the encoded bytes.

        Raises:
            EncodeFailure: On non-zero exit, timeout, missing executable, or
                missing/empty output.
        """
        cmd = self.build_command(input_path, output_path, pair)
        start_time = time.monotonic()

        # Output of a previous attempt must never be read back as this one's
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            raise EncodeFailure(pair, f"could not clear output path: {e}") from e

        try:
            _stdout, stderr, rc = run_command(cmd, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise EncodeFailure(
                pair,
                f"timed out after {self.timeout}s",
                stderr=_decode(e.stderr),
                timed_out=True,
            ) from e
        except OSError as e:
            raise EncodeFailure(pair, f"could not start ffmpeg: {e}") from e

        if rc != 0:
            raise EncodeFailure(
                pair, f"ffmpeg exited with code {rc}", returncode=rc, stderr=stderr
            )

        try:
            data = output_path.read_bytes()
        except FileNotFoundError as e:
            raise EncodeFailure(
                pair, "ffmpeg produced no output file", returncode=rc, stderr=stderr
            ) from e
        except OSError as e:
            raise EncodeFailure(
                pair, f"could not read output: {e}", returncode=rc
            ) from e

        if not data:
            raise EncodeFailure(
                pair, "ffmpeg produced an empty file", returncode=rc, stderr=stderr
            )

        logger.debug(
            "Encoded %s in %.2fs",
            pair,
            time.monotonic() - start_time,
            extra={"size_bytes": len(data)},
        )
        return AttemptResult(pair=pair, data=data)


def _decode(stream: bytes | str | None) -> str:
    """Normalize captured output attached to TimeoutExpired."""
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream
