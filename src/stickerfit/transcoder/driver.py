"""Size-fitting transcoder driver.

Searches the (duration, compression) grid for the first encoding that fits
a byte budget. Durations are tried longest first, and within one duration
compression escalates from mild to aggressive, so the accepted result is
the longest clip at the mildest compression that fits.

The budget is soft: when nothing fits, the fallback candidate is returned
instead of an error. ConversionFailure is raised only when no attempt
produced any output.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from stickerfit.domain import (
    AttemptRecord,
    AttemptResult,
    ConversionReport,
    ConversionState,
)
from stickerfit.executor.codec import WebpStickerCodec
from stickerfit.executor.exceptions import ConversionFailure, EncodeFailure
from stickerfit.executor.scratch import ScratchManager, ScratchPair
from stickerfit.logging.context import conversion_context
from stickerfit.tools.detection import ToolNotFoundError, detect_ffmpeg
from stickerfit.transcoder.models import ConversionRequest, iter_parameter_grid

if TYPE_CHECKING:
    from stickerfit.config.env import EnvReader
    from stickerfit.config.models import TranscoderConfig
    from stickerfit.executor.codec import StickerCodec

logger = logging.getLogger(__name__)


def _transition(state: ConversionState, **context: object) -> None:
    logger.debug("State -> %s", state.value, extra={"state": state.value, **context})


class SizeFittingTranscoder:
    """Converts animated media into a WebP sticker under a size budget.

    The instance holds configuration and collaborators only. Every call
    allocates its own scratch pair, so one transcoder can serve concurrent
    conversions from threads or from convert_async().

    Example:
        transcoder = SizeFittingTranscoder.from_config(TranscoderConfig())
        webp = transcoder.convert(mp4_bytes)
    """

    def __init__(
        self,
        config: TranscoderConfig,
        codec: StickerCodec,
        scratch: ScratchManager | None = None,
    ) -> None:
        """Initialize the transcoder.

        Args:
            config: Search schedule, budget and scratch settings.
            codec: Encoder invoked once per grid point.
            scratch: Scratch manager. Built from config.scratch_dir if None.
        """
        self.config = config
        self.codec = codec
        self.scratch = scratch or ScratchManager(config.scratch_dir)

    @classmethod
    def from_config(
        cls,
        config: TranscoderConfig,
        env_reader: EnvReader | None = None,
    ) -> SizeFittingTranscoder:
        """Build a transcoder backed by the real ffmpeg codec.

        Raises:
            ToolNotFoundError: If ffmpeg cannot be resolved or does not run.
        """
        info = detect_ffmpeg(config.codec_path, env_reader)
        if not info.is_available() or info.path is None:
            raise ToolNotFoundError(info.status_message or "ffmpeg not available")
        if info.encoders and not info.has_libwebp:
            logger.warning(
                "ffmpeg at %s does not list the libwebp encoder; "
                "conversions will fail",
                info.path,
            )

        codec = WebpStickerCodec(
            info.path,
            fps=config.fps,
            max_dimension=config.max_dimension,
            canvas_size=config.canvas_size,
            compression_level=config.compression_level,
            timeout=config.encode_timeout,
            use_fps_mode=info.supports_fps_mode,
        )
        return cls(config, codec, ScratchManager(config.scratch_dir))

    def convert(self, input_bytes: bytes, budget_bytes: int | None = None) -> bytes:
        """Convert media bytes into an animated WebP sticker.

        Args:
            input_bytes: Raw input media (video or GIF).
            budget_bytes: Target ceiling in bytes. Defaults to the configured
                budget.

        Returns:
            WebP bytes: the first result within budget, or the fallback
            candidate when nothing fits.

        Raises:
            ValueError: If the budget is not a positive integer.
            ConversionFailure: If the input is empty, cannot be persisted, or
                every encoding attempt failed.
        """
        return self.convert_with_report(input_bytes, budget_bytes).data

    async def convert_async(
        self, input_bytes: bytes, budget_bytes: int | None = None
    ) -> bytes:
        """Run convert() in a worker thread and await its single outcome."""
        return await asyncio.to_thread(self.convert, input_bytes, budget_bytes)

    def convert_with_report(
        self, input_bytes: bytes, budget_bytes: int | None = None
    ) -> ConversionReport:
        """Convert media bytes and describe every attempt made.

        Same contract as convert(), returning a ConversionReport.
        """
        budget = self.config.budget_bytes if budget_bytes is None else budget_bytes
        if isinstance(budget, bool) or not isinstance(budget, int) or budget <= 0:
            raise ValueError(f"budget_bytes must be a positive integer, got {budget!r}")
        if not input_bytes:
            raise ConversionFailure("Input media is empty")

        request = ConversionRequest(data=bytes(input_bytes))
        with conversion_context(request.request_id):
            _transition(ConversionState.IDLE, input_bytes=request.size)
            allocated = False
            try:
                with self.scratch.scratch(request.request_id) as scratch:
                    allocated = True
                    _transition(ConversionState.SCRATCH_ALLOCATED)
                    self._persist_input(scratch, request)
                    return self._search(scratch, budget)
            except OSError as e:
                if allocated:
                    raise
                raise ConversionFailure(
                    f"Could not create scratch directory {self.scratch.directory}: {e}"
                ) from e
            finally:
                if allocated:
                    _transition(ConversionState.SCRATCH_RELEASED)

    def _persist_input(self, scratch: ScratchPair, request: ConversionRequest) -> None:
        try:
            scratch.input_path.write_bytes(request.data)
        except OSError as e:
            raise ConversionFailure(
                f"Could not persist input to {scratch.input_path}: {e}"
            ) from e

    def _search(self, scratch: ScratchPair, budget: int) -> ConversionReport:
        """Walk the parameter grid until a result fits or the grid runs out."""
        keep_smallest = self.config.fallback == "smallest"
        best: AttemptResult | None = None
        last_error: EncodeFailure | None = None
        records: list[AttemptRecord] = []

        for index, pair in enumerate(iter_parameter_grid(self.config)):
            _transition(ConversionState.ENCODING, attempt=index, pair=str(pair))
            start_time = time.monotonic()
            try:
                result = self.codec.invoke(
                    scratch.input_path, scratch.output_path, pair
                )
            except EncodeFailure as e:
                last_error = e
                records.append(
                    AttemptRecord(
                        index=index,
                        pair=pair,
                        error=str(e),
                        elapsed_seconds=time.monotonic() - start_time,
                    )
                )
                _transition(ConversionState.ENCODE_FAILED, attempt=index)
                logger.warning(
                    "%s",
                    e,
                    extra={"returncode": e.returncode, "timed_out": e.timed_out},
                )
                continue

            records.append(
                AttemptRecord(
                    index=index,
                    pair=pair,
                    size=result.size,
                    elapsed_seconds=time.monotonic() - start_time,
                )
            )
            if best is None or not keep_smallest or result.size < best.size:
                best = result
            _transition(
                ConversionState.SIZE_CHECKED,
                size_bytes=result.size,
                budget_bytes=budget,
            )

            if result.size <= budget:
                _transition(ConversionState.ACCEPTED)
                logger.info(
                    "Accepted %s: %d bytes (budget %d) after %d attempts",
                    pair,
                    result.size,
                    budget,
                    index + 1,
                )
                return ConversionReport(
                    result=result,
                    accepted=True,
                    budget_bytes=budget,
                    attempts=tuple(records),
                )

        _transition(ConversionState.EXHAUSTED)
        if best is None:
            raise ConversionFailure(
                f"All {len(records)} encoding attempts failed",
                attempts=len(records),
                last_error=last_error,
            ) from last_error

        logger.info(
            "No attempt fit the %d byte budget; returning %s at %d bytes",
            budget,
            best.pair,
            best.size,
            extra={"fallback": self.config.fallback},
        )
        return ConversionReport(
            result=best,
            accepted=False,
            budget_bytes=budget,
            attempts=tuple(records),
        )
