"""Request model and parameter grid for the size-fitting transcoder."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stickerfit.domain import ParameterPair
from stickerfit.executor.scratch import new_token

if TYPE_CHECKING:
    from stickerfit.config.models import TranscoderConfig


@dataclass(frozen=True)
class ConversionRequest:
    """Input bytes of one conversion plus its unique request id.

    Owned by the call that created it and never shared across conversions.
    """

    data: bytes = field(repr=False)
    request_id: str = field(default_factory=new_token)

    @property
    def size(self) -> int:
        return len(self.data)


def iter_parameter_grid(config: TranscoderConfig) -> Iterator[ParameterPair]:
    """Yield parameter pairs in search order.

    Durations are the outer loop (longest first); compression escalates
    in the inner loop starting from quality_start at every duration.

    Args:
        config: Transcoder configuration holding both schedules.

    Yields:
        ParameterPair for each grid point, len(durations) *
        max_attempts_per_duration in total.
    """
    for duration in config.durations:
        for step in range(config.max_attempts_per_duration):
            yield ParameterPair(
                duration_seconds=duration,
                quality=config.quality_start + step * config.quality_step,
            )
