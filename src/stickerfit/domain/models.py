"""Domain models for stickerfit.

Frozen value types describing the search over encoder parameters and the
outcome of each attempt.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ParameterPair:
    """One (duration cap, compression level) point of the search grid."""

    duration_seconds: int
    """Maximum clip length passed to the encoder."""

    quality: int
    """Compression level; higher values compress more aggressively."""

    def __str__(self) -> str:
        return f"{self.duration_seconds}s@q{self.quality}"


@dataclass(frozen=True)
class AttemptResult:
    """Bytes produced by one successful encoder invocation."""

    pair: ParameterPair
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        """Size of the encoded artifact in bytes."""
        return len(self.data)


@dataclass(frozen=True)
class AttemptRecord:
    """What happened at one grid point, successful or not."""

    index: int
    pair: ParameterPair
    size: int | None = None
    error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ConversionReport:
    """Full outcome of a conversion.

    accepted is True when result fits the budget; False means the search
    exhausted the grid and result is the fallback candidate.
    """

    result: AttemptResult
    accepted: bool
    budget_bytes: int
    attempts: tuple[AttemptRecord, ...] = ()

    @property
    def data(self) -> bytes:
        return self.result.data

    @property
    def size(self) -> int:
        return self.result.size

    @property
    def failed_attempts(self) -> int:
        return sum(1 for a in self.attempts if not a.succeeded)

    def to_dict(self) -> dict:
        """Serialize the report (without the payload) for JSON output."""
        return {
            "accepted": self.accepted,
            "size_bytes": self.size,
            "budget_bytes": self.budget_bytes,
            "duration_seconds": self.result.pair.duration_seconds,
            "quality": self.result.pair.quality,
            "attempts": [
                {
                    "index": a.index,
                    "duration_seconds": a.pair.duration_seconds,
                    "quality": a.pair.quality,
                    "size_bytes": a.size,
                    "error": a.error,
                    "elapsed_seconds": round(a.elapsed_seconds, 3),
                }
                for a in self.attempts
            ],
        }
