"""Exception types for sticker encoding and conversion.

All stickerfit errors inherit from StickerfitError so callers can catch
everything the library raises with one clause.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stickerfit.domain import ParameterPair

# Lines of ffmpeg stderr kept on an EncodeFailure
STDERR_TAIL_LINES = 20


class StickerfitError(Exception):
    """Base exception for stickerfit errors."""


class EncodeFailure(StickerfitError):
    """Raised when one encoder invocation terminates abnormally.

    Attributes:
        pair: Parameter pair of the failed attempt.
        returncode: Process exit code, or None if it never exited normally.
        stderr: Tail of the encoder's diagnostic output.
        timed_out: True if the invocation was killed by the timeout.
    """

    def __init__(
        self,
        pair: ParameterPair,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        self.pair = pair
        self.returncode = returncode
        self.stderr = _tail(stderr)
        self.timed_out = timed_out
        super().__init__(f"Encoding failed at {pair}: {message}")


class ConversionFailure(StickerfitError):
    """Raised when a conversion produced no output at all.

    Either every invocation across the parameter grid failed, or the input
    could not be persisted to scratch storage.

    Attributes:
        attempts: Number of encoder invocations made.
        last_error: The last EncodeFailure seen, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        attempts: int = 0,
        last_error: EncodeFailure | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


class CleanupFailure(StickerfitError):
    """Raised internally when a scratch artifact cannot be deleted.

    Never propagated out of the scratch manager: it is logged and dropped so
    it cannot mask the conversion result.

    Attributes:
        path: The artifact that could not be removed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not remove scratch artifact {path}: {reason}")


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    """Keep the last few lines of diagnostic output."""
    if not text:
        return ""
    return "\n".join(text.strip().splitlines()[-lines:])
