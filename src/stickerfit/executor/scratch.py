"""Scratch artifact management for conversions.

Each conversion gets one input/output path pair in the scratch directory.
Names carry a per-request unique token, so concurrent conversions never
collide and no locking is needed. Release is best-effort and never raises.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from stickerfit.executor.exceptions import CleanupFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScratchPair:
    """Input and output locations owned by one conversion."""

    input_path: Path
    output_path: Path
    token: str


def new_token() -> str:
    """Generate a per-request unique token."""
    return uuid.uuid4().hex


class ScratchManager:
    """Allocates and releases scratch artifacts in a single directory.

    The manager holds no per-request state; one instance can be shared by
    any number of concurrent conversions.
    """

    def __init__(
        self,
        directory: Path,
        input_suffix: str = ".mp4",
        output_suffix: str = ".webp",
    ) -> None:
        """Initialize the manager.

        Args:
            directory: Scratch directory. Created on first allocation.
            input_suffix: File suffix for the persisted input.
            output_suffix: File suffix for the encoder output.
        """
        self.directory = Path(directory)
        self.input_suffix = input_suffix
        self.output_suffix = output_suffix

    def allocate(self, request_id: str | None = None) -> ScratchPair:
        """Allocate a scratch pair for one conversion.

        The files themselves are not created; only the directory is.

        Args:
            request_id: Unique token to embed in the names. A fresh uuid4
                token is generated when None.

        Returns:
            ScratchPair with two distinct paths.

        Raises:
            OSError: If the scratch directory cannot be created.
        """
        token = request_id or new_token()
        self.directory.mkdir(parents=True, exist_ok=True)
        pair = ScratchPair(
            input_path=self.directory / f"in_{token}{self.input_suffix}",
            output_path=self.directory / f"out_{token}{self.output_suffix}",
            token=token,
        )
        logger.debug(
            "Allocated scratch pair %s",
            token,
            extra={
                "input_path": str(pair.input_path),
                "output_path": str(pair.output_path),
            },
        )
        return pair

    def release(self, pair: ScratchPair) -> None:
        """Delete both artifacts of a pair, suppressing any error.

        Missing files are not errors. Each artifact is attempted once even
        if the other one fails.

        Args:
            pair: The pair returned by allocate().
        """
        for path in (pair.input_path, pair.output_path):
            try:
                _remove(path)
            except CleanupFailure as e:
                logger.warning("%s", e, extra={"scratch_path": str(e.path)})
        logger.debug("Released scratch pair %s", pair.token)

    @contextmanager
    def scratch(self, request_id: str | None = None) -> Iterator[ScratchPair]:
        """Allocate a pair and release it on every exit path.

        Args:
            request_id: Optional unique token, see allocate().

        Yields:
            The allocated ScratchPair.

        Example:
            with manager.scratch() as pair:
                pair.input_path.write_bytes(data)
                codec.invoke(pair.input_path, pair.output_path, params)
        """
        pair = self.allocate(request_id)
        try:
            yield pair
        finally:
            self.release(pair)


def _remove(path: Path) -> None:
    """Unlink a file, treating an already-missing file as success.

    Raises:
        CleanupFailure: If the file exists but cannot be removed.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise CleanupFailure(path, str(e)) from e
