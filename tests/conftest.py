"""Shared test fixtures for stickerfit."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from stickerfit.config import TranscoderConfig
from stickerfit.domain import AttemptResult, ParameterPair
from stickerfit.executor import EncodeFailure, ScratchManager


def default_size(pair: ParameterPair) -> int:
    """Output size that shrinks with compression and with shorter clips.

    10s@q50 -> 2_000_000, 10s@q70 -> 1_200_000, 3s@q80 -> 240_000.
    """
    return pair.duration_seconds * 4_000 * (100 - pair.quality)


class StubCodec:
    """Codec double whose output size is a function of the parameter pair.

    The payload is the persisted input repeated up to the target size, so
    every result can be traced back to the input it was produced from.
    """

    def __init__(
        self,
        size_fn: Callable[[ParameterPair], int] = default_size,
        fail_fn: Callable[[ParameterPair], bool] | None = None,
    ) -> None:
        self.size_fn = size_fn
        self.fail_fn = fail_fn or (lambda pair: False)
        self.calls: list[ParameterPair] = []
        self.paths: list[tuple[Path, Path]] = []
        self._lock = threading.Lock()

    def invoke(
        self, input_path: Path, output_path: Path, pair: ParameterPair
    ) -> AttemptResult:
        with self._lock:
            self.calls.append(pair)
            self.paths.append((input_path, output_path))
        if self.fail_fn(pair):
            output_path.write_bytes(b"partial")
            raise EncodeFailure(pair, "stub failure", returncode=1, stderr="boom")
        payload = input_path.read_bytes()
        size = self.size_fn(pair)
        data = (payload * (size // len(payload) + 1))[:size]
        output_path.write_bytes(data)
        return AttemptResult(pair=pair, data=data)


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Scratch directory that does not exist yet."""
    return tmp_path / "scratch"


@pytest.fixture
def scratch_manager(scratch_dir: Path) -> ScratchManager:
    return ScratchManager(scratch_dir)


@pytest.fixture
def transcoder_config(scratch_dir: Path) -> TranscoderConfig:
    return TranscoderConfig(scratch_dir=scratch_dir)


@pytest.fixture
def stub_codec() -> StubCodec:
    return StubCodec()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's STICKERFIT_* variables and config file out of tests."""
    import os

    for var in list(os.environ):
        if var.startswith("STICKERFIT_"):
            monkeypatch.delenv(var)
    monkeypatch.setenv("STICKERFIT_CONFIG_PATH", str(tmp_path / "no-config.toml"))


@pytest.fixture
def make_codec() -> type[StubCodec]:
    """StubCodec class, for tests that need custom size or failure rules."""
    return StubCodec
