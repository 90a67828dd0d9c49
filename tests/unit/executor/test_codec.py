"""Tests for the animated WebP sticker codec."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from stickerfit.domain import ParameterPair
from stickerfit.executor.codec import (
    WebpStickerCodec,
    build_filter_chain,
    webp_quality_for,
)
from stickerfit.executor.exceptions import EncodeFailure

RUN_COMMAND = "stickerfit.executor.codec.run_command"


@pytest.fixture
def codec() -> WebpStickerCodec:
    return WebpStickerCodec(Path("/usr/bin/ffmpeg"), timeout=30)


@pytest.fixture
def paths(tmp_path: Path) -> tuple[Path, Path]:
    input_path = tmp_path / "in_tok.mp4"
    input_path.write_bytes(b"video")
    return input_path, tmp_path / "out_tok.webp"


def _value_after(cmd: list[str], flag: str) -> str:
    return cmd[cmd.index(flag) + 1]


class TestWebpQuality:
    """Compression level to libwebp -q:v mapping."""

    def test_inverts_scale(self):
        """Higher compression means lower libwebp quality."""
        assert webp_quality_for(50) == 50
        assert webp_quality_for(80) == 20
        assert webp_quality_for(60) < webp_quality_for(50)

    def test_clamps(self):
        assert webp_quality_for(150) == 0
        assert webp_quality_for(-10) == 100


class TestBuildFilterChain:
    def test_contains_all_stages_in_order(self):
        chain = build_filter_chain(30, 512, 512)
        stages = chain.split(",")

        assert stages[0].startswith("scale=512:512")
        assert "force_original_aspect_ratio=decrease" in stages[0]
        assert stages[1] == "fps=30"
        assert stages[2].startswith("pad=512:512:(ow-iw)/2:(oh-ih)/2")
        assert stages[2].endswith("color=0x00000000")
        assert stages[3] == "format=yuva420p"


class TestBuildCommand:
    """Tests for WebpStickerCodec.build_command."""

    def test_deterministic(self, codec: WebpStickerCodec, paths):
        pair = ParameterPair(8, 60)
        assert codec.build_command(*paths, pair) == codec.build_command(*paths, pair)

    def test_format_constraints(self, codec: WebpStickerCodec, paths):
        """The command encodes a silent, looping, lossy WebP at fixed effort."""
        cmd = codec.build_command(*paths, ParameterPair(8, 60))

        assert cmd[0] == "/usr/bin/ffmpeg"
        assert _value_after(cmd, "-i") == str(paths[0])
        assert _value_after(cmd, "-t") == "8"
        assert _value_after(cmd, "-c:v") == "libwebp"
        assert _value_after(cmd, "-lossless") == "0"
        assert _value_after(cmd, "-compression_level") == "6"
        assert _value_after(cmd, "-q:v") == "40"
        assert _value_after(cmd, "-preset") == "picture"
        assert _value_after(cmd, "-loop") == "0"
        assert _value_after(cmd, "-f") == "webp"
        assert "-an" in cmd
        assert "-y" in cmd
        assert cmd[-1] == str(paths[1])

    def test_fps_mode_for_modern_ffmpeg(self, codec: WebpStickerCodec, paths):
        cmd = codec.build_command(*paths, ParameterPair(10, 50))
        assert _value_after(cmd, "-fps_mode") == "passthrough"
        assert "-vsync" not in cmd

    def test_vsync_for_old_ffmpeg(self, paths):
        codec = WebpStickerCodec(Path("ffmpeg"), use_fps_mode=False)
        cmd = codec.build_command(*paths, ParameterPair(10, 50))
        assert _value_after(cmd, "-vsync") == "0"
        assert "-fps_mode" not in cmd

    def test_custom_geometry(self, paths):
        codec = WebpStickerCodec(
            Path("ffmpeg"), fps=15, max_dimension=256, canvas_size=320
        )
        vf = _value_after(codec.build_command(*paths, ParameterPair(3, 80)), "-vf")
        assert "scale=256:256" in vf
        assert "fps=15" in vf
        assert "pad=320:320" in vf

    def test_default_timeout(self):
        codec = WebpStickerCodec(Path("ffmpeg"))
        assert codec.timeout == WebpStickerCodec.DEFAULT_TIMEOUT


class TestInvoke:
    """Tests for WebpStickerCodec.invoke with run_command mocked."""

    def test_success_returns_output_bytes(self, codec: WebpStickerCodec, paths):
        input_path, output_path = paths

        def fake_run(cmd, timeout):
            output_path.write_bytes(b"RIFFwebp")
            return "", "", 0

        with patch(RUN_COMMAND, side_effect=fake_run) as mock_run:
            result = codec.invoke(input_path, output_path, ParameterPair(10, 50))

        assert result.data == b"RIFFwebp"
        assert result.pair == ParameterPair(10, 50)
        assert mock_run.call_args.kwargs["timeout"] == 30

    def test_nonzero_exit(self, codec: WebpStickerCodec, paths):
        with patch(RUN_COMMAND, return_value=("", "Unknown encoder 'libwebp'", 1)):
            with pytest.raises(EncodeFailure) as exc_info:
                codec.invoke(*paths, ParameterPair(10, 50))

        err = exc_info.value
        assert err.returncode == 1
        assert "libwebp" in err.stderr
        assert err.pair == ParameterPair(10, 50)
        assert not err.timed_out

    def test_timeout(self, codec: WebpStickerCodec, paths):
        expired = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=30, stderr=b"frame=")
        with patch(RUN_COMMAND, side_effect=expired):
            with pytest.raises(EncodeFailure) as exc_info:
                codec.invoke(*paths, ParameterPair(10, 50))

        assert exc_info.value.timed_out
        assert exc_info.value.returncode is None
        assert exc_info.value.stderr == "frame="

    def test_missing_executable(self, codec: WebpStickerCodec, paths):
        with patch(RUN_COMMAND, side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(EncodeFailure, match="could not start ffmpeg"):
                codec.invoke(*paths, ParameterPair(10, 50))

    def test_missing_output(self, codec: WebpStickerCodec, paths):
        with patch(RUN_COMMAND, return_value=("", "", 0)):
            with pytest.raises(EncodeFailure, match="no output file"):
                codec.invoke(*paths, ParameterPair(10, 50))

    def test_empty_output(self, codec: WebpStickerCodec, paths):
        def fake_run(cmd, timeout):
            paths[1].write_bytes(b"")
            return "", "", 0

        with patch(RUN_COMMAND, side_effect=fake_run):
            with pytest.raises(EncodeFailure, match="empty file"):
                codec.invoke(*paths, ParameterPair(10, 50))

    def test_stale_output_is_not_reused(self, codec: WebpStickerCodec, paths):
        """A leftover file from a previous attempt never counts as output."""
        paths[1].write_bytes(b"previous attempt")

        with patch(RUN_COMMAND, return_value=("", "", 0)):
            with pytest.raises(EncodeFailure):
                codec.invoke(*paths, ParameterPair(8, 50))


class TestEncodeFailure:
    def test_keeps_stderr_tail(self):
        stderr = "\n".join(f"line {i}" for i in range(100))
        err = EncodeFailure(ParameterPair(3, 80), "failed", stderr=stderr)

        lines = err.stderr.splitlines()
        assert len(lines) == 20
        assert lines[-1] == "line 99"

    def test_message_names_pair(self):
        err = EncodeFailure(ParameterPair(3, 80), "ffmpeg exited with code 1")
        assert str(err) == "Encoding failed at 3s@q80: ffmpeg exited with code 1"
