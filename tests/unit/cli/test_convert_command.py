"""Tests for the stickerfit convert command."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from stickerfit.cli.convert import _default_output, convert_command
from stickerfit.cli.exit_codes import ExitCode
from stickerfit.media.fetch import FetchedMedia, FetchError
from stickerfit.tools import ToolNotFoundError
from stickerfit.transcoder import SizeFittingTranscoder

FROM_CONFIG = "stickerfit.cli.convert.SizeFittingTranscoder.from_config"
FETCH = "stickerfit.cli.convert.MediaFetcher.fetch"


@pytest.fixture
def clip(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"fake-mp4-payload")
    return path


@pytest.fixture
def stub_transcoder(stub_codec):
    """Patch transcoder construction to use the stub codec."""
    with patch(
        FROM_CONFIG,
        side_effect=lambda config: SizeFittingTranscoder(config, stub_codec),
    ) as mock:
        yield mock


def _invoke(*args: str, obj: dict | None = None):
    runner = CliRunner()
    return runner.invoke(convert_command, list(args), obj=obj)


class TestDefaultOutput:
    def test_file_gets_webp_suffix(self) -> None:
        assert _default_output("videos/clip.mp4") == Path("videos/clip.webp")

    def test_webp_input_is_not_overwritten(self) -> None:
        assert _default_output("anim.webp") == Path("anim.sticker.webp")

    def test_url_uses_path_stem(self) -> None:
        output = _default_output("https://example.com/media/cat.gif?x=1")
        assert output == Path.cwd() / "cat.webp"

    def test_url_without_path(self) -> None:
        output = _default_output("https://example.com/")
        assert output == Path.cwd() / "sticker.webp"


class TestConvertCommand:
    """Tests for convert exit codes and output."""

    def test_help(self) -> None:
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "SOURCE" in result.output

    def test_writes_sticker_within_budget(
        self, clip: Path, tmp_path: Path, stub_transcoder
    ) -> None:
        """First fitting attempt is written next to the input."""
        result = _invoke(str(clip), "--scratch-dir", str(tmp_path / "scratch"))

        assert result.exit_code == ExitCode.SUCCESS, result.output
        output = tmp_path / "clip.webp"
        assert output.stat().st_size == 1_200_000
        assert "✓ Wrote" in result.output
        assert "quality 70" in result.output

    def test_explicit_output_path(
        self, clip: Path, tmp_path: Path, stub_transcoder
    ) -> None:
        target = tmp_path / "out" / "sticker.webp"

        result = _invoke(
            str(clip), "-o", str(target), "--scratch-dir", str(tmp_path / "s")
        )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert target.is_file()

    def test_over_budget_warns(
        self, clip: Path, tmp_path: Path, stub_transcoder
    ) -> None:
        """Nothing fits: the fallback is written and the exit code warns."""
        result = _invoke(
            str(clip), "--budget", "1000", "--scratch-dir", str(tmp_path / "s")
        )

        assert result.exit_code == ExitCode.WARNINGS
        assert (tmp_path / "clip.webp").stat().st_size == 240_000
        assert "Over budget" in result.output

    def test_json_report(self, clip: Path, tmp_path: Path, stub_transcoder) -> None:
        output = tmp_path / "report.webp"

        result = _invoke(
            str(clip),
            "-o",
            str(output),
            "--json",
            "--scratch-dir",
            str(tmp_path / "s"),
        )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        data = json.loads(result.output)
        assert data["output"] == str(output)
        assert data["accepted"] is True
        assert data["size_bytes"] == 1_200_000
        assert data["duration_seconds"] == 10
        assert data["quality"] == 70
        assert len(data["attempts"]) == 3

    def test_rejects_non_positive_budget(self, clip: Path) -> None:
        result = _invoke(str(clip), "--budget", "0")
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        result = _invoke(str(tmp_path / "nope.mp4"))

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "File not found" in result.output

    def test_ffmpeg_unavailable(self, clip: Path) -> None:
        with patch(FROM_CONFIG, side_effect=ToolNotFoundError("ffmpeg not found")):
            result = _invoke(str(clip))

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert "ffmpeg not found" in result.output

    def test_every_attempt_fails(self, clip: Path, tmp_path: Path, make_codec) -> None:
        codec = make_codec(fail_fn=lambda pair: True)
        with patch(
            FROM_CONFIG,
            side_effect=lambda config: SizeFittingTranscoder(config, codec),
        ):
            result = _invoke(str(clip), "--scratch-dir", str(tmp_path / "s"))

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "All 24 encoding attempts failed" in result.output
        assert "boom" in result.output
        assert not (tmp_path / "clip.webp").exists()

    def test_invalid_config_file(self, clip: Path, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[transcoder]\nquality_start = 500\n")

        result = _invoke(str(clip), obj={"config_path": config_file})

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Invalid configuration" in result.output

    def test_float_budget_in_config_file(self, clip: Path, tmp_path: Path) -> None:
        """A float budget is a config error, not a crash during the search."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[transcoder]\nbudget_bytes = 1500000.0\n")

        result = _invoke(str(clip), obj={"config_path": config_file})

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "budget_bytes must be an integer" in result.output


class TestConvertUrl:
    def test_downloads_and_converts(
        self, tmp_path: Path, stub_transcoder
    ) -> None:
        fetched = FetchedMedia(b"gif-bytes", "image/gif", "https://e.com/cat.gif")
        output = tmp_path / "cat.webp"

        with patch(FETCH, return_value=fetched) as fetch:
            result = _invoke(
                "https://e.com/cat.gif",
                "-o",
                str(output),
                "--scratch-dir",
                str(tmp_path / "s"),
            )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        fetch.assert_called_once_with("https://e.com/cat.gif")
        assert output.read_bytes().startswith(b"gif-bytes")

    def test_download_failure(self) -> None:
        with patch(FETCH, side_effect=FetchError("HTTP 404 downloading x")):
            result = _invoke("https://e.com/missing.gif")

        assert result.exit_code == ExitCode.FETCH_FAILED
        assert "HTTP 404" in result.output
