"""Tests for the stickerfit doctor command."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from stickerfit.cli.doctor import doctor_command
from stickerfit.cli.exit_codes import ExitCode
from stickerfit.tools import FFmpegInfo, ToolSource, ToolStatus

DETECT = "stickerfit.cli.doctor.detect_ffmpeg"


def _info(**overrides) -> FFmpegInfo:
    values = {
        "path": Path("/usr/bin/ffmpeg"),
        "source": ToolSource.PATH,
        "version": "6.1.1",
        "version_tuple": (6, 1, 1),
        "status": ToolStatus.AVAILABLE,
        "encoders": {"libwebp", "libwebp_anim", "libx264"},
        "supports_fps_mode": True,
    }
    values.update(overrides)
    return FFmpegInfo(**values)


@pytest.mark.parametrize(
    ("info", "expected"),
    [
        (_info(), ExitCode.SUCCESS),
        (_info(supports_fps_mode=False), ExitCode.WARNINGS),
        (_info(encoders={"libx264"}), ExitCode.TOOL_NOT_AVAILABLE),
        (
            FFmpegInfo(status=ToolStatus.MISSING, status_message="not found"),
            ExitCode.TOOL_NOT_AVAILABLE,
        ),
    ],
)
def test_exit_codes(info: FFmpegInfo, expected: ExitCode) -> None:
    with patch(DETECT, return_value=info):
        result = CliRunner().invoke(doctor_command, [])

    assert result.exit_code == expected, result.output


class TestDoctorOutput:
    def test_ready(self) -> None:
        with patch(DETECT, return_value=_info()):
            result = CliRunner().invoke(doctor_command, [])

        assert "✓ ffmpeg: 6.1.1" in result.output
        assert "/usr/bin/ffmpeg (path)" in result.output
        assert "✓ Ready." in result.output

    def test_missing_ffmpeg_hint(self) -> None:
        info = FFmpegInfo(status=ToolStatus.MISSING, status_message="not found")
        with patch(DETECT, return_value=info):
            result = CliRunner().invoke(doctor_command, [])

        assert "✗ ffmpeg: not found" in result.output
        assert "STICKERFIT_FFMPEG_PATH" in result.output

    def test_no_libwebp_warning(self) -> None:
        with patch(DETECT, return_value=_info(encoders={"libx264"})):
            result = CliRunner().invoke(doctor_command, [])

        assert "✗ libwebp encoder" in result.output
        assert "cannot encode WebP" in result.output

    def test_json(self) -> None:
        with patch(DETECT, return_value=_info()):
            result = CliRunner().invoke(doctor_command, ["--json"])

        data = json.loads(result.output)
        assert data["status"] == "available"
        assert data["has_libwebp"] is True
        assert data["supports_fps_mode"] is True
        assert data["scratch_dir"] == "tmp"

    def test_configured_path_is_passed(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text('[tools]\nffmpeg = "/opt/ffmpeg/bin/ffmpeg"\n')

        with patch(DETECT, return_value=_info()) as detect:
            CliRunner().invoke(doctor_command, [], obj={"config_path": config_file})

        detect.assert_called_once_with(Path("/opt/ffmpeg/bin/ffmpeg"))
