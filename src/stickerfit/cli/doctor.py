"""stickerfit doctor command for checking ffmpeg health."""

import json
import sys

import click

from stickerfit.cli.exit_codes import ExitCode
from stickerfit.config import ConfigError, get_config
from stickerfit.tools import FFmpegInfo, detect_ffmpeg


def _format_status(ok: bool) -> str:
    return "✓" if ok else "✗"


def _exit_code_for(info: FFmpegInfo) -> ExitCode:
    if not info.is_available() or not info.has_libwebp:
        return ExitCode.TOOL_NOT_AVAILABLE
    if not info.supports_fps_mode:
        return ExitCode.WARNINGS
    return ExitCode.SUCCESS


@click.command("doctor")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg is available and can encode WebP stickers.

    Exit codes:
      0  - ffmpeg ready
      30 - ffmpeg missing, broken, or built without libwebp
      60 - usable, but older than 5.1 (uses -vsync instead of -fps_mode)
    """
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        config = get_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    info = detect_ffmpeg(config.tools.ffmpeg)
    exit_code = _exit_code_for(info)

    if json_output:
        data = info.to_dict()
        data["scratch_dir"] = str(config.transcoder.scratch_dir)
        click.echo(json.dumps(data, indent=2))
        sys.exit(exit_code)

    click.echo("stickerfit Health Check")
    click.echo("=" * 40)
    click.echo()

    if not info.is_available():
        click.echo(f"  ✗ ffmpeg: {info.status_message or 'not found'}")
        click.echo(
            "    └─ Install ffmpeg or imageio-ffmpeg, or set STICKERFIT_FFMPEG_PATH"
        )
        sys.exit(exit_code)

    source = info.source.value if info.source else "unknown"
    click.echo(f"  ✓ ffmpeg: {info.version or 'unknown version'}")
    click.echo(f"    ├─ Path: {info.path} ({source})")
    click.echo(f"    ├─ {_format_status(info.has_libwebp)} libwebp encoder")
    click.echo(
        f"    └─ {_format_status(info.supports_fps_mode)} -fps_mode "
        f"({'5.1+' if info.supports_fps_mode else 'falls back to -vsync'})"
    )
    click.echo()
    click.echo(f"Scratch directory: {config.transcoder.scratch_dir}")
    click.echo()

    if exit_code == ExitCode.TOOL_NOT_AVAILABLE:
        click.echo("⚠ ffmpeg cannot encode WebP. Conversions will fail.")
    elif exit_code == ExitCode.WARNINGS:
        click.echo("Note: ffmpeg is older than 5.1.")
    else:
        click.echo("✓ Ready.")
    sys.exit(exit_code)
