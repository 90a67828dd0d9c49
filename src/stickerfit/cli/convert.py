"""stickerfit convert command.

Converts a local file or a downloaded URL into an animated WebP sticker.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

import click

from stickerfit.cli.exit_codes import ExitCode
from stickerfit.config import ConfigError, StickerfitConfig, get_config
from stickerfit.core.formatting import format_duration, format_file_size
from stickerfit.domain import ConversionReport
from stickerfit.executor.exceptions import ConversionFailure
from stickerfit.media.fetch import FetchError, MediaFetcher
from stickerfit.tools import ToolNotFoundError
from stickerfit.transcoder import SizeFittingTranscoder

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_STEM = "sticker"


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _default_output(source: str) -> Path:
    """Pick an output path next to the input, or in the cwd for URLs."""
    if _is_url(source):
        stem = Path(urlparse(source).path).stem or DEFAULT_OUTPUT_STEM
        return Path.cwd() / f"{stem}.webp"
    path = Path(source)
    output = path.with_suffix(".webp")
    if output == path:
        output = path.with_name(f"{path.stem}.sticker.webp")
    return output


def _load_source(source: str, config: StickerfitConfig) -> bytes:
    """Read the input media, exiting with the matching code on failure."""
    if _is_url(source):
        try:
            with MediaFetcher.from_config(config.fetch) as fetcher:
                fetched = fetcher.fetch(source)
        except FetchError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(ExitCode.FETCH_FAILED)
        logger.info(
            "Downloaded %s (%s, %s)",
            fetched.url,
            fetched.content_type or "unknown type",
            format_file_size(len(fetched.data)),
        )
        return fetched.data

    path = Path(source).expanduser()
    if not path.is_file():
        click.echo(f"Error: File not found: {source}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)
    try:
        return path.read_bytes()
    except OSError as e:
        click.echo(f"Error: Cannot read {path}: {e}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)


def _echo_summary(report: ConversionReport, output: Path) -> None:
    pair = report.result.pair
    elapsed = sum(a.elapsed_seconds for a in report.attempts)
    status = "✓" if report.accepted else "⚠"
    click.echo(
        f"{status} Wrote {output} ({format_file_size(report.size)}, "
        f"{pair.duration_seconds}s, quality {pair.quality})"
    )
    click.echo(
        f"  Attempts: {len(report.attempts)} "
        f"({report.failed_attempts} failed) in {format_duration(elapsed)}"
    )
    if not report.accepted:
        click.echo(
            f"  Over budget: {format_file_size(report.size)} > "
            f"{format_file_size(report.budget_bytes)}"
        )


@click.command("convert")
@click.argument("source")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Output file (default: SOURCE with a .webp suffix).",
)
@click.option(
    "--budget",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum output size in bytes (default: 1536000).",
)
@click.option(
    "--ffmpeg",
    "ffmpeg_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to the ffmpeg executable.",
)
@click.option(
    "--scratch-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for temporary files (default: ./tmp).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the conversion report as JSON",
)
@click.pass_context
def convert_command(
    ctx: click.Context,
    source: str,
    output: Path | None,
    budget: int | None,
    ffmpeg_path: Path | None,
    scratch_dir: Path | None,
    json_output: bool,
) -> None:
    """Convert SOURCE (a file path or http(s) URL) into a WebP sticker.

    Exit codes:
      0  - Sticker written within budget
      11 - Invalid configuration
      20 - Input file not found
      30 - ffmpeg not available
      40 - Conversion failed
      41 - URL download failed
      60 - Sticker written, but over budget
    """
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        config = get_config(
            config_path,
            ffmpeg_path=ffmpeg_path,
            budget_bytes=budget,
            scratch_dir=scratch_dir,
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    data = _load_source(source, config)
    output = output or _default_output(source)

    try:
        transcoder = SizeFittingTranscoder.from_config(config.transcoder)
    except ToolNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)

    try:
        report = transcoder.convert_with_report(data)
    except ConversionFailure as e:
        click.echo(f"Error: {e}", err=True)
        if e.last_error is not None and e.last_error.stderr:
            click.echo(e.last_error.stderr, err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(report.data)
    except OSError as e:
        click.echo(f"Error: Cannot write {output}: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    if json_output:
        click.echo(json.dumps({"output": str(output), **report.to_dict()}, indent=2))
    else:
        _echo_summary(report, output)

    sys.exit(ExitCode.SUCCESS if report.accepted else ExitCode.WARNINGS)
