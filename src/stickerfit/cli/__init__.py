"""CLI module for stickerfit."""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from stickerfit.cli.exit_codes import ExitCode
from stickerfit.config import ConfigError, get_config
from stickerfit.logging import configure_logging

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the config file, environment and CLI options.

    CLI options override the [logging] section and STICKERFIT_LOG_* values.
    """
    global _logging_configured
    if _logging_configured:
        return

    try:
        logging_config = get_config(config_path).logging
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    overrides: dict = {}
    if log_level:
        overrides["level"] = log_level.lower()
    if log_file:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"

    configure_logging(replace(logging_config, **overrides))
    _logging_configured = True


@click.group()
@click.version_option(package_name="stickerfit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.stickerfit/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """stickerfit - Turn videos and GIFs into size-limited WebP stickers."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    _configure_logging(config_path, log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from stickerfit.cli.convert import convert_command
    from stickerfit.cli.doctor import doctor_command

    main.add_command(convert_command)
    main.add_command(doctor_command)


_register_commands()
