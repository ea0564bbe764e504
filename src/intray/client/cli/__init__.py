"""Command-line interface for intray.

This module provides the main CLI entry point and assembles all commands.

Commands:
- upload: Upload files to the server
- ping: Check that the server answers
- config: Show or change the stored configuration
"""

from __future__ import annotations

import logging

import click

from intray.client.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
)
from intray.client.cli.config_cmd import config
from intray.client.cli.upload import ping, upload

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: int, quiet: bool) -> None:
    """Attach a stderr handler to the intray logger.

    Args:
        verbose: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
        quiet: Only show errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    intray_logger = logging.getLogger("intray")
    for handler in list(intray_logger.handlers):
        intray_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    intray_logger.addHandler(handler)
    intray_logger.setLevel(level)


@click.group()
@click.version_option(package_name="intray")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-vv for debug).")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
def cli(verbose: int, quiet: bool) -> None:
    """intray - Upload files to an intray server, chunk by chunk."""
    setup_logging(verbose, quiet)


cli.add_command(upload)
cli.add_command(ping)
cli.add_command(config)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    "setup_logging",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]
