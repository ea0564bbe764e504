"""Config commands for intray CLI.

Commands:
- config show: Print the stored configuration
- config set: Store one configuration value
"""

from __future__ import annotations

import json

import click

from intray.client.cli.config import (
    config_keys,
    get_config_file,
    load_config,
    parse_value,
    save_config,
)


@click.group()
def config() -> None:
    """Show or change the stored configuration."""


@config.command("show")
def show() -> None:
    """Print the configuration file."""
    click.echo(f"# {get_config_file()}")
    click.echo(json.dumps(load_config(), indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
def set_value(key: str, value: str) -> None:
    """Store KEY = VALUE in the configuration file."""
    if key not in config_keys():
        raise click.BadParameter(
            f"unknown key, expected one of: {', '.join(config_keys())}",
            param_hint="KEY",
        )

    stored = load_config()
    stored[key] = value.rstrip("/") if key == "server_url" else parse_value(value)
    save_config(stored)
    click.echo(f"{key} = {stored[key]}")
