"""Configuration utilities for intray CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Any

from intray.core.config import UploadConfig

# Keys accepted in config.json besides the UploadConfig fields
SERVER_KEYS = ("server_url", "timeout")


def get_config_dir() -> Path:
    """Get the configuration directory for intray.

    Returns:
        Path to ~/.intray or equivalent.
    """
    return Path.home() / ".intray"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def config_keys() -> list[str]:
    """Every key the config file may hold."""
    return [*SERVER_KEYS, *(f.name for f in fields(UploadConfig))]


def parse_value(value: str) -> Any:
    """Convert a command-line string to int or float when it looks numeric."""
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value
