"""Shared pytest fixtures for intray tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def reset_intray_logger() -> Generator[None, None, None]:
    """Undo logging configuration done by CLI invocations."""
    intray_logger = logging.getLogger("intray")
    handlers = list(intray_logger.handlers)
    level = intray_logger.level
    yield
    for handler in list(intray_logger.handlers):
        if handler not in handlers:
            intray_logger.removeHandler(handler)
    intray_logger.setLevel(level)


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Create files of a given size filled with random bytes."""

    def _make_file(name: str = "data.bin", size: int = 0) -> Path:
        path = tmp_path / name
        path.write_bytes(os.urandom(size))
        return path

    return _make_file
