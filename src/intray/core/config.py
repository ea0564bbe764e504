"""Shared configuration classes for intray.

This module defines:
- ServerConfig: Where the intray server lives and how to reach it
- UploadConfig: Chunking, pool size and retry policy of the upload engine
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from intray.core.chunking import DEFAULT_CHUNK_SIZE
from intray.core.types import InvalidConfig

DEFAULT_WORKER_COUNT = 3
DEFAULT_CHUNK_RETRY_LIMIT = 3


@dataclass
class ServerConfig:
    """Configuration for connecting to an intray server.

    Attributes:
        server_url: Base URL of the server (e.g., "http://localhost:8080").
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    server_url: str
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.strip().rstrip("/")
        if not self.server_url:
            raise InvalidConfig("server_url must not be empty")
        if self.timeout <= 0:
            raise InvalidConfig(f"timeout must be positive, got {self.timeout}")

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS."""
        return self.server_url.startswith("https://")


@dataclass
class UploadConfig:
    """Configuration of the upload engine.

    Higher worker_count means more concurrent connections to the server.
    It never changes the per-file guarantee that chunks are sent one at a
    time in ascending order. The pool does not grow with queue depth.

    Attributes:
        chunk_size: Size of each chunk in bytes.
        oneshot_threshold: Files up to this size are sent in a single
            request instead of start/chunk/finish. 0 disables one-shot.
        worker_count: Number of concurrent upload workers.
        chunk_retry_limit: Attempts per chunk before the task fails.
        retry_backoff: Seconds to wait before the first retry (0 = none).
        retry_backoff_multiplier: Backoff growth factor per retry.
        retry_max_backoff: Upper bound for the backoff in seconds.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    oneshot_threshold: int = 0
    worker_count: int = DEFAULT_WORKER_COUNT
    chunk_retry_limit: int = DEFAULT_CHUNK_RETRY_LIMIT
    retry_backoff: float = 0.0
    retry_backoff_multiplier: float = 2.0
    retry_max_backoff: float = 30.0

    def __post_init__(self) -> None:
        """Validate values."""
        for name in ("chunk_size", "oneshot_threshold", "worker_count", "chunk_retry_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfig(f"{name} must be an integer, got {value!r}")
        for name in ("retry_backoff", "retry_backoff_multiplier", "retry_max_backoff"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfig(f"{name} must be a number, got {value!r}")

        if self.chunk_size <= 0:
            raise InvalidConfig(f"chunk_size must be positive, got {self.chunk_size}")
        if self.oneshot_threshold < 0:
            raise InvalidConfig(
                f"oneshot_threshold must not be negative, got {self.oneshot_threshold}"
            )
        if self.worker_count < 1:
            raise InvalidConfig(f"worker_count must be at least 1, got {self.worker_count}")
        if self.chunk_retry_limit < 1:
            raise InvalidConfig(
                f"chunk_retry_limit must be at least 1, got {self.chunk_retry_limit}"
            )
        if self.retry_backoff < 0 or self.retry_max_backoff < 0:
            raise InvalidConfig("retry backoff must not be negative")
        if self.retry_backoff_multiplier < 1:
            raise InvalidConfig(
                f"retry_backoff_multiplier must be >= 1, got {self.retry_backoff_multiplier}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UploadConfig:
        """Create from a config dictionary, ignoring unrelated keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return asdict(self)
