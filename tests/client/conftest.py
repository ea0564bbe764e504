"""Fixtures for upload engine tests: an in-memory fake of IntrayClient."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

from intray.client.api import RejectedError, TransportError, UploadJob
from intray.core.chunking import chunk_count


class FakeClient:
    """Records protocol calls and fails them on demand.

    Attributes:
        calls: Every call as a tuple, in the order the server saw them.
        chunks: Received chunk bytes by (file_token, index).
    """

    def __init__(
        self,
        start_error: Exception | None = None,
        finish_error: Exception | None = None,
        chunk_failures: dict[int, int] | None = None,
        chunk_delay: float = 0.0,
        on_chunk: Callable[[str, int], None] | None = None,
    ) -> None:
        self.start_error = start_error
        self.finish_error = finish_error
        self.chunk_failures = dict(chunk_failures or {})
        self.chunk_delay = chunk_delay
        self.on_chunk = on_chunk
        self.calls: list[tuple[Any, ...]] = []
        self.chunks: dict[tuple[str, int], bytes] = {}
        self._lock = threading.Lock()

    def _record(self, *call: Any) -> None:
        with self._lock:
            self.calls.append(call)

    def start_upload(self, file_name: str, file_size: int, chunk_size: int) -> UploadJob:
        self._record("start", file_name, file_size, chunk_size)
        if self.start_error:
            raise self.start_error
        return UploadJob(
            file_token=f"token-{file_name}",
            chunk_size=chunk_size,
            chunk_count=chunk_count(file_size, chunk_size),
        )

    def upload_chunk(self, file_token: str, chunk_index: int, data: bytes) -> None:
        self._record("chunk", file_token, chunk_index, len(data))
        if self.on_chunk:
            self.on_chunk(file_token, chunk_index)
        if self.chunk_delay:
            time.sleep(self.chunk_delay)
        with self._lock:
            remaining = self.chunk_failures.get(chunk_index, 0)
            if remaining:
                self.chunk_failures[chunk_index] = remaining - 1
                raise TransportError(f"connection reset on chunk {chunk_index}")
            self.chunks[(file_token, chunk_index)] = data

    def finish_upload(self, file_token: str) -> None:
        self._record("finish", file_token)
        if self.finish_error:
            raise self.finish_error

    def upload_full(self, file_name: str, data: bytes) -> int:
        self._record("full", file_name, len(data))
        with self._lock:
            remaining = self.chunk_failures.get(0, 0)
            if remaining:
                self.chunk_failures[0] = remaining - 1
                raise RejectedError("disk full")
        return len(data)

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        """Calls of one kind ("start", "chunk", "finish", "full")."""
        with self._lock:
            return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def make_client() -> Callable[..., FakeClient]:
    """Build a FakeClient with the given failure behavior."""
    return FakeClient
