"""Chunked file upload over the start/chunk/finish protocol.

This module provides:
- FileUploader: Drives one task through start, chunk uploads and finish

Per task the uploader moves through START -> UPLOADING(i) -> FINISHING -> DONE.
Any phase may end the task with an UploadError instead:
- InitError: start rejected or unreachable (never retried)
- ChunkError: one chunk failed chunk_retry_limit times in a row
- FinishError: finish rejected or unreachable (never retried)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from intray.client.api import APIError
from intray.client.upload.retry import retry_with_backoff
from intray.client.upload.types import ChunkError, FinishError, InitError
from intray.core.chunking import ChunkRange, slice_chunks
from intray.core.config import UploadConfig

if TYPE_CHECKING:
    from intray.client.api import IntrayClient, UploadJob
    from intray.client.upload.types import Task, UploadFile

logger = logging.getLogger(__name__)

# Failures worth another attempt for a single chunk
CHUNK_RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (APIError, OSError)


class FileUploader:
    """Uploads files chunk by chunk.

    Chunks of one file are sent strictly in ascending order, one at a
    time. Partially uploaded files are left to the server to clean up.
    """

    def __init__(
        self,
        client: IntrayClient,
        config: UploadConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the uploader.

        Args:
            client: HTTP client for server communication.
            config: Chunking and retry policy.
            sleep: Function used to wait between retries.
        """
        self._client = client
        self._config = config or UploadConfig()
        self._sleep = sleep

    @property
    def config(self) -> UploadConfig:
        """Chunking and retry policy."""
        return self._config

    def upload(self, task: Task) -> float:
        """Upload the file of an IN_PROGRESS task.

        Progress is reported through task.set_progress() after every
        successful chunk, ending at exactly 1.0.

        Args:
            task: The task to run, already claimed by the caller.

        Returns:
            Elapsed wall-clock time in milliseconds, measured from the start call.

        Raises:
            InitError: If the start phase fails.
            ChunkError: If a chunk exhausts its retry budget.
            FinishError: If the finish phase fails.
        """
        upload_file = task.file
        threshold = self._config.oneshot_threshold
        started_at = time.monotonic()

        if threshold and 0 < upload_file.size <= threshold:
            self._upload_oneshot(task)
        else:
            self._upload_chunked(task)

        elapsed_ms = (time.monotonic() - started_at) * 1000
        size_mib = upload_file.size / 1024 / 1024
        logger.info(
            f"Uploaded {upload_file.name} ({size_mib:.2f} MiB) in {elapsed_ms / 1000:.2f}s"
        )
        return elapsed_ms

    def _upload_chunked(self, task: Task) -> None:
        """Run start, every chunk, then finish."""
        upload_file = task.file
        chunk_size = self._config.chunk_size
        chunks = slice_chunks(upload_file.size, chunk_size)

        logger.info(
            f"Task {task.id}: uploading {upload_file.name} "
            f"({upload_file.size} bytes, {len(chunks)} chunks)"
        )

        try:
            job = self._client.start_upload(upload_file.name, upload_file.size, chunk_size)
        except APIError as e:
            raise InitError(f"Cannot start upload of {upload_file.name}: {e}", e) from e

        for chunk in chunks:
            self._upload_chunk_with_retry(job, upload_file, chunk)
            task.set_progress((chunk.index + 1) / len(chunks))
            logger.debug(f"Task {task.id}: uploaded {chunk.index + 1}/{len(chunks)} chunks")

        try:
            self._client.finish_upload(job.file_token)
        except APIError as e:
            raise FinishError(f"Cannot finish upload of {upload_file.name}: {e}", e) from e

    def _upload_chunk_with_retry(
        self,
        job: UploadJob,
        upload_file: UploadFile,
        chunk: ChunkRange,
    ) -> None:
        """Upload one chunk, retrying up to chunk_retry_limit attempts.

        Raises:
            ChunkError: If every attempt failed.
        """

        def do_upload() -> None:
            data = upload_file.read(chunk)
            self._client.upload_chunk(job.file_token, chunk.index, data)

        self._retry(do_upload, chunk.index, f"{upload_file.name} chunk {chunk.index}")

    def _upload_oneshot(self, task: Task) -> None:
        """Send a small file in a single request, counted as one chunk."""
        upload_file = task.file
        logger.info(f"Task {task.id}: uploading {upload_file.name} in one request")

        def do_upload() -> None:
            written = self._client.upload_full(upload_file.name, upload_file.read_all())
            if written != upload_file.size:
                logger.warning(
                    f"Server wrote {written} bytes of {upload_file.name}, "
                    f"expected {upload_file.size}"
                )

        self._retry(do_upload, 0, f"{upload_file.name} one-shot")
        task.set_progress(1.0)

    def _retry(self, func: Callable[[], None], index: int, description: str) -> None:
        config = self._config
        try:
            retry_with_backoff(
                func,
                max_attempts=config.chunk_retry_limit,
                initial_backoff=config.retry_backoff,
                max_backoff=config.retry_max_backoff,
                backoff_multiplier=config.retry_backoff_multiplier,
                retryable_exceptions=CHUNK_RETRYABLE_EXCEPTIONS,
                description=description,
                sleep=self._sleep,
            )
        except CHUNK_RETRYABLE_EXCEPTIONS as e:
            raise ChunkError(index, e) from e
