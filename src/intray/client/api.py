"""HTTP client for the intray server API.

This module provides:
- IntrayClient: HTTP client for the three-phase chunked upload protocol
- UploadJob: Server-issued session for one file upload
- APIError, TransportError, RejectedError: Protocol call failures

Every endpoint answers with a JSON envelope ``{"ok": bool, "error": str}``.
An HTTP or network failure is a TransportError, an ``ok: false`` answer is
a RejectedError carrying the server's message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from intray.core.chunking import chunk_count
from intray.core.config import ServerConfig
from intray.core.types import IntrayError

logger = logging.getLogger(__name__)


class APIError(IntrayError):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(APIError):
    """The request could not be completed (network failure or HTTP error)."""


class RejectedError(APIError):
    """The server answered with ``ok: false``."""


@dataclass
class UploadJob:
    """Upload session returned by the start phase.

    Attributes:
        file_token: Opaque token identifying the session on the server.
        chunk_size: Chunk size announced at start.
        chunk_count: Number of chunks the server expects.
    """

    file_token: str
    chunk_size: int
    chunk_count: int

    @classmethod
    def from_dict(cls, data: dict[str, Any], file_size: int, chunk_size: int) -> UploadJob:
        """Create from a start response envelope."""
        token = data.get("file_token")
        if not token:
            raise RejectedError("Start response carries no file_token")
        return cls(
            file_token=str(token),
            chunk_size=chunk_size,
            chunk_count=chunk_count(file_size, chunk_size),
        )


class IntrayClient:
    """HTTP client for the intray server API.

    One instance may be shared by all upload workers; the underlying
    httpx.Client is thread-safe and pools connections.
    """

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server connection settings.
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
        )

    @property
    def server_url(self) -> str:
        """Base URL of the server."""
        return self._config.server_url

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> IntrayClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        """POST a request and unwrap the ``ok`` envelope.

        Raises:
            TransportError: On network failure, HTTP error status or a
                body that is not a JSON envelope.
            RejectedError: If the server answered ``ok: false``.
        """
        try:
            response = self._client.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}") from e

        if response.status_code >= 400:
            raise TransportError(
                f"POST {url} returned HTTP {response.status_code}",
                response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"POST {url} returned a non-JSON body", response.status_code
            ) from e

        if not isinstance(data, dict):
            raise TransportError(f"POST {url} returned an unexpected body", response.status_code)

        if not data.get("ok"):
            raise RejectedError(str(data.get("error") or "Unknown error"), response.status_code)

        return data

    # === Health check ===

    def health_check(self) -> bool:
        """Check if the server is reachable.

        Returns:
            True if the server answered without an error status.
        """
        try:
            response = self._client.get("/")
            return response.status_code < 400
        except httpx.HTTPError:
            return False

    # === Chunked upload ===

    def start_upload(self, file_name: str, file_size: int, chunk_size: int) -> UploadJob:
        """Open an upload session.

        Args:
            file_name: Name the server should store the file under.
            file_size: Total size in bytes.
            chunk_size: Size of every chunk but the last.

        Returns:
            The upload job with its file token.
        """
        data = self._post(
            "/upload/start",
            json={
                "file_name": file_name,
                "file_size": file_size,
                "chunk_size": chunk_size,
            },
        )
        job = UploadJob.from_dict(data, file_size, chunk_size)
        logger.debug(f"Upload session {job.file_token} opened for {file_name}")
        return job

    def upload_chunk(self, file_token: str, chunk_index: int, data: bytes) -> None:
        """Upload the bytes of one chunk.

        Args:
            file_token: Token from start_upload.
            chunk_index: Index of the chunk.
            data: Raw chunk bytes.
        """
        self._post(
            f"/upload/{quote(file_token, safe='')}/{chunk_index}",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )

    def finish_upload(self, file_token: str) -> None:
        """Close an upload session once every chunk is stored.

        Args:
            file_token: Token from start_upload.
        """
        self._post("/upload/finish", json={"file_token": file_token})

    # === One-shot upload ===

    def upload_full(self, file_name: str, data: bytes) -> int:
        """Upload a whole file in a single request.

        Args:
            file_name: Name to store the file under ("" lets the server pick).
            data: File content.

        Returns:
            Number of bytes the server wrote.
        """
        url = f"/upload/full/{quote(file_name, safe='')}" if file_name else "/upload/full"
        result = self._post(
            url,
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return int(result.get("written") or 0)
