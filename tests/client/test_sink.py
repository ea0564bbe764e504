"""Tests for upload callbacks dispatch."""

from __future__ import annotations

import logging

import pytest

from intray.client.upload.sink import LoggingSink, ProgressSink, UploadCallbacks
from intray.client.upload.types import UploadError


class TestProgressSink:
    """Tests for ProgressSink class."""

    def test_dispatches_to_callbacks(self) -> None:
        """Each event reaches its callback with the task id."""
        events: list[tuple[str, int, object]] = []
        sink = ProgressSink(
            UploadCallbacks(
                on_progress=lambda t, p: events.append(("progress", t, p)),
                on_done=lambda t, ms: events.append(("done", t, ms)),
                on_failed=lambda t, e: events.append(("failed", t, str(e))),
            )
        )

        sink.progress(1, 0.5)
        sink.done(1, 12.0)
        sink.failed(2, UploadError("boom"))

        assert events == [
            ("progress", 1, 0.5),
            ("done", 1, 12.0),
            ("failed", 2, "boom"),
        ]

    def test_missing_callbacks_are_skipped(self) -> None:
        """A sink without callbacks accepts every event."""
        sink = ProgressSink()
        sink.progress(1, 1.0)
        sink.done(1, 1.0)
        sink.failed(1, UploadError("boom"))

    def test_callback_exception_is_contained(self, caplog: pytest.LogCaptureFixture) -> None:
        """A raising callback is logged, not propagated."""

        def broken(task_id: int, fraction: float) -> None:
            raise RuntimeError("ui crashed")

        sink = ProgressSink(UploadCallbacks(on_progress=broken))

        with caplog.at_level(logging.ERROR, logger="intray.client.upload.sink"):
            sink.progress(3, 0.25)

        assert "on_progress callback failed for task 3" in caplog.text


class TestLoggingSink:
    """Tests for LoggingSink class."""

    def test_logs_events(self, caplog: pytest.LogCaptureFixture) -> None:
        """Every event becomes a log record."""
        sink = ProgressSink(LoggingSink())

        with caplog.at_level(logging.INFO, logger="intray.client.upload.sink"):
            sink.progress(1, 0.5)
            sink.done(1, 250.0)
            sink.failed(2, UploadError("quota exceeded"))

        assert "Task 1: 50.0%" in caplog.text
        assert "Task 1: done in 250 ms" in caplog.text
        assert "Task 2: failed: quota exceeded" in caplog.text
