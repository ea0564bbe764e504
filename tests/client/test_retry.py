"""Tests for retry_with_backoff."""

from __future__ import annotations

import logging

import pytest

from intray.client.upload.retry import retry_with_backoff


class Flaky:
    """Callable failing a fixed number of times before returning."""

    def __init__(self, failures: int, exc: type[Exception] = ConnectionError) -> None:
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"failure {self.calls}")
        return "ok"


class TestRetryWithBackoff:
    """Tests for retry_with_backoff function."""

    def test_first_attempt_succeeds(self) -> None:
        """No retry when the call works."""
        func = Flaky(0)
        assert retry_with_backoff(func) == "ok"
        assert func.calls == 1

    def test_succeeds_on_last_attempt(self) -> None:
        """max_attempts - 1 failures still succeed."""
        func = Flaky(2)
        assert retry_with_backoff(func, max_attempts=3) == "ok"
        assert func.calls == 3

    def test_exhaustion_reraises_last_error(self) -> None:
        """After max_attempts failures the last exception propagates."""
        func = Flaky(5)
        with pytest.raises(ConnectionError, match="failure 3"):
            retry_with_backoff(func, max_attempts=3)
        assert func.calls == 3

    def test_single_attempt(self) -> None:
        """max_attempts=1 means no retry at all."""
        func = Flaky(1)
        with pytest.raises(ConnectionError):
            retry_with_backoff(func, max_attempts=1)
        assert func.calls == 1

    def test_invalid_max_attempts(self) -> None:
        """max_attempts below 1 is rejected."""
        with pytest.raises(ValueError):
            retry_with_backoff(Flaky(0), max_attempts=0)

    def test_non_retryable_exception_propagates(self) -> None:
        """Exceptions outside retryable_exceptions are not retried."""
        func = Flaky(1, exc=KeyError)
        with pytest.raises(KeyError):
            retry_with_backoff(func, max_attempts=3, retryable_exceptions=(ConnectionError,))
        assert func.calls == 1

    def test_no_wait_without_backoff(self) -> None:
        """The default policy retries immediately."""
        waits: list[float] = []
        retry_with_backoff(Flaky(2), max_attempts=3, sleep=waits.append)
        assert waits == []

    def test_exponential_backoff_capped(self) -> None:
        """Waits grow by the multiplier up to max_backoff."""
        waits: list[float] = []
        retry_with_backoff(
            Flaky(4),
            max_attempts=5,
            initial_backoff=1.0,
            backoff_multiplier=3.0,
            max_backoff=5.0,
            sleep=waits.append,
        )
        assert waits == [1.0, 3.0, 5.0, 5.0]

    def test_logs_each_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        """Every failed attempt is logged with the description."""
        with caplog.at_level(logging.WARNING, logger="intray.client.upload.retry"):
            with pytest.raises(ConnectionError):
                retry_with_backoff(Flaky(5), max_attempts=2, description="chunk 7")

        messages = [r.getMessage() for r in caplog.records]
        assert any("chunk 7: attempt 1/2 failed" in m for m in messages)
        assert any("chunk 7: all 2 attempts failed" in m for m in messages)
