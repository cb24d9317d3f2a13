"""
Unit tests for retry with exponential backoff.

The delay coroutine is patched out so the tests observe the requested
delays without sleeping.
"""

import logging
from unittest.mock import AsyncMock, Mock, call, patch

import pytest

from fleetexec.errors import ValidationError, retry, retry_with_defaults, with_retry
from fleetexec.models import RetryPolicy


class FlakyOperation:
    """Fails a fixed number of times, then succeeds."""

    def __init__(self, failures, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"attempt {self.calls} failed")
        return self.result


@pytest.mark.unit
class TestRetryPolicy:
    """Test RetryPolicy validation and delays."""

    def test_defaults(self):
        """Test the default policy values."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.initial_delay_ms == 1000
        assert policy.backoff_multiplier == 2

    def test_delay_growth(self):
        """Test that the delay grows geometrically."""
        policy = RetryPolicy(initial_delay_ms=100, backoff_multiplier=3)
        assert [policy.delay_for_attempt(i) for i in range(3)] == [100, 300, 900]

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"max_attempts": True},
        {"initial_delay_ms": -1},
        {"backoff_multiplier": 0.5},
        {"label": ""},
    ])
    def test_invalid_policy(self, kwargs):
        """Test that invalid policy values are rejected."""
        with pytest.raises(ValidationError):
            RetryPolicy(**kwargs)

    def test_values_are_normalised(self):
        """Test that accepted strings and integral floats are stored as numbers."""
        policy = RetryPolicy(max_attempts="3", initial_delay_ms="0", backoff_multiplier="2")
        assert policy.max_attempts == 3
        assert isinstance(policy.max_attempts, int)
        assert policy.initial_delay_ms == 0.0
        assert isinstance(policy.initial_delay_ms, float)
        assert policy.backoff_multiplier == 2.0
        assert RetryPolicy(max_attempts=3.0).max_attempts == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": "3"},
        {"max_attempts": 3.0},
        {"initial_delay_ms": "0"},
    ])
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_loosely_typed_policy_retries(self, mock_delay, kwargs):
        """Test that a policy built from loosely typed values drives retry()."""
        operation = FlakyOperation(failures=1)
        assert await retry(operation, RetryPolicy(**kwargs)) == "ok"
        assert operation.calls == 2
        mock_delay.assert_awaited_once()


@pytest.mark.unit
class TestRetry:
    """Test the retry orchestrator."""

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_success_after_failures(self, mock_delay):
        """Test that two failures then a success returns the success after 1s and 2s."""
        operation = FlakyOperation(failures=2)

        result = await retry(operation, RetryPolicy(label="download image"))

        assert result == "ok"
        assert operation.calls == 3
        assert mock_delay.await_args_list == [call(1000), call(2000)]

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_last_error_is_unwrapped(self, mock_delay):
        """Test that the final attempt's exception reaches the caller as-is."""
        operation = FlakyOperation(failures=10)

        with pytest.raises(ConnectionError, match="attempt 3 failed"):
            await retry(operation, RetryPolicy())

        assert operation.calls == 3
        assert mock_delay.await_count == 2

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_single_attempt(self, mock_delay):
        """Test that max_attempts=1 runs once and never waits."""
        operation = FlakyOperation(failures=1)

        with pytest.raises(ConnectionError):
            await retry(operation, RetryPolicy(max_attempts=1))

        assert operation.calls == 1
        mock_delay.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_first_success_is_not_retried(self, mock_delay):
        """Test that a first-time success makes exactly one call."""
        operation = FlakyOperation(failures=0, result=42)
        assert await retry(operation, RetryPolicy()) == 42
        assert operation.calls == 1
        mock_delay.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_plain_callable(self, mock_delay):
        """Test that a synchronous callable is supported."""
        func = Mock(side_effect=[OSError("busy"), "done"])
        assert await retry(func, RetryPolicy(initial_delay_ms=10)) == "done"
        assert func.call_count == 2
        mock_delay.assert_awaited_once_with(10)

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_retry_is_logged(self, mock_delay, caplog):
        """Test the log line emitted before each wait."""
        caplog.set_level(logging.INFO, logger="fleetexec.errors.backoff")

        await retry(FlakyOperation(failures=1), RetryPolicy(label="flash device"))

        assert 'Retrying "flash device" after 1.00s (1 of 3) due to: attempt 1 failed' in caplog.text

    @pytest.mark.asyncio
    async def test_real_delay(self):
        """Test that the real delay path works with a zero delay."""
        operation = FlakyOperation(failures=1)
        assert await retry(operation, RetryPolicy(initial_delay_ms=0)) == "ok"


@pytest.mark.unit
class TestRetryDecorators:
    """Test the decorator and config-driven helpers."""

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_with_retry(self, mock_delay):
        """Test that with_retry applies overrides to the default policy."""
        operation = FlakyOperation(failures=3)

        @with_retry(max_attempts=4, initial_delay_ms=5)
        async def fetch_manifest(suffix):
            return f"{await operation()}{suffix}"

        assert await fetch_manifest("!") == "ok!"
        assert fetch_manifest.__name__ == "fetch_manifest"
        assert mock_delay.await_args_list == [call(5), call(10), call(20)]

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_with_retry_labels_with_function_name(self, mock_delay, caplog):
        """Test that the default label is the decorated function's name."""
        caplog.set_level(logging.INFO, logger="fleetexec.errors.backoff")
        operation = FlakyOperation(failures=1)

        @with_retry()
        async def push_config():
            return await operation()

        await push_config()
        assert 'Retrying "push_config"' in caplog.text

    @pytest.mark.asyncio
    @patch("fleetexec.errors.backoff.delay", new_callable=AsyncMock)
    async def test_retry_with_defaults_uses_config(self, mock_delay, config_file):
        """Test that the configured [retry] section drives retry_with_defaults."""
        from fleetexec.config import set_config_path

        set_config_path(config_file)
        operation = FlakyOperation(failures=4)

        assert await retry_with_defaults(operation, "sync") == "ok"
        assert operation.calls == 5
        assert mock_delay.await_args_list == [call(250), call(500), call(1000), call(2000)]
