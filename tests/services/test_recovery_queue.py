"""
Tests for ErrorQueue, backoff delays and RetryHandler.
"""

from unittest.mock import AsyncMock

import pytest

from componentizer.services.models import SectionType
from componentizer.services.recovery import (
    ErrorCode,
    ErrorQueue,
    PipelineError,
    RetryHandler,
    calculate_backoff_delay,
    can_retry,
)


def _error(code=ErrorCode.SCREENSHOT_FAILED, website_id="site", component_type=SectionType.HERO):
    return PipelineError(code=code, message="boom", website_id=website_id, component_type=component_type)


class TestBackoff:
    def test_doubles_without_jitter(self):
        delays = [calculate_backoff_delay(n, 1.0, 30.0, rand=lambda: 0) for n in range(5)]
        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0]

    def test_capped(self):
        assert calculate_backoff_delay(10, 1.0, 30.0, rand=lambda: 0.99) == 30.0

    def test_jitter_bounded(self):
        delay = calculate_backoff_delay(2, 1.0, 30.0, rand=lambda: 0.99)
        assert 4.0 <= delay <= 4.0 * 1.3

    def test_non_decreasing(self):
        delays = [calculate_backoff_delay(n, 0.5, 10.0, rand=lambda: 0) for n in range(8)]
        assert delays == sorted(delays)


class TestErrorQueue:
    def test_filters(self):
        queue = ErrorQueue()
        screenshot = queue.add(_error())
        database = queue.add(_error(code=ErrorCode.DATABASE_FAILED, website_id="other", component_type=None))

        assert len(queue) == 2
        assert queue.recoverable() == [screenshot]
        assert queue.non_recoverable() == [database]
        assert queue.by_website("other") == [database]
        assert queue.by_type(SectionType.HERO) == [screenshot]

    def test_increment_never_exceeds_budget(self):
        queue = ErrorQueue()
        error = queue.add(_error())
        for _ in range(10):
            queue.increment_retry(error.id)
        assert error.retry_count == error.max_retries
        assert not can_retry(error)

    def test_state_counts(self):
        queue = ErrorQueue()
        first = queue.add(_error())
        queue.add(_error(code=ErrorCode.DATABASE_FAILED))
        queue.increment_retry(first.id)
        queue.mark_skipped(first.id)

        state = queue.state()
        assert state.total_errors == 2
        assert state.recoverable_errors == 1
        assert state.non_recoverable_errors == 1
        assert state.retried_count == 1
        assert state.skipped_count == 1

    def test_clear_website(self):
        queue = ErrorQueue()
        queue.add(_error(website_id="a"))
        queue.add(_error(website_id="a"))
        queue.add(_error(website_id="b"))

        assert queue.clear_website("a") == 2
        assert [e.website_id for e in queue] == ["b"]

    def test_queues_are_independent(self):
        first, second = ErrorQueue(), ErrorQueue()
        first.add(_error())
        assert len(second) == 0


class TestRetryHandler:
    """Backoff retries with a recorded fake sleep."""

    @pytest.mark.asyncio
    async def test_recovers_and_removes(self):
        queue = ErrorQueue()
        error = queue.add(_error())
        sleeps = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        fn = AsyncMock(side_effect=[RuntimeError("again"), "ok"])
        handler = RetryHandler(queue, base_delay=1.0, max_delay=30.0, sleep=fake_sleep)

        result = await handler.retry(error, fn)

        assert result == "ok"
        assert fn.await_count == 2
        assert len(sleeps) == 2
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_gives_up_after_budget(self):
        queue = ErrorQueue()
        error = queue.add(_error())
        fn = AsyncMock(side_effect=RuntimeError("still broken"))
        retries = []

        handler = RetryHandler(queue, sleep=AsyncMock(), on_retry=lambda n, e: retries.append(n))
        result = await handler.retry(error, fn)

        assert result is None
        assert fn.await_count == error.max_retries
        assert retries == [1, 2, 3]
        assert queue.state().skipped_count == 1

    @pytest.mark.asyncio
    async def test_non_recoverable_is_not_called(self):
        queue = ErrorQueue()
        error = queue.add(_error(code=ErrorCode.DATABASE_FAILED))
        fn = AsyncMock()

        assert await RetryHandler(queue, sleep=AsyncMock()).retry(error, fn) is None
        fn.assert_not_called()
