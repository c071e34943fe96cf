"""
ErrorQueue - per-run collection of pipeline errors, plus backoff retries.

A queue instance is created per run and injected where it is needed;
nothing here is module-global.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Set

from pydantic import BaseModel, Field

from ...core.retry import RetryPolicy
from ..models import SectionType
from .errors import PipelineError

logger = logging.getLogger(__name__)


class QueueState(BaseModel):
    errors: List[PipelineError] = Field(default_factory=list)
    total_errors: int = 0
    recoverable_errors: int = 0
    non_recoverable_errors: int = 0
    retried_count: int = 0
    skipped_count: int = 0


def can_retry(error: PipelineError) -> bool:
    """Recoverable and still under its retry budget."""
    return bool(error.recoverable) and error.retry_count < (error.max_retries or 0)


def calculate_backoff_delay(
    retry_count: int,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Seconds to wait before retry `retry_count`.

    base x 2^retry_count plus up to 30% jitter, capped at max_delay
    (defaults from Config: 1s base, 30s cap).
    """
    policy = RetryPolicy.exponential(base_delay=base_delay, max_delay=max_delay)
    return policy.delay_for(retry_count, rand=rand)


class ErrorQueue:
    """Ordered, filterable store of PipelineErrors for one run."""

    def __init__(self) -> None:
        self._errors: List[PipelineError] = []
        self._skipped: Set[str] = set()

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self):
        return iter(list(self._errors))

    def add(self, error: PipelineError) -> PipelineError:
        self._errors.append(error)
        logger.debug(f"Queued {error.code.value} for {error.scope}: {error.message}")
        return error

    def get(self, error_id: str) -> Optional[PipelineError]:
        return next((e for e in self._errors if e.id == error_id), None)

    def all(self) -> List[PipelineError]:
        return list(self._errors)

    def remove(self, error_id: str) -> bool:
        for index, error in enumerate(self._errors):
            if error.id == error_id:
                del self._errors[index]
                self._skipped.discard(error_id)
                return True
        return False

    def recoverable(self) -> List[PipelineError]:
        return [e for e in self._errors if can_retry(e)]

    def non_recoverable(self) -> List[PipelineError]:
        return [e for e in self._errors if not can_retry(e)]

    def by_website(self, website_id: str) -> List[PipelineError]:
        return [e for e in self._errors if e.website_id == website_id]

    def by_type(self, component_type: SectionType) -> List[PipelineError]:
        component_type = SectionType(component_type)
        return [e for e in self._errors if e.component_type == component_type]

    def increment_retry(self, error_id: str) -> Optional[PipelineError]:
        """Bump an error's retry count, never past its max_retries."""
        error = self.get(error_id)
        if error is None:
            return None
        error.retry_count = min(error.retry_count + 1, error.max_retries or 0)
        error.timestamp = datetime.now(timezone.utc)
        return error

    def mark_skipped(self, error_id: str) -> bool:
        """Record that an error was given up on without retrying."""
        if self.get(error_id) is None:
            return False
        self._skipped.add(error_id)
        return True

    def clear(self) -> None:
        self._errors = []
        self._skipped.clear()

    def clear_website(self, website_id: str) -> int:
        before = len(self._errors)
        removed = {e.id for e in self._errors if e.website_id == website_id}
        self._errors = [e for e in self._errors if e.website_id != website_id]
        self._skipped -= removed
        return before - len(self._errors)

    def state(self) -> QueueState:
        recoverable = self.recoverable()
        return QueueState(
            errors=list(self._errors),
            total_errors=len(self._errors),
            recoverable_errors=len(recoverable),
            non_recoverable_errors=len(self._errors) - len(recoverable),
            retried_count=sum(1 for e in self._errors if e.retry_count > 0),
            skipped_count=len(self._skipped),
        )


class RetryHandler:
    """
    Retries a queued error with exponential backoff while it stays retryable.

    Each attempt waits calculate_backoff_delay(retry_count), increments the
    error's retry count and calls the retry callable. A successful call
    removes the error from the queue.
    """

    def __init__(
        self,
        queue: ErrorQueue,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_retry: Optional[Callable[[int, PipelineError], Any]] = None,
    ):
        self.queue = queue
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self.on_retry = on_retry

    async def retry(self, error: PipelineError, fn: Callable[[], Awaitable[Any]]) -> Any:
        """
        Retry `fn` for a queued error until it succeeds or the budget runs out.

        Returns:
            fn's result, or None when the error was not (or no longer) retryable
        """
        last_exception: Optional[BaseException] = None
        while can_retry(error):
            delay = calculate_backoff_delay(error.retry_count, self.base_delay, self.max_delay)
            await self._sleep(delay)
            queued = self.queue.increment_retry(error.id)
            if queued is None or queued is not error:
                error.retry_count = queued.retry_count if queued else min(
                    error.retry_count + 1, error.max_retries or 0
                )
            if self.on_retry:
                self.on_retry(error.retry_count, error)
            try:
                result = await fn()
            except Exception as e:
                last_exception = e
                logger.warning(
                    f"Retry {error.retry_count}/{error.max_retries} for "
                    f"{error.scope} failed: {e}"
                )
                continue
            self.queue.remove(error.id)
            logger.info(f"Recovered {error.scope} after {error.retry_count} retries")
            return result

        self.queue.mark_skipped(error.id)
        if last_exception is not None:
            logger.error(f"Giving up on {error.scope}: {last_exception}")
        return None
