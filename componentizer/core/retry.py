"""
Retry policy shared by the pipeline orchestrator and error recovery.

One policy object describes how long to wait between attempts:

- NONE:        a single attempt, no waiting
- LINEAR:      base_delay * (attempt index + 1)
- EXPONENTIAL: base_delay * 2^retry_count, plus up to `jitter` fraction
               of random extra delay

Any policy can be capped with max_delay. Execution goes through
tenacity's AsyncRetrying so retries only block the current task.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from .config import Config
from .exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_JITTER = 0.3


class RetryKind(str, Enum):
    NONE = "none"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configurable retry/backoff policy.

    Attributes:
        kind: Backoff shape (none, linear, exponential)
        base_delay: Base delay in seconds
        max_delay: Optional cap in seconds applied after jitter
        jitter: Fraction (0-1) of random extra delay on top of the base curve
        max_attempts: Total attempts, including the first one
    """

    kind: RetryKind = RetryKind.LINEAR
    base_delay: float = 1.0
    max_delay: Optional[float] = None
    jitter: float = 0.0
    max_attempts: int = 3

    @classmethod
    def linear(cls, max_attempts: Optional[int] = None, base_delay: Optional[float] = None) -> "RetryPolicy":
        """Orchestrator policy: attempt-index x fixed delay."""
        return cls(
            kind=RetryKind.LINEAR,
            base_delay=Config.RETRY_DELAY_MS / 1000 if base_delay is None else base_delay,
            max_attempts=Config.MAX_RETRIES if max_attempts is None else max_attempts,
        )

    @classmethod
    def exponential(
        cls,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        jitter: float = DEFAULT_JITTER,
        max_attempts: int = 3,
    ) -> "RetryPolicy":
        """Recovery policy: doubling delay with jitter, capped."""
        return cls(
            kind=RetryKind.EXPONENTIAL,
            base_delay=Config.BACKOFF_BASE_MS / 1000 if base_delay is None else base_delay,
            max_delay=Config.BACKOFF_MAX_MS / 1000 if max_delay is None else max_delay,
            jitter=jitter,
            max_attempts=max_attempts,
        )

    @classmethod
    def none(cls) -> "RetryPolicy":
        return cls(kind=RetryKind.NONE, base_delay=0.0, max_attempts=1)

    def delay_for(self, retry_index: int, rand: Callable[[], float] = random.random) -> float:
        """
        Seconds to wait before retry number `retry_index` (0-based).

        Args:
            retry_index: How many retries have already happened
            rand: Source of [0, 1) randomness for jitter

        Returns:
            Delay in seconds, never above max_delay when one is set
        """
        if self.kind == RetryKind.NONE:
            return 0.0

        if self.kind == RetryKind.LINEAR:
            delay = self.base_delay * (retry_index + 1)
        else:
            delay = self.base_delay * (2 ** retry_index)

        if self.jitter > 0:
            delay += rand() * self.jitter * delay

        if self.max_delay is not None:
            delay = min(delay, self.max_delay)

        return delay

    def _wait(self, retry_state: RetryCallState) -> float:
        # attempt_number is 1-based and counts the attempt that just failed
        return self.delay_for(retry_state.attempt_number - 1)

    async def run(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run an async callable under this policy.

        Args:
            operation: Human-readable name used in logs and the final error
            fn: Zero-argument coroutine factory, called once per attempt

        Returns:
            The first successful result

        Raises:
            RetryExhaustedError: After the last attempt fails
        """
        attempts = max(1, self.max_attempts)
        made = 0

        def _log_retry(retry_state: RetryCallState) -> None:
            outcome = retry_state.outcome
            error = outcome.exception() if outcome else None
            logger.warning(
                f"{operation} attempt {retry_state.attempt_number}/{attempts} failed: {error}"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=self._wait,
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    made += 1
                    result = await fn()
        except Exception as e:
            raise RetryExhaustedError(operation, made, e) from e

        return result


async def with_retry(
    operation: str,
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
) -> T:
    """Run `fn` under the given policy (linear from Config by default)."""
    return await (policy or RetryPolicy.linear()).run(operation, fn)
