"""
Reusable retry policy for network calls.

Every call site that talks to a rate-limited or flaky endpoint goes through
RetryPolicy instead of looping with its own sleeps.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import tenacity

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _always(exc: BaseException) -> bool:
    return isinstance(exc, Exception)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-delay retry policy.

    Args:
        max_attempts: Total attempts including the first one
        delay: Seconds to wait between attempts
        is_retryable: Predicate deciding whether an error is worth retrying;
            non-retryable errors are raised immediately
    """

    max_attempts: int = 3
    delay: float = 1.0
    is_retryable: Callable[[BaseException], bool] = field(default=_always)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")

    def _retryer(self) -> tenacity.AsyncRetrying:
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=tenacity.wait_fixed(self.delay),
            retry=tenacity.retry_if_exception(self.is_retryable),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: tenacity.RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.debug(
            f"Attempt {retry_state.attempt_number} failed ({exc}), retrying"
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Await fn(*args, **kwargs), retrying per policy; re-raises the last error."""
        async for attempt in self._retryer():
            with attempt:
                return await fn(*args, **kwargs)
        raise AssertionError("unreachable")  # pragma: no cover
