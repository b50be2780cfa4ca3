"""
Backoff for rate-limited storage calls.

Only explicit "too many requests" signals are retried here; every other
error propagates immediately so the strategy chain can fall through.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

from ..config.models import RetryPolicy
from ..exceptions import ErrorHandler, RateLimitError

logger = logging.getLogger(__name__)


class RetryHandler:
    """Retries a coroutine function while the backend answers 429."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize retry handler.

        Args:
            policy: Retry policy configuration
            sleep: Awaitable used to wait between attempts
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def calculate_delay(self, error: RateLimitError, attempt: int) -> float:
        """Delay before the next attempt; ``attempt`` is 0-based."""
        delay = ErrorHandler.get_retry_delay(
            error,
            attempt,
            base_delay=self.policy.initial_delay,
            exponential_base=self.policy.exponential_base,
            max_delay=self.policy.max_delay,
        )

        # Server-provided Retry-After is honoured as-is
        if self.policy.jitter and error.retry_after is None and delay > 0:
            delay += random.uniform(0, delay * 0.1)  # Up to 10% jitter

        return delay

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        operation_name: str = "storage call",
        **kwargs: Any,
    ) -> Any:
        """
        Await ``func(*args, **kwargs)``, retrying on RateLimitError.

        Raises:
            RateLimitError: If the call is still throttled after the last attempt
        """
        attempts = self.policy.max_attempts
        last_error: Optional[RateLimitError] = None

        for attempt in range(attempts):
            if last_error is not None:
                delay = self.calculate_delay(last_error, attempt - 1)
                logger.warning(
                    f"{operation_name} rate limited; retrying in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                await self._sleep(delay)

            try:
                result = await func(*args, **kwargs)
                if attempt > 0:
                    logger.info(f"{operation_name} succeeded on attempt {attempt + 1}")
                return result

            except RateLimitError as e:
                last_error = e

        # All retries exhausted
        logger.error(f"{operation_name} still rate limited after {attempts} attempts")
        if last_error is not None:
            raise last_error
        raise RateLimitError(f"{operation_name} made no attempts")


__all__ = ["RetryHandler"]
