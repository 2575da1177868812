"""Retry with exponential backoff for outbound calls.

Only coroutines are retried; every outbound call in the wizard is async.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import (
    Any,
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from config.settings import BenefitApiSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")
ExceptionTypes = Union[Type[Exception], Tuple[Type[Exception], ...]]


class RetryExhausted(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including initial).
        base_delay: Initial delay between retries in seconds.
        max_delay: Maximum delay between retries in seconds.
        backoff_multiplier: Multiplier for exponential backoff.
        jitter: Random jitter as a fraction of the delay (0-1).
        retryable_exceptions: Exception types that should trigger retry.
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    jitter: float = 0.1
    retryable_exceptions: ExceptionTypes = (Exception,)

    @classmethod
    def from_settings(
        cls,
        settings: BenefitApiSettings,
        retryable_exceptions: ExceptionTypes = (Exception,),
    ) -> "RetryConfig":
        return cls(
            max_attempts=max(1, settings.retry_max_attempts),
            base_delay=settings.retry_base_delay,
            backoff_multiplier=settings.retry_backoff_multiplier,
            retryable_exceptions=retryable_exceptions,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Delay before the retry that follows attempt (1-indexed)."""
        delay = self.base_delay * (self.backoff_multiplier ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter > 0:
            jitter_range = delay * self.jitter
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    def should_retry(self, exception: Exception) -> bool:
        return isinstance(exception, self.retryable_exceptions)


async def retry_call(
    func: Callable[..., Awaitable[T]],
    config: RetryConfig,
    *args: Any,
    **kwargs: Any,
) -> T:
    """Await func(*args, **kwargs), retrying per config.

    Raises:
        RetryExhausted: every attempt failed with a retryable exception.
        Exception: the first non-retryable exception, unchanged.
    """
    name = getattr(func, "__name__", repr(func))

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not config.should_retry(e):
                logger.debug(f"Non-retryable exception in {name}: {e}")
                raise

            if attempt >= config.max_attempts:
                logger.warning(f"Retry exhausted for {name} after {attempt} attempts: {e}")
                raise RetryExhausted(
                    f"Retry exhausted after {attempt} attempts",
                    attempts=attempt,
                    last_exception=e,
                ) from e

            delay = config.calculate_delay(attempt)
            logger.info(f"Retry {attempt}/{config.max_attempts} for {name} in {delay:.2f}s: {e}")
            await asyncio.sleep(delay)

    # max_attempts < 1 never enters the loop
    raise RetryExhausted("No attempts configured", attempts=0)


def async_retry(config: RetryConfig) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator form of retry_call.

    Usage:
        @async_retry(RetryConfig(max_attempts=5))
        async def call_external_api():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_call(func, config, *args, **kwargs)
        return wrapper
    return decorator
