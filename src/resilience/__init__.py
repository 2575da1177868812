"""Resilience patterns for outbound service communication.

Provides retry logic with exponential backoff for calls to the benefits
system.
"""

from .retry import (
    async_retry,
    retry_call,
    RetryConfig,
    RetryExhausted,
)

__all__ = [
    "async_retry",
    "retry_call",
    "RetryConfig",
    "RetryExhausted",
]
