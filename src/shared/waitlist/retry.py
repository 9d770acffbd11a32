"""Exponential-backoff retry for submission transports."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from src.shared.waitlist.constants import MAX_RETRY_ATTEMPTS, RETRY_DELAY_BASE_SECONDS
from src.shared.waitlist.errors import NetworkError

T = TypeVar("T")


def is_retryable_error(error: BaseException) -> bool:
    """Transport failures and 5xx responses are worth another attempt; nothing else is."""
    return isinstance(error, NetworkError)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the attempt following ``attempt`` (1-based): base, 2x base, 4x base..."""
    return base_delay * (2 ** (attempt - 1))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = MAX_RETRY_ATTEMPTS,
    base_delay: float = RETRY_DELAY_BASE_SECONDS,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await ``operation`` until it succeeds or the attempt budget is spent.

    Attempts run one after another, never concurrently. A failure is re-raised
    immediately when it is the last attempt or when ``should_retry`` rejects it.

    Args:
        operation: Zero-argument coroutine function performing one attempt
        max_attempts: Total number of attempts, including the first
        base_delay: Seconds to wait after the first failure; doubles each retry
        should_retry: Error classifier, defaults to is_retryable_error
        sleep: Awaitable sleep, replaceable for tests

    Returns:
        The operation's result
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    classify = should_retry or is_retryable_error
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= max_attempts or not classify(e):
                if attempt > 1:
                    logging.error(f"All retry attempts failed after {attempt} attempt(s): {type(e).__name__}")
                raise
            delay = backoff_delay(attempt, base_delay)
            logging.warning(f"Attempt {attempt} failed ({type(e).__name__}), retrying in {delay:.2f}s")
            await sleep(delay)
            attempt += 1
