"""Retry helpers for read paths.

Reads are retried with exponential backoff on transient database errors.
Writes are never routed through here: a repeated upsert or quiz submission
would duplicate side effects.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError

from .config import get_read_retry_attempts
from .errors import DataUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that indicate the store was unreachable rather than a bad query
TRANSIENT_ERRORS = (OperationalError, InterfaceError, OSError, asyncio.TimeoutError)


def get_retry_delay(attempt: int, include_jitter: bool = True) -> float:
    """
    Calculate retry delay using exponential backoff with cap.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        include_jitter: Add random jitter to prevent thundering herd

    Returns:
        Delay in seconds (1, 2, 4, 8, ... capped at 30)
    """
    base_delay = min(2**attempt, 30)
    if include_jitter:
        jitter = random.uniform(0, base_delay * 0.1)
        return base_delay + jitter
    return float(base_delay)


async def with_read_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    description: str,
    attempts: int | None = None,
) -> T:
    """
    Run a read operation, retrying transient failures.

    Args:
        operation: Zero-argument coroutine factory (called once per attempt)
        description: Human-readable name used in logs and the final error
        attempts: Total attempts including the first; defaults to config

    Raises:
        DataUnavailable: When every attempt failed with a transient error
    """
    if attempts is None:
        attempts = max(1, get_read_retry_attempts())

    last_error: Exception | None = None
    for attempt in range(attempts):
        try:
            return await operation()
        except TRANSIENT_ERRORS as e:
            last_error = e
            if attempt + 1 >= attempts:
                break
            delay = get_retry_delay(attempt)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                description,
                attempt + 1,
                attempts,
                delay,
                e,
            )
            await asyncio.sleep(delay)

    logger.error("%s failed after %d attempts: %s", description, attempts, last_error)
    raise DataUnavailable(f"{description} is unavailable") from last_error
