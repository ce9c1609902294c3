"""Bounded retry for transient provider failures."""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from casual_creator.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 0.5,
    description: str = "provider call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run ``operation`` with exponential backoff and jitter.

    Only ``ProviderError`` instances flagged ``transient`` are retried; every
    other exception propagates immediately.

    Args:
        operation: Zero-argument coroutine factory
        attempts: Total number of attempts (>= 1)
        base_delay: Delay before the second attempt, doubled each time
        description: Label used in log messages
        sleep: Awaitable sleep function (injectable for tests)

    Returns:
        The operation's result

    Raises:
        ProviderError: The last transient error once attempts are exhausted
    """
    attempts = max(1, attempts)

    for attempt in range(attempts):
        try:
            return await operation()
        except ProviderError as e:
            if not e.transient or attempt == attempts - 1:
                raise
            delay = base_delay * (2**attempt) + random.uniform(0, base_delay)
            logger.warning(
                f"{description} attempt {attempt + 1}/{attempts} failed: {e}; "
                f"retrying in {delay:.2f}s"
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises
    raise ProviderError(f"{description} failed after {attempts} attempts")
