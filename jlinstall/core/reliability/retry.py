"""
Retry policy — exponential backoff with jitter for caller-level retries.

The engines never retry on their own. The CLI wraps read-only network
operations (catalog fetch) in :func:`call_with_retry` when the user
asks for ``--retries``.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 60.0) -> float:
    """Delay before retry number ``attempt`` (1-based), jitter included."""
    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
    jitter = random.uniform(0, delay * 0.3)
    return delay + jitter


def call_with_retry(
    fn: Callable[[], T],
    *,
    retries: int = 0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn``, retrying up to ``retries`` times on ``retry_on`` errors.

    Args:
        fn: Zero-argument callable.
        retries: Extra attempts after the first one.
        retry_on: Exception types that trigger a retry. Anything else
            propagates immediately.
        base_delay: Delay before the first retry, doubled each time.
        max_delay: Upper bound for a single delay.
        sleep: Sleep function (injectable for tests).

    Returns:
        Whatever ``fn`` returns on the first successful attempt.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except retry_on as exc:
            attempt += 1
            if attempt > retries:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "Attempt %d/%d failed: %s — retrying in %.1fs",
                attempt, retries + 1, exc, delay,
            )
            sleep(delay)
