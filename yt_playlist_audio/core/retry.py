"""
Per-item retry wrapper.

Turns an item processor that "fails sometimes" into one that fails only after the
configured number of attempts, surfacing a single RetryExhaustedError.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .. import config
from .errors import RetryExhaustedError
from .models import WorkItem
from .utils import _backoff_sleep

logger = logging.getLogger(__name__)

ItemProcessor = Callable[[WorkItem], object]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = config.RETRY_ATTEMPTS
    delay: float = config.RETRY_DELAY
    # Optional exponential growth of the delay (delay * 2**(n-1), capped at backoff_max)
    backoff: bool = config.RETRY_BACKOFF
    backoff_max: float = config.RETRY_BACKOFF_MAX

    def __post_init__(self) -> None:
        if int(self.max_attempts) < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def wait_seconds(self, failed_attempt: int) -> float:
        delay = max(0.0, float(self.delay))
        if not self.backoff:
            return delay
        return _backoff_sleep(failed_attempt, delay, self.backoff_max)


def attempt_with_retry(
    item: WorkItem,
    processor: ItemProcessor,
    policy: RetryPolicy | None = None,
    *,
    sleep: Optional[Callable[[float], None]] = None,
) -> None:
    """
    Run ``processor(item)`` until it succeeds or ``policy.max_attempts`` is used up.

    Raises RetryExhaustedError (chained from the last failure) when every attempt failed.
    """
    policy = policy or RetryPolicy()
    sleep = sleep or time.sleep
    max_attempts = int(policy.max_attempts)
    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            processor(item)
            return
        except Exception as e:
            last_error = e

        if attempt >= max_attempts:
            break
        wait_s = policy.wait_seconds(attempt)
        logger.warning(
            f"Attempt {attempt}/{max_attempts} failed for {item.name}: {last_error}. "
            f"Retrying in {wait_s:g}s..."
        )
        if wait_s > 0:
            sleep(wait_s)

    logger.warning(f"Attempt {max_attempts}/{max_attempts} failed for {item.name}: {last_error}. Giving up")
    raise RetryExhaustedError(max_attempts, last_error) from last_error
