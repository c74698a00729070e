"""
Retry helper with linear backoff.

Shared by media downloads (Frigate) and document uploads (Telegram), which
both retry with the same budget from config.
"""

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    func: Callable[[], T],
    attempts: int,
    base_delay: float,
    label: str,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call func until it succeeds or the attempt budget is spent.

    After failed attempt k the helper waits base_delay * k seconds, so the
    delays grow linearly (3s, 6s, 9s with the default delay of 3s).

    Args:
        func: Callable performing one attempt
        attempts: Maximum number of attempts (at least 1)
        base_delay: Delay unit in seconds
        label: Description used in log messages
        retry_on: Exception types that count as a failed attempt
        sleep: Sleep function (injectable for tests)

    Returns:
        The first successful result

    Raises:
        The exception from the last attempt if all attempts fail
    """
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as e:
            if attempt >= attempts:
                logger.warning(f"{label} failed after {attempts} attempt(s): {e}")
                raise
            delay = base_delay * attempt
            logger.info(
                f"{label} attempt {attempt}/{attempts} failed ({e}), retrying in {delay:g}s"
            )
            sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{label}: retry loop exited without result")
