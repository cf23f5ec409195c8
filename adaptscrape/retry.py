"""Retry policies for fetch attempts.

Every retry loop in adaptscrape is built here so attempts are capped and
each pause is reported the same way.
"""

import logging
from collections.abc import Callable
from typing import Any

import logfire
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)


def _wait_strategy(wait_min: float, wait_max: float, wait_multiplier: float) -> wait_base:
    if wait_min == wait_max:
        return wait_fixed(wait_min)
    return wait_exponential(multiplier=wait_multiplier, min=wait_min, max=wait_max)


def get_retryer(
    max_attempts: int = 3,
    wait_min: float = 1.0,
    wait_max: float = 10.0,
    wait_multiplier: float = 1.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    log_callback: Callable[[Any], None] | None = None,
    reraise: bool = True,
) -> Retrying:
    """Build a capped tenacity retryer.

    Equal ``wait_min`` and ``wait_max`` give a fixed pause between attempts;
    otherwise the pause grows exponentially between the two bounds. Only the
    listed exception types are retried, anything else propagates at once.

    Args:
        max_attempts: Hard cap on attempts, including the first
        wait_min: Shortest pause in seconds
        wait_max: Longest pause in seconds
        wait_multiplier: Exponential backoff multiplier
        exceptions: Exception types worth another attempt
        log_callback: Called with the retry state before each pause
        reraise: Raise the last exception instead of tenacity's RetryError

    Returns:
        A Retrying usable as ``retryer(fn)`` or ``for attempt in retryer``

    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=_wait_strategy(wait_min, wait_max, wait_multiplier),
        retry=retry_if_exception_type(exceptions),
        before_sleep=log_callback,
        reraise=reraise,
    )


def log_retry(retry_state: Any) -> None:
    """Report a failed attempt before the retryer pauses.

    Args:
        retry_state: tenacity RetryCallState for the failed attempt

    """
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    error = str(exception) if exception else 'unknown error'
    pause = getattr(retry_state.next_action, 'sleep', 0.0)

    logger.warning(f'Attempt {retry_state.attempt_number} failed ({error}), retrying in {pause:.1f}s')
    logfire.warn('Retrying operation', attempt=retry_state.attempt_number, error=error, wait=pause)
