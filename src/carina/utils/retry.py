"""Retry utilities for Carina.

Lifecycle calls are never retried on network errors; the only automatic replay is
a single one after the session token has been refreshed.
"""

from collections.abc import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)

from carina.utils.logging import get_logger

logger = get_logger(__name__)


def refresh_and_retry(
    refresh: Callable[[], None],
    exceptions: tuple[type[Exception], ...],
    max_attempts: int = 2,
) -> Retrying:
    """Build a retry policy that runs refresh before replaying a failed call.

    Args:
        refresh: Called between attempts, e.g. to obtain a new token
        exceptions: Exception types that trigger a refresh and replay
        max_attempts: Total attempts including the first one

    Returns:
        tenacity Retrying object to iterate over
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        """Log and refresh before replaying."""
        if retry_state.outcome and retry_state.outcome.failed:
            exception = retry_state.outcome.exception()
            logger.debug(
                "refreshing_before_retry",
                attempt=retry_state.attempt_number,
                max_attempts=max_attempts,
                exception=type(exception).__name__,
            )
        refresh()

    return Retrying(
        retry=retry_if_exception_type(exceptions),
        stop=stop_after_attempt(max_attempts),
        wait=wait_none(),
        before_sleep=before_sleep,
        reraise=True,
    )
