# ABOUTME: Retry policies for flaky page interactions using the tenacity library
# ABOUTME: Popup reveal retries on empty results rather than on exceptions

from typing import Any

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_fixed

from town_scraper.utils.logging import get_logger

logger = get_logger(__name__)


def _is_empty(result: Any) -> bool:
    return not result


def _give_up(retry_state: RetryCallState) -> None:
    logger.debug("Popup attempts exhausted", attempts=retry_state.attempt_number)
    return None


def popup_retrying(attempts: int = 3, pause_seconds: float = 0.0) -> AsyncRetrying:
    """Build a retry policy for revealing a marker popup.

    Retries while the attempt returns an empty result and stops after
    ``attempts`` tries. Exhaustion yields ``None`` instead of raising so a
    marker with no popup is simply skipped. Exceptions are not retried.

    Args:
        attempts: Maximum number of attempts
        pause_seconds: Fixed wait between attempts

    Returns:
        AsyncRetrying instance; call it with the attempt coroutine function
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(pause_seconds),
        retry=retry_if_result(_is_empty),
        retry_error_callback=_give_up,
    )
