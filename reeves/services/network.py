"""
Helpers for outbound HTTP requests with a timeout and retries.
"""

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ..errors import RequestTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0


async def fetch_with_timeout(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs,
) -> httpx.Response:
    try:
        return await client.request(method, url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as exc:
        raise RequestTimeoutError(url, timeout) from exc


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.error(f"Request attempt {retry_state.attempt_number} failed: {exc}")


async def fetch_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    retries: int = DEFAULT_RETRIES,
    timeout: float = DEFAULT_TIMEOUT,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    **kwargs,
) -> httpx.Response:
    """Request with up to `retries` attempts.

    Attempt n uses a timeout of timeout * n and is preceded by a wait of
    retry_delay * (n - 1). The last error is re-raised when every attempt
    fails.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(retries, 1)),
        wait=wait_incrementing(start=retry_delay, increment=retry_delay),
        retry=retry_if_exception_type((httpx.HTTPError, RequestTimeoutError)),
        after=_log_failed_attempt,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            attempt_timeout = timeout * attempt.retry_state.attempt_number
            return await fetch_with_timeout(client, method, url, timeout=attempt_timeout, **kwargs)
