"""
Retry helpers for the HTTP transports.

Only failures that never produced a response are retried; HTTP error
statuses are surfaced to the caller unchanged.
"""

import logging
from functools import wraps
from typing import Callable

import httpx
import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

TRANSIENT_TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)


def with_retry(
    max_attempts: int = 3,
    backoff_min: float = 0.5,
    backoff_max: float = 10.0,
    retry_exceptions: tuple = TRANSIENT_TRANSPORT_ERRORS,
):
    """Decorator to add retry logic with exponential backoff."""

    def decorator(func: Callable) -> Callable:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff_min, min=backoff_min, max=backoff_max),
            retry=retry_if_exception_type(retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except retry_exceptions as e:
                logger.warning(
                    "Retrying operation",
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

        return wrapper

    return decorator
