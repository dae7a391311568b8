"""Retry utilities for handling transient failures.

Provides a wrapper and a decorator for retrying repository calls with
exponential backoff. Failures are classified before any retry happens:
only transient failures consume the retry budget.

Key Features:
    - Exponential backoff doubling from an initial delay, no jitter
    - Retryable vs non-retryable failure classification
    - Maximum retry limiting
    - Structured logging of retry attempts

Key Exports:
    with_retry: Run a callable with retries.
    retry: Decorator form of with_retry.
    is_retryable: Failure classification used by both.

Example:
    >>> from semver_checker.utils.retry import with_retry
    >>> release_id = with_retry(lambda: repository.create_release("v1.0.0", draft=True))

Classification:
    Retryable: timeouts, connection errors, dropped connections (httpx
    protocol errors), HTTP 429 and 5xx responses, and TransportError
    instances flagged retryable. Everything else (other 4xx,
    validation errors, UnfixableConflictError) propagates immediately.

Backoff Formula:
    delay = initial_delay * 2 ** (retry_number - 1)
    For initial_delay=1.0: 1s, 2s, 4s, 8s, ...
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import structlog
from github import GithubException

from semver_checker.exceptions import TransportError

log = structlog.get_logger(__name__)

T = TypeVar("T")


def is_retryable_status(status_code: int | None) -> bool:
    """Whether an HTTP status denotes a transient failure."""
    if status_code is None:
        return False
    return status_code == 429 or 500 <= status_code < 600


def is_retryable(error: BaseException) -> bool:
    """Classify a failure as transient (retryable) or permanent.

    Args:
        error: The exception raised by the operation

    Returns:
        True if retrying the same call may succeed
    """
    if isinstance(error, TransportError):
        return error.retryable
    if isinstance(error, (TimeoutError, ConnectionError)):
        return True
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError, httpx.ProtocolError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return is_retryable_status(error.response.status_code)
    if isinstance(error, GithubException):
        return is_retryable_status(error.status)
    return False


def with_retry(
    operation: Callable[[], T],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], None] | None = None,
    name: str | None = None,
) -> T:
    """Run an operation, retrying transient failures with exponential backoff.

    Args:
        operation: Zero-argument callable to run
        max_retries: Retries allowed after the first attempt. The operation
            runs at most max_retries + 1 times.
        initial_delay: Seconds to wait before the first retry; each later
            retry waits twice as long as the previous one
        sleep: Blocking sleep function, defaults to time.sleep
        name: Operation name used in log events

    Returns:
        The operation's result

    Raises:
        The last retryable exception once the budget is exhausted.
        Non-retryable exceptions are raised immediately.
    """
    op_name = name or getattr(operation, "__name__", "operation")
    sleep = sleep or time.sleep
    delay = initial_delay

    for attempt in range(1, max_retries + 2):
        try:
            return operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt > max_retries:
                log.error(
                    "retry_exhausted",
                    operation=op_name,
                    attempts=attempt,
                    error=str(e),
                )
                raise

            log.warning(
                "retry_attempt",
                operation=op_name,
                attempt=attempt,
                max_retries=max_retries,
                delay=delay,
                error=str(e),
            )
            sleep(delay)
            delay *= 2

    # Unreachable: the loop either returns or raises
    raise RuntimeError("Retry logic error")


def retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator form of with_retry.

    Example:
        >>> @retry(max_retries=5, initial_delay=0.5)
        ... def list_tags():
        ...     return client.get("/tags")
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return with_retry(
                lambda: func(*args, **kwargs),
                max_retries=max_retries,
                initial_delay=initial_delay,
                name=func.__name__,
            )

        return wrapper

    return decorator
