"""Retry utilities for handling transient BigQuery API failures."""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable, Optional, Type, TypeVar, cast

from google.api_core import exceptions as google_exceptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP statuses BigQuery documents as safe to retry
RETRYABLE_API_ERRORS: tuple[Type[Exception], ...] = (
    google_exceptions.TooManyRequests,
    google_exceptions.InternalServerError,
    google_exceptions.BadGateway,
    google_exceptions.ServiceUnavailable,
    google_exceptions.GatewayTimeout,
)

# Error reasons that BigQuery reports with a 403 but that are transient
RETRYABLE_REASONS = {"rateLimitExceeded", "backendError", "internalError"}


def retry_with_exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retryable_exceptions: tuple[Type[Exception], ...] = (Exception,),
    non_retryable_exceptions: tuple[Type[Exception], ...] = (),
    retry_if: Optional[Callable[[Exception], bool]] = None,
):
    """
    Decorator for retrying async functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 60.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)
        retryable_exceptions: Tuple of exception types to retry on
        non_retryable_exceptions: Tuple of exception types to never retry on
        retry_if: Optional predicate; a caught exception is only retried if it returns True

    Example:
        @retry_with_exponential_backoff(max_retries=3, retry_if=is_retryable_google_error)
        async def get_job(self, job_id):
            return await asyncio.to_thread(self.client.get_job, job_id)
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    result = await func(*args, **kwargs)
                    if attempt > 0:
                        logger.info(
                            f"Retry succeeded for {func.__name__} on attempt {attempt + 1}"
                        )
                    return result

                except non_retryable_exceptions as e:
                    logger.debug(f"Non-retryable error in {func.__name__}: {e}")
                    raise

                except retryable_exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        raise

                    if attempt >= max_retries:
                        logger.error(
                            f"All {max_retries + 1} attempts failed for {func.__name__}: {e}"
                        )
                        raise

                    delay = min(base_delay * (exponential_base ** attempt), max_delay)
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_retries + 1} failed for {func.__name__}: {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)

            raise RuntimeError(f"{func.__name__} failed after {max_retries + 1} attempts")

        return cast(Callable[..., T], wrapper)

    return decorator


def error_reasons(error: Exception) -> set[str]:
    """Collect the `reason` fields of a Google API error payload."""
    reasons = set()
    for item in getattr(error, "errors", None) or []:
        if isinstance(item, dict) and item.get("reason"):
            reasons.add(item["reason"])
    return reasons


def is_retryable_google_error(error: Exception) -> bool:
    """
    Determine if a BigQuery API error is retryable.

    Args:
        error: The exception to check

    Returns:
        True if the error is retryable, False otherwise
    """
    if isinstance(error, RETRYABLE_API_ERRORS):
        return True

    if isinstance(error, google_exceptions.GoogleAPICallError):
        return bool(error_reasons(error) & RETRYABLE_REASONS)

    # Transport errors raised below google-api-core (requests/urllib3)
    error_str = str(error).lower()
    retryable_patterns = [
        "connection reset",
        "connection refused",
        "connection aborted",
        "timed out",
        "temporary failure",
        "broken pipe",
    ]
    return any(pattern in error_str for pattern in retryable_patterns)


def is_permission_error(error: Exception) -> bool:
    """
    Determine if an error is related to permissions.

    Args:
        error: The exception to check

    Returns:
        True if the error is a permission error, False otherwise
    """
    if isinstance(error, (google_exceptions.Forbidden, google_exceptions.Unauthorized)):
        return not (error_reasons(error) & RETRYABLE_REASONS)

    error_str = str(error).lower()

    permission_patterns = [
        "permission denied",
        "access denied",
        "does not have bigquery",
        "not authorized",
        "could not automatically determine credentials",
        "default credentials were not found",
    ]

    return any(pattern in error_str for pattern in permission_patterns)
