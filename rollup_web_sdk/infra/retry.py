"""
Retry Logic Helper Module

Provides async retry functionality for calls to the rollup provider.
Includes structured logging with correlation IDs for session tracing.
"""

import asyncio
import contextvars
import logging
import uuid
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

import httpx

from ..errors import ErrorCode, WebSdkError
from ..config import config as global_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Context variable for correlation ID (task-local under asyncio)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for session tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("init") as cid:
            logger.info("Starting initialization")  # record.correlation_id == cid
            status = await get_rollup_provider_status(server_url)
    """

    def __init__(self, prefix: Optional[str] = None):
        """
        Initialize correlation context.

        Args:
            prefix: Optional prefix for the correlation ID (e.g., "init")
        """
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


class CorrelationIdFilter(logging.Filter):
    """
    Handler filter that stamps records with the active correlation ID

    Sets record.correlation_id for %(correlation_id)s in format strings,
    "-" when no CorrelationContext is active. Installed by setup_logging().
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = get_correlation_id() or "-"
        return True


def log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_retries: Optional[int] = None,
    log: Optional[logging.Logger] = None,
    **extra
):
    """
    Log message with operation and attempt prefixes and structured context.

    The correlation ID travels as record.correlation_id, rendered by the
    format string set up in setup_logging().

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_retries: Maximum number of retries
        log: Logger to write to (defaults to this module's logger)
        **extra: Additional context fields
    """
    parts = [f"[{operation_name}]"]
    if attempt is not None and max_retries is not None:
        parts.append(f"[{attempt}/{max_retries}]")
    parts.append(message)

    extra_context = {
        "correlation_id": get_correlation_id(),
        "operation": operation_name,
        "attempt": attempt,
        "max_retries": max_retries,
        **extra
    }

    (log or logger).log(level, " ".join(parts), extra=extra_context)


# Error keywords for classification
RECOVERABLE_KEYWORDS = [
    "timeout", "timed out", "connection", "network", "rate limit",
    "too many requests", "503", "502", "504",
    "temporarily unavailable", "service unavailable",
    "econnreset", "enotfound", "etimedout",
    "socket hang up", "request failed",
]


def classify_error(error: Exception) -> Tuple[bool, Optional[ErrorCode]]:
    """
    Classify an error to determine if it's worth retrying.

    Args:
        error: The exception to classify

    Returns:
        Tuple of (is_recoverable, error_code)
    """
    if isinstance(error, WebSdkError):
        return error.recoverable, error.code

    if isinstance(error, httpx.TimeoutException):
        return True, ErrorCode.ROLLUP_PROVIDER_TIMEOUT
    if isinstance(error, httpx.TransportError):
        return True, ErrorCode.ROLLUP_PROVIDER_UNREACHABLE

    error_str = str(error).lower()
    is_recoverable = any(keyword in error_str for keyword in RECOVERABLE_KEYWORDS)

    error_code = None
    if is_recoverable:
        if "timeout" in error_str or "timed out" in error_str:
            error_code = ErrorCode.ROLLUP_PROVIDER_TIMEOUT
        else:
            error_code = ErrorCode.ROLLUP_PROVIDER_UNREACHABLE

    return is_recoverable, error_code


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    sleep_func: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Execute an async operation with automatic retry for recoverable errors.

    Uses linear backoff on transient failures (1s, 2s, 3s... with the
    default delay). Non-recoverable errors are raised immediately; the
    last error is raised once retries are exhausted.

    Args:
        operation: Zero-argument coroutine function
        operation_name: Name for logging purposes
        max_retries: Maximum attempts (defaults to config.rollup_provider.max_retries)
        retry_delay: Base delay between attempts in seconds
        sleep_func: Awaitable sleep, defaults to asyncio.sleep

    Returns:
        Whatever the operation returns

    Example:
        status = await execute_with_retry(
            lambda: fetch_status(client, url),
            "rollup_status",
        )
    """
    max_retries = max_retries if max_retries is not None else global_config.rollup_provider.max_retries
    retry_delay = retry_delay if retry_delay is not None else global_config.rollup_provider.retry_delay
    sleep = sleep_func or asyncio.sleep
    max_retries = max(1, max_retries)

    for attempt in range(max_retries):
        try:
            result = await operation()
            if attempt > 0:
                log_with_correlation(
                    logging.INFO,
                    f"Succeeded after {attempt + 1} attempts",
                    operation_name,
                    attempt + 1,
                    max_retries,
                )
            return result

        except Exception as e:
            is_recoverable, error_code = classify_error(e)

            if is_recoverable and attempt < max_retries - 1:
                log_with_correlation(
                    logging.WARNING,
                    f"Recoverable error: {e}",
                    operation_name,
                    attempt + 1,
                    max_retries,
                    error_type="recoverable",
                )
                await sleep(retry_delay * (attempt + 1))
                continue

            log_with_correlation(
                logging.ERROR,
                f"Failed: {e}",
                operation_name,
                attempt + 1,
                max_retries,
                error_type="fatal" if not is_recoverable else "exhausted",
                error_code=error_code.value if error_code else None,
            )
            raise
