"""
Deadlines and bounded retries for backend calls.

Retryable failures (BackendUnavailableError, ThrottledError) are repeated
with exponential backoff and jitter until either the attempt budget from
StorageConfig or the caller's deadline runs out. Everything else is raised
on the first failure.
"""

import logging
import random
import time
from decimal import DecimalException
from typing import Any, Callable, Optional, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig
from ..exceptions import BackendUnavailableError, ValidationError
from .errors import error_context, map_backend_error

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Deadline:
    """Point in monotonic time after which a call must give up.

    A Deadline built from ``None`` never expires.
    """

    def __init__(self, seconds: Optional[float] = None):
        self.seconds = seconds
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    def remaining(self) -> Optional[float]:
        """Seconds left, or None for an unbounded deadline."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def __repr__(self) -> str:
        return f"Deadline(seconds={self.seconds!r}, remaining={self.remaining()!r})"


def backoff_delay(attempt: int, base: float, cap: float, retry_after: Optional[float] = None) -> float:
    """Delay before retry number ``attempt`` (1-based), exponential with jitter."""
    delay = min(cap, base * (2 ** (attempt - 1)))
    delay *= random.uniform(0.5, 1.0)
    if retry_after:
        delay = max(delay, retry_after)
    return delay


def call_with_retry(
    fn: Callable[[], T],
    *,
    config: StorageConfig,
    operation: str,
    table_name: str,
    deadline: Deadline,
    key: Optional[Any] = None,
) -> T:
    """Invoke ``fn`` and map botocore failures, retrying the retryable ones.

    Raises:
        StorageAccessError: the mapped failure of the last attempt
        BackendUnavailableError: the deadline expired before the first attempt
        ValidationError: boto3 could not serialize a value of the request
    """
    attempt = 0
    while True:
        if deadline.expired:
            raise BackendUnavailableError(
                f"Deadline of {deadline.seconds}s exceeded before {operation} on {table_name}",
                context=error_context(operation, table_name, key),
            )
        attempt += 1
        try:
            return fn()
        except (ClientError, BotoCoreError) as e:
            error = map_backend_error(e, operation, table_name, key)
            if not error.retryable or attempt >= config.max_attempts:
                raise error from e

            delay = backoff_delay(
                attempt,
                config.backoff_base_seconds,
                config.backoff_max_seconds,
                getattr(error, 'retry_after_seconds', None),
            )
            remaining = deadline.remaining()
            if remaining is not None and remaining <= delay:
                logger.warning(f"{operation} on {table_name} gave up after {attempt} attempts: deadline exhausted")
                raise error from e

            logger.warning(
                f"{operation} on {table_name} failed with {type(error).__name__}, "
                f"retrying in {delay:.2f}s (attempt {attempt}/{config.max_attempts})"
            )
            time.sleep(delay)
        except (TypeError, DecimalException) as e:
            # boto3 TypeSerializer failures, raised before anything is sent
            raise ValidationError(
                f"Unserializable value - {operation} on {table_name}: {e}",
                original_error=e,
                context=error_context(operation, table_name, key),
            ) from e
