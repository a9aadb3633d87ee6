"""
Retry wrapper for calls against the backing store
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from google.api_core import exceptions as google_exceptions
from sqlalchemy.exc import OperationalError

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors worth another attempt: dropped connections, busy databases, Firestore hiccups
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    OperationalError,
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
)


def with_retry(
    op: Callable[[], T],
    attempts: Optional[int] = None,
    backoff: Optional[float] = None,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``op`` with bounded retries and exponential backoff.

    Waits ``backoff * 2 ** attempt`` seconds between attempts (0.5s, 1s, 2s with
    the defaults) and gives up early once the overall ``timeout`` would be
    exceeded. Only ``TRANSIENT_ERRORS`` are retried; anything else propagates
    immediately. The last transient error is re-raised when attempts run out.
    """
    if attempts is None:
        attempts = settings.STORE_RETRY_ATTEMPTS
    if backoff is None:
        backoff = settings.STORE_RETRY_BACKOFF
    if timeout is None:
        timeout = settings.STORE_TIMEOUT_SECONDS

    deadline = time.monotonic() + timeout
    last_error: Optional[BaseException] = None

    for attempt in range(attempts):
        try:
            return op()
        except TRANSIENT_ERRORS as e:
            last_error = e
            if attempt == attempts - 1:
                break
            delay = backoff * (2 ** attempt)
            if time.monotonic() + delay > deadline:
                logger.error(f"Store call exceeded {timeout}s deadline after {attempt + 1} attempts")
                break
            logger.warning(f"Store call failed (attempt {attempt + 1}/{attempts}): {e}. Retrying in {delay}s")
            sleep(delay)

    raise last_error
