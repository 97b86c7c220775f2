"""Bounded retry with jitter for Drive API calls."""

import socket
import time
import logging
from typing import Callable, Optional

from googleapiclient.errors import HttpError
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from .exceptions import RemoteOperationError, RetryExhaustedError

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504}
TRANSIENT_EXCEPTIONS = (ConnectionError, TimeoutError, socket.timeout)


def is_transient(error: BaseException) -> bool:
    """Return True if the error is worth retrying."""
    if isinstance(error, HttpError):
        return error.resp is not None and error.resp.status in TRANSIENT_STATUS_CODES
    return isinstance(error, TRANSIENT_EXCEPTIONS)


class RetryPolicy:
    """Exponential backoff with full jitter.

    Attempt n (1-based) waits a random delay in [0, min(max_delay, base_delay * 2**(n-1))]
    before attempt n+1.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep or time.sleep

    @classmethod
    def from_config(cls, config: dict) -> "RetryPolicy":
        retry = config.get("retry") or {}
        return cls(
            max_attempts=int(retry.get("max_attempts", 3)),
            base_delay=float(retry.get("base_delay", 0.5)),
            max_delay=float(retry.get("max_delay", 8.0)),
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random_exponential(multiplier=self.base_delay, max=self.max_delay),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

    def call(self, action: str, func: Callable, *args, **kwargs):
        """
        Run func, retrying transient failures.

        Raises:
            RetryExhaustedError: A transient failure persisted through every attempt
            RemoteOperationError: A non-transient failure (raised immediately)
        """
        try:
            return self._retrying()(func, *args, **kwargs)
        except RetryError as e:
            cause = e.last_attempt.exception()
            attempts = e.last_attempt.attempt_number
            logger.error(f"Drive '{action}' failed after {attempts} attempts: {cause}")
            raise RetryExhaustedError(action, cause, attempts) from cause
        except RemoteOperationError:
            raise
        except Exception as e:
            logger.error(f"Drive '{action}' failed: {e}")
            raise RemoteOperationError(action, e) from e
