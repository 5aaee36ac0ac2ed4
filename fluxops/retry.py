"""RetryPolicy — bounded, fixed-delay retry around network-facing calls.

Wraps :class:`tenacity.Retrying` so every caller shares one attempt count,
one delay and one definition of which errors are worth retrying.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    stop_when_event_set,
    wait_fixed,
)

from fluxops.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from fluxops.errors import RepositoryIsEmptyError

T = TypeVar("T")

# Errors that describe a permanent state rather than a transient failure.
_TERMINAL_ERRORS: tuple[type[BaseException], ...] = (RepositoryIsEmptyError,)


def is_retryable(exc: BaseException) -> bool:
    """Default predicate: retry any ``Exception`` except terminal conditions."""
    return isinstance(exc, Exception) and not isinstance(exc, _TERMINAL_ERRORS)


class RetryPolicy:
    """Run a callable up to *max_attempts* times with a fixed *delay*.

    Parameters
    ----------
    max_attempts:
        Total number of calls, including the first one.
    delay:
        Seconds to wait between attempts.
    retryable:
        Predicate deciding whether an exception is worth another attempt.
        Non-retryable exceptions propagate immediately.
    sleep:
        Sleep function, replaceable in tests.
    logger:
        Logger receiving a WARNING before each retry.
    cancel:
        Event that, once set, stops further attempts; the last error is
        re-raised.  Attempts already running are not interrupted.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        *,
        retryable: Callable[[BaseException], bool] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.max_attempts = max_attempts
        self.delay = delay
        self.retryable = retryable or is_retryable
        self._sleep = sleep
        self.log = logger or logging.getLogger(__name__)
        self.cancel = cancel

    def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``fn(*args, **kwargs)`` under this policy.

        Returns the first successful result.  After the last attempt the
        final exception is re-raised unchanged.
        """
        stop = stop_after_attempt(self.max_attempts)
        if self.cancel is not None:
            stop = stop | stop_when_event_set(self.cancel)
        retrying = Retrying(
            stop=stop,
            wait=wait_fixed(self.delay),
            retry=retry_if_exception(self.retryable),
            before_sleep=before_sleep_log(self.log, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)

    def __repr__(self) -> str:
        return f"RetryPolicy(max_attempts={self.max_attempts}, delay={self.delay})"
