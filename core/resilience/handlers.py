"""Failure handlers consulted by the transport between attempts."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Protocol

import structlog

from .backoff import STOP, ExponentialBackOff
from .retry_policies import RetryPolicy, Sleeper

logger = structlog.get_logger(__name__)


class UnsuccessfulResponseHandler(Protocol):
    """Decide whether a request that got a non-success response is retried."""

    def handle_response(self, request: Any, response: Any, supports_retry: bool) -> bool:
        ...


class IOExceptionHandler(Protocol):
    """Decide whether a request that failed with an I/O error is retried."""

    def handle_io_exception(self, request: Any, supports_retry: bool) -> bool:
        ...


def sleep_for_backoff(backoff: ExponentialBackOff, sleeper: Sleeper) -> bool:
    """Sleep for the next backoff interval; return ``False`` when exhausted."""
    millis = backoff.next_backoff_millis()
    if millis == STOP:
        return False
    sleeper(millis / 1000.0)
    return True


def _retry_after_millis(response: Any) -> Optional[int]:
    """Parse ``Retry-After`` as delay-seconds or an HTTP-date."""
    headers = getattr(response, "headers", None) or {}
    value = headers.get("Retry-After")
    if value is None:
        return None
    value = str(value).strip()
    try:
        return max(int(value), 0) * 1000
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    delay = (retry_at - datetime.now(timezone.utc)).total_seconds()
    return max(int(delay * 1000), 0)


class StatusCodeRetryHandler:
    """Retry responses whose status code the policy lists as retryable.

    A retried response waits before the next attempt: the ``Retry-After``
    header when the server sends one, capped at the policy's maximum
    interval, otherwise the next value of the request's backoff.
    """

    def __init__(self, policy: RetryPolicy, backoff: Optional[ExponentialBackOff] = None) -> None:
        self.policy = policy
        self.backoff = backoff or policy.new_backoff()

    def handle_response(self, request: Any, response: Any, supports_retry: bool) -> bool:
        if not supports_retry:
            return False
        if not self.policy.is_retryable_status(response.status_code):
            return False

        delay = _retry_after_millis(response)
        if delay is not None:
            delay = min(delay, self.policy.max_interval_millis)
            logger.info(
                "retry_after_honoured",
                status_code=response.status_code,
                delay_ms=delay,
            )
            self.policy.sleeper(delay / 1000.0)
        elif not sleep_for_backoff(self.backoff, self.policy.sleeper):
            logger.debug("backoff_exhausted", status_code=response.status_code)
        return True


class BackOffIOExceptionHandler:
    """Wait for the next backoff interval after a transport I/O failure."""

    def __init__(self, backoff: ExponentialBackOff, sleeper: Sleeper) -> None:
        self.backoff = backoff
        self.sleeper = sleeper

    def handle_io_exception(self, request: Any, supports_retry: bool) -> bool:
        if not supports_retry:
            return False
        if not sleep_for_backoff(self.backoff, self.sleeper):
            logger.warning("backoff_exhausted", attempts=self.backoff.attempts)
            return False
        return True
