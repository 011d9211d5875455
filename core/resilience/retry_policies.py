"""Retry policy for outbound HTTP requests."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, fields
from typing import Any, Callable, FrozenSet, Iterable, Mapping, Optional

import structlog

from config.defaults import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MAX_RETRIES,
    INITIAL_INTERVAL_MILLIS,
)
from config.settings import Settings
from exceptions import InvalidConfiguration

from .backoff import ExponentialBackOff

logger = structlog.get_logger(__name__)

Sleeper = Callable[[float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration shared by every request of a client.

    ``retry_status_codes`` lists the HTTP status codes worth retrying,
    ``max_retries`` caps the number of retries per request and the backoff
    between attempts starts at :data:`INITIAL_INTERVAL_MILLIS`, growing by
    ``backoff_multiplier`` up to ``max_interval_millis``.

    The backoff parameters are checked at construction by building (and
    discarding) one generator, so a bad policy fails here rather than on
    the first failed request.
    """

    retry_status_codes: FrozenSet[int] = frozenset()
    max_retries: int = DEFAULT_MAX_RETRIES
    max_interval_millis: int = DEFAULT_MAX_INTERVAL_MILLIS
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    sleeper: Sleeper = field(default=time.sleep, compare=False, repr=False)

    def __post_init__(self) -> None:
        codes: Optional[Iterable[int]] = self.retry_status_codes
        try:
            codes = frozenset(int(c) for c in codes or ())
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(
                f"retry_status_codes must be integers, got {self.retry_status_codes!r}"
            ) from exc
        object.__setattr__(self, "retry_status_codes", codes)
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise InvalidConfiguration(
                f"max_retries must be an integer, got {self.max_retries!r}"
            )
        if self.max_retries < 0:
            raise InvalidConfiguration("max_retries must not be negative")
        if self.sleeper is None:
            raise InvalidConfiguration("sleeper must not be None")
        self.new_backoff()

    @property
    def initial_interval_millis(self) -> int:
        return INITIAL_INTERVAL_MILLIS

    @classmethod
    def build(cls, options: Optional[Mapping[str, Any]] = None) -> "RetryPolicy":
        """Build a policy from a plain mapping of options."""
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown retry options: {', '.join(unknown)}")
        try:
            return cls(**options)
        except InvalidConfiguration:
            raise
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"Invalid retry options: {exc}") from exc

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["RetryPolicy"]:
        """Return the policy described by ``settings`` or ``None`` if disabled."""
        if not settings.retry_enabled:
            logger.info("retry_policy_disabled")
            return None
        return cls(
            retry_status_codes=frozenset(settings.retry_status_codes),
            max_retries=settings.retry_max_retries,
            max_interval_millis=settings.retry_max_interval_millis,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )

    def new_backoff(self) -> ExponentialBackOff:
        """Return a fresh backoff generator bounded by ``max_retries``."""
        return ExponentialBackOff(
            initial_interval_millis=INITIAL_INTERVAL_MILLIS,
            max_interval_millis=self.max_interval_millis,
            multiplier=self.backoff_multiplier,
            max_attempts=self.max_retries,
        )

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retry_status_codes
