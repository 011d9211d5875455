"""Deterministic exponential backoff generator."""

from __future__ import annotations

import math
import numbers
import time
from typing import Callable, Iterator, Optional

from config.defaults import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_ELAPSED_TIME_MILLIS,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_RANDOMIZATION_FACTOR,
    INITIAL_INTERVAL_MILLIS,
)
from exceptions import InvalidConfiguration

STOP = -1


def _monotonic_millis() -> int:
    return int(time.monotonic() * 1000)


def _require_finite(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")


class ExponentialBackOff:
    """Produce successive wait durations that grow by ``multiplier``.

    The first duration is ``initial_interval_millis``. Each following one is
    the previous duration times ``multiplier``, capped at
    ``max_interval_millis``. Once ``max_attempts`` durations have been handed
    out, or ``max_elapsed_time_millis`` has passed since the first duration
    was asked for, :meth:`next_backoff_millis` returns :data:`STOP`.

    The elapsed-time clock starts at the first call after construction or
    :meth:`reset`, so a request that waits before failing keeps its full
    allowance. Attempts are not restored between executions of the same
    request unless :meth:`reset` is called.

    No jitter is applied, so two generators built from the same settings
    produce the same sequence. Instances are stateful and belong to a
    single request.
    """

    randomization_factor = DEFAULT_RANDOMIZATION_FACTOR

    def __init__(
        self,
        *,
        initial_interval_millis: int = INITIAL_INTERVAL_MILLIS,
        max_interval_millis: int = DEFAULT_MAX_INTERVAL_MILLIS,
        multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
        max_elapsed_time_millis: int = DEFAULT_MAX_ELAPSED_TIME_MILLIS,
        max_attempts: Optional[int] = None,
        clock: Callable[[], int] = _monotonic_millis,
    ) -> None:
        _require_finite("initial_interval_millis", initial_interval_millis)
        _require_finite("max_interval_millis", max_interval_millis)
        _require_finite("multiplier", multiplier)
        _require_finite("max_elapsed_time_millis", max_elapsed_time_millis)
        if max_attempts is not None and (
            isinstance(max_attempts, bool) or not isinstance(max_attempts, int)
        ):
            raise InvalidConfiguration(f"max_attempts must be an integer, got {max_attempts!r}")
        if initial_interval_millis <= 0:
            raise InvalidConfiguration("initial_interval_millis must be positive")
        if max_interval_millis < initial_interval_millis:
            raise InvalidConfiguration(
                "max_interval_millis must be at least initial_interval_millis"
            )
        if multiplier < 1:
            raise InvalidConfiguration("multiplier must be at least 1")
        if max_elapsed_time_millis <= 0:
            raise InvalidConfiguration("max_elapsed_time_millis must be positive")
        if max_attempts is not None and max_attempts < 0:
            raise InvalidConfiguration("max_attempts must not be negative")

        self.initial_interval_millis = initial_interval_millis
        self.max_interval_millis = max_interval_millis
        self.multiplier = multiplier
        self.max_elapsed_time_millis = max_elapsed_time_millis
        self.max_attempts = max_attempts
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        """Restart the sequence from the initial interval."""
        self.current_interval_millis = self.initial_interval_millis
        self.attempts = 0
        self._start_millis: Optional[int] = None

    @property
    def elapsed_time_millis(self) -> int:
        if self._start_millis is None:
            return 0
        return self._clock() - self._start_millis

    def next_backoff_millis(self) -> int:
        """Return the next wait in milliseconds, or ``STOP``."""
        if self._start_millis is None:
            self._start_millis = self._clock()
        if self.max_attempts is not None and self.attempts >= self.max_attempts:
            return STOP
        if self.elapsed_time_millis > self.max_elapsed_time_millis:
            return STOP

        interval = self.current_interval_millis
        self.attempts += 1
        self.current_interval_millis = min(
            int(interval * self.multiplier), self.max_interval_millis
        )
        return interval

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        interval = self.next_backoff_millis()
        if interval == STOP:
            raise StopIteration
        return interval
