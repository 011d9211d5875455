import pytest

from core.resilience.backoff import STOP, ExponentialBackOff
from exceptions import InvalidConfiguration


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


def test_sequence_doubles_until_ceiling():
    backoff = ExponentialBackOff(max_interval_millis=5000)
    values = [backoff.next_backoff_millis() for _ in range(7)]
    assert values == [500, 1000, 2000, 4000, 5000, 5000, 5000]


def test_each_value_is_previous_times_multiplier_capped():
    backoff = ExponentialBackOff(multiplier=3.0, max_interval_millis=20000)
    values = [backoff.next_backoff_millis() for _ in range(5)]
    assert values[0] == 500
    for prev, cur in zip(values, values[1:]):
        assert cur == min(int(prev * 3.0), 20000)


def test_multiplier_of_one_keeps_interval_constant():
    backoff = ExponentialBackOff(multiplier=1.0)
    assert [backoff.next_backoff_millis() for _ in range(3)] == [500, 500, 500]


def test_max_attempts_bounds_sequence():
    backoff = ExponentialBackOff(max_attempts=3)
    assert list(backoff) == [500, 1000, 2000]
    assert backoff.next_backoff_millis() == STOP


def test_zero_attempts_stops_immediately():
    backoff = ExponentialBackOff(max_attempts=0)
    assert backoff.next_backoff_millis() == STOP
    assert list(backoff) == []


def test_reset_restarts_sequence():
    backoff = ExponentialBackOff(max_attempts=2)
    assert list(backoff) == [500, 1000]
    backoff.reset()
    assert backoff.attempts == 0
    assert backoff.next_backoff_millis() == 500


def test_stops_after_max_elapsed_time():
    clock = FakeClock()
    backoff = ExponentialBackOff(max_elapsed_time_millis=1000, clock=clock)
    assert backoff.next_backoff_millis() == 500
    clock.now = 1001
    assert backoff.next_backoff_millis() == STOP


@pytest.mark.parametrize(
    "kwargs",
    [
        {"initial_interval_millis": 0},
        {"max_interval_millis": 100},
        {"multiplier": 0.5},
        {"multiplier": 0},
        {"max_elapsed_time_millis": 0},
        {"max_attempts": -1},
        {"multiplier": float("nan")},
        {"multiplier": float("inf")},
        {"max_interval_millis": float("inf")},
        {"max_interval_millis": float("nan")},
        {"multiplier": "2"},
        {"max_attempts": 1.5},
    ],
)
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(InvalidConfiguration):
        ExponentialBackOff(**kwargs)


def test_jitter_is_disabled():
    assert ExponentialBackOff().randomization_factor == 0.0


def test_elapsed_time_counted_from_first_backoff():
    clock = FakeClock()
    backoff = ExponentialBackOff(max_elapsed_time_millis=1000, clock=clock)
    clock.now = 10_000
    assert backoff.elapsed_time_millis == 0
    assert backoff.next_backoff_millis() == 500
    clock.now = 10_500
    assert backoff.next_backoff_millis() == 1000


def test_reset_restarts_elapsed_time():
    clock = FakeClock()
    backoff = ExponentialBackOff(max_elapsed_time_millis=1000, clock=clock)
    backoff.next_backoff_millis()
    clock.now = 5000
    assert backoff.next_backoff_millis() == STOP
    backoff.reset()
    assert backoff.next_backoff_millis() == 500
