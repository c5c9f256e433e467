from datetime import date

import pytest

from parliament.time.calendar import SimulationClock, Speed, add_years


@pytest.mark.parametrize(
    "speed, interval",
    [
        (Speed.PAUSED, None),
        (Speed.SLOW, 1000),
        (Speed.NORMAL, 500),
        (Speed.FAST, 125),
        (Speed.FASTEST, 50),
    ],
)
def test_speed_intervals(speed, interval):
    assert speed.interval_ms == interval


def test_advance_and_day_index():
    clock = SimulationClock(date(1951, 1, 31))

    assert clock.advance_day() == date(1951, 2, 1)
    assert clock.day_index == 1
    assert clock.days_until(date(1951, 2, 11)) == 10


def test_resume_restores_previous_speed():
    clock = SimulationClock(date(1951, 1, 1), speed=Speed.FAST)

    clock.pause()
    clock.pause()
    assert clock.is_paused
    clock.resume()
    assert clock.speed is Speed.FAST


def test_election_clamp_only_slows_the_fastest_speed():
    clock = SimulationClock(date(1955, 7, 1), speed=Speed.FASTEST)

    assert not clock.clamp_for_election(date(1955, 8, 30))
    assert clock.clamp_for_election(date(1955, 7, 20))
    assert clock.speed is Speed.FAST
    assert not clock.clamp_for_election(date(1955, 7, 20))
    assert not clock.clamp_for_election(None)


def test_clamp_while_paused_lowers_the_resume_speed():
    clock = SimulationClock(date(1955, 7, 1), speed=Speed.FASTEST)
    clock.pause()

    assert clock.clamp_for_election(date(1955, 7, 10))
    assert clock.is_paused
    clock.resume()
    assert clock.speed is Speed.FAST


def test_add_years_handles_leap_days():
    assert add_years(date(1953, 6, 15), 3) == date(1956, 6, 15)
    assert add_years(date(1956, 2, 29), 3) == date(1959, 2, 28)
