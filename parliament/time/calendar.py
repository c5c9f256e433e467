"""Simulation clock: one calendar day per tick with speed and pause control."""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum


class Speed(str, Enum):
    """Tick speeds; ``interval_ms`` is the wall-clock delay between days."""

    PAUSED = "paused"
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    FASTEST = "fastest"

    @property
    def interval_ms(self) -> int | None:
        return _INTERVALS[self]


_INTERVALS: dict[Speed, int | None] = {
    Speed.PAUSED: None,
    Speed.SLOW: 1000,
    Speed.NORMAL: 500,
    Speed.FAST: 125,
    Speed.FASTEST: 50,
}


class SimulationClock:
    """Tracks the simulated date and the player's chosen speed.

    Pausing is the only way to stop time; a day already in progress always
    runs to completion. ``resume`` restores the speed in effect before the
    pause.
    """

    def __init__(self, start_date: date, *, speed: Speed = Speed.NORMAL) -> None:
        self._start_date = start_date
        self._current_date = start_date
        self._speed = speed
        self._resume_speed = speed if speed is not Speed.PAUSED else Speed.NORMAL

    @property
    def start_date(self) -> date:
        return self._start_date

    @property
    def current_date(self) -> date:
        return self._current_date

    @property
    def day_index(self) -> int:
        return (self._current_date - self._start_date).days

    @property
    def speed(self) -> Speed:
        return self._speed

    @property
    def is_paused(self) -> bool:
        return self._speed is Speed.PAUSED

    def set_speed(self, speed: Speed) -> None:
        if speed is not Speed.PAUSED:
            self._resume_speed = speed
        self._speed = speed

    def pause(self) -> None:
        if not self.is_paused:
            self._resume_speed = self._speed
        self._speed = Speed.PAUSED

    def resume(self) -> None:
        self._speed = self._resume_speed

    def advance_day(self) -> date:
        self._current_date += timedelta(days=1)
        return self._current_date

    def days_until(self, when: date) -> int:
        return (when - self._current_date).days

    def clamp_for_election(self, next_election: date | None, threshold_days: int = 20) -> bool:
        """Slow the clock to ``FAST`` near an election; returns ``True`` if it clamped."""

        if next_election is None:
            return False
        remaining = self.days_until(next_election)
        if remaining < 0 or remaining > threshold_days:
            return False
        if self._speed is Speed.FASTEST:
            self._speed = Speed.FAST
            return True
        if self.is_paused and self._resume_speed is Speed.FASTEST:
            self._resume_speed = Speed.FAST
            return True
        return False


def add_years(when: date, years: int) -> date:
    """Same calendar day ``years`` later; 29 February falls back to the 28th."""

    try:
        return when.replace(year=when.year + years)
    except ValueError:
        return when.replace(year=when.year + years, day=28)


__all__ = ["SimulationClock", "Speed", "add_years"]
