"""Calendar of scheduled political fixtures (elections, strategy passes)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
import heapq
from itertools import count
from typing import Any, Dict, Iterable, List, Tuple


@dataclass
class QueuedEvent:
    """A fixture scheduled for a given simulation day index."""

    day: int
    event_type: str
    payload: Dict[str, Any]


class EventQueue:
    """Manages future fixtures keyed by the day index on which they fire.

    Day indices count from ``start_date``; helpers translate calendar dates so
    callers can schedule "the general election on 1955-07-27" directly.
    """

    def __init__(self, start_date: date | None = None) -> None:
        self.start_date = start_date
        self._heap: List[Tuple[int, int, QueuedEvent]] = []
        self._counter = count()

    def schedule(
        self, day: int, event_type: str, payload: Dict[str, Any] | None = None
    ) -> QueuedEvent:
        """Schedule an event to fire on the provided day index."""

        if day < 0:
            raise ValueError("day must be non-negative")
        event = QueuedEvent(day=day, event_type=event_type, payload=payload or {})
        heapq.heappush(self._heap, (day, next(self._counter), event))
        return event

    def schedule_in(
        self,
        days_from_now: int,
        current_day: int,
        event_type: str,
        payload: Dict[str, Any] | None = None,
    ) -> QueuedEvent:
        """Convenience helper to schedule relative to the current day."""

        if days_from_now < 0:
            raise ValueError("days_from_now must be non-negative")
        return self.schedule(current_day + days_from_now, event_type, payload)

    def schedule_on(
        self, when: date, event_type: str, payload: Dict[str, Any] | None = None
    ) -> QueuedEvent:
        """Schedule an event for a calendar date."""

        return self.schedule(self.day_for(when), event_type, payload)

    def day_for(self, when: date) -> int:
        if self.start_date is None:
            raise ValueError("queue has no start_date; schedule by day index instead")
        return (when - self.start_date).days

    def date_for(self, day: int) -> date:
        if self.start_date is None:
            raise ValueError("queue has no start_date")
        return self.start_date + timedelta(days=day)

    def events_for_day(self, day: int) -> List[QueuedEvent]:
        """Return events queued for the specified day without removing them."""

        return [entry[2] for entry in sorted(self._heap) if entry[0] == day]

    def pop_events_for_day(self, day: int) -> List[QueuedEvent]:
        """Retrieve and remove events scheduled up to and including ``day``.

        Overdue events are returned too, so a fixture is never lost when the
        caller skips days.
        """

        popped: List[QueuedEvent] = []
        while self._heap and self._heap[0][0] <= day:
            popped.append(heapq.heappop(self._heap)[2])
        return popped

    def next_event(self, event_type: str) -> QueuedEvent | None:
        """Return the earliest pending event of ``event_type``."""

        for _, _, event in sorted(self._heap):
            if event.event_type == event_type:
                return event
        return None

    def cancel(self, event_type: str) -> int:
        """Drop every pending event of ``event_type``; return how many were removed."""

        kept = [entry for entry in self._heap if entry[2].event_type != event_type]
        removed = len(self._heap) - len(kept)
        heapq.heapify(kept)
        self._heap = kept
        return removed

    def has_events(self) -> bool:
        return bool(self._heap)

    def upcoming_days(self) -> List[int]:
        return sorted({day for day, _, _ in self._heap})

    def pending(self) -> Iterable[QueuedEvent]:
        return [entry[2] for entry in sorted(self._heap)]

    def clear(self) -> None:
        self._heap.clear()
        self._counter = count()


__all__ = ["EventQueue", "QueuedEvent"]
