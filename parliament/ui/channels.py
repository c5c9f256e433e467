"""Political log, daily summaries and notification channels."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Literal, Mapping, Sequence

from ..events.event_queue import QueuedEvent

if TYPE_CHECKING:
    from ..engine.turn_engine import TurnContext

LogCategory = Literal["event", "politics", "election", "personal"]
LOG_CATEGORIES: tuple[str, ...] = ("event", "politics", "election", "personal")

_CATEGORY_STYLES = {
    "event": "yellow",
    "politics": "cyan",
    "election": "green",
    "personal": "magenta",
}


@dataclass(slots=True)
class LogEntry:
    """A human-readable line describing one state change."""

    date: date
    title: str
    description: str
    category: str = "politics"


@dataclass
class DayLogEntry:
    """High level summary of a simulated day."""

    day: date
    summary: str
    highlights: List[str] = field(default_factory=list)
    events: List[str] = field(default_factory=list)
    scheduled: List[str] = field(default_factory=list)


@dataclass
class NotificationRecord:
    """Light-weight notification for surfacing events to the player."""

    day: date
    message: str
    category: str = "info"
    payload: Dict[str, Any] = field(default_factory=dict)

    def format_brief(self) -> str:
        payload_bits = [f"{key}={value}" for key, value in self.payload.items()]
        payload_text = f" ({', '.join(payload_bits)})" if payload_bits else ""
        return f"[{self.category}] {self.day.isoformat()}: {self.message}{payload_text}"


class PoliticalLog:
    """Bounded, append-only record of political happenings."""

    def __init__(self, *, max_entries: int = 500) -> None:
        self.max_entries = max_entries
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> Sequence[LogEntry]:
        return tuple(self._entries)

    def record(
        self, when: date, title: str, description: str, category: str = "politics"
    ) -> LogEntry:
        if category not in LOG_CATEGORIES:
            raise ValueError(f"Unknown log category '{category}'")
        entry = LogEntry(date=when, title=title, description=description, category=category)
        self._entries.append(entry)
        return entry

    def titles(self) -> list[str]:
        return [entry.title for entry in self._entries]

    def since(self, when: date) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.date >= when]

    def __len__(self) -> int:
        return len(self._entries)

    def render_table(self, *, title: str = "Political Log", limit: int = 40):
        """Return a Rich renderable listing the most recent entries."""

        from rich import box
        from rich.panel import Panel
        from rich.table import Table

        table = Table(expand=True, box=box.SIMPLE_HEAVY)
        table.add_column("Date", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Title", no_wrap=True)
        table.add_column("Description", overflow="fold")

        for entry in list(self._entries)[-limit:]:
            style = _CATEGORY_STYLES.get(entry.category, "white")
            table.add_row(
                entry.date.isoformat(),
                f"[{style}]{entry.category}[/{style}]",
                entry.title,
                entry.description,
            )
        return Panel(table, title=title, border_style="yellow")


class TurnLogChannel:
    """Collects daily summaries that can be rendered after a run."""

    def __init__(self, *, max_entries: int = 100) -> None:
        self.max_entries = max_entries
        self._entries: List[DayLogEntry] = []

    @property
    def entries(self) -> Sequence[DayLogEntry]:
        return tuple(self._entries)

    def push(self, entry: DayLogEntry) -> None:
        self._entries.append(entry)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries :]

    def record_context(
        self, context: "TurnContext", *, summary: str | None = None
    ) -> DayLogEntry:
        """Create a log entry from the provided turn context."""

        entry = DayLogEntry(
            day=context.date,
            summary=summary or _build_default_summary(context),
            highlights=list(context.summary_lines),
            events=[_format_event_line(event) for event in context.events],
            scheduled=[_format_scheduled_line(event) for event in context.scheduled_events],
        )
        self.push(entry)
        return entry

    def render_table(self, *, title: str = "Daily Log"):
        from rich import box
        from rich.panel import Panel
        from rich.table import Table

        table = Table(title=title, expand=True, box=box.SIMPLE_HEAVY)
        table.add_column("Date", justify="right", no_wrap=True)
        table.add_column("Summary", overflow="fold")
        table.add_column("Events", overflow="fold")

        for entry in reversed(self._entries):
            event_lines = entry.events + entry.scheduled
            event_text = "\n".join(event_lines) if event_lines else "-"
            table.add_row(entry.day.isoformat(), entry.summary, event_text)

        return Panel(table, title=title, border_style="yellow")


class NotificationChannel:
    """Capture notifications addressed to the human player."""

    def __init__(self, *, max_entries: int = 200) -> None:
        self.max_entries = max_entries
        self._notifications: List[NotificationRecord] = []

    @property
    def notifications(self) -> Sequence[NotificationRecord]:
        return tuple(self._notifications)

    def push(self, notification: NotificationRecord) -> None:
        self._notifications.append(notification)
        if len(self._notifications) > self.max_entries:
            self._notifications = self._notifications[-self.max_entries :]

    def notify(
        self,
        day: date,
        message: str,
        *,
        category: str = "info",
        payload: Mapping[str, Any] | None = None,
    ) -> NotificationRecord:
        record = NotificationRecord(
            day=day, message=message, category=category, payload=dict(payload or {})
        )
        self.push(record)
        return record

    def extend_from_events(self, day: date, events: Iterable[QueuedEvent]) -> None:
        for event in events:
            payload = dict(event.payload)
            message = str(
                payload.pop("message", event.event_type.replace("_", " ").title())
            )
            payload.setdefault("event_type", event.event_type)
            self.push(
                NotificationRecord(day=day, message=message, category="event", payload=payload)
            )

    def clear(self) -> None:
        """Remove all stored notifications."""

        self._notifications.clear()

    def render_panel(self, *, title: str = "Notifications"):
        from rich.panel import Panel
        from rich.table import Table

        table = Table(expand=True)
        table.add_column("Date", justify="right", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Message", overflow="fold")

        for record in reversed(self._notifications[-10:]):
            table.add_row(record.day.isoformat(), record.category, record.format_brief())

        return Panel(table, title=title, border_style="magenta")


# ---------------------------------------------------------------------------
def _format_event_line(event: QueuedEvent) -> str:
    payload = ", ".join(f"{key}={value}" for key, value in event.payload.items())
    if payload:
        return f"{event.event_type} ({payload})"
    return event.event_type


def _format_scheduled_line(event: QueuedEvent) -> str:
    base = f"Day {event.day}: {event.event_type}"
    payload = ", ".join(f"{key}={value}" for key, value in event.payload.items())
    if payload:
        base = f"{base} ({payload})"
    return base


def _build_default_summary(context: "TurnContext") -> str:
    if context.summary_lines:
        return " | ".join(context.summary_lines)
    if context.events:
        return ", ".join(event.event_type for event in context.events)
    if context.scheduled_events:
        return f"Scheduled {len(context.scheduled_events)} future event(s)"
    return "A quiet day in politics."


__all__ = [
    "LOG_CATEGORIES",
    "DayLogEntry",
    "LogCategory",
    "LogEntry",
    "NotificationChannel",
    "NotificationRecord",
    "PoliticalLog",
    "TurnLogChannel",
]
