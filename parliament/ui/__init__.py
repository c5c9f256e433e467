"""Logs, notifications and rich reports."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .channels import (
        LogEntry,
        NotificationChannel,
        NotificationRecord,
        PoliticalLog,
        TurnLogChannel,
    )
    from .reports import election_summary, government_panel, party_roster, seat_table

__all__ = [
    "LogEntry",
    "NotificationChannel",
    "NotificationRecord",
    "PoliticalLog",
    "TurnLogChannel",
    "election_summary",
    "government_panel",
    "party_roster",
    "seat_table",
]

_EXPORTS = {
    "LogEntry": "parliament.ui.channels",
    "NotificationChannel": "parliament.ui.channels",
    "NotificationRecord": "parliament.ui.channels",
    "PoliticalLog": "parliament.ui.channels",
    "TurnLogChannel": "parliament.ui.channels",
    "seat_table": "parliament.ui.reports",
    "party_roster": "parliament.ui.reports",
    "government_panel": "parliament.ui.reports",
    "election_summary": "parliament.ui.reports",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted({*globals(), *__all__})
