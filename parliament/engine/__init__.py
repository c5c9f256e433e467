"""Game engine modules."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .turn_engine import run_simulation, TurnContext, TurnEngine
    from .world import (
        CalendarComponent,
        GameWorld,
        PendingEventsComponent,
        ServicesComponent,
        WorldStateComponent,
    )

__all__ = [
    "CalendarComponent",
    "GameWorld",
    "PendingEventsComponent",
    "ServicesComponent",
    "TurnContext",
    "TurnEngine",
    "WorldStateComponent",
    "run_simulation",
]

_EXPORTS = {
    "TurnContext": "parliament.engine.turn_engine",
    "TurnEngine": "parliament.engine.turn_engine",
    "run_simulation": "parliament.engine.turn_engine",
    "GameWorld": "parliament.engine.world",
    "WorldStateComponent": "parliament.engine.world",
    "CalendarComponent": "parliament.engine.world",
    "ServicesComponent": "parliament.engine.world",
    "PendingEventsComponent": "parliament.engine.world",
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
