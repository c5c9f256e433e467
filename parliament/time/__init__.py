"""Timekeeping utilities."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .calendar import add_years, SimulationClock, Speed

__all__ = [
    "SimulationClock",
    "Speed",
    "add_years",
]

_EXPORTS = {
    "SimulationClock": "parliament.time.calendar",
    "Speed": "parliament.time.calendar",
    "add_years": "parliament.time.calendar",
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
