"""Population dynamics."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .dynamics import apply_growth, build_initial_state, PlayerProfile, run_mortality

__all__ = [
    "PlayerProfile",
    "apply_growth",
    "build_initial_state",
    "run_mortality",
]

_EXPORTS = {
    "PlayerProfile": "parliament.population.dynamics",
    "build_initial_state": "parliament.population.dynamics",
    "run_mortality": "parliament.population.dynamics",
    "apply_growth": "parliament.population.dynamics",
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
