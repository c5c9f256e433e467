"""World data: configuration, randomness, constituencies and the shared state."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .config import (
        CalendarSettings,
        ElectoralSettings,
        ElectoralSystem,
        EventSettings,
        PopulationSettings,
        RandomnessSettings,
        SimulationConfig,
    )
    from .constituencies import Constituency, load_constituencies_csv, synthetic_constituencies
    from .graph import same_bloc
    from .naming import NameGenerator
    from .rng import SimulationRandomness
    from .state import WorldState

__all__ = [
    "CalendarSettings",
    "Constituency",
    "ElectoralSettings",
    "ElectoralSystem",
    "EventSettings",
    "NameGenerator",
    "PopulationSettings",
    "RandomnessSettings",
    "SimulationConfig",
    "SimulationRandomness",
    "WorldState",
    "load_constituencies_csv",
    "same_bloc",
    "synthetic_constituencies",
]

_EXPORTS = {
    "SimulationConfig": "parliament.world.config",
    "ElectoralSystem": "parliament.world.config",
    "ElectoralSettings": "parliament.world.config",
    "CalendarSettings": "parliament.world.config",
    "PopulationSettings": "parliament.world.config",
    "EventSettings": "parliament.world.config",
    "RandomnessSettings": "parliament.world.config",
    "SimulationRandomness": "parliament.world.rng",
    "Constituency": "parliament.world.constituencies",
    "load_constituencies_csv": "parliament.world.constituencies",
    "synthetic_constituencies": "parliament.world.constituencies",
    "NameGenerator": "parliament.world.naming",
    "WorldState": "parliament.world.state",
    "same_bloc": "parliament.world.graph",
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
