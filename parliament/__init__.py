"""Parliamentary politics simulation.

The package models characters, interest-group affiliations, parties and
alliances competing for constituencies over decades of simulated time.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .engine.turn_engine import TurnContext, TurnEngine, run_simulation
    from .world.config import SimulationConfig
    from .world.rng import SimulationRandomness
    from .world.state import WorldState

__all__ = [
    "SimulationConfig",
    "SimulationRandomness",
    "TurnContext",
    "TurnEngine",
    "WorldState",
    "__version__",
    "run_simulation",
]

_EXPORTS = {
    "SimulationConfig": "parliament.world.config",
    "SimulationRandomness": "parliament.world.rng",
    "TurnContext": "parliament.engine.turn_engine",
    "TurnEngine": "parliament.engine.turn_engine",
    "WorldState": "parliament.world.state",
    "run_simulation": "parliament.engine.turn_engine",
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
