"""Political actors and the rules that move them."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .ai import run_character_ai
    from .developments import run_political_developments
    from .influence import effective_influence
    from .legislation import Bill, BILLS, VoteDirection
    from .lifecycle import absorb_parties, merge_parties, secede
    from .models import (
        Affiliation,
        AllianceType,
        Character,
        Ethnicity,
        Government,
        Ideology,
        Party,
        PoliticalAlliance,
    )
    from .player import perform_action, PlayerAction
    from .strategy import run_ai_strategies

__all__ = [
    "Affiliation",
    "AllianceType",
    "BILLS",
    "Bill",
    "Character",
    "Ethnicity",
    "Government",
    "Ideology",
    "Party",
    "PlayerAction",
    "PoliticalAlliance",
    "VoteDirection",
    "absorb_parties",
    "effective_influence",
    "merge_parties",
    "perform_action",
    "run_ai_strategies",
    "run_character_ai",
    "run_political_developments",
    "secede",
]

_EXPORTS = {
    "Character": "parliament.politics.models",
    "Party": "parliament.politics.models",
    "Affiliation": "parliament.politics.models",
    "PoliticalAlliance": "parliament.politics.models",
    "Government": "parliament.politics.models",
    "Ideology": "parliament.politics.models",
    "Ethnicity": "parliament.politics.models",
    "AllianceType": "parliament.politics.models",
    "effective_influence": "parliament.politics.influence",
    "run_political_developments": "parliament.politics.developments",
    "secede": "parliament.politics.lifecycle",
    "merge_parties": "parliament.politics.lifecycle",
    "absorb_parties": "parliament.politics.lifecycle",
    "Bill": "parliament.politics.legislation",
    "VoteDirection": "parliament.politics.legislation",
    "BILLS": "parliament.politics.legislation",
    "PlayerAction": "parliament.politics.player",
    "perform_action": "parliament.politics.player",
    "run_character_ai": "parliament.politics.ai",
    "run_ai_strategies": "parliament.politics.strategy",
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
