"""General elections and the business of the house."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .general import (
        allocate_fptp,
        allocate_pr,
        ElectionHistoryEntry,
        run_general_election,
        swing,
    )
    from .parliament import (
        conduct_bill_vote,
        conduct_confidence_vote,
        elect_speaker,
        form_government,
        security_crackdown,
    )

__all__ = [
    "ElectionHistoryEntry",
    "allocate_fptp",
    "allocate_pr",
    "conduct_bill_vote",
    "conduct_confidence_vote",
    "elect_speaker",
    "form_government",
    "run_general_election",
    "security_crackdown",
    "swing",
]

_EXPORTS = {
    "ElectionHistoryEntry": "parliament.elections.general",
    "run_general_election": "parliament.elections.general",
    "allocate_fptp": "parliament.elections.general",
    "allocate_pr": "parliament.elections.general",
    "swing": "parliament.elections.general",
    "form_government": "parliament.elections.parliament",
    "elect_speaker": "parliament.elections.parliament",
    "conduct_confidence_vote": "parliament.elections.parliament",
    "conduct_bill_vote": "parliament.elections.parliament",
    "security_crackdown": "parliament.elections.parliament",
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
