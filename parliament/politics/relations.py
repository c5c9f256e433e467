"""Directed party relation scores."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from ..world.graph import relationship
from .ideology import ideological_distance
from .models import Party, clamp

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState


def baseline_relation(party_a: Party, party_b: Party) -> float:
    """Affinity before noise: ideology closeness minus ethnic-focus friction."""

    score = 100.0 - ideological_distance(party_a.ideology, party_b.ideology) * 0.5
    focus_a, focus_b = party_a.ethnicity_focus, party_b.ethnicity_focus
    if focus_a is not None and focus_b is not None:
        if focus_a != focus_b:
            score -= 30
    elif focus_a is not None or focus_b is not None:
        score -= 15
    return clamp(score)


def initialize_party_relations(state: WorldState, rng: np.random.Generator) -> None:
    """Recompute every directed relation from scratch (O(n^2) over parties)."""

    parties = list(state.parties.values())
    for party in parties:
        relations: dict[str, float] = {}
        for other in parties:
            if other.id == party.id:
                continue
            noise = math.floor(rng.random() * 10) - 5
            relations[other.id] = clamp(baseline_relation(party, other) + noise)
        party.relations = relations


def set_mutual_relations(state: WorldState, party_ids: Sequence[str], value: float) -> None:
    """Force every ordered pair among ``party_ids`` to ``value``."""

    for party_id in party_ids:
        party = state.parties.get(party_id)
        if party is None:
            continue
        for other_id in party_ids:
            if other_id != party_id and other_id in state.parties:
                party.relations[other_id] = clamp(value)


def coalition_acceptance_chance(
    state: WorldState,
    initiator_id: str,
    target_id: str,
    existing_member_ids: Iterable[str] = (),
) -> float:
    """Probability that ``target_id`` joins a coalition led by ``initiator_id``.

    Each existing member's view of the target is folded in by successive
    halving, and ideological proximity on the economic axis adds a bonus.
    """

    initiator = state.parties[initiator_id]
    target = state.parties[target_id]
    graph = state.relations_graph()
    base = relationship(graph, initiator_id, target_id)
    for member_id in existing_member_ids:
        if member_id not in state.parties or member_id == initiator_id:
            continue
        base = (base + relationship(graph, member_id, target_id)) / 2
    chance = base / 100.0
    if abs(initiator.ideology.economic - target.ideology.economic) < 20:
        chance += 0.1
    return max(0.0, min(1.0, chance))


__all__ = [
    "baseline_relation",
    "coalition_acceptance_chance",
    "initialize_party_relations",
    "set_mutual_relations",
]
