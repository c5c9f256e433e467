"""Two-axis ideology arithmetic, naming and periodic recomputation."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable

import numpy as np

from .models import Ideology

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

# Rows are indexed by floor(economic / 10); columns by floor((100 - governance) / 10).
IDEOLOGY_GRID: tuple[tuple[str, ...], ...] = (
    ("Totalitarian Communism", "Maoism", "Juche", "Trotskyism", "Left Communism", "Communization", "Anarchist Communism", "Kropotkinism", "Post-Left Anarchism", "Anarcho-Primitivism"),
    ("Stalinism", "Soviet Model", "Command Economy", "Central Planning", "Planned Economy", "Decentralized Planning", "Participatory Economics", "Anarcho-Communism", "Communitarian Anarchism", "Insurrectionary Anarchism"),
    ("Marxism-Leninism", "Centralized Communism", "State Communism", "Planned Socialism", "Council Communism", "Federalist Communism", "Libertarian Marxism", "Anarcho-Syndicalism", "Anarcho-Collectivism", "Platform Anarchism"),
    ("Leninist Socialism", "Fabian Socialism", "Guild Socialism", "Reformist Socialism", "Market Socialism", "Cooperative Socialism", "Communalism", "Syndicalism", "Left-Mutualism", "Collectivist Anarchism"),
    ("Authoritarian Socialism", "State Socialism", "Social Corporatism", "Social Democracy", "Democratic Socialism", "Federalist Socialism", "Decentralized Social Democracy", "Libertarian Socialism", "Individualist Anarchism", "Egoist Anarchism"),
    ("State Corporatism", "Third Way", "Keynesianism", "Progressive Capitalism", "Centrism", "Federalism", "Decentralized Centrism", "Georgism", "Mutualism", "Anarcho-Mutualism"),
    ("Guided Democracy", "Corporatism", "Dirigisme", "Welfare Capitalism", "Mixed Economy", "Cooperative Federalism", "Social Liberalism", "Geolibertarianism", "Mutualism (Right)", "Agorism"),
    ("Developmental State", "Asian Tiger Model", "Corporatist Capitalism", "Social Market Economy", "Liberal Democracy", "Federalist Liberalism", "Decentralized Democracy", "Libertarian Conservatism", "Market Anarchism", "Right-Anarchism"),
    ("Authoritarian Neoliberalism", "Centralized Neoliberalism", "Neoliberalism", "Ordoliberalism", "Liberal Conservatism", "Classical Liberalism", "Decentralized Liberalism", "Right-Libertarianism", "Paleolibertarianism", "Voluntaryism"),
    ("State Capitalism", "Authoritarian Capitalism", "Technocratic Capitalism", "Guided Capitalism", "Regulated Capitalism", "Liberal Capitalism", "Decentralized Capitalism", "Libertarianism", "Minarchism", "Anarcho-Capitalism"),
)


def average_ideology(ideologies: Iterable[Ideology]) -> Ideology:
    """Component-wise mean; the centre ``(50, 50)`` for an empty input."""

    items = list(ideologies)
    if not items:
        return Ideology(50.0, 50.0)
    economic = sum(item.economic for item in items) / len(items)
    governance = sum(item.governance for item in items) / len(items)
    return Ideology(economic, governance)


def ideological_distance(a: Ideology, b: Ideology) -> float:
    return math.hypot(a.economic - b.economic, a.governance - b.governance)


def ideology_name(ideology: Ideology) -> str:
    eco_index = min(9, int(ideology.economic // 10))
    gov_index = min(9, int((100 - ideology.governance) // 10))
    if 0 <= eco_index <= 9 and 0 <= gov_index <= 9:
        return IDEOLOGY_GRID[eco_index][gov_index]
    return "Centrism"


def update_affiliation_ideologies(state: WorldState) -> None:
    """Set each affiliation's ideology to the mean of its living members."""

    members: dict[str, list[Ideology]] = {}
    for character in state.characters.values():
        if character.is_alive:
            members.setdefault(character.affiliation_id, []).append(character.ideology)
    for affiliation in state.affiliations.values():
        ideologies = members.get(affiliation.id)
        affiliation.ideology = (
            average_ideology(ideologies) if ideologies else affiliation.base_ideology.copy()
        )


def update_party_ideologies(state: WorldState) -> None:
    """Set each party's ideology to the mean of its member affiliations."""

    for party in state.parties.values():
        ideologies = [
            state.affiliations[affiliation_id].ideology
            for affiliation_id in party.affiliation_ids
            if affiliation_id in state.affiliations
        ]
        if ideologies:
            party.ideology = average_ideology(ideologies)


def apply_ideological_drift(
    state: WorldState, rng: np.random.Generator, *, chance: float = 0.01, magnitude: float = 2.0
) -> int:
    """Nudge a random ``chance`` share of living characters by up to ``magnitude``."""

    drifted = 0
    for character in state.characters.values():
        if not character.is_alive or rng.random() >= chance:
            continue
        character.ideology = character.ideology.shifted(
            float(rng.uniform(-magnitude, magnitude)),
            float(rng.uniform(-magnitude, magnitude)),
        )
        drifted += 1
    return drifted


__all__ = [
    "IDEOLOGY_GRID",
    "apply_ideological_drift",
    "average_ideology",
    "ideological_distance",
    "ideology_name",
    "update_affiliation_ideologies",
    "update_party_ideologies",
]
