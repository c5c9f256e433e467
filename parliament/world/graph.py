"""Graph views over party relations and alliance membership."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, TypeAlias, cast

import networkx as nx

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..politics.models import AllianceType, Party, PoliticalAlliance

    RelationsGraph: TypeAlias = nx.DiGraph[str]
    BlocGraph: TypeAlias = nx.Graph[str]
else:  # pragma: no cover - runtime alias without subscripting
    RelationsGraph: TypeAlias = nx.DiGraph
    BlocGraph: TypeAlias = nx.Graph


def build_relations_graph(
    parties: Mapping[str, Party] | Iterable[Party],
    *,
    neutral_value: float = 50.0,
) -> RelationsGraph:
    """Construct a directed graph of how each party views every other party."""

    values = parties.values() if isinstance(parties, Mapping) else parties
    party_list = list(values)
    graph: RelationsGraph = nx.DiGraph(neutral_value=float(neutral_value))
    for party in party_list:
        graph.add_node(party.id, name=party.name)
    known = {party.id for party in party_list}
    for party in party_list:
        for other_id, value in party.relations.items():
            if other_id == party.id or other_id not in known:
                continue
            graph.add_edge(party.id, other_id, weight=float(value))
    return graph


def relationship(
    graph: RelationsGraph, party_a: str, party_b: str, *, default: float | None = None
) -> float:
    """Return how ``party_a`` views ``party_b``."""

    if party_a == party_b:
        return float("inf")
    if default is None:
        default = float(graph.graph.get("neutral_value", 50.0))
    if graph.has_edge(party_a, party_b):
        return float(graph.edges[party_a, party_b].get("weight", default))
    return float(default)


def allied_parties(graph: RelationsGraph, party: str, threshold: float = 70.0) -> list[str]:
    """Return parties that ``party`` regards at or above ``threshold``."""

    allies: list[str] = []
    if party not in graph:
        return allies
    for node in graph.nodes:
        other = cast(str, node)
        if other == party:
            continue
        if relationship(graph, party, other) >= threshold:
            allies.append(other)
    return allies


def build_alliance_graph(alliances: Iterable[PoliticalAlliance]) -> BlocGraph:
    """Connect every pair of parties sharing an alliance."""

    graph: BlocGraph = nx.Graph()
    for alliance in alliances:
        members = list(alliance.member_party_ids)
        for member in members:
            graph.add_node(member)
        for index, party_a in enumerate(members):
            for party_b in members[index + 1 :]:
                graph.add_edge(
                    party_a,
                    party_b,
                    alliance_id=alliance.id,
                    alliance_type=alliance.type,
                )
    return graph


def same_bloc(
    graph: BlocGraph,
    party_a: str,
    party_b: str,
    *,
    alliance_type: AllianceType | None = None,
) -> bool:
    """Return ``True`` when both parties share an alliance (optionally of one type)."""

    if party_a == party_b:
        return True
    if not graph.has_edge(party_a, party_b):
        return False
    if alliance_type is None:
        return True
    return graph.edges[party_a, party_b].get("alliance_type") == alliance_type


__all__ = [
    "allied_parties",
    "build_alliance_graph",
    "build_relations_graph",
    "relationship",
    "same_bloc",
]
