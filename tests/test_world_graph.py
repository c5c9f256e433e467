import math

from parliament.politics.models import AllianceType, Party, PoliticalAlliance
from parliament.world.graph import (
    allied_parties,
    build_alliance_graph,
    build_relations_graph,
    relationship,
    same_bloc,
)


def _party(party_id: str, relations: dict[str, float]) -> Party:
    return Party(party_id, party_id.title(), "#000000", [], relations=relations)


def test_relations_graph_queries() -> None:
    parties = [
        _party("umno", {"mca": 90.0, "pmip": 20.0}),
        _party("mca", {"umno": 85.0}),
        _party("pmip", {"ghost": 99.0}),
    ]
    graph = build_relations_graph(parties)

    assert allied_parties(graph, "umno") == ["mca"]
    assert relationship(graph, "umno", "pmip") == 20.0
    assert relationship(graph, "mca", "pmip") == 50.0
    assert relationship(graph, "umno", "umno") == math.inf
    # Relations towards parties that no longer exist are dropped.
    assert not graph.has_node("ghost")


def test_alliance_graph_blocs_respect_alliance_type() -> None:
    alliances = [
        PoliticalAlliance("a", "The Alliance", ["umno", "mca", "mic"], AllianceType.ALLIANCE, "umno"),
        PoliticalAlliance("b", "Opposition Pact", ["labour", "pr"], AllianceType.PACT, "labour"),
    ]
    graph = build_alliance_graph(alliances)

    assert same_bloc(graph, "umno", "mic")
    assert same_bloc(graph, "labour", "pr")
    assert not same_bloc(graph, "labour", "pr", alliance_type=AllianceType.ALLIANCE)
    assert not same_bloc(graph, "umno", "labour")
    assert same_bloc(graph, "pmip", "pmip")
