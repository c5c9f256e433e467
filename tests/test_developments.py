"""Monthly political developments: unity, schisms, alignment and alliance upkeep."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from parliament.politics import developments
from parliament.politics.developments import (
    SCHISM_CHANCE,
    DevelopmentReport,
    align_independents,
    attempt_schism,
    consolidate_weak_parties,
    enforce_alliance_integrity,
    form_ai_alliances,
    rebel_affiliations,
    run_political_developments,
    schism_eligible,
    schism_triggered,
)
from parliament.politics.models import AllianceType, Ideology, Party, PoliticalAlliance
from parliament.world.naming import NameGenerator


def _fractious(unity: float = 15.0, factions: int = 3) -> Party:
    return Party("split", "Split", "#000000", [f"f{index}" for index in range(factions)], unity=unity)


@pytest.mark.parametrize(
    "unity, factions, eligible",
    [(15.0, 3, True), (19.9, 4, True), (20.0, 3, False), (10.0, 2, False)],
)
def test_schism_eligibility(unity, factions, eligible):
    assert schism_eligible(_fractious(unity, factions)) is eligible


def test_schism_fires_about_one_month_in_twenty():
    party = _fractious()
    rng = np.random.default_rng(2024)
    trials = 10_000

    fired = sum(schism_triggered(party, rng) for _ in range(trials))

    assert abs(fired / trials - SCHISM_CHANCE) < 0.01


def test_ineligible_parties_do_not_consume_draws():
    stable = _fractious(unity=80.0)
    rng = np.random.default_rng(3)
    twin = np.random.default_rng(3)

    assert not schism_triggered(stable, rng)
    assert rng.random() == twin.random()


def test_schism_splits_the_dissident_faction(small_state, rng):
    alpha = small_state.parties["alpha"]
    alpha.unity = 15.0
    dissident = small_state.characters["a2"]

    # The Islamists sit closer to the nationalist leader than to the progressives.
    assert rebel_affiliations(small_state, alpha, dissident) == ["malay-prog"]

    destination = attempt_schism(small_state, alpha, rng, NameGenerator(np.random.default_rng(8)))

    assert destination is not None
    assert destination.id not in ("alpha", "beta", "gamma")
    assert destination.affiliation_ids == ["malay-prog"]
    assert destination.leader_id == "a2"
    assert alpha.affiliation_ids == ["malay-nat", "malay-islamist"]
    assert small_state.election_results["S3"] == destination.id
    assert small_state.political_log.titles()[-1] == "Party Schism"


def test_no_schism_without_a_rival_faction_leader(small_state, rng):
    beta = small_state.parties["beta"]
    small_state.characters["b2"].is_alive = False
    small_state.characters["b2"].is_affiliation_leader = False

    assert attempt_schism(small_state, beta, rng, NameGenerator(rng)) is None


def test_independent_faction_aligns_with_the_nearest_party(small_state, make_character, monkeypatch):
    monkeypatch.setattr(developments, "ALIGNMENT_CHANCE", 1.0)
    royalist = make_character(small_state, "r1", "malay-royalist", "S2")
    royalist.is_affiliation_leader = True

    aligned = align_independents(small_state, np.random.default_rng(0))

    assert aligned == ["malay-royalist"]
    assert "malay-royalist" in small_state.parties["alpha"].affiliation_ids


def test_estranged_members_leave_the_alliance(small_state):
    small_state.add_alliance(
        PoliticalAlliance("pact", "Pact", ["alpha", "beta", "gamma"], AllianceType.ALLIANCE, "alpha")
    )
    alpha = small_state.parties["alpha"]
    alpha.relations.update({"beta": 20.0, "gamma": 80.0})
    small_state.parties["gamma"].ideology = alpha.ideology.copy()
    report = DevelopmentReport()

    enforce_alliance_integrity(small_state, report)

    assert report.departures == ["beta"]
    assert small_state.alliances["pact"].member_party_ids == ["alpha", "gamma"]

    alpha.relations["gamma"] = 10.0
    enforce_alliance_integrity(small_state, report)
    assert "pact" not in small_state.alliances
    assert report.dissolved_alliances == ["pact"]


@pytest.mark.parametrize("relation, allied", [(80.0, True), (69.0, False)])
def test_ai_alliances_need_a_warm_partner(small_state, monkeypatch, relation, allied):
    monkeypatch.setattr(developments, "ALLIANCE_CHANCE", 1.0)
    small_state.parties["alpha"].relations.update({"beta": 30.0, "gamma": relation})
    rng = np.random.default_rng(2)

    created = form_ai_alliances(small_state, rng, NameGenerator(rng))

    if allied:
        assert len(created) == 1
        assert small_state.alliances[created[0]].member_party_ids == ["alpha", "gamma"]
    else:
        assert created == []
        assert small_state.alliances == {}


@pytest.mark.parametrize("relation, absorbed", [(60.0, True), (30.0, False)])
def test_seatless_party_is_absorbed_by_a_friendly_neighbour(small_state, monkeypatch, relation, absorbed):
    monkeypatch.setattr(developments, "CONSOLIDATION_CHANCE", 1.0)
    gamma = small_state.parties["gamma"]
    gamma.ideology = Ideology(40, 65)
    gamma.relations["alpha"] = relation
    rng = np.random.default_rng(3)

    consolidated = consolidate_weak_parties(small_state, rng, NameGenerator(rng))

    if absorbed:
        assert consolidated == ["gamma"]
        assert "gamma" not in small_state.parties
        assert "malay-socialist" in small_state.parties["alpha"].affiliation_ids
    else:
        assert consolidated == []
        assert "gamma" in small_state.parties


def test_developments_pass_keeps_the_world_consistent(seeded_state):
    rng = np.random.default_rng(11)
    names = NameGenerator(np.random.default_rng(12))

    for _ in range(24):
        report = run_political_developments(seeded_state, rng, names)
        assert isinstance(report, DevelopmentReport)

    held = Counter(
        affiliation_id for party in seeded_state.parties.values() for affiliation_id in party.affiliation_ids
    )
    assert all(count == 1 for count in held.values())
    for alliance in seeded_state.alliances.values():
        assert len(alliance.member_party_ids) >= 2
        assert all(party_id in seeded_state.parties for party_id in alliance.member_party_ids)
    assert set(seeded_state.election_results.values()) <= set(seeded_state.parties)
