"""Secession, absorption, merger and leadership contests."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from parliament.politics.lifecycle import (
    absorb_parties,
    cleanup_vacancies,
    conduct_party_leadership_election,
    elect_state_branches,
    merge_parties,
    run_party_leadership_election,
    secede,
    unique_party_name,
    update_affiliation_leaders,
)
from parliament.politics.models import Ethnicity, Government, Minister


def _assert_affiliations_held_once(state) -> None:
    held = Counter(
        affiliation_id for party in state.parties.values() for affiliation_id in party.affiliation_ids
    )
    assert all(count == 1 for count in held.values())


def test_secession_moves_only_seats_held_by_the_faction(small_state, rng):
    islamist_mp = small_state.characters["a3"]

    party = secede(small_state, "malay-islamist", islamist_mp, "new", rng, new_party_name="Islamic Front")

    assert small_state.election_results == {"S1": "beta", "S2": "alpha", "S3": "alpha", "S4": party.id}
    assert party.affiliation_ids == ["malay-islamist"]
    assert party.leader_id == "a3"
    assert small_state.parties["alpha"].affiliation_ids == ["malay-nat", "malay-prog"]
    assert islamist_mp.history[-1].text == "Left Alpha to join Islamic Front."
    _assert_affiliations_held_once(small_state)


def test_secession_into_an_existing_party(small_state, rng):
    secede(small_state, "malay-prog", small_state.characters["a2"], "join", rng, target_party_id="gamma")

    assert small_state.election_results["S3"] == "gamma"
    assert "malay-prog" in small_state.parties["gamma"].affiliation_ids
    assert small_state.seat_counts() == {"alpha": 2, "beta": 1, "gamma": 1}


def test_secession_of_the_last_faction_dissolves_the_party(small_state, rng):
    absorb_parties(small_state, "alpha", affiliation_ids=["chinese-edu"])
    secede(small_state, "chinese-biz", small_state.characters["b1"], "join", rng, target_party_id="gamma")

    assert "beta" not in small_state.parties
    assert small_state.election_results["S1"] == "gamma"


@pytest.mark.parametrize(
    "affiliation_id, leader_id, mode, options, error",
    [
        ("malay-prog", "a1", "new", {"new_party_name": "X"}, ValueError),
        ("malay-prog", "a2", "join", {"target_party_id": "beta"}, ValueError),
        ("malay-prog", "a2", "join", {"target_party_id": "alpha"}, ValueError),
        ("malay-prog", "a2", "join", {"target_party_id": "missing"}, KeyError),
        ("malay-prog", "a2", "new", {}, ValueError),
        ("malay-prog", "a2", "new", {"new_party_name": "X", "focus": Ethnicity.CHINESE}, ValueError),
        ("malay-prog", "a2", "split", {}, ValueError),
    ],
)
def test_invalid_secessions_are_rejected(small_state, rng, affiliation_id, leader_id, mode, options, error):
    before = dict(small_state.election_results)
    with pytest.raises(error):
        secede(small_state, affiliation_id, small_state.characters[leader_id], mode, rng, **options)
    assert small_state.election_results == before


def test_absorption_conserves_seats(small_state):
    host = absorb_parties(small_state, "gamma", ["beta"], ["malay-islamist"])

    assert host.id == "gamma"
    assert "beta" not in small_state.parties
    assert small_state.election_results["S1"] == "gamma"
    assert "malay-islamist" in host.affiliation_ids
    assert sum(small_state.seat_counts().values()) == small_state.total_seats
    _assert_affiliations_held_once(small_state)


def test_seats_follow_their_mp_when_a_poached_party_dissolves(small_state):
    host = absorb_parties(small_state, "gamma", affiliation_ids=["chinese-biz", "chinese-edu"])

    assert "beta" not in small_state.parties
    assert small_state.election_results["S1"] == host.id
    assert set(small_state.election_results.values()) <= set(small_state.parties)
    assert sum(small_state.seat_counts().values()) == small_state.total_seats


def test_seat_without_an_mp_is_cleared_when_its_party_dissolves(small_state):
    small_state.characters["b1"].is_mp = False

    absorb_parties(small_state, "gamma", affiliation_ids=["chinese-biz", "chinese-edu"])

    assert "S1" not in small_state.election_results
    assert set(small_state.election_results.values()) <= set(small_state.parties)


def test_merger_creates_a_new_party(small_state, rng):
    merged = merge_parties(
        small_state, "alpha", rng, name="United Front", leader_id="a1", party_ids=["beta"]
    )

    assert set(small_state.parties) == {merged.id, "gamma"}
    assert small_state.seat_counts()[merged.id] == 4
    assert merged.ethnicity_focus is None
    assert merged.leader_history[0].leader_id == "a1"
    assert set(merged.affiliation_ids) == {
        "malay-nat",
        "malay-prog",
        "malay-islamist",
        "chinese-biz",
        "chinese-edu",
    }
    _assert_affiliations_held_once(small_state)


def test_unique_party_name(small_state):
    assert unique_party_name(small_state, "Delta") == "Delta"
    assert unique_party_name(small_state, "Alpha") == "Alpha (1)"
    assert unique_party_name(small_state, "Alpha", suffix="Kedah") == "Alpha (Kedah)"


def test_leadership_falls_back_to_influence_without_voters(small_state, rng):
    candidates = [small_state.characters["g1"], small_state.characters["a1"]]

    result = conduct_party_leadership_election([], candidates, rng)
    assert (result.leader_id, result.deputy_leader_id) == ("a1", "g1")

    result = conduct_party_leadership_election([], candidates, rng, extra_votes={"g1": 1})
    assert result.leader_id == "g1"
    assert result.tally == {"g1": 1, "a1": 0}


def test_leadership_election_with_state_branches(small_state):
    alpha = small_state.parties["alpha"]
    elect_state_branches(small_state, alpha)

    assert alpha.state_branches["Kedah"].leader_id == "a1"
    assert alpha.state_branches["Penang"].leader_id is None

    result = run_party_leadership_election(small_state, alpha, np.random.default_rng(3))
    assert result.leader_id in {"a1", "a2", "a3"}
    assert sum(result.tally.values()) == 3
    assert alpha.leader_id == result.leader_id


def test_dead_office_holders_are_cleared(small_state):
    small_state.government = Government("a1", ["alpha"], [Minister("a2", "Finance")], small_state.current_date)
    for character_id in ("a1", "a2"):
        small_state.characters[character_id].is_alive = False

    cleanup_vacancies(small_state)
    update_affiliation_leaders(small_state)

    alpha = small_state.parties["alpha"]
    assert alpha.leader_id is None
    assert alpha.deputy_leader_id is None
    assert alpha.leader_history[-1].end == small_state.current_date
    assert small_state.government.chief_minister_id == ""
    assert small_state.government.cabinet == []
    assert not small_state.characters["a1"].is_affiliation_leader
