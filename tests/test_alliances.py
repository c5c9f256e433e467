from __future__ import annotations

import numpy as np
import pytest

from parliament.politics.alliances import (
    MIN_SEATS_PER_MEMBER,
    attempt_alliance_formation,
    attempt_alliance_merger,
    check_big_tent,
    distribute_alliance_seats,
    merger_ready,
)
from parliament.politics.models import AllianceType, Government, Ideology, Party, PoliticalAlliance
from parliament.world.naming import NameGenerator


def _alliance(members: list[str], alliance_id: str = "pact", kind=AllianceType.ALLIANCE) -> PoliticalAlliance:
    return PoliticalAlliance(alliance_id, alliance_id.title(), members, kind, members[0])


def test_a_party_sits_in_at_most_one_alliance(small_state):
    small_state.add_alliance(_alliance(["alpha", "beta"]))

    with pytest.raises(ValueError):
        small_state.add_alliance(_alliance(["beta", "gamma"], "other"))
    with pytest.raises(ValueError):
        small_state.add_alliance(_alliance(["gamma"], "solo"))
    with pytest.raises(KeyError):
        small_state.add_alliance(_alliance(["gamma", "missing"], "ghost"))
    assert list(small_state.alliances) == ["pact"]


def test_alliance_leader_must_be_a_member(small_state):
    with pytest.raises(ValueError):
        small_state.add_alliance(
            PoliticalAlliance("odd", "Odd", ["gamma", "beta"], AllianceType.PACT, "alpha")
        )
    assert small_state.alliances == {}


def test_leaving_below_two_members_dissolves_the_alliance(small_state):
    small_state.add_alliance(_alliance(["alpha", "beta", "gamma"]))

    small_state.leave_alliance("alpha")
    assert small_state.alliances["pact"].leader_party_id == "beta"
    small_state.remove_party("gamma")
    assert "pact" not in small_state.alliances
    assert "gamma" not in small_state.parties["alpha"].relations


def test_alliance_seats_are_shared_without_overlap(seeded_state):
    alliance = seeded_state.alliances["alliance"]

    allocations = distribute_alliance_seats(seeded_state, alliance)

    assert set(allocations) == set(seeded_state.constituencies)
    members = [seeded_state.parties[party_id] for party_id in alliance.member_party_ids]
    contested = [set(member.contested_seats) for member in members]
    assert sum(len(seats) for seats in contested) == seeded_state.total_seats
    assert set().union(*contested) == set(seeded_state.constituencies)
    for member in members:
        assert len(member.contested_seats) >= MIN_SEATS_PER_MEMBER
        for contest in member.contested_seats.values():
            assert contest.allocated_affiliation_id in member.affiliation_ids


def test_like_minded_party_accepts_an_alliance(small_state):
    alpha, gamma = small_state.parties["alpha"], small_state.parties["gamma"]
    gamma.ideology = alpha.ideology.copy()
    alpha.relations["gamma"] = 100.0

    outcome = attempt_alliance_formation(
        small_state, "alpha", ["gamma"], "Front", AllianceType.ALLIANCE, np.random.default_rng(0)
    )

    assert outcome.succeeded
    assert outcome.alliance.member_party_ids == ["alpha", "gamma"]
    assert small_state.alliance_of("gamma") is outcome.alliance
    assert set(alpha.contested_seats) | set(gamma.contested_seats) == set(small_state.constituencies)


def test_parties_in_another_alliance_decline(small_state):
    small_state.add_alliance(_alliance(["beta", "gamma"]))

    outcome = attempt_alliance_formation(
        small_state, "alpha", ["beta"], "Front", AllianceType.PACT, np.random.default_rng(0)
    )

    assert not outcome.succeeded
    assert outcome.rejected == ["beta"]
    assert small_state.political_log.titles()[-1] == "Alliance Failed"


def test_cohesive_alliance_merges_into_one_party(small_state, rng):
    small_state.add_alliance(_alliance(["alpha", "beta"]))
    for party_id, other in (("alpha", "beta"), ("beta", "alpha")):
        party = small_state.parties[party_id]
        party.ideology = Ideology(50, 60)
        party.relations[other] = 95.0
    assert merger_ready(small_state, small_state.alliances["pact"])

    merged = attempt_alliance_merger(small_state, rng)

    assert merged is not None
    assert merged.id == "merged-pact"
    assert merged.leader_id == "a1"
    assert merged.deputy_leader_id == "b1"
    assert small_state.seat_counts()[merged.id] == 4
    assert "pact" not in small_state.alliances
    assert {"alpha", "beta"}.isdisjoint(small_state.parties)


def test_big_tent_after_twenty_years_of_one_regime(small_state):
    small_state.add_party(Party("delta", "Delta", "#000075", ["malay-royalist"]))
    small_state.government = Government("a1", ["alpha"], [], small_state.current_date)
    small_state.regime_start = small_state.current_date.replace(year=1930)
    names = NameGenerator(np.random.default_rng(1))

    alliance = check_big_tent(small_state, names)

    assert alliance is not None
    assert set(alliance.member_party_ids) == {"beta", "gamma", "delta"}
    assert small_state.big_tent_triggered
    assert small_state.parties["beta"].relation_to("delta") == 90.0
    assert check_big_tent(small_state, names) is None


def test_big_tent_needs_three_opposition_parties(small_state):
    small_state.government = Government("a1", ["alpha"], [], small_state.current_date)
    small_state.regime_start = small_state.current_date.replace(year=1920)

    assert check_big_tent(small_state, NameGenerator(np.random.default_rng(1))) is None
    assert not small_state.big_tent_triggered
