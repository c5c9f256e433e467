from __future__ import annotations

import math

import numpy as np
import pytest

from parliament.politics.ideology import (
    IDEOLOGY_GRID,
    average_ideology,
    ideological_distance,
    ideology_name,
    update_affiliation_ideologies,
    update_party_ideologies,
)
from parliament.politics.influence import effective_influence, influence_in_seat, round_half_up
from parliament.politics.models import Ideology, Party, Stronghold
from parliament.politics.relations import (
    baseline_relation,
    coalition_acceptance_chance,
    initialize_party_relations,
    set_mutual_relations,
)


@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.49, 1), (2.5, 3), (48.1536, 48)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_effective_influence_combines_every_modifier(small_state):
    # Chinese industrialist at home in an urban, 70% Chinese seat.
    b1 = small_state.characters["b1"]
    b1.influence, b1.recognition = 50.0, 20.0
    seat = small_state.constituencies["S1"]
    base = 50 * 0.8 + 20 * 0.2
    plain = base * 1.2 * (0.2 + 0.8 * 0.70) * 1.2

    assert influence_in_seat(small_state, b1, "S1") == round_half_up(plain)
    assert influence_in_seat(small_state, b1, "S1", candidate_id="b1") == round_half_up(plain * 1.25)
    assert influence_in_seat(
        small_state, b1, "S1", allocated_affiliation_id="chinese-biz"
    ) == round_half_up(plain * 1.1)

    strongholds = {"S1": Stronghold("chinese-biz", terms=2)}
    assert effective_influence(b1, seat, small_state.affiliations, strongholds) == round_half_up(plain * 1.2)
    # Without a seat only base power counts.
    assert effective_influence(b1, None, small_state.affiliations, {}) == round_half_up(base)


def test_away_and_area_mismatch_penalties(small_state):
    b1 = small_state.characters["b1"]
    b1.influence, b1.recognition = 50.0, 20.0
    # Kedah is rural, away from Penang and only 12% Chinese.
    expected = 44 * 0.8 * (0.2 + 0.8 * 0.12) * 0.8
    assert influence_in_seat(small_state, b1, "S2") == round_half_up(expected)


def test_effective_influence_is_never_negative(small_state):
    character = small_state.characters["g2"]
    character.influence = character.recognition = 0.0
    for seat in small_state.constituencies:
        assert influence_in_seat(small_state, character, seat) == 0


def test_ideology_is_clamped_and_averaged():
    assert Ideology(-20, 140) == Ideology(0, 100)
    assert Ideology(90, 10).shifted(economic=30) == Ideology(100, 10)
    assert average_ideology([]) == Ideology(50, 50)
    assert average_ideology([Ideology(20, 40), Ideology(60, 80)]) == Ideology(40, 60)
    assert ideological_distance(Ideology(0, 0), Ideology(30, 40)) == pytest.approx(50.0)


@pytest.mark.parametrize(
    "ideology, expected",
    [
        (Ideology(50, 50), IDEOLOGY_GRID[5][5]),
        (Ideology(0, 100), "Totalitarian Communism"),
        (Ideology(100, 0), "Anarcho-Capitalism"),
    ],
)
def test_ideology_name(ideology, expected):
    assert ideology_name(ideology) == expected


def test_faction_and_party_ideologies_follow_members(small_state):
    small_state.characters["a1"].ideology = Ideology(10, 90)
    update_affiliation_ideologies(small_state)
    update_party_ideologies(small_state)

    assert small_state.affiliations["malay-nat"].ideology == Ideology(10, 90)
    # An affiliation with no living members falls back to its base ideology.
    assert small_state.affiliations["malay-royalist"].ideology == Ideology(50, 85)
    alpha = small_state.parties["alpha"]
    expected = average_ideology(
        small_state.affiliations[affiliation_id].ideology for affiliation_id in alpha.affiliation_ids
    )
    assert alpha.ideology == expected


def test_baseline_relation_penalises_ethnic_friction(small_state):
    alpha, beta, gamma = (small_state.parties[key] for key in ("alpha", "beta", "gamma"))
    for party in (alpha, beta, gamma):
        party.ideology = Ideology(50, 50)

    assert baseline_relation(alpha, beta) == 70.0
    assert baseline_relation(alpha, gamma) == 85.0
    gamma_twin = Party("twin", "Twin", "#000000", [], ideology=Ideology(50, 50))
    assert baseline_relation(gamma, gamma_twin) == 100.0


def test_relations_cover_every_ordered_pair(small_state):
    initialize_party_relations(small_state, np.random.default_rng(9))

    for party in small_state.parties.values():
        assert party.id not in party.relations
        assert set(party.relations) == set(small_state.parties) - {party.id}
        assert all(0.0 <= value <= 100.0 for value in party.relations.values())

    set_mutual_relations(small_state, ["alpha", "beta"], 100.0)
    assert small_state.parties["alpha"].relation_to("beta") == 100.0
    assert small_state.parties["beta"].relation_to("alpha") == 100.0
    assert small_state.parties["alpha"].relation_to("missing") == 50.0


def test_coalition_acceptance_blends_member_views(small_state):
    alpha, beta, gamma = (small_state.parties[key] for key in ("alpha", "beta", "gamma"))
    alpha.relations = {"gamma": 60.0}
    beta.relations = {"gamma": 20.0}
    alpha.ideology = Ideology(30, 50)
    gamma.ideology = Ideology(20, 50)

    chance = coalition_acceptance_chance(small_state, "alpha", "gamma", ["beta"])
    assert math.isclose(chance, 0.4 + 0.1)
