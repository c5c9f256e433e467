from __future__ import annotations

import pytest

from parliament.politics import player as player_actions
from parliament.politics.lifecycle import update_affiliation_leaders
from parliament.politics.models import AllianceType, Government
from parliament.politics.player import (
    PlayerAction,
    merger_acceptance_chance,
    order_crackdown,
    perform_action,
    player_secede,
    propose_alliance,
    propose_merger,
    require_player,
)


@pytest.fixture
def player(small_state, make_character):
    """A youth-wing organiser inside Alpha, sole member of their faction."""

    small_state.move_affiliation("malay-youth", "alpha")
    character = make_character(small_state, "player-1", "malay-youth", "S3", is_player=True)
    update_affiliation_leaders(small_state)
    return character


def _always(chance: float):
    return lambda _player: chance


def test_actions_need_a_living_player(small_state, player):
    player.is_alive = False

    with pytest.raises(ValueError):
        require_player(small_state)
    with pytest.raises(ValueError):
        perform_action(small_state, PlayerAction.ADDRESS_LOCALS)


def test_addressing_locals(small_state, player):
    perform_action(small_state, "address_locals")

    assert (player.influence, player.recognition) == (58.0, 24.0)
    assert small_state.political_log.titles()[-1] == "Action Performed"


def test_gains_are_capped(small_state, player):
    player.influence = 95.0

    perform_action(small_state, PlayerAction.ORGANIZE_STATE_RALLY)

    assert player.influence == 100.0


def test_undermining_a_rival(small_state, player):
    perform_action(small_state, PlayerAction.UNDERMINE_RIVAL, target_id="b1")

    assert small_state.characters["b1"].influence == 60.0
    assert player.influence == 50.0
    with pytest.raises(KeyError):
        perform_action(small_state, PlayerAction.UNDERMINE_RIVAL, target_id="ghost")
    with pytest.raises(ValueError):
        perform_action(small_state, "filibuster")


@pytest.mark.parametrize("influence, chance", [(61, 0.8), (60, 0.3), (10, 0.3)])
def test_merger_acceptance_depends_on_standing(player, influence, chance):
    player.influence = influence
    assert merger_acceptance_chance(player) == chance


def test_accepted_merger_founds_a_new_party(small_state, player, rng, monkeypatch):
    monkeypatch.setattr(player_actions, "merger_acceptance_chance", _always(1.0))

    outcome = propose_merger(small_state, rng, party_ids=["gamma"], name="United Front")

    assert outcome.succeeded
    assert outcome.accepted_parties == ["gamma"]
    merged = outcome.party
    assert merged.leader_id == player.id
    assert {"alpha", "gamma"}.isdisjoint(small_state.parties)
    assert small_state.seat_counts()[merged.id] == 3


def test_absorbing_an_independent_faction(small_state, player, rng, monkeypatch):
    monkeypatch.setattr(player_actions, "merger_acceptance_chance", _always(1.0))

    outcome = propose_merger(small_state, rng, affiliation_ids=["malay-royalist"], mode="absorb")

    assert outcome.party.id == "alpha"
    assert "malay-royalist" in small_state.parties["alpha"].affiliation_ids


def test_rejected_merger_changes_nothing(small_state, player, rng, monkeypatch):
    monkeypatch.setattr(player_actions, "merger_acceptance_chance", _always(0.0))

    outcome = propose_merger(small_state, rng, party_ids=["beta", "gamma"], name="Grand Front")

    assert not outcome.succeeded
    assert outcome.rejected == ["beta", "gamma"]
    assert set(small_state.parties) == {"alpha", "beta", "gamma"}
    assert small_state.political_log.titles()[-1] == "Merger Rejected"


@pytest.mark.parametrize(
    "options, error",
    [
        ({"party_ids": ["gamma"]}, ValueError),
        ({"party_ids": ["ghost"], "name": "X"}, KeyError),
        ({"affiliation_ids": ["ghost"], "name": "X"}, KeyError),
        ({"party_ids": ["gamma"], "name": "X", "mode": "annex"}, ValueError),
    ],
)
def test_invalid_merger_proposals(small_state, player, rng, options, error):
    with pytest.raises(error):
        propose_merger(small_state, rng, **options)


def test_faction_leader_can_lead_a_secession(small_state, player, rng):
    party = player_secede(small_state, rng, "new", new_party_name="Alpha")

    assert party.name == "Alpha (1)"
    assert party.affiliation_ids == ["malay-youth"]
    assert "malay-youth" not in small_state.parties["alpha"].affiliation_ids


def test_only_the_faction_leader_can_secede(small_state, player, make_character, rng):
    make_character(small_state, "rival", "malay-youth", "S3", influence=90)
    update_affiliation_leaders(small_state)

    with pytest.raises(ValueError):
        player_secede(small_state, rng, "join", target_party_id="gamma")


def test_alliances_are_negotiated_by_the_party_leader(small_state, player, rng):
    with pytest.raises(ValueError):
        propose_alliance(small_state, rng, ["gamma"], "Front")

    alpha, gamma = small_state.parties["alpha"], small_state.parties["gamma"]
    alpha.leader_id = player.id
    gamma.ideology = alpha.ideology.copy()
    alpha.relations["gamma"] = 100.0
    with pytest.raises(KeyError):
        propose_alliance(small_state, rng, ["ghost"], "Front")

    outcome = propose_alliance(small_state, rng, ["gamma"], "Front", AllianceType.PACT)
    assert outcome.succeeded
    assert outcome.alliance.type is AllianceType.PACT


def test_only_the_chief_minister_orders_a_crackdown(small_state, player):
    with pytest.raises(ValueError):
        order_crackdown(small_state)
    small_state.government = Government(player.id, ["alpha"], [], small_state.current_date)

    event = order_crackdown(small_state)

    assert small_state.characters["b1"].influence == 0.0
    assert event.affected_party_ids == ["alpha"]
