from __future__ import annotations

import pytest

from parliament.elections.parliament import (
    bill_passes,
    choose_ruling_coalition,
    conduct_bill_vote,
    conduct_confidence_vote,
    conduct_speaker_vote,
    elect_speaker,
    form_government,
    negotiate_coalition,
    security_crackdown,
    speaker_candidates,
)
from parliament.events.political import EventType
from parliament.politics.legislation import PR_BILL_ID, VoteDirection, bill_by_id
from parliament.politics.models import SPEAKER_SEAT, AllianceType, PoliticalAlliance
from parliament.world.config import ElectoralSystem


def test_a_chosen_coalition_needs_a_majority(small_state):
    assert small_state.majority == 3
    with pytest.raises(ValueError):
        form_government(small_state, ["beta"])
    with pytest.raises(KeyError):
        form_government(small_state, ["nope"])
    assert small_state.government is None


@pytest.mark.parametrize("relation, coalition", [(100.0, ["alpha", "beta"]), (0.0, ["alpha"])])
def test_invited_partners_may_decline_a_coalition(small_state, rng, relation, coalition):
    small_state.election_results = {"S1": "beta", "S2": "gamma", "S3": "alpha", "S4": "alpha"}
    small_state.parties["alpha"].relations["beta"] = relation

    government = form_government(small_state, ["alpha", "beta"], rng)

    assert government.ruling_coalition_ids == coalition
    titles = small_state.political_log.titles()
    if coalition == ["alpha"]:
        assert titles.index("Coalition Declined") < titles.index("Coalition Talks Failed")
    else:
        assert "Coalition Declined" not in titles


def test_alliance_partners_join_without_a_vote(small_state, rng):
    small_state.election_results = {"S1": "beta", "S2": "gamma", "S3": "alpha", "S4": "alpha"}
    small_state.parties["alpha"].relations["beta"] = 0.0
    small_state.add_alliance(
        PoliticalAlliance("pact", "Pact", ["alpha", "beta"], AllianceType.ALLIANCE, "alpha")
    )

    assert negotiate_coalition(small_state, ["beta", "alpha"], rng) == (["alpha", "beta"], [])


def test_largest_party_forms_the_government(small_state):
    government = form_government(small_state)

    assert government.ruling_coalition_ids == ["alpha"]
    assert government.chief_minister_id == "a1"
    assert [(minister.minister_id, minister.portfolio) for minister in government.cabinet] == [
        ("a2", "Home Affairs"),
        ("a3", "Finance"),
    ]
    assert small_state.regime_leader_party == "alpha"
    assert small_state.regime_start == small_state.current_date
    assert small_state.characters["a1"].history[-1].text == "Appointed as Chief Minister."


def test_an_alliance_wins_ties_against_a_single_party(small_state):
    small_state.election_results = {"S1": "beta", "S2": "gamma", "S3": "alpha", "S4": "alpha"}
    small_state.add_alliance(
        PoliticalAlliance("pact", "Pact", ["beta", "gamma"], AllianceType.ALLIANCE, "beta")
    )

    assert choose_ruling_coalition(small_state) == ["beta", "gamma"]


def test_speaker_vote_follows_the_government_bloc(small_state):
    form_government(small_state)
    candidates = speaker_candidates(small_state)
    assert [candidate.id for candidate in candidates] == ["a1", "b1"]

    result = conduct_speaker_vote(small_state, candidates)
    assert result.winner_id == "a1"
    assert result.tally == {"a1": 3, "b1": 1}
    assert result.breakdown == {"alpha": "a1", "beta": "b1"}


def test_elected_speaker_leaves_their_seat(small_state):
    result = elect_speaker(small_state)

    speaker = small_state.characters[result.winner_id]
    assert speaker.seat == SPEAKER_SEAT
    assert small_state.speaker() is speaker
    assert small_state.political_log.titles()[-1] == "Speaker Elected"


def test_confidence_vote(small_state):
    with pytest.raises(ValueError):
        conduct_confidence_vote(small_state)
    form_government(small_state)

    result = conduct_confidence_vote(small_state)

    assert result.passed
    assert (result.votes_for, result.votes_against) == (3, 1)
    assert result.breakdown["b1"] == "Against"


@pytest.mark.parametrize(
    "constitutional, ayes, nays, expected",
    [
        (False, 3, 2, True),
        (False, 2, 2, False),
        (True, 66, 0, False),
        (True, 67, 33, True),
    ],
)
def test_bill_thresholds(constitutional, ayes, nays, expected):
    bill = bill_by_id(PR_BILL_ID if constitutional else "edu_reform_1")
    tally = {VoteDirection.AYE: ayes, VoteDirection.NAY: nays}

    assert bill_passes(bill, tally, 100) is expected


def test_proportional_representation_amendment(small_state, rng):
    form_government(small_state)
    bill = bill_by_id(PR_BILL_ID).proposed_by("alpha")

    result = conduct_bill_vote(small_state, bill, rng)

    assert result.passed
    assert result.tally[VoteDirection.AYE] == 3
    assert result.breakdown == {"alpha": VoteDirection.AYE, "beta": VoteDirection.NAY}
    assert small_state.electoral_system is ElectoralSystem.PR
    assert small_state.political_log.titles()[-1] == "Constitutional Amendment"


def test_player_party_vote_overrides_the_ai(small_state, make_character, rng):
    make_character(small_state, "player-1", "chinese-edu", "S1", is_player=True)
    bill = bill_by_id(PR_BILL_ID).proposed_by("alpha")

    result = conduct_bill_vote(small_state, bill, rng, player_vote=VoteDirection.AYE)

    assert result.breakdown["beta"] is VoteDirection.AYE
    assert result.tally[VoteDirection.AYE] == 4


def test_crackdown_detains_the_strongest_opposition_mp(small_state):
    with pytest.raises(ValueError):
        security_crackdown(small_state)
    form_government(small_state)

    event = security_crackdown(small_state)

    assert small_state.characters["b1"].influence == 0.0
    assert event.type is EventType.CRACKDOWN_BACKLASH
    assert event.affected_party_ids == ["alpha"]
    assert "B1" in event.description
