"""Mortality, succession, electorate growth and world seeding."""

from __future__ import annotations

from datetime import date, timedelta

import numpy as np
import pytest

from parliament.population.dynamics import (
    OLDEST_RATE,
    PlayerProfile,
    apply_growth,
    build_initial_state,
    create_successor,
    daily_mortality_rate,
    run_mortality,
    should_die,
)
from parliament.politics.models import SPEAKER_SEAT
from parliament.world.constituencies import synthetic_constituencies
from parliament.world.naming import NameGenerator

SPAN = 10_000


@pytest.mark.parametrize(
    "age, rate",
    [
        (30, 0.000005),
        (49, 0.000005),
        (50, 0.00001),
        (65, 0.00005),
        (75, 0.0015),
        (85, 0.005),
        (95, OLDEST_RATE),
    ],
)
def test_hazard_table(age, rate):
    assert daily_mortality_rate(age) == rate


def test_the_very_old_almost_never_outlive_the_span(small_state, make_character):
    elder = make_character(small_state, "elder", "malay-nat", "S2", born=date(1856, 1, 1))
    rng = np.random.default_rng(95)
    trials = 200

    deaths = 0
    for _ in range(trials):
        for day in range(SPAN):
            if should_die(elder, small_state.current_date + timedelta(days=day), rng):
                deaths += 1
                break

    assert deaths / trials > 0.99


def test_thirty_year_olds_die_at_the_table_rate(small_state, make_character):
    young = make_character(small_state, "young", "malay-nat", "S2", born=date(1921, 1, 1))
    start = small_state.current_date
    rates = np.array(
        [daily_mortality_rate(young.age_on(start + timedelta(days=day))) for day in range(SPAN)]
    )
    expected = 1 - np.prod(1 - rates)
    rng = np.random.default_rng(30)
    trials = 500

    died = (rng.random((trials, SPAN)) < rates).any(axis=1).mean()

    assert 0.03 < expected < 0.1
    assert abs(died - expected) < 0.04


def test_the_dead_do_not_die_twice(small_state, rng):
    character = small_state.characters["g2"]
    character.is_alive = False

    assert not should_die(character, small_state.current_date, rng)


def test_mortality_spares_the_player_and_replaces_the_dead(small_state, make_character):
    born = date(1850, 1, 1)
    player = make_character(small_state, "player-1", "chinese-edu", "S4", born=born, is_player=True)
    elder = make_character(small_state, "elder", "malay-prog", "S3", born=born)
    rng = np.random.default_rng(4)
    names = NameGenerator(np.random.default_rng(5))

    successors = {}
    for _ in range(2_000):
        for deceased, successor in run_mortality(small_state, rng, names, sample_rate=1.0):
            successors[deceased.id] = successor
        if "elder" in successors:
            break

    assert player.is_alive
    assert not elder.is_alive
    heir = successors["elder"]
    assert (heir.seat, heir.affiliation_id, heir.state) == ("S3", "malay-prog", "Perak")
    assert heir.id.startswith("npc-")
    assert "Obituary" in small_state.political_log.titles()


def test_sampling_skips_most_days(small_state, make_character):
    make_character(small_state, "elder", "malay-prog", "S3", born=date(1850, 1, 1))
    names = NameGenerator(np.random.default_rng(0))

    assert run_mortality(small_state, np.random.default_rng(0), names, sample_rate=0.0) == []


def test_a_dead_speakers_successor_returns_to_a_home_seat(small_state, rng):
    speaker = small_state.characters["a1"]
    speaker.seat = SPEAKER_SEAT

    successor = create_successor(small_state, speaker, rng, NameGenerator(rng))

    assert successor.seat == "S2"
    assert 24 <= successor.age_on(small_state.current_date) <= 49
    assert successor.history[-1].text.endswith(f"succeeding {speaker.name}.")


def test_monthly_growth_rounds_up(small_state):
    added = apply_growth(small_state)

    seats = small_state.constituencies
    assert seats["S1"].electorate == 10_040
    assert seats["S2"].electorate == 12_024
    assert added == 40 + 24 + 30 + 36


def test_initial_world_with_a_player(seeded_config):
    randomness = seeded_config.randomness_factory()
    seats = synthetic_constituencies(randomness.generator("map"), 10)
    first_seat = next(iter(seats))

    state = build_initial_state(
        seeded_config, seats, randomness, player=PlayerProfile("Tunku Test", "malay-nat", first_seat)
    )

    player = state.player()
    assert player is not None and player.id.startswith("player")
    assert player.seat == first_seat
    assert state.party_of(player).id == "umno"
    alliance = state.alliances["alliance"]
    assert alliance.member_party_ids == ["umno", "mca", "mic"]
    assert state.parties["umno"].relation_to("mca") == 100.0
    assert state.regime_start == seeded_config.calendar.start_date
    for party in state.parties.values():
        if state.members_of_party(party.id):
            assert party.leader_id is not None
    with pytest.raises(KeyError):
        build_initial_state(seeded_config, seats, randomness, player=PlayerProfile("X", "nope", first_seat))
