"""Shared fixtures: a hand-built four-seat parliament and a seeded synthetic world."""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from parliament.politics.lifecycle import update_affiliation_leaders
from parliament.politics.models import Character, Ethnicity, Ideology, LeaderTerm, Party
from parliament.population.dynamics import build_initial_state
from parliament.world.catalog import default_affiliations
from parliament.world.config import PopulationSettings, RandomnessSettings, SimulationConfig
from parliament.world.constituencies import Constituency, synthetic_constituencies
from parliament.world.state import WorldState

START = date(1951, 1, 1)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def make_character():
    """Factory adding a character to ``state`` with the affiliation's ethnicity and ideology."""

    def _make(
        state: WorldState,
        character_id: str,
        affiliation_id: str,
        seat: str,
        *,
        influence: float = 50.0,
        charisma: float = 50.0,
        recognition: float = 20.0,
        born: date = date(1910, 1, 1),
        is_mp: bool = False,
        is_player: bool = False,
    ) -> Character:
        affiliation = state.affiliations[affiliation_id]
        character = Character(
            id=character_id,
            name=character_id.replace("-", " ").title(),
            seat=seat,
            affiliation_id=affiliation_id,
            ethnicity=affiliation.ethnicity,
            state=state.constituencies[seat].state,
            date_of_birth=born,
            charisma=charisma,
            influence=influence,
            recognition=recognition,
            ideology=affiliation.base_ideology.copy(),
            is_mp=is_mp,
            is_player=is_player,
        )
        state.characters[character.id] = character
        if is_player:
            state.player_id = character.id
        return character

    return _make


@pytest.fixture
def small_state(make_character) -> WorldState:
    """Four seats: Beta holds George Town, Alpha holds the other three.

    Alpha is a three-faction Malay party, Beta a Chinese party and Gamma a
    multi-ethnic party with no seats.
    """

    constituencies = {
        "S1": Constituency("S1", "GEORGE TOWN", "Penang", 10000, 20.0, 70.0, 9.0, 1.0, "URBAN"),
        "S2": Constituency("S2", "KEDAH 2", "Kedah", 12000, 80.0, 12.0, 6.0, 2.0, "RURAL"),
        "S3": Constituency("S3", "PERAK 3", "Perak", 15000, 50.0, 35.0, 14.0, 1.0, "RURAL"),
        "S4": Constituency("S4", "SELANGOR 4", "Selangor", 9000, 45.0, 40.0, 13.0, 2.0, "URBAN"),
    }
    state = WorldState(
        constituencies=constituencies,
        affiliations=default_affiliations(),
        current_date=START,
    )
    state.add_party(
        Party(
            "alpha",
            "Alpha",
            "#e6194B",
            ["malay-nat", "malay-prog", "malay-islamist"],
            ethnicity_focus=Ethnicity.MALAY,
            ideology=Ideology(40, 70),
        )
    )
    state.add_party(
        Party(
            "beta",
            "Beta",
            "#3cb44b",
            ["chinese-biz", "chinese-edu"],
            ethnicity_focus=Ethnicity.CHINESE,
            ideology=Ideology(80, 55),
        )
    )
    state.add_party(
        Party("gamma", "Gamma", "#4363d8", ["malay-socialist", "chinese-labour"], ideology=Ideology(20, 50))
    )

    make_character(state, "a1", "malay-nat", "S2", influence=70, is_mp=True)
    make_character(state, "a2", "malay-prog", "S3", influence=55, is_mp=True)
    make_character(state, "a3", "malay-islamist", "S4", influence=40, is_mp=True)
    make_character(state, "b1", "chinese-biz", "S1", influence=65, is_mp=True)
    make_character(state, "b2", "chinese-edu", "S4", influence=35)
    make_character(state, "g1", "malay-socialist", "S3", influence=45)
    make_character(state, "g2", "chinese-labour", "S1", influence=30)

    for party_id, leader_id, deputy_id in (
        ("alpha", "a1", "a2"),
        ("beta", "b1", "b2"),
        ("gamma", "g1", "g2"),
    ):
        party = state.parties[party_id]
        party.leader_id = leader_id
        party.deputy_leader_id = deputy_id
        party.leader_history = [LeaderTerm(leader_id, state.characters[leader_id].name, START)]

    state.election_results = {"S1": "beta", "S2": "alpha", "S3": "alpha", "S4": "alpha"}
    update_affiliation_leaders(state)
    return state


@pytest.fixture
def seeded_config() -> SimulationConfig:
    return SimulationConfig(
        randomness=RandomnessSettings(seed=7),
        population=PopulationSettings(npcs_per_seat=8),
    )


@pytest.fixture
def seeded_state(seeded_config: SimulationConfig) -> WorldState:
    randomness = seeded_config.randomness_factory()
    seats = synthetic_constituencies(randomness.generator("map"), 12)
    return build_initial_state(seeded_config, seats, randomness)
