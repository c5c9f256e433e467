"""Population dynamics: mortality, successors, electorate growth and NPC seeding."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Mapping

import numpy as np

from ..logging_setup import get_logger
from ..politics.ideology import update_affiliation_ideologies, update_party_ideologies
from ..politics.lifecycle import cleanup_vacancies, update_affiliation_leaders
from ..politics.models import SPEAKER_SEAT, Character, Ideology, LeaderTerm
from ..politics.relations import initialize_party_relations, set_mutual_relations
from ..world.catalog import (
    INITIAL_REGIME_PARTY,
    default_affiliations,
    default_alliances,
    default_parties,
)
from ..world.naming import NameGenerator
from ..world.rng import shuffled
from ..world.state import WorldState

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.config import SimulationConfig
    from ..world.constituencies import Constituency
    from ..world.rng import SimulationRandomness

logger = get_logger(__name__)

# (upper age bound, daily probability of death)
MORTALITY_TABLE: tuple[tuple[int, float], ...] = (
    (50, 0.000005),
    (60, 0.00001),
    (70, 0.00005),
    (80, 0.0015),
    (90, 0.005),
)
OLDEST_RATE = 0.02
MIN_SHARE_FOR_NPC = 0.5


def daily_mortality_rate(age: int) -> float:
    for bound, rate in MORTALITY_TABLE:
        if age < bound:
            return rate
    return OLDEST_RATE


def should_die(character: Character, when: date, rng: np.random.Generator) -> bool:
    if not character.is_alive:
        return False
    return rng.random() < daily_mortality_rate(character.age_on(when))


def _random_birthday(rng: np.random.Generator, year: int) -> date:
    return date(year, int(rng.integers(1, 13)), int(rng.integers(1, 29)))


def create_successor(
    state: WorldState, deceased: Character, rng: np.random.Generator, names: NameGenerator
) -> Character:
    """A younger member of the same faction steps up in the same seat."""

    today = state.current_date
    age = 25 + int(rng.random() * 25)
    seat = deceased.seat
    if seat == SPEAKER_SEAT or seat not in state.constituencies:
        in_state = [code for code, item in state.constituencies.items() if item.state == deceased.state]
        seat = in_state[0] if in_state else next(iter(state.constituencies))
    affiliation = state.affiliations.get(deceased.affiliation_id)
    faction = affiliation.name if affiliation is not None else deceased.affiliation_id
    successor = Character(
        id=state.new_id("npc"),
        name=names.character(deceased.ethnicity),
        seat=seat,
        affiliation_id=deceased.affiliation_id,
        ethnicity=deceased.ethnicity,
        state=deceased.state,
        date_of_birth=_random_birthday(rng, today.year - age),
        charisma=float(20 + int(rng.random() * 60)),
        influence=float(10 + int(rng.random() * 40)),
        recognition=float(5 + int(rng.random() * 20)),
        ideology=deceased.ideology.shifted(
            rng.random() * 20 - 10,
            rng.random() * 20 - 10,
        ),
    )
    successor.add_history(
        today,
        f"Emerged as a new voice for the {faction} faction in {state.seat_name(seat)}, "
        f"succeeding {deceased.name}.",
    )
    state.characters[successor.id] = successor
    return successor


def run_mortality(
    state: WorldState,
    rng: np.random.Generator,
    names: NameGenerator,
    *,
    sample_rate: float = 0.25,
) -> list[tuple[Character, Character]]:
    """Sampled daily mortality; the player character is never at risk.

    Returns ``(deceased, successor)`` pairs.
    """

    if rng.random() >= sample_rate:
        return []
    today = state.current_date
    deaths: list[tuple[Character, Character]] = []
    for character in list(state.characters.values()):
        if character.is_player or not should_die(character, today, rng):
            continue
        character.is_alive = False
        character.is_affiliation_leader = False
        character.add_history(today, "Died of natural causes.")
        state.log(
            "Obituary",
            f"{character.name} has died at the age of {character.age_on(today)}.",
            "personal",
        )
        successor = create_successor(state, character, rng, names)
        state.log(
            "New Blood",
            f"{successor.name} emerges to succeed {character.name}.",
            "personal",
        )
        deaths.append((character, successor))
    if deaths:
        cleanup_vacancies(state)
        logger.info("mortality", deaths=len(deaths), date=today.isoformat())
    return deaths


def apply_growth(state: WorldState, *, urban_rate: float = 0.004, rural_rate: float = 0.002) -> int:
    """Monthly electorate growth; returns the number of new electors."""

    added = 0
    for constituency in state.constituencies.values():
        rate = urban_rate if constituency.is_urban else rural_rate
        growth = math.ceil(constituency.electorate * rate)
        constituency.electorate += growth
        added += growth
    return added


# ----------------------------------------------------------------------
# Start-up
@dataclass
class PlayerProfile:
    """The human player's choices at the start of a game."""

    name: str
    affiliation_id: str
    seat: str
    charisma: float = 50.0
    influence: float = 30.0
    recognition: float = 20.0


def create_player_character(
    state: WorldState, profile: PlayerProfile, rng: np.random.Generator
) -> Character:
    if profile.affiliation_id not in state.affiliations:
        raise KeyError(f"Unknown affiliation '{profile.affiliation_id}'")
    if profile.seat not in state.constituencies:
        raise KeyError(f"Unknown constituency '{profile.seat}'")
    affiliation = state.affiliations[profile.affiliation_id]
    age = 25 + int(rng.random() * 30)
    base = affiliation.base_ideology
    player = Character(
        id=state.new_id("player"),
        name=profile.name,
        seat=profile.seat,
        affiliation_id=affiliation.id,
        ethnicity=affiliation.ethnicity,
        state=state.constituencies[profile.seat].state,
        date_of_birth=_random_birthday(rng, state.current_date.year - age),
        charisma=profile.charisma,
        influence=profile.influence,
        recognition=profile.recognition,
        ideology=Ideology(
            base.economic + rng.random() * 10 - 5,
            base.governance + rng.random() * 10 - 5,
        ),
        is_player=True,
    )
    state.characters[player.id] = player
    state.player_id = player.id
    return player


def generate_initial_npcs(
    state: WorldState,
    rng: np.random.Generator,
    names: NameGenerator,
    *,
    per_seat: int = 40,
) -> list[Character]:
    """Seed every seat with up to ``per_seat`` characters from shuffled affiliations.

    An affiliation is skipped where its community is under half a percent of
    the electorate.
    """

    occupied: dict[str, int] = {}
    for character in state.characters.values():
        occupied[character.seat] = occupied.get(character.seat, 0) + 1
    affiliations = list(state.affiliations.values())
    created: list[Character] = []
    for code, seat in state.constituencies.items():
        count = occupied.get(code, 0)
        for affiliation in shuffled(rng, affiliations):
            if count >= per_seat:
                break
            if seat.ethnic_share(affiliation.ethnicity) < MIN_SHARE_FOR_NPC:
                continue
            base = affiliation.base_ideology
            character = Character(
                id=state.new_id("npc"),
                name=names.character(affiliation.ethnicity),
                seat=code,
                affiliation_id=affiliation.id,
                ethnicity=affiliation.ethnicity,
                state=seat.state,
                date_of_birth=date(1900 + int(rng.random() * 30), int(rng.integers(1, 13)), 1),
                charisma=float(20 + int(rng.random() * 60)),
                influence=float(10 + int(rng.random() * 50)),
                recognition=float(5 + int(rng.random() * 30)),
                ideology=Ideology(
                    base.economic + rng.random() * 30 - 15,
                    base.governance + rng.random() * 30 - 15,
                ),
            )
            state.characters[character.id] = character
            created.append(character)
            count += 1
    return created


def seed_party_leaders(state: WorldState) -> None:
    """The two most influential members become leader and deputy."""

    today = state.current_date
    for party in state.parties.values():
        members = sorted(state.members_of_party(party.id), key=lambda member: -member.influence)
        if not members:
            continue
        leader = members[0]
        party.leader_id = leader.id
        party.deputy_leader_id = members[1].id if len(members) > 1 else None
        leader.add_history(today, f"Became the leader of {party.name}.")
        party.leader_history = [LeaderTerm(leader.id, leader.name, today)]


def build_initial_state(
    config: SimulationConfig,
    constituencies: Mapping[str, Constituency],
    randomness: SimulationRandomness,
    *,
    player: PlayerProfile | None = None,
) -> WorldState:
    """Assemble the founding parties, the initial alliance and the population."""

    start = config.calendar.start_date
    state = WorldState(
        constituencies=dict(constituencies),
        affiliations=default_affiliations(),
        current_date=start,
        parties=default_parties(),
        electoral_system=config.electoral.system,
        regime_start=start,
        regime_leader_party=INITIAL_REGIME_PARTY,
    )
    for alliance in default_alliances().values():
        state.add_alliance(alliance)

    setup_rng = randomness.generator("setup")
    names = NameGenerator(randomness.generator("names"))
    if player is not None:
        create_player_character(state, player, setup_rng)
    generate_initial_npcs(state, setup_rng, names, per_seat=config.population.npcs_per_seat)
    seed_party_leaders(state)

    initialize_party_relations(state, setup_rng)
    for alliance in state.alliances.values():
        for party_id in alliance.member_party_ids:
            state.parties[party_id].unity = 100.0
        set_mutual_relations(state, alliance.member_party_ids, 100.0)

    update_affiliation_leaders(state)
    update_affiliation_ideologies(state)
    update_party_ideologies(state)
    state.log(
        "A New Nation",
        f"{config.name} begins with {state.total_seats} constituencies and "
        f"{len(state.characters)} politicians.",
        "politics",
    )
    logger.info(
        "world_built",
        seats=state.total_seats,
        characters=len(state.characters),
        parties=len(state.parties),
    )
    return state


__all__ = [
    "MORTALITY_TABLE",
    "PlayerProfile",
    "apply_growth",
    "build_initial_state",
    "create_player_character",
    "create_successor",
    "daily_mortality_rate",
    "generate_initial_npcs",
    "run_mortality",
    "seed_party_leaders",
    "should_die",
]
