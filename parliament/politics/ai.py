"""Daily behaviour of computer-controlled characters: moving seats and campaigning."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Sequence

import numpy as np

from .influence import influence_in_seat
from .models import SPEAKER_SEAT, Character, Party

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

MOVEMENT_CHANCE_REGULAR = 0.005
MOVEMENT_CHANCE_LEADER = 0.5
SEATS_EVALUATED_REGULAR = 10
SEATS_EVALUATED_LEADER = 20
STATEMENT_CHANCE = 0.3
STATEMENT_CHANCE_STUCK = 0.8
STRATEGIC_THRESHOLD = 50
MIN_SEAT_POPULATION = 9


class CharacterRole(str, Enum):
    NATIONAL_LEADER = "National Leader"
    NATIONAL_DEPUTY = "National Deputy Leader"
    STATE_LEADER = "State Leader"
    STATE_EXECUTIVE = "State Executive"
    MEMBER = "Member"


LEADER_ROLES = frozenset(
    {CharacterRole.NATIONAL_LEADER, CharacterRole.NATIONAL_DEPUTY, CharacterRole.STATE_LEADER}
)

# (influence, recognition) gained from a public statement.
STATEMENT_GAINS: dict[str, tuple[float, float]] = {
    "organize_state_rally": (10.0, 5.0),
    "strengthen_local_branch": (5.0, 0.0),
    "promote_party": (5.0, 2.0),
}


def character_role(party: Party | None, character: Character) -> CharacterRole:
    if party is None:
        return CharacterRole.MEMBER
    if party.leader_id == character.id:
        return CharacterRole.NATIONAL_LEADER
    if party.deputy_leader_id == character.id:
        return CharacterRole.NATIONAL_DEPUTY
    branch = party.state_branches.get(character.state)
    if branch is not None:
        if branch.leader_id == character.id:
            return CharacterRole.STATE_LEADER
        if character.id in branch.executive_ids:
            return CharacterRole.STATE_EXECUTIVE
    return CharacterRole.MEMBER


def seat_party_influence(
    state: WorldState,
    seat: str,
    occupants: Sequence[Character],
    affiliation_party: dict[str, str],
) -> dict[str, int]:
    """Uncommitted influence per party among the occupants of ``seat``."""

    totals: dict[str, int] = {}
    for character in occupants:
        party_id = affiliation_party.get(character.affiliation_id)
        if party_id is None:
            continue
        totals[party_id] = totals.get(party_id, 0) + influence_in_seat(state, character, seat)
    return totals


def party_margin(totals: dict[str, int], party_id: str) -> int:
    """Lead (positive) or deficit (negative) against the strongest rival."""

    own = totals.get(party_id, 0)
    rival = max((value for key, value in totals.items() if key != party_id), default=0)
    return own - max(0, rival)


def statement_action(character: Character, role: CharacterRole, rng: np.random.Generator) -> str:
    """Campaign in place; returns the action taken."""

    if role in (CharacterRole.STATE_LEADER, CharacterRole.NATIONAL_DEPUTY):
        action = "organize_state_rally" if rng.random() < 0.5 else "strengthen_local_branch"
    elif role is CharacterRole.STATE_EXECUTIVE:
        action = "strengthen_local_branch"
    else:
        action = "promote_party"
    influence, recognition = STATEMENT_GAINS[action]
    character.boost(influence=influence, recognition=recognition)
    return action


def regular_move(
    state: WorldState, character: Character, seats: Sequence[str], rng: np.random.Generator
) -> str:
    """Move to whichever of a few sampled seats gives the most personal influence."""

    if character.seat not in state.constituencies or not seats:
        return character.seat
    best_seat = character.seat
    best = influence_in_seat(state, character, character.seat)
    for index in rng.integers(0, len(seats), size=SEATS_EVALUATED_REGULAR):
        seat = seats[int(index)]
        influence = influence_in_seat(state, character, seat)
        if influence > best:
            best = influence
            best_seat = seat
    return best_seat


def strategic_move(
    state: WorldState,
    character: Character,
    seats: Sequence[str],
    rng: np.random.Generator,
    population: dict[str, list[Character]],
    affiliation_party: dict[str, str],
) -> str:
    """Move where the party's combined margin improves by more than the threshold."""

    party_id = affiliation_party.get(character.affiliation_id)
    if party_id is None or not seats or character.seat not in state.constituencies:
        return character.seat
    home = character.seat
    home_occupants = population.get(home, [])
    home_totals = seat_party_influence(state, home, home_occupants, affiliation_party)
    home_without = seat_party_influence(
        state, home, [other for other in home_occupants if other.id != character.id], affiliation_party
    )
    home_change = party_margin(home_without, party_id) - party_margin(home_totals, party_id)

    sampled = dict.fromkeys(seats[int(index)] for index in rng.integers(0, len(seats), size=SEATS_EVALUATED_LEADER))
    best_seat = home
    best_gain: float = float("-inf")
    for seat in sampled:
        if seat == home:
            continue
        occupants = population.get(seat, [])
        before = seat_party_influence(state, seat, occupants, affiliation_party)
        after = dict(before)
        after[party_id] = after.get(party_id, 0) + influence_in_seat(state, character, seat)
        gain = home_change + party_margin(after, party_id) - party_margin(before, party_id)
        if gain > best_gain:
            best_gain = gain
            best_seat = seat
    return best_seat if best_gain > STRATEGIC_THRESHOLD else home


def determine_ai_action(
    state: WorldState,
    character: Character,
    role: CharacterRole,
    rng: np.random.Generator,
    population: dict[str, list[Character]],
    affiliation_party: dict[str, str],
) -> str | None:
    """Act for one character; returns ``"move"``, a statement name or ``None``."""

    occupants = population.get(character.seat, [])
    kin = sum(1 for other in occupants if other.affiliation_id == character.affiliation_id)
    can_move = kin > 1 and len(occupants) > MIN_SEAT_POPULATION and character.seat != SPEAKER_SEAT

    chance = MOVEMENT_CHANCE_LEADER if role in LEADER_ROLES else MOVEMENT_CHANCE_REGULAR
    if rng.random() > chance:
        return None
    threshold = STATEMENT_CHANCE if can_move else STATEMENT_CHANCE_STUCK
    if rng.random() < threshold:
        return statement_action(character, role, rng)
    if not can_move:
        return None

    all_seats = list(state.constituencies)
    if role in (CharacterRole.NATIONAL_LEADER, CharacterRole.NATIONAL_DEPUTY):
        destination = strategic_move(state, character, all_seats, rng, population, affiliation_party)
    elif role is CharacterRole.STATE_LEADER:
        in_state = [code for code, seat in state.constituencies.items() if seat.state == character.state]
        destination = strategic_move(state, character, in_state, rng, population, affiliation_party)
    else:
        destination = regular_move(state, character, all_seats, rng)

    if destination == character.seat:
        return None
    population[character.seat] = [other for other in occupants if other.id != character.id]
    population.setdefault(destination, []).append(character)
    character.seat = destination
    return "move"


def run_character_ai(state: WorldState, rng: np.random.Generator) -> dict[str, int]:
    """One day of AI behaviour for every living non-player character."""

    population = state.seat_population()
    affiliation_party = state.affiliation_party_map()
    tally: dict[str, int] = {}
    for character in list(state.characters.values()):
        if character.is_player or not character.is_alive:
            continue
        party = state.party_of(character)
        action = determine_ai_action(
            state, character, character_role(party, character), rng, population, affiliation_party
        )
        if action is not None:
            tally[action] = tally.get(action, 0) + 1
    return tally


__all__ = [
    "CharacterRole",
    "STATEMENT_GAINS",
    "character_role",
    "determine_ai_action",
    "party_margin",
    "regular_move",
    "run_character_ai",
    "seat_party_influence",
    "statement_action",
    "strategic_move",
]
