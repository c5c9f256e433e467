"""Alliance formation, seat sharing, cohesion and unification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from ..logging_setup import get_logger
from ..world.graph import relationship
from .ideology import average_ideology, ideological_distance
from .influence import influence_in_seat
from .models import (
    AllianceType,
    Character,
    Contest,
    Party,
    PoliticalAlliance,
)
from .relations import initialize_party_relations, set_mutual_relations

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.naming import NameGenerator
    from ..world.state import WorldState

logger = get_logger(__name__)

MIN_SEATS_PER_MEMBER = 2
REBALANCE_ITERATIONS = 20
INCUMBENT_BONUS = 50.0
MULTI_ETHNIC_AFFINITY = 35.0
NO_DEMOGRAPHICS_AFFINITY = 20.0
BIG_TENT_YEARS = 20


@dataclass
class AllianceOutcome:
    alliance: PoliticalAlliance | None
    accepted: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.accepted)


# ----------------------------------------------------------------------
# Seat scoring
def party_seat_score(
    state: WorldState,
    party: Party,
    seat_code: str,
    *,
    population: dict[str, list[Character]] | None = None,
    affiliation_party: dict[str, str] | None = None,
) -> float:
    """How strong ``party`` would be in ``seat_code``.

    Sum of its present members' influence, an incumbency bonus and an
    ethnic-affinity term from the seat's demographics.
    """

    population = population if population is not None else state.seat_population()
    affiliation_party = affiliation_party if affiliation_party is not None else state.affiliation_party_map()
    score = 0.0
    for character in population.get(seat_code, []):
        if affiliation_party.get(character.affiliation_id) == party.id:
            score += influence_in_seat(
                state,
                character,
                seat_code,
                candidate_id=character.id,
                allocated_affiliation_id=character.affiliation_id,
            )
    incumbent = state.mp_for_seat(seat_code)
    if incumbent is not None and affiliation_party.get(incumbent.affiliation_id) == party.id:
        score += INCUMBENT_BONUS

    constituency = state.constituencies.get(seat_code)
    if constituency is None:
        score += NO_DEMOGRAPHICS_AFFINITY
    elif party.ethnicity_focus is not None:
        score += constituency.ethnic_share(party.ethnicity_focus)
    else:
        score += MULTI_ETHNIC_AFFINITY
    return score


def best_affiliation_for_seat(
    state: WorldState,
    party: Party,
    seat_code: str,
    members: Sequence[Character] | None = None,
) -> str | None:
    """Pick the affiliation whose strongest member would do best in the seat."""

    members = members if members is not None else state.members_of_party(party.id)
    best_id: str | None = None
    best_influence = -1
    for affiliation_id in party.affiliation_ids:
        pool = [member for member in members if member.affiliation_id == affiliation_id]
        if not pool:
            continue
        top = pool[0]
        for member in pool[1:]:
            if member.influence + member.charisma >= top.influence + top.charisma:
                top = member
        influence = influence_in_seat(
            state, top, seat_code, candidate_id=top.id, allocated_affiliation_id=affiliation_id
        )
        if influence > best_influence:
            best_influence = influence
            best_id = affiliation_id
    if best_id is None and party.affiliation_ids:
        best_id = party.affiliation_ids[0]
    return best_id


def distribute_alliance_seats(state: WorldState, alliance: PoliticalAlliance) -> dict[str, str]:
    """Share every constituency among the alliance so members never split the vote.

    Each seat goes to the member with the best seat score, ties to the
    earlier member in alliance order. A bounded rebalancing pass then
    gives every member at least two seats when there are enough to go round.
    """

    members = [state.parties[party_id] for party_id in alliance.member_party_ids if party_id in state.parties]
    if not members:
        return {}
    for party in members:
        party.contested_seats = {}

    population = state.seat_population()
    affiliation_party = state.affiliation_party_map()
    seat_codes = list(state.constituencies)
    scores: dict[str, dict[str, float]] = {
        seat: {
            party.id: party_seat_score(
                state, party, seat, population=population, affiliation_party=affiliation_party
            )
            for party in members
        }
        for seat in seat_codes
    }

    allocations: dict[str, str] = {}
    for seat in seat_codes:
        winner = members[0].id
        best = -1.0
        for party in members:
            if scores[seat][party.id] > best:
                best = scores[seat][party.id]
                winner = party.id
        allocations[seat] = winner

    if len(seat_codes) >= MIN_SEATS_PER_MEMBER * len(members):
        limit = max(REBALANCE_ITERATIONS, MIN_SEATS_PER_MEMBER * len(members))
        for _ in range(limit):
            counts = {party.id: 0 for party in members}
            for owner in allocations.values():
                counts[owner] += 1
            deficit = [party.id for party in members if counts[party.id] < MIN_SEATS_PER_MEMBER]
            if not deficit:
                break
            surplus = sorted(
                (party.id for party in members if counts[party.id] > MIN_SEATS_PER_MEMBER),
                key=lambda party_id: -counts[party_id],
            )
            if not surplus:
                break
            donor, receiver = surplus[0], deficit[0]
            swap: str | None = None
            best_receiver = -1.0
            for seat, owner in allocations.items():
                if owner == donor and scores[seat][receiver] > best_receiver:
                    best_receiver = scores[seat][receiver]
                    swap = seat
            if swap is not None:
                allocations[swap] = receiver

    by_party = {party.id: party for party in members}
    member_pool = {party.id: state.members_of_party(party.id) for party in members}
    for seat, party_id in allocations.items():
        party = by_party[party_id]
        affiliation_id = best_affiliation_for_seat(state, party, seat, member_pool[party_id])
        if affiliation_id is not None:
            party.contested_seats[seat] = Contest(affiliation_id)
    return allocations


# ----------------------------------------------------------------------
# Formation
def alliance_ideology(state: WorldState, alliance: PoliticalAlliance):
    return average_ideology(
        state.parties[party_id].ideology
        for party_id in alliance.member_party_ids
        if party_id in state.parties
    )


def alliance_acceptance_chance(
    state: WorldState,
    target: Party,
    members: Sequence[Party],
    base_ideology,
) -> float:
    """Chance (before the pact bonus) that ``target`` accepts an invitation."""

    graph = state.relations_graph()
    distance = ideological_distance(target.ideology, base_ideology)
    ideology_chance = max(0.0, 1 - distance / 35)
    average_relation = sum(relationship(graph, member.id, target.id) for member in members) / len(members)
    return ideology_chance * 0.7 + (average_relation / 100) * 0.3


def attempt_alliance_formation(
    state: WorldState,
    initiator_id: str,
    target_ids: Iterable[str],
    name: str,
    alliance_type: AllianceType,
    rng: np.random.Generator,
) -> AllianceOutcome:
    """Invite ``target_ids`` to form (or expand the initiator's) alliance."""

    initiator = state.parties[initiator_id]
    targets = [state.parties[target_id] for target_id in dict.fromkeys(target_ids) if target_id != initiator_id]
    existing = state.alliance_of(initiator_id)
    if existing is not None:
        members = [state.parties[party_id] for party_id in existing.member_party_ids]
        base = alliance_ideology(state, existing)
    else:
        members = [initiator]
        base = initiator.ideology

    accepted: list[str] = []
    rejected: list[str] = []
    for target in targets:
        if existing is not None and target.id in existing.member_party_ids:
            continue
        other = state.alliance_of(target.id)
        if other is not None:
            rejected.append(target.id)
            continue
        chance = alliance_acceptance_chance(state, target, members, base)
        bonus = 0.1 if alliance_type is AllianceType.PACT else 0.0
        if rng.random() < chance + bonus and chance > 0.3:
            accepted.append(target.id)
        else:
            rejected.append(target.id)

    if not accepted:
        state.log(
            "Alliance Failed",
            f'No party accepted the invitation to join "{existing.name if existing else name}".',
        )
        return AllianceOutcome(existing, [], [target.id for target in targets])

    if existing is not None:
        for party_id in accepted:
            state.join_alliance(existing.id, party_id)
        alliance = existing
    else:
        alliance = state.add_alliance(
            PoliticalAlliance(
                id=state.new_id("alliance"),
                name=name,
                member_party_ids=[initiator_id, *accepted],
                type=alliance_type,
                leader_party_id=initiator_id,
            )
        )
    distribute_alliance_seats(state, alliance)
    state.log(
        "Alliance Formed",
        f'The "{alliance.name}" ({alliance.type.value}) has been successfully formed!',
    )
    return AllianceOutcome(alliance, accepted, rejected)


# ----------------------------------------------------------------------
# Monthly dynamics
def consolidate_alliance_cohesion(state: WorldState) -> None:
    """Pull members toward the alliance centre and polarise against outsiders."""

    for alliance in state.alliances.values():
        members = [state.parties[party_id] for party_id in alliance.member_party_ids if party_id in state.parties]
        if len(members) < 2:
            continue
        centre = average_ideology(member.ideology for member in members)
        member_ids = {member.id for member in members}
        for member in members:
            member.ideology = member.ideology.shifted(
                (centre.economic - member.ideology.economic) * 0.05,
                (centre.governance - member.ideology.governance) * 0.05,
            )
            for ally in members:
                if ally.id != member.id:
                    member.relations[ally.id] = min(100.0, member.relation_to(ally.id) + 1)
            for outsider_id in state.parties:
                if outsider_id not in member_ids:
                    member.relations[outsider_id] = max(0.0, member.relation_to(outsider_id) - 0.5)


def merger_ready(state: WorldState, alliance: PoliticalAlliance) -> bool:
    if alliance.type is not AllianceType.ALLIANCE:
        return False
    members = [state.parties[party_id] for party_id in alliance.member_party_ids if party_id in state.parties]
    if len(members) < 2:
        return False
    centre = average_ideology(member.ideology for member in members)
    if any(ideological_distance(member.ideology, centre) >= 5.0 for member in members):
        return False
    graph = state.relations_graph()
    for index, party_a in enumerate(members):
        for party_b in members[index + 1 :]:
            if relationship(graph, party_a.id, party_b.id, default=0.0) < 90:
                return False
    return True


def attempt_alliance_merger(state: WorldState, rng: np.random.Generator) -> Party | None:
    """Fuse the first alliance that has become a single party in all but name."""

    for alliance in list(state.alliances.values()):
        if not merger_ready(state, alliance):
            continue
        members = [state.parties[party_id] for party_id in alliance.member_party_ids]
        leader_party = state.parties.get(alliance.leader_party_id, members[0])
        others = [member for member in members if member.id != leader_party.id]
        focuses = {member.ethnicity_focus for member in members}
        merged_id = f"merged-{alliance.id}"
        if merged_id in state.parties:
            merged_id = state.new_id("party")
        affiliation_ids = list(
            dict.fromkeys(
                affiliation_id for member in members for affiliation_id in member.affiliation_ids
            )
        )
        merged = Party(
            id=merged_id,
            name=alliance.name,
            color=leader_party.color,
            affiliation_ids=[],
            leader_id=leader_party.leader_id,
            deputy_leader_id=others[0].leader_id if others else None,
            leader_history=list(leader_party.leader_history),
            ethnicity_focus=focuses.pop() if len(focuses) == 1 else None,
            unity=100.0,
            ideology=average_ideology(member.ideology for member in members),
        )
        old_names = ", ".join(member.name for member in members)
        member_ids = [member.id for member in members]

        state.remove_alliance(alliance.id)
        state.add_party(merged)
        for affiliation_id in affiliation_ids:
            state.move_affiliation(affiliation_id, merged.id)
        state.transfer_seats(member_ids, merged.id)
        for party_id in member_ids:
            state.remove_party(party_id)
        moved = set(affiliation_ids)
        for character in state.characters.values():
            if character.affiliation_id in moved:
                character.add_history(state.current_date, f"Party merged into {merged.name}.")
        initialize_party_relations(state, rng)
        state.log(
            "Historic Merger",
            f"{old_names} have officially merged to form the single unified party: {merged.name}!",
        )
        logger.info("alliance_merged", alliance=alliance.id, party=merged.id)
        return merged
    return None


def form_big_tent_coalition(
    state: WorldState, names: NameGenerator
) -> PoliticalAlliance | None:
    """Unite every opposition party into one alliance (needs at least three)."""

    ruling = set(state.government.ruling_coalition_ids) if state.government else set()
    opposition = [party_id for party_id in state.parties if party_id not in ruling]
    if len(opposition) <= 2:
        return None
    for party_id in opposition:
        state.leave_alliance(party_id)
    alliance = state.add_alliance(
        PoliticalAlliance(
            id=state.new_id("big-tent"),
            name=names.alliance(),
            member_party_ids=opposition,
            type=AllianceType.ALLIANCE,
            leader_party_id=opposition[0],
        )
    )
    set_mutual_relations(state, opposition, 90.0)
    for party_id in opposition:
        party = state.parties[party_id]
        party.unity = max(party.unity, 80.0)
    state.log(
        "End of an Era?",
        "The current regime has held power for over 20 years. In a historic move, "
        f'opposition parties have united to form "{alliance.name}" to challenge the '
        "incumbent's dominance.",
    )
    return alliance


def check_big_tent(state: WorldState, names: NameGenerator) -> PoliticalAlliance | None:
    """On New Year's Day, react to a regime that has ruled for over twenty years."""

    today = state.current_date
    if today.month != 1 or today.day != 1:
        return None
    if state.big_tent_triggered or state.government is None or state.regime_start is None:
        return None
    if today.year - state.regime_start.year <= BIG_TENT_YEARS:
        return None
    alliance = form_big_tent_coalition(state, names)
    if alliance is not None:
        state.big_tent_triggered = True
    return alliance


__all__ = [
    "AllianceOutcome",
    "alliance_acceptance_chance",
    "alliance_ideology",
    "attempt_alliance_formation",
    "attempt_alliance_merger",
    "best_affiliation_for_seat",
    "check_big_tent",
    "consolidate_alliance_cohesion",
    "distribute_alliance_seats",
    "form_big_tent_coalition",
    "merger_ready",
    "party_seat_score",
]
