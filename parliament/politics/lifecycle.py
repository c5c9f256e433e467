"""Party and affiliation lifecycle: leadership, secession, absorption, merger.

Every structural change goes through :class:`~parliament.world.state.WorldState`
primitives so an affiliation is detached from its old party before it is
attached to a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Iterable, Literal, Mapping, Sequence

import numpy as np

from ..logging_setup import get_logger
from ..world.catalog import COLOR_PALETTE
from ..world.rng import pick
from .ideology import average_ideology
from .models import Character, Ethnicity, LeaderTerm, Party, StateBranch
from .relations import initialize_party_relations

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

logger = get_logger(__name__)

STATE_EXECUTIVE_COUNT = 3

SecessionMode = Literal["join", "new"]


@dataclass
class LeadershipResult:
    leader_id: str | None
    deputy_leader_id: str | None
    tally: dict[str, int] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Derived roles
def update_affiliation_leaders(state: WorldState) -> None:
    """Flag the most influential living member of each affiliation."""

    best: dict[str, Character] = {}
    for character in state.characters.values():
        if not character.is_alive:
            continue
        current = best.get(character.affiliation_id)
        if current is None or character.influence > current.influence:
            best[character.affiliation_id] = character
    leaders = {character.id for character in best.values()}
    for character in state.characters.values():
        character.is_affiliation_leader = character.id in leaders


def _by_influence(characters: Iterable[Character]) -> list[Character]:
    return sorted(characters, key=lambda character: -character.influence)


# ----------------------------------------------------------------------
# Leadership elections
def conduct_party_leadership_election(
    voters: Sequence[Character],
    candidates: Sequence[Character],
    rng: np.random.Generator,
    *,
    extra_votes: Mapping[str, int] | None = None,
) -> LeadershipResult:
    """Indirect election: each voter backs the candidate they score highest.

    Ties resolve to the candidate listed first.
    """

    tally = {candidate.id: 0 for candidate in candidates}
    if not candidates:
        return LeadershipResult(None, None, tally)

    if not voters and not extra_votes:
        ranked = _by_influence(candidates)
        leader = ranked[0].id
        deputy = ranked[1].id if len(ranked) > 1 else None
        tally[leader] = 1
        return LeadershipResult(leader, deputy, tally)

    for voter in voters:
        best_id: str | None = None
        best_score = -1.0
        for candidate in candidates:
            score = candidate.influence + candidate.charisma
            if voter.affiliation_id == candidate.affiliation_id:
                score *= 1.5
            score += candidate.recognition / 2
            gap = abs(voter.ideology.economic - candidate.ideology.economic) + abs(
                voter.ideology.governance - candidate.ideology.governance
            )
            score += (200 - gap) * 0.2
            score *= 1 + rng.random() * 0.1
            if score > best_score:
                best_score = score
                best_id = candidate.id
        if best_id is not None:
            tally[best_id] += 1

    for candidate_id, votes in (extra_votes or {}).items():
        if candidate_id in tally:
            tally[candidate_id] += votes

    if all(votes == 0 for votes in tally.values()):
        ranked_ids = [candidate.id for candidate in _by_influence(candidates)]
    else:
        ranked_ids = sorted(tally, key=lambda candidate_id: -tally[candidate_id])
    leader = ranked_ids[0]
    deputy = ranked_ids[1] if len(ranked_ids) > 1 else None
    if deputy == leader:
        deputy = None
    return LeadershipResult(leader, deputy, tally)


def elect_state_branches(state: WorldState, party: Party) -> None:
    """Rank living members per state: first leads, the next three sit on the executive."""

    members = state.members_of_party(party.id)
    previous_leaders = {name: branch.leader_id for name, branch in party.state_branches.items()}
    previous_executives = {
        executive_id
        for branch in party.state_branches.values()
        for executive_id in branch.executive_ids
    }
    branches: dict[str, StateBranch] = {}
    for state_name in state.states:
        ranked = _by_influence(member for member in members if member.state == state_name)
        leader_id = ranked[0].id if ranked else None
        executives = [member.id for member in ranked[1 : 1 + STATE_EXECUTIVE_COUNT]]
        if leader_id is not None and leader_id != previous_leaders.get(state_name):
            state.characters[leader_id].add_history(
                state.current_date, f"Elected State Leader for {party.name} in {state_name}."
            )
        for executive_id in executives:
            if executive_id not in previous_executives:
                state.characters[executive_id].add_history(
                    state.current_date,
                    f"Appointed State Executive for {party.name} in {state_name}.",
                )
        branches[state_name] = StateBranch(leader_id=leader_id, executive_ids=executives)
    party.state_branches = branches


def run_state_branch_elections(state: WorldState) -> None:
    for party in list(state.parties.values()):
        elect_state_branches(state, party)
    update_affiliation_leaders(state)


def leadership_electorate(state: WorldState, party: Party) -> tuple[list[Character], list[Character]]:
    """Return ``(voters, candidates)`` for a national leadership contest."""

    def alive(character_id: str | None) -> Character | None:
        if character_id is None:
            return None
        character = state.characters.get(character_id)
        return character if character is not None and character.is_alive else None

    candidates: dict[str, Character] = {}
    for branch in party.state_branches.values():
        leader = alive(branch.leader_id)
        if leader is not None:
            candidates.setdefault(leader.id, leader)
    incumbent = alive(party.leader_id)
    if incumbent is not None:
        candidates.setdefault(incumbent.id, incumbent)
    if not candidates:
        for member in _by_influence(state.members_of_party(party.id))[:2]:
            candidates[member.id] = member

    voters: dict[str, Character] = {}
    for branch in party.state_branches.values():
        for character_id in [branch.leader_id, *branch.executive_ids]:
            voter = alive(character_id)
            if voter is not None:
                voters.setdefault(voter.id, voter)
    for member in state.members_of_party(party.id):
        if member.is_affiliation_leader:
            voters.setdefault(member.id, member)
    return list(voters.values()), list(candidates.values())


def run_party_leadership_election(
    state: WorldState,
    party: Party,
    rng: np.random.Generator,
    *,
    player_vote: str | None = None,
) -> LeadershipResult:
    """Hold the national leadership vote for ``party`` and install the result."""

    voters, candidates = leadership_electorate(state, party)
    extra: dict[str, int] = {}
    player = state.player()
    if player is not None and player_vote is not None:
        if any(voter.id == player.id for voter in voters):
            voters = [voter for voter in voters if voter.id != player.id]
            extra[player_vote] = 1
    result = conduct_party_leadership_election(voters, candidates, rng, extra_votes=extra)
    install_leadership(state, party, result.leader_id, result.deputy_leader_id)
    return result


def install_leadership(
    state: WorldState, party: Party, leader_id: str | None, deputy_id: str | None
) -> None:
    """Record a new leader and deputy, closing the previous leadership term."""

    if leader_id is None:
        return
    today = state.current_date
    if leader_id != party.leader_id:
        term = party.open_term()
        if term is not None:
            term.end = today
        leader = state.characters[leader_id]
        party.leader_history.append(LeaderTerm(leader_id, leader.name, today))
        leader.add_history(today, f"Elected National Leader of {party.name}.")
    if deputy_id is not None and deputy_id != party.deputy_leader_id:
        state.characters[deputy_id].add_history(today, f"Elected Deputy Leader of {party.name}.")
    party.leader_id = leader_id
    party.deputy_leader_id = deputy_id


# ----------------------------------------------------------------------
# Vacancies
def cleanup_political_vacancies(state: WorldState) -> None:
    """Clear party posts held by dead or missing characters."""

    def living(character_id: str | None) -> bool:
        if character_id is None:
            return False
        character = state.characters.get(character_id)
        return character is not None and character.is_alive

    for party in state.parties.values():
        if party.leader_id is not None and not living(party.leader_id):
            term = party.open_term()
            if term is not None:
                term.end = state.current_date
            party.leader_id = None
        if party.deputy_leader_id is not None and not living(party.deputy_leader_id):
            party.deputy_leader_id = None
        for branch in party.state_branches.values():
            if branch.leader_id is not None and not living(branch.leader_id):
                branch.leader_id = None
            branch.executive_ids = [
                executive_id for executive_id in branch.executive_ids if living(executive_id)
            ]


def cleanup_government_vacancies(state: WorldState) -> None:
    government = state.government
    if government is None:
        return
    alive = {character.id for character in state.living_characters()}
    government.cabinet = [
        minister for minister in government.cabinet if minister.minister_id in alive
    ]
    if government.chief_minister_id not in alive:
        government.chief_minister_id = ""


def cleanup_vacancies(state: WorldState) -> None:
    cleanup_political_vacancies(state)
    cleanup_government_vacancies(state)


# ----------------------------------------------------------------------
# Structural changes
def _random_color(rng: np.random.Generator) -> str:
    return pick(rng, COLOR_PALETTE)


def _refill_leadership(state: WorldState, party: Party) -> None:
    ranked = _by_influence(state.members_of_party(party.id))
    party.leader_id = ranked[0].id if ranked else None
    party.deputy_leader_id = ranked[1].id if len(ranked) > 1 else None


def secede(
    state: WorldState,
    affiliation_id: str,
    leader: Character,
    mode: SecessionMode,
    rng: np.random.Generator,
    *,
    target_party_id: str | None = None,
    new_party_name: str | None = None,
    focus: Ethnicity | None = None,
) -> Party:
    """Move one affiliation out of its party into ``target_party_id`` or a new party.

    Only seats whose sitting MP belongs to the affiliation follow it.
    """

    if leader.affiliation_id != affiliation_id:
        raise ValueError("only a member of the affiliation can lead its secession")
    affiliation = state.affiliations[affiliation_id]
    source = state.party_of_affiliation(affiliation_id)
    today = state.current_date

    if mode == "join":
        if target_party_id is None or target_party_id not in state.parties:
            raise KeyError(f"Unknown party '{target_party_id}'")
        if source is not None and source.id == target_party_id:
            raise ValueError("affiliation already belongs to the target party")
        target = state.parties[target_party_id]
        if not target.accepts(affiliation.ethnicity):
            raise ValueError(f"{target.name} does not accept {affiliation.ethnicity.value} affiliations")
    elif mode == "new":
        if not new_party_name:
            raise ValueError("a new party needs a name")
        if focus is not None and focus != affiliation.ethnicity:
            raise ValueError("a new party may only focus on its founders' community")
        target = Party(
            id=state.new_id("party"),
            name=new_party_name,
            color=_random_color(rng),
            affiliation_ids=[],
            leader_id=leader.id,
            leader_history=[LeaderTerm(leader.id, leader.name, today)],
            ethnicity_focus=focus,
            unity=100.0,
            ideology=leader.ideology.copy(),
        )
        state.add_party(target)
    else:
        raise ValueError(f"Unknown secession mode '{mode}'")

    moving_seats: list[str] = []
    if source is not None:
        for seat, holder in state.election_results.items():
            if holder != source.id:
                continue
            mp = state.mp_for_seat(seat)
            if mp is not None and mp.affiliation_id == affiliation_id:
                moving_seats.append(seat)

    state.move_affiliation(affiliation_id, target.id)
    for seat in moving_seats:
        state.election_results[seat] = target.id

    if source is not None:
        if not source.affiliation_ids:
            state.remove_party(source.id)
        elif source.leader_id == leader.id:
            _refill_leadership(state, source)

    message = (
        f"Left {source.name} to join {target.name}."
        if source is not None
        else f"Joined {target.name} as an affiliated faction."
    )
    for character in state.affiliation_members(affiliation_id, alive=False):
        character.add_history(today, message)

    initialize_party_relations(state, rng)
    logger.debug(
        "affiliation_seceded",
        affiliation=affiliation_id,
        source=source.id if source else None,
        target=target.id,
        seats=len(moving_seats),
    )
    return target


def absorb_parties(
    state: WorldState,
    host_party_id: str,
    party_ids: Iterable[str] = (),
    affiliation_ids: Iterable[str] = (),
) -> Party:
    """Fold parties and poached affiliations into a surviving host party."""

    host = state.parties[host_party_id]
    absorbed = [party_id for party_id in dict.fromkeys(party_ids) if party_id != host_party_id]
    poached = list(dict.fromkeys(affiliation_ids))
    incoming: list[str] = []
    for party_id in absorbed:
        incoming.extend(state.parties[party_id].affiliation_ids)
    incoming.extend(poached)

    affected = set(incoming)
    for affiliation_id in dict.fromkeys(incoming):
        if affiliation_id not in host.affiliation_ids:
            state.move_affiliation(affiliation_id, host.id)
    state.transfer_seats(absorbed, host.id)
    for party_id in absorbed:
        state.remove_party(party_id)
    state.remove_empty_parties()

    for character in state.characters.values():
        if character.affiliation_id in affected:
            character.add_history(state.current_date, f"Absorbed into {host.name}.")
    return host


def merge_parties(
    state: WorldState,
    initiator_party_id: str,
    rng: np.random.Generator,
    *,
    name: str,
    leader_id: str,
    deputy_id: str | None = None,
    party_ids: Iterable[str] = (),
    affiliation_ids: Iterable[str] = (),
) -> Party:
    """Dissolve the participants into one brand-new party."""

    participants = list(dict.fromkeys([initiator_party_id, *party_ids]))
    members: list[str] = []
    for party_id in participants:
        members.extend(state.parties[party_id].affiliation_ids)
    members.extend(affiliation_ids)
    members = list(dict.fromkeys(members))

    leader = state.characters[leader_id]
    merged = Party(
        id=state.new_id("party"),
        name=name,
        color=_random_color(rng),
        affiliation_ids=[],
        leader_id=leader_id,
        deputy_leader_id=deputy_id,
        leader_history=[LeaderTerm(leader_id, leader.name, state.current_date)],
        ethnicity_focus=None,
        unity=100.0,
        ideology=average_ideology(state.affiliations[member].ideology for member in members),
    )
    state.add_party(merged)
    for affiliation_id in members:
        state.move_affiliation(affiliation_id, merged.id)
    state.transfer_seats(participants, merged.id)
    for party_id in participants:
        state.remove_party(party_id)
    state.remove_empty_parties()

    affected = set(members)
    for character in state.characters.values():
        if character.affiliation_id in affected:
            character.add_history(state.current_date, f"Merged into {name}.")
    initialize_party_relations(state, rng)
    return merged


def unique_party_name(state: WorldState, name: str, *, suffix: str | None = None) -> str:
    """Disambiguate ``name`` against live parties."""

    taken = {party.name for party in state.parties.values()}
    if name not in taken:
        return name
    if suffix is not None:
        return f"{name} ({suffix})"
    counter = 1
    candidate = name
    while candidate in taken:
        candidate = f"{name} ({counter})"
        counter += 1
    return candidate


__all__ = [
    "STATE_EXECUTIVE_COUNT",
    "LeadershipResult",
    "absorb_parties",
    "cleanup_government_vacancies",
    "cleanup_political_vacancies",
    "cleanup_vacancies",
    "conduct_party_leadership_election",
    "elect_state_branches",
    "install_leadership",
    "leadership_electorate",
    "merge_parties",
    "run_party_leadership_election",
    "run_state_branch_elections",
    "secede",
    "unique_party_name",
    "update_affiliation_leaders",
]
