"""Party electoral strategy: which seats to contest and who stands where."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Collection, Sequence

from ..logging_setup import get_logger
from .alliances import best_affiliation_for_seat, distribute_alliance_seats, party_seat_score
from .influence import influence_in_seat
from .models import Character, Contest, Party

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

logger = get_logger(__name__)

CONTEST_THRESHOLD = 15.0
SITTING_MP_FACTOR = 1.5
PRESENT_IN_SEAT_FACTOR = 1.2


@dataclass
class StrategyReport:
    party_id: str
    contested: int = 0
    selected: list[str] = field(default_factory=list)
    drafted: list[str] = field(default_factory=list)


def manage_party_contests(state: WorldState, party: Party) -> dict[str, Contest]:
    """Rebuild ``party.contested_seats`` from seat scores.

    A seat is contested when the party scores above the threshold there or
    already contested it. Candidates who died or left the party are dropped.
    """

    population = state.seat_population()
    affiliation_party = state.affiliation_party_map()
    members = state.members_of_party(party.id)
    contests: dict[str, Contest] = {}
    for seat in state.constituencies:
        existing = party.contested_seats.get(seat)
        score = party_seat_score(
            state, party, seat, population=population, affiliation_party=affiliation_party
        )
        if score <= CONTEST_THRESHOLD and existing is None:
            continue
        affiliation_id = best_affiliation_for_seat(state, party, seat, members)
        if affiliation_id is None:
            continue
        candidate_id = existing.candidate_id if existing is not None else None
        if candidate_id is not None:
            candidate = state.characters.get(candidate_id)
            if (
                candidate is None
                or not candidate.is_alive
                or candidate.affiliation_id not in party.affiliation_ids
            ):
                candidate_id = None
        contests[seat] = Contest(affiliation_id, candidate_id)
    party.contested_seats = contests
    return contests


def select_affiliation_candidates(
    state: WorldState, members: Sequence[Character], seats: Sequence[str]
) -> dict[str, str]:
    """Greedy per-seat pick from one affiliation's members; nobody stands twice."""

    selections: dict[str, str] = {}
    available = list(members)
    for seat in seats:
        best: Character | None = None
        best_score = 0.0
        for member in available:
            score = float(
                influence_in_seat(
                    state,
                    member,
                    seat,
                    candidate_id=member.id,
                    allocated_affiliation_id=member.affiliation_id,
                )
            )
            if member.is_mp and member.seat == seat:
                score *= SITTING_MP_FACTOR
            if member.seat == seat:
                score *= PRESENT_IN_SEAT_FACTOR
            if best is None or score > best_score:
                best = member
                best_score = score
        if best is not None:
            selections[seat] = best.id
            available.remove(best)
    return selections


def full_election_strategy(
    state: WorldState,
    party: Party,
    *,
    skip_contests: bool = False,
    skip_affiliation_ids: Collection[str] = (),
) -> StrategyReport:
    """Contest management, candidate selection, then emergency drafting."""

    report = StrategyReport(party.id)
    previous = {seat: contest.candidate_id for seat, contest in party.contested_seats.items()}
    if not skip_contests:
        manage_party_contests(state, party)
    today = state.current_date

    for affiliation_id in list(party.affiliation_ids):
        if affiliation_id in skip_affiliation_ids:
            continue
        seats = [
            seat
            for seat, contest in party.contested_seats.items()
            if contest.allocated_affiliation_id == affiliation_id and seat in state.constituencies
        ]
        if not seats:
            continue
        members = state.affiliation_members(affiliation_id)
        if not members:
            continue
        for seat, candidate_id in select_affiliation_candidates(state, members, seats).items():
            party.contested_seats[seat].candidate_id = candidate_id
            if previous.get(seat) != candidate_id:
                state.characters[candidate_id].add_history(
                    today, f"Selected as candidate for {state.seat_name(seat)}."
                )
                report.selected.append(candidate_id)

    unfilled = [seat for seat, contest in party.contested_seats.items() if contest.candidate_id is None]
    if unfilled:
        assigned = {
            contest.candidate_id
            for contest in party.contested_seats.values()
            if contest.candidate_id is not None
        }
        backups = sorted(
            (member for member in state.members_of_party(party.id) if member.id not in assigned),
            key=lambda member: -member.influence,
        )
        for seat, backup in zip(unfilled, backups):
            party.contested_seats[seat].candidate_id = backup.id
            backup.add_history(today, f"Drafted as emergency candidate for {state.seat_name(seat)}.")
            report.drafted.append(backup.id)

    report.contested = len(party.contested_seats)
    return report


def run_ai_strategies(state: WorldState) -> list[StrategyReport]:
    """The post-election strategy pass for every party.

    Alliances share the map out first; their members then only choose
    candidates. A player who leads their party keeps control of its seat
    plan, and a player who leads their affiliation picks its candidates.
    """

    for alliance in list(state.alliances.values()):
        distribute_alliance_seats(state, alliance)

    player = state.player()
    player_party = state.party_of(player) if player is not None else None
    reports: list[StrategyReport] = []
    for party in list(state.parties.values()):
        skip_contests = state.alliance_of(party.id) is not None
        skip_affiliations: list[str] = []
        if player_party is not None and party.id == player_party.id and player is not None:
            if party.leader_id == player.id:
                skip_contests = True
            if player.is_affiliation_leader:
                skip_affiliations.append(player.affiliation_id)
        reports.append(
            full_election_strategy(
                state, party, skip_contests=skip_contests, skip_affiliation_ids=skip_affiliations
            )
        )
    logger.info(
        "strategies_refreshed",
        parties=len(reports),
        contests=sum(report.contested for report in reports),
    )
    return reports


__all__ = [
    "StrategyReport",
    "full_election_strategy",
    "manage_party_contests",
    "run_ai_strategies",
    "select_affiliation_candidates",
]
