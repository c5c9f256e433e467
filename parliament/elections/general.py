"""General elections: per-seat vote simulation, seat allocation and history."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Mapping, Sequence

import numpy as np
import polars as pl

from ..logging_setup import get_logger
from ..politics.influence import influence_in_seat
from ..politics.models import Character, Party, PoliticalAlliance, Stronghold
from ..world.config import ElectoralSettings, ElectoralSystem

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

logger = get_logger(__name__)

SeatVotes = dict[str, dict[str, int]]


@dataclass(slots=True)
class SeatWinner:
    party_id: str
    candidate_id: str
    candidate_name: str


@dataclass
class ElectionHistoryEntry:
    """Snapshot of one general election, kept for swing calculations."""

    date: date
    system: ElectoralSystem
    results: dict[str, str]
    detailed_results: SeatVotes
    seat_winners: dict[str, SeatWinner] = field(default_factory=dict)
    seat_candidates: dict[str, dict[str, tuple[str, str]]] = field(default_factory=dict)
    total_electorate: int = 0
    total_votes: int = 0
    total_seats: int = 0
    parties: dict[str, Party] = field(default_factory=dict)
    alliances: dict[str, PoliticalAlliance] = field(default_factory=dict)

    def seat_totals(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for party_id in self.results.values():
            totals[party_id] = totals.get(party_id, 0) + 1
        return totals


# ----------------------------------------------------------------------
# Vote simulation
def simulate_seat_votes(
    scores: Mapping[str, float],
    electorate: int,
    rng: np.random.Generator,
    *,
    turnout: tuple[float, float] = (0.65, 0.85),
    variance: float = 0.15,
) -> dict[str, int]:
    """Turn raw influence totals into vote counts for one seat.

    Each party's score is scaled by an independent ``1 +/- variance`` draw;
    votes are the floored share of ``floor(electorate * turnout)``.
    """

    adjusted = {
        party_id: score * (1 - variance + rng.random() * 2 * variance)
        for party_id, score in scores.items()
    }
    total = sum(adjusted.values())
    low, high = turnout
    valid = math.floor(electorate * (low + rng.random() * (high - low)))
    return {
        party_id: math.floor((score / total if total > 0 else 0.0) * valid)
        for party_id, score in adjusted.items()
    }


def seat_winner(votes: Mapping[str, int]) -> str | None:
    """Most votes wins; ties go to the party listed first."""

    winner: str | None = None
    best = -1
    for party_id, count in votes.items():
        if count > best:
            best = count
            winner = party_id
    return winner


def allocate_fptp(seat_votes: SeatVotes) -> dict[str, str]:
    allocations: dict[str, str] = {}
    for seat, votes in seat_votes.items():
        winner = seat_winner(votes)
        if winner is not None:
            allocations[seat] = winner
    return allocations


def largest_remainder_quotas(national_votes: Mapping[str, int], total_seats: int) -> dict[str, int]:
    """Hare quota with largest remainders; quotas sum to ``total_seats``."""

    total_votes = sum(national_votes.values())
    if total_votes <= 0:
        return {party_id: 0 for party_id in national_votes}
    quotas: dict[str, int] = {}
    remainders: dict[str, float] = {}
    for party_id, votes in national_votes.items():
        share = votes / total_votes * total_seats
        quotas[party_id] = math.floor(share)
        remainders[party_id] = share - quotas[party_id]
    leftover = total_seats - sum(quotas.values())
    for party_id in sorted(remainders, key=lambda key: -remainders[key])[:leftover]:
        quotas[party_id] += 1
    return quotas


def allocate_pr(seat_votes: SeatVotes) -> dict[str, str]:
    """National quotas first, then each seat goes to the best-performing party with quota left."""

    national: dict[str, int] = {}
    for votes in seat_votes.values():
        for party_id, count in votes.items():
            national[party_id] = national.get(party_id, 0) + count
    quotas = largest_remainder_quotas(national, len(seat_votes))

    performance: list[tuple[float, str, str]] = []
    for seat, votes in seat_votes.items():
        seat_total = sum(votes.values())
        if seat_total <= 0:
            continue
        for party_id, count in votes.items():
            performance.append((count / seat_total, seat, party_id))
    performance.sort(key=lambda row: -row[0])

    allocations: dict[str, str] = {}
    wins: dict[str, int] = {}
    for _, seat, party_id in performance:
        if seat in allocations:
            continue
        if wins.get(party_id, 0) < quotas.get(party_id, 0):
            allocations[seat] = party_id
            wins[party_id] = wins.get(party_id, 0) + 1

    for _, seat, party_id in performance:
        allocations.setdefault(seat, party_id)
    for seat, votes in seat_votes.items():
        if seat not in allocations:
            winner = seat_winner(votes)
            if winner is not None:
                allocations[seat] = winner
    return allocations


# ----------------------------------------------------------------------
# Strongholds and MPs
def update_strongholds(
    strongholds: dict[str, Stronghold],
    allocations: Mapping[str, str],
    winners: Mapping[str, Character],
) -> None:
    """Extend a run for the same affiliation, start a new one, or clear the seat."""

    for seat in allocations:
        candidate = winners.get(seat)
        if candidate is None:
            strongholds.pop(seat, None)
            continue
        current = strongholds.get(seat)
        if current is not None and current.affiliation_id == candidate.affiliation_id:
            current.terms += 1
        else:
            strongholds[seat] = Stronghold(candidate.affiliation_id, 1)


def _update_mp_status(
    state: WorldState, winners: Mapping[str, Character], contested: Mapping[str, str], when: date
) -> None:
    new_mps = {candidate.id for candidate in winners.values()}
    for character in state.characters.values():
        if not character.is_alive:
            continue
        was_mp = character.is_mp
        seat = contested.get(character.id)
        seat_name = state.seat_name(seat) if seat is not None else state.seat_name(character.seat)
        if character.id in new_mps:
            if was_mp:
                character.add_history(when, f"Re-elected in {seat_name}.")
            else:
                character.add_history(when, f"Won election in {seat_name}, becoming a Member of Parliament.")
            character.is_mp = True
            continue
        if was_mp:
            if seat is not None:
                character.add_history(when, f"Defeated in {seat_name}, losing seat.")
            else:
                character.add_history(when, "Did not contest, losing seat.")
        elif seat is not None:
            character.add_history(when, f"Defeated in election for {seat_name}.")
        character.is_mp = False


def _return_speaker_to_floor(state: WorldState) -> None:
    speaker = state.speaker()
    if speaker is None:
        return
    home = [code for code, seat in state.constituencies.items() if seat.state == speaker.state]
    if home:
        speaker.seat = home[0]
    elif state.constituencies:
        speaker.seat = next(iter(state.constituencies))


# ----------------------------------------------------------------------
def seat_contributors(
    occupants: Sequence[Character], affiliation_party: Mapping[str, str], bloc: set[str]
) -> list[Character]:
    """Occupants whose party belongs to ``bloc``, a party and its alliance partners."""

    return [
        character
        for character in occupants
        if affiliation_party.get(character.affiliation_id) in bloc
    ]


def run_general_election(
    state: WorldState,
    rng: np.random.Generator,
    settings: ElectoralSettings | None = None,
) -> ElectionHistoryEntry:
    """Hold a general election, mutating results, strongholds and MPs in place."""

    settings = settings or ElectoralSettings()
    today = state.current_date
    state.government = None
    _return_speaker_to_floor(state)

    contested: dict[str, str] = {}
    for party in state.parties.values():
        for seat, contest in party.contested_seats.items():
            if contest.candidate_id is not None:
                contested[contest.candidate_id] = seat
    for candidate_id, seat in contested.items():
        candidate = state.characters.get(candidate_id)
        if candidate is not None and candidate.is_alive:
            candidate.seat = seat

    population = state.seat_population()
    affiliation_party = state.affiliation_party_map()
    blocs: dict[str, set[str]] = {party_id: {party_id} for party_id in state.parties}
    for alliance in state.alliances.values():
        for member in alliance.member_party_ids:
            blocs.setdefault(member, {member}).update(alliance.member_party_ids)

    seat_votes: SeatVotes = {}
    seat_candidates: dict[str, dict[str, tuple[str, str]]] = {}
    total_electorate = 0
    for seat, constituency in state.constituencies.items():
        electorate = constituency.electorate if constituency.electorate > 0 else settings.default_electorate
        total_electorate += electorate
        contenders = [party for party in state.parties.values() if seat in party.contested_seats]
        if not contenders:
            contenders = list(state.parties.values())
        occupants = population.get(seat, [])
        scores: dict[str, float] = {}
        candidates: dict[str, tuple[str, str]] = {}
        for party in contenders:
            contest = party.contested_seats.get(seat)
            candidate_id = contest.candidate_id if contest is not None else None
            allocated = contest.allocated_affiliation_id if contest is not None else None
            if candidate_id is not None and candidate_id in state.characters:
                candidates[party.id] = (candidate_id, state.characters[candidate_id].name)
            scores[party.id] = float(
                sum(
                    influence_in_seat(
                        state,
                        character,
                        seat,
                        candidate_id=candidate_id,
                        allocated_affiliation_id=allocated,
                    )
                    for character in seat_contributors(occupants, affiliation_party, blocs[party.id])
                )
            )
        seat_candidates[seat] = candidates
        seat_votes[seat] = simulate_seat_votes(
            scores,
            electorate,
            rng,
            turnout=(settings.turnout_min, settings.turnout_max),
            variance=settings.variance,
        )

    if state.electoral_system is ElectoralSystem.PR:
        allocations = allocate_pr(seat_votes)
    else:
        allocations = allocate_fptp(seat_votes)

    winners: dict[str, Character] = {}
    seat_winners: dict[str, SeatWinner] = {}
    for seat, party_id in allocations.items():
        contest = state.parties[party_id].contested_seats.get(seat)
        if contest is None or contest.candidate_id is None:
            continue
        candidate = state.characters.get(contest.candidate_id)
        if candidate is None:
            continue
        winners[seat] = candidate
        seat_winners[seat] = SeatWinner(party_id, candidate.id, candidate.name)

    update_strongholds(state.strongholds, allocations, winners)
    _update_mp_status(state, winners, contested, today)

    state.election_results = dict(allocations)
    state.last_election_date = today
    entry = ElectionHistoryEntry(
        date=today,
        system=state.electoral_system,
        results=dict(allocations),
        detailed_results=seat_votes,
        seat_winners=seat_winners,
        seat_candidates=seat_candidates,
        total_electorate=total_electorate,
        total_votes=sum(sum(votes.values()) for votes in seat_votes.values()),
        total_seats=state.total_seats,
        parties=copy.deepcopy(state.parties),
        alliances=copy.deepcopy(state.alliances),
    )
    state.election_history.append(entry)

    counts = entry.seat_totals()
    leader = max(counts, key=lambda party_id: counts[party_id]) if counts else None
    state.log(
        "General Election",
        f"{len(allocations)} seats decided under {state.electoral_system.value}."
        + (f" {state.parties[leader].name} won {counts[leader]} seats." if leader else ""),
        "election",
    )
    logger.info(
        "general_election_complete",
        date=today.isoformat(),
        seats=len(allocations),
        system=state.electoral_system.value,
        turnout=entry.total_votes,
    )
    return entry


# ----------------------------------------------------------------------
# Analysis
def party_vote_frame(entry: ElectionHistoryEntry) -> pl.DataFrame:
    """Long-form ``seat, party, votes`` tallies for one election."""

    rows = [
        (seat, party_id, votes)
        for seat, tallies in entry.detailed_results.items()
        for party_id, votes in tallies.items()
    ]
    return pl.DataFrame(
        rows,
        schema={"seat": pl.Utf8, "party": pl.Utf8, "votes": pl.Int64},
        orient="row",
    )


def national_summary(entry: ElectionHistoryEntry) -> pl.DataFrame:
    """Per-party national votes, vote share and seats won."""

    votes = (
        party_vote_frame(entry)
        .group_by("party")
        .agg(pl.col("votes").sum())
        .with_columns((pl.col("votes") / pl.col("votes").sum()).fill_nan(0.0).alias("share"))
    )
    seats = pl.DataFrame(
        {"party": list(entry.results.values())}, schema={"party": pl.Utf8}
    ).group_by("party").agg(pl.len().cast(pl.Int64).alias("seats"))
    return (
        votes.join(seats, on="party", how="full", coalesce=True)
        .with_columns(
            pl.col("votes").fill_null(0),
            pl.col("share").fill_null(0.0),
            pl.col("seats").fill_null(0),
        )
        .sort("party")
    )


def swing(previous: ElectionHistoryEntry, current: ElectionHistoryEntry) -> pl.DataFrame:
    """Seat and vote-share change per party between two elections."""

    before = national_summary(previous).select(
        "party", pl.col("seats").alias("seats_before"), pl.col("share").alias("share_before")
    )
    after = national_summary(current).select(
        "party", pl.col("seats").alias("seats_after"), pl.col("share").alias("share_after")
    )
    return (
        before.join(after, on="party", how="full", coalesce=True)
        .with_columns(
            pl.col("seats_before").fill_null(0),
            pl.col("seats_after").fill_null(0),
            pl.col("share_before").fill_null(0.0),
            pl.col("share_after").fill_null(0.0),
        )
        .with_columns(
            (pl.col("seats_after") - pl.col("seats_before")).alias("seat_swing"),
            (pl.col("share_after") - pl.col("share_before")).alias("share_swing"),
        )
        .sort("party")
    )


__all__ = [
    "ElectionHistoryEntry",
    "SeatWinner",
    "allocate_fptp",
    "allocate_pr",
    "largest_remainder_quotas",
    "national_summary",
    "party_vote_frame",
    "run_general_election",
    "seat_contributors",
    "seat_winner",
    "simulate_seat_votes",
    "swing",
    "update_strongholds",
]
