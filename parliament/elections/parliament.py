"""Post-election parliament: government formation, Speaker, confidence and bills."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

import numpy as np

from ..events.political import GameEvent, crackdown_backlash_event
from ..logging_setup import get_logger
from ..politics.legislation import PR_BILL_ID, Bill, BillVoteResult, VoteDirection, ai_decide_bill_vote
from ..politics.models import SPEAKER_SEAT, AllianceType, Character, Government, Minister
from ..politics.relations import coalition_acceptance_chance
from ..world.config import ElectoralSystem
from ..world.graph import same_bloc

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

logger = get_logger(__name__)

PORTFOLIOS: tuple[str, ...] = (
    "Home Affairs",
    "Finance",
    "Defence",
    "Education",
    "Health",
    "Agriculture",
    "Transport",
)


@dataclass
class SpeakerVoteResult:
    winner_id: str | None
    tally: dict[str, int] = field(default_factory=dict)
    breakdown: dict[str, str] = field(default_factory=dict)


@dataclass
class ConfidenceVoteResult:
    passed: bool
    votes_for: int
    votes_against: int
    breakdown: dict[str, str] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Government formation
def coalition_seats(state: WorldState, party_ids: Sequence[str]) -> int:
    counts = state.seat_counts()
    return sum(counts.get(party_id, 0) for party_id in party_ids)


def choose_ruling_coalition(state: WorldState) -> list[str]:
    """Best alliance against the best unaligned party; the alliance wins ties."""

    counts = state.seat_counts()
    best_alliance: list[str] | None = None
    alliance_seats = -1
    for alliance in state.alliances.values():
        seats = sum(counts.get(member, 0) for member in alliance.member_party_ids)
        if seats > alliance_seats:
            alliance_seats = seats
            best_alliance = list(alliance.member_party_ids)

    best_party: str | None = None
    party_seats = -1
    for party_id in state.parties:
        if state.alliance_of(party_id) is not None:
            continue
        seats = counts.get(party_id, 0)
        if seats > party_seats:
            party_seats = seats
            best_party = party_id

    if best_alliance is not None and alliance_seats >= party_seats:
        return best_alliance
    if best_party is not None:
        return [best_party]
    return [next(iter(state.parties))] if state.parties else []


def coalition_initiator(state: WorldState, party_ids: Sequence[str]) -> str:
    """The player's party when it is in the coalition, else its largest member."""

    player = state.player()
    player_party = state.party_of(player) if player is not None else None
    if player_party is not None and player_party.id in party_ids:
        return player_party.id
    counts = state.seat_counts()
    return max(party_ids, key=lambda party_id: counts.get(party_id, 0))


def negotiate_coalition(
    state: WorldState, party_ids: Sequence[str], rng: np.random.Generator
) -> tuple[list[str], list[str]]:
    """Invite each party to the initiator's coalition; returns ``(accepted, declined)``.

    Members of the initiator's own alliance come along without a vote.
    """

    initiator_id = coalition_initiator(state, party_ids)
    blocs = state.alliance_graph()
    accepted = [initiator_id]
    declined: list[str] = []
    for party_id in party_ids:
        if party_id in accepted:
            continue
        if same_bloc(blocs, initiator_id, party_id):
            accepted.append(party_id)
            continue
        chance = coalition_acceptance_chance(state, initiator_id, party_id, accepted)
        if rng.random() < chance:
            accepted.append(party_id)
        else:
            declined.append(party_id)
            state.log(
                "Coalition Declined",
                f"{state.parties[party_id].name} refused to join a government led by "
                f"{state.parties[initiator_id].name}.",
                "politics",
            )
    return accepted, declined


def form_government(
    state: WorldState,
    coalition_ids: Sequence[str] | None = None,
    rng: np.random.Generator | None = None,
) -> Government:
    """Install a government from ``coalition_ids`` or from the AI's choice.

    A chosen coalition must command a majority. With ``rng`` each invited
    party decides whether to join; if the parties that accept fall short of a
    majority the AI's choice governs instead. The lead party is the coalition
    member with most seats; its leader becomes Chief Minister and the most
    influential coalition MPs fill the cabinet in portfolio order.
    """

    if coalition_ids is not None:
        unknown = [party_id for party_id in coalition_ids if party_id not in state.parties]
        if unknown:
            raise KeyError(f"Unknown party '{unknown[0]}'")
        members = list(dict.fromkeys(coalition_ids))
        if coalition_seats(state, members) < state.majority:
            raise ValueError("coalition does not command a majority")
        if rng is not None:
            members, declined = negotiate_coalition(state, members, rng)
            if declined and coalition_seats(state, members) < state.majority:
                state.log(
                    "Coalition Talks Failed",
                    "Too few parties accepted the proposed coalition to command a majority.",
                    "politics",
                )
                members = choose_ruling_coalition(state)
    else:
        members = choose_ruling_coalition(state)
    if not members:
        raise ValueError("no party is available to form a government")

    counts = state.seat_counts()
    members.sort(key=lambda party_id: -counts.get(party_id, 0))
    lead = state.parties[members[0]]

    chief_id = lead.leader_id
    chief = state.characters.get(chief_id) if chief_id is not None else None
    if chief is None or not chief.is_alive:
        first_affiliation = lead.affiliation_ids[0] if lead.affiliation_ids else None
        chief_id = next(
            (
                character.id
                for character in state.living_characters()
                if character.is_mp and character.affiliation_id == first_affiliation
            ),
            "",
        )

    affiliation_party = state.affiliation_party_map()
    coalition = set(members)
    eligible = sorted(
        (
            character
            for character in state.living_characters()
            if character.is_mp
            and character.id != chief_id
            and character.seat != SPEAKER_SEAT
            and affiliation_party.get(character.affiliation_id) in coalition
        ),
        key=lambda character: -character.influence,
    )
    cabinet = [
        Minister(minister.id, portfolio) for portfolio, minister in zip(PORTFOLIOS, eligible)
    ]

    today = state.current_date
    if chief_id:
        state.characters[chief_id].add_history(today, "Appointed as Chief Minister.")
    for minister in cabinet:
        state.characters[minister.minister_id].add_history(
            today, f"Appointed as Minister of {minister.portfolio}."
        )

    government = Government(chief_id, members, cabinet, today)
    state.government = government
    _track_regime(state, lead.id)

    chief = state.characters.get(chief_id)
    state.log(
        "Government Formed",
        f"{lead.name} leads a government of {len(members)} "
        f"part{'y' if len(members) == 1 else 'ies'} with {coalition_seats(state, members)} seats"
        + (f"; {chief.name} is Chief Minister." if chief else "."),
        "politics",
    )
    logger.info("government_formed", lead=lead.id, coalition=members, cabinet=len(cabinet))
    return government


def _track_regime(state: WorldState, lead_party_id: str) -> None:
    """Keep the regime clock running while the same party or its alliance governs."""

    previous = state.regime_leader_party
    continuing = previous is not None and (
        previous == lead_party_id or same_bloc(state.alliance_graph(), previous, lead_party_id)
    )
    if not continuing:
        state.regime_start = state.current_date
        state.big_tent_triggered = False
    state.regime_leader_party = lead_party_id


# ----------------------------------------------------------------------
# Speaker
def speaker_candidates(state: WorldState) -> list[Character]:
    """Leaders of the two largest parties, padded with the most prominent characters."""

    counts = state.seat_counts()
    ranked = sorted(
        (party_id for party_id, seats in counts.items() if seats > 0),
        key=lambda party_id: -counts[party_id],
    )
    candidates: list[Character] = []
    for party_id in ranked[:2]:
        leader_id = state.parties[party_id].leader_id
        if leader_id is None:
            continue
        leader = state.characters.get(leader_id)
        if leader is None or not leader.is_alive:
            continue
        if all(other.id != leader.id for other in candidates):
            candidates.append(leader)
    if len(candidates) < 2:
        others = sorted(
            (
                character
                for character in state.living_characters()
                if all(other.id != character.id for other in candidates)
            ),
            key=lambda character: -(character.influence + character.recognition),
        )
        candidates.extend(others[: 2 - len(candidates)])
    return candidates


def conduct_speaker_vote(
    state: WorldState,
    candidates: Sequence[Character],
    *,
    player_vote: str | None = None,
) -> SpeakerVoteResult:
    """Bloc vote weighted by seats: the government candidate's alliance backs them."""

    if not candidates:
        return SpeakerVoteResult(None)
    counts = state.seat_counts()
    if len(candidates) == 1:
        return SpeakerVoteResult(candidates[0].id, {candidates[0].id: sum(counts.values())})

    government_candidate, opposition_candidate = candidates[0], candidates[1]
    government_party = state.party_of(government_candidate)
    blocs = state.alliance_graph()
    player = state.player()
    player_party = state.party_of(player) if player is not None else None

    tally = {candidate.id: 0 for candidate in candidates}
    breakdown: dict[str, str] = {}
    for party_id, seats in counts.items():
        if seats == 0:
            continue
        if player_party is not None and party_id == player_party.id and player_vote in tally:
            choice = player_vote
        elif government_party is not None and same_bloc(
            blocs, party_id, government_party.id, alliance_type=AllianceType.ALLIANCE
        ):
            choice = government_candidate.id
        else:
            choice = opposition_candidate.id
        tally[choice] += seats
        breakdown[party_id] = choice

    winner_id = candidates[0].id
    for candidate_id, votes in tally.items():
        if votes > tally[winner_id]:
            winner_id = candidate_id
    return SpeakerVoteResult(winner_id, tally, breakdown)


def install_speaker(state: WorldState, character_id: str) -> Character:
    speaker = state.characters[character_id]
    previous = state.speaker()
    if previous is not None and previous.id != speaker.id:
        seats = [code for code, seat in state.constituencies.items() if seat.state == previous.state]
        previous.seat = seats[0] if seats else next(iter(state.constituencies))
    speaker.seat = SPEAKER_SEAT
    speaker.is_mp = True
    speaker.add_history(state.current_date, "Elected as Speaker of Parliament.")
    state.log("Speaker Elected", f"{speaker.name} was elected Speaker of Parliament.", "politics")
    return speaker


def elect_speaker(state: WorldState, *, player_vote: str | None = None) -> SpeakerVoteResult:
    result = conduct_speaker_vote(state, speaker_candidates(state), player_vote=player_vote)
    if result.winner_id is not None:
        install_speaker(state, result.winner_id)
    return result


# ----------------------------------------------------------------------
# Votes on the floor
def conduct_confidence_vote(state: WorldState) -> ConfidenceVoteResult:
    """Every MP but the Speaker votes with their party's place in or out of government."""

    government = state.government
    if government is None:
        raise ValueError("there is no government to test")
    coalition = set(government.ruling_coalition_ids)
    affiliation_party = state.affiliation_party_map()
    votes_for = votes_against = 0
    breakdown: dict[str, str] = {}
    for mp in state.living_characters():
        if not mp.is_mp or mp.seat == SPEAKER_SEAT:
            continue
        if affiliation_party.get(mp.affiliation_id) in coalition:
            votes_for += 1
            breakdown[mp.id] = "For"
        else:
            votes_against += 1
            breakdown[mp.id] = "Against"
    passed = votes_for > votes_against
    state.log(
        "Vote of Confidence",
        f"The government {'survived' if passed else 'lost'} a confidence vote "
        f"{votes_for} to {votes_against}.",
        "politics",
    )
    return ConfidenceVoteResult(passed, votes_for, votes_against, breakdown)


def bill_passes(bill: Bill, tally: dict[VoteDirection, int], total_seats: int) -> bool:
    """Two thirds of all seats for constitutional bills, else more Ayes than Nays."""

    ayes = tally.get(VoteDirection.AYE, 0)
    if bill.is_constitutional:
        return ayes >= math.ceil(total_seats * 2 / 3)
    return ayes > tally.get(VoteDirection.NAY, 0)


def conduct_bill_vote(
    state: WorldState,
    bill: Bill,
    rng: np.random.Generator,
    *,
    player_vote: VoteDirection | None = None,
) -> BillVoteResult:
    """Every seated party votes as a bloc weighted by its seat count."""

    counts = state.seat_counts()
    blocs = state.alliance_graph()
    player = state.player()
    player_party = state.party_of(player) if player is not None else None

    tally = {direction: 0 for direction in VoteDirection}
    breakdown: dict[str, VoteDirection] = {}
    for party_id, seats in counts.items():
        if seats == 0:
            continue
        if player_party is not None and party_id == player_party.id and player_vote is not None:
            direction = player_vote
        else:
            direction = ai_decide_bill_vote(state.parties[party_id], bill, rng, blocs)
        tally[direction] += seats
        breakdown[party_id] = direction

    passed = bill_passes(bill, tally, state.total_seats)
    state.log(
        "Bill Passed" if passed else "Bill Defeated",
        f"{bill.title}: {tally[VoteDirection.AYE]} Aye, {tally[VoteDirection.NAY]} Nay, "
        f"{tally[VoteDirection.ABSTAIN]} Abstain.",
        "politics",
    )
    if passed and bill.id == PR_BILL_ID and state.electoral_system is ElectoralSystem.FPTP:
        state.electoral_system = ElectoralSystem.PR
        state.log(
            "Constitutional Amendment",
            "Parliament has adopted proportional representation for all future elections.",
            "politics",
        )
        logger.info("electoral_system_changed", system=ElectoralSystem.PR.value)
    return BillVoteResult(bill, passed, tally, breakdown)


def security_crackdown(state: WorldState) -> GameEvent:
    """Detain the most influential opposition MP; returns the backlash event."""

    government = state.government
    if government is None:
        raise ValueError("only a sitting government can order a crackdown")
    coalition = set(government.ruling_coalition_ids)
    affiliation_party = state.affiliation_party_map()
    target: Character | None = None
    for mp in state.living_characters():
        if not mp.is_mp or mp.seat == SPEAKER_SEAT:
            continue
        party_id = affiliation_party.get(mp.affiliation_id)
        if party_id is None or party_id in coalition:
            continue
        if target is None or mp.influence > target.influence:
            target = mp
    if target is not None:
        target.influence = 0.0
        target.add_history(state.current_date, "Detained under Internal Security Act.")
    return crackdown_backlash_event(
        state, target.name if target is not None else None, list(government.ruling_coalition_ids)
    )


__all__ = [
    "PORTFOLIOS",
    "ConfidenceVoteResult",
    "SpeakerVoteResult",
    "bill_passes",
    "choose_ruling_coalition",
    "coalition_initiator",
    "coalition_seats",
    "conduct_bill_vote",
    "conduct_confidence_vote",
    "conduct_speaker_vote",
    "elect_speaker",
    "form_government",
    "install_speaker",
    "negotiate_coalition",
    "security_crackdown",
]
