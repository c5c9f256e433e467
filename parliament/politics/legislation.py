"""Bill catalog, bill generation and AI voting on bills."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Literal

import numpy as np

from ..world.graph import BlocGraph, same_bloc
from ..world.rng import pick
from .models import Party

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

EffectType = Literal["party_influence", "affiliation_recognition"]

PR_BILL_ID = "const_prop_rep"
CONSTITUTIONAL_SHARE = 0.1


class VoteDirection(str, Enum):
    AYE = "Aye"
    NAY = "Nay"
    ABSTAIN = "Abstain"


@dataclass(frozen=True, slots=True)
class BillEffect:
    type: EffectType
    target_id: str
    value: float


@dataclass(frozen=True, slots=True)
class Bill:
    id: str
    title: str
    description: str
    effects: tuple[BillEffect, ...] = ()
    tags: tuple[str, ...] = ()
    is_constitutional: bool = False
    proposing_party_id: str = ""

    def proposed_by(self, party_id: str) -> Bill:
        return replace(self, proposing_party_id=party_id)

    def effect_on_party(self, party_id: str) -> float | None:
        for effect in self.effects:
            if effect.type == "party_influence" and effect.target_id == party_id:
                return effect.value
        return None


def _effects(*rows: tuple[EffectType, str, float]) -> tuple[BillEffect, ...]:
    return tuple(BillEffect(kind, target, value) for kind, target, value in rows)


BILLS: tuple[Bill, ...] = (
    Bill(
        id="edu_reform_1",
        title="Vernacular School Funding Act",
        description=(
            "A bill to increase federal funding for Chinese and Tamil vernacular schools "
            "to ensure equitable educational resources across all communities."
        ),
        effects=_effects(
            ("affiliation_recognition", "chinese-edu", 10),
            ("affiliation_recognition", "indian-reform", 5),
            ("party_influence", "mca", 5),
            ("party_influence", "mic", 3),
            ("party_influence", "umno", -5),
            ("party_influence", "pmip", -3),
        ),
        tags=("social",),
    ),
    Bill(
        id="islamic_law_1",
        title="Sharia Courts Enhancement Bill",
        description=(
            "This bill proposes to expand the jurisdiction of Sharia courts in matters of "
            "family law for the Muslim population."
        ),
        effects=_effects(
            ("affiliation_recognition", "malay-islamist", 15),
            ("party_influence", "pmip", 8),
            ("party_influence", "umno", 3),
            ("party_influence", "mca", -4),
            ("party_influence", "labour", -5),
        ),
        tags=("religious", "social"),
    ),
    Bill(
        id="nat_security_1",
        title="Internal Security Act",
        description=(
            "A bill to grant the government powers to detain individuals without trial to "
            "prevent subversive activities and ensure national security."
        ),
        effects=_effects(
            ("party_influence", "umno", 7),
            ("party_influence", "labour", -10),
            ("party_influence", "pr", -8),
        ),
        tags=("nationalist",),
    ),
    Bill(
        id="const_redelineation",
        title="Constitutional Amendment: Constituency Redelineation",
        description=(
            "A constitutional amendment to redraw electoral boundaries, creating more rural "
            "constituencies to better represent the agrarian populace. Requires 2/3 majority."
        ),
        effects=_effects(
            ("party_influence", "umno", 10),
            ("party_influence", "pmip", 5),
            ("party_influence", "labour", -10),
            ("affiliation_recognition", "chinese-urban", -5),
        ),
        tags=("constitutional", "nationalist"),
        is_constitutional=True,
    ),
    Bill(
        id="const_language",
        title="National Language Act Amendment",
        description=(
            "An amendment to enshrine the national language as the sole language for all "
            "official purposes, including courts and education. Requires 2/3 majority."
        ),
        effects=_effects(
            ("affiliation_recognition", "malay-nat", 20),
            ("party_influence", "umno", 5),
            ("party_influence", "mca", -10),
            ("party_influence", "mic", -8),
        ),
        tags=("constitutional", "nationalist", "social"),
        is_constitutional=True,
    ),
    Bill(
        id=PR_BILL_ID,
        title="Constitutional Amendment: Proportional Representation",
        description=(
            "An amendment replacing first-past-the-post constituencies with proportional "
            "representation, allocating seats by national vote share. Requires 2/3 majority."
        ),
        effects=_effects(
            ("party_influence", "labour", 5),
            ("party_influence", "pr", 5),
            ("party_influence", "umno", -5),
        ),
        tags=("constitutional",),
        is_constitutional=True,
    ),
)


def bill_by_id(bill_id: str) -> Bill:
    for bill in BILLS:
        if bill.id == bill_id:
            return bill
    raise KeyError(f"Unknown bill '{bill_id}'")


def proposing_party(state: WorldState) -> Party:
    """The government's lead party, else the largest party in parliament."""

    government = state.government
    if government is not None:
        for party_id in government.ruling_coalition_ids:
            if party_id in state.parties:
                return state.parties[party_id]
    if not state.parties:
        raise ValueError("no party can propose a bill")
    counts = state.seat_counts()
    return max(state.parties.values(), key=lambda party: counts.get(party.id, 0))


def generate_bill(rng: np.random.Generator, state: WorldState) -> Bill:
    """Draw a bill template; one in ten comes from the constitutional pool."""

    constitutional = rng.random() < CONSTITUTIONAL_SHARE
    pool = [bill for bill in BILLS if bill.is_constitutional == constitutional] or list(BILLS)
    return pick(rng, pool).proposed_by(proposing_party(state).id)


def ai_decide_bill_vote(
    party: Party | None,
    bill: Bill,
    rng: np.random.Generator,
    blocs: BlocGraph,
) -> VoteDirection:
    """Decide a party's vote.

    Priority: a direct effect on the party, bloc discipline on
    constitutional bills, loyalty to an allied proposer, ideological tags,
    opposition to a rival bloc, then abstention.
    """

    if party is None:
        return VoteDirection.ABSTAIN

    effect = bill.effect_on_party(party.id)
    if effect is not None and effect != 0:
        return VoteDirection.AYE if effect > 0 else VoteDirection.NAY

    proposer = bill.proposing_party_id
    allied = same_bloc(blocs, party.id, proposer)
    proposer_aligned = proposer in blocs

    if bill.is_constitutional:
        return VoteDirection.AYE if allied else VoteDirection.NAY

    if allied:
        return VoteDirection.AYE if rng.random() > 0.1 else VoteDirection.ABSTAIN

    if "economic" in bill.tags:
        if party.ideology.economic > 60:
            return VoteDirection.AYE
        if party.ideology.economic < 40:
            return VoteDirection.NAY
    if "religious" in bill.tags and any("islamist" in aid for aid in party.affiliation_ids):
        return VoteDirection.AYE
    if "nationalist" in bill.tags and any("nat" in aid for aid in party.affiliation_ids):
        return VoteDirection.AYE
    if "social" in bill.tags and any(
        "chinese" in aid or "indian" in aid for aid in party.affiliation_ids
    ):
        return VoteDirection.AYE if rng.random() > 0.3 else VoteDirection.ABSTAIN

    if proposer_aligned:
        return VoteDirection.NAY if rng.random() > 0.2 else VoteDirection.ABSTAIN
    return VoteDirection.ABSTAIN


@dataclass
class BillVoteResult:
    bill: Bill
    passed: bool
    tally: dict[VoteDirection, int] = field(default_factory=dict)
    breakdown: dict[str, VoteDirection] = field(default_factory=dict)


__all__ = [
    "BILLS",
    "PR_BILL_ID",
    "Bill",
    "BillEffect",
    "BillVoteResult",
    "VoteDirection",
    "ai_decide_bill_vote",
    "bill_by_id",
    "generate_bill",
    "proposing_party",
]
