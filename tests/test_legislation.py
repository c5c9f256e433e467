from __future__ import annotations

import numpy as np
import pytest

from parliament.politics.legislation import (
    BILLS,
    PR_BILL_ID,
    Bill,
    BillEffect,
    VoteDirection,
    ai_decide_bill_vote,
    bill_by_id,
    generate_bill,
    proposing_party,
)
from parliament.politics.models import AllianceType, Government, PoliticalAlliance
from parliament.world.graph import build_alliance_graph


def test_catalog_lookup():
    assert len({bill.id for bill in BILLS}) == len(BILLS)
    assert bill_by_id(PR_BILL_ID).is_constitutional
    with pytest.raises(KeyError):
        bill_by_id("repeal_gravity")


def test_effect_on_party():
    effects = (BillEffect("party_influence", "alpha", -5), BillEffect("affiliation_recognition", "beta", 3))
    bill = Bill("b", "B", "", effects=effects)

    assert bill.effect_on_party("alpha") == -5
    assert bill.effect_on_party("beta") is None
    assert bill.proposed_by("gamma").proposing_party_id == "gamma"
    assert bill.proposing_party_id == ""


def test_proposer_is_the_government_lead_or_largest_party(small_state):
    assert proposing_party(small_state).id == "alpha"
    small_state.government = Government("g1", ["gamma", "alpha"], [], small_state.current_date)
    assert proposing_party(small_state).id == "gamma"


def test_generated_bills_carry_their_proposer(small_state):
    rng = np.random.default_rng(6)
    bills = [generate_bill(rng, small_state) for _ in range(300)]

    assert all(bill.proposing_party_id == "alpha" for bill in bills)
    constitutional = sum(bill.is_constitutional for bill in bills)
    assert 0 < constitutional < 90


def test_ai_vote_priorities(small_state, rng):
    alpha, beta, gamma = (small_state.parties[key] for key in ("alpha", "beta", "gamma"))
    blocs = build_alliance_graph(
        [PoliticalAlliance("pact", "Pact", ["alpha", "gamma"], AllianceType.ALLIANCE, "alpha")]
    )
    constitutional = Bill("c", "C", "", is_constitutional=True, proposing_party_id="alpha")
    hurts_beta = Bill(
        "h", "H", "", effects=(BillEffect("party_influence", "beta", -3),), proposing_party_id="alpha"
    )

    assert ai_decide_bill_vote(None, constitutional, rng, blocs) is VoteDirection.ABSTAIN
    assert ai_decide_bill_vote(beta, hurts_beta, rng, blocs) is VoteDirection.NAY
    assert ai_decide_bill_vote(gamma, constitutional, rng, blocs) is VoteDirection.AYE
    assert ai_decide_bill_vote(beta, constitutional, rng, blocs) is VoteDirection.NAY
    assert ai_decide_bill_vote(alpha, constitutional, rng, blocs) is VoteDirection.AYE


@pytest.mark.parametrize(
    "economic, expected",
    [(80, VoteDirection.AYE), (20, VoteDirection.NAY)],
)
def test_economic_bills_split_on_ideology(small_state, rng, economic, expected):
    beta = small_state.parties["beta"]
    beta.ideology = beta.ideology.shifted(economic - beta.ideology.economic)
    bill = Bill("e", "E", "", tags=("economic",), proposing_party_id="gamma")

    assert ai_decide_bill_vote(beta, bill, rng, build_alliance_graph([])) is expected


def test_unaligned_proposer_leaves_others_abstaining(small_state, rng):
    bill = Bill("x", "X", "", tags=("infrastructure",), proposing_party_id="gamma")

    vote = ai_decide_bill_vote(small_state.parties["beta"], bill, rng, build_alliance_graph([]))

    assert vote is VoteDirection.ABSTAIN
