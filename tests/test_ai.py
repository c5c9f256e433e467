from __future__ import annotations

import numpy as np
import pytest

from parliament.politics.ai import (
    CharacterRole,
    character_role,
    party_margin,
    run_character_ai,
    statement_action,
)
from parliament.politics.models import StateBranch


def test_roles(small_state):
    alpha = small_state.parties["alpha"]
    alpha.state_branches["Selangor"] = StateBranch(leader_id="a3")

    assert character_role(alpha, small_state.characters["a1"]) is CharacterRole.NATIONAL_LEADER
    assert character_role(alpha, small_state.characters["a2"]) is CharacterRole.NATIONAL_DEPUTY
    assert character_role(alpha, small_state.characters["a3"]) is CharacterRole.STATE_LEADER
    assert character_role(None, small_state.characters["a3"]) is CharacterRole.MEMBER


@pytest.mark.parametrize(
    "totals, expected",
    [({"a": 50, "b": 30}, 20), ({"a": 10, "b": 30, "c": 5}, -20), ({"a": 7}, 7), ({}, 0)],
)
def test_party_margin(totals, expected):
    assert party_margin(totals, "a") == expected


def test_members_promote_their_party(small_state, rng):
    g2 = small_state.characters["g2"]

    assert statement_action(g2, CharacterRole.MEMBER, rng) == "promote_party"
    assert (g2.influence, g2.recognition) == (35.0, 22.0)


def test_character_ai_skips_the_player(small_state, make_character):
    player = make_character(small_state, "player-1", "malay-youth", "S3", is_player=True)
    rng = np.random.default_rng(0)

    for _ in range(200):
        run_character_ai(small_state, rng)

    assert (player.influence, player.recognition, player.seat) == (50.0, 20.0, "S3")
    # National leaders act on about half of all days.
    assert small_state.characters["a1"].influence > 70.0
