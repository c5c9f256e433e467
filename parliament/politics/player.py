"""Actions available to the human-controlled character."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Literal

import numpy as np

from ..elections.parliament import security_crackdown
from ..logging_setup import get_logger
from .alliances import AllianceOutcome, attempt_alliance_formation
from .lifecycle import SecessionMode, absorb_parties, merge_parties, secede, unique_party_name
from .models import AllianceType, Character, Ethnicity, Party

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..events.political import GameEvent
    from ..world.state import WorldState

logger = get_logger(__name__)

MergerMode = Literal["merge", "absorb"]

STRONG_INFLUENCE = 60
STRONG_ACCEPTANCE = 0.8
WEAK_ACCEPTANCE = 0.3
UNDERMINE_PENALTY = 5.0


class PlayerAction(str, Enum):
    PROMOTE_PARTY = "promote_party"
    ADDRESS_LOCALS = "address_locals"
    STRENGTHEN_LOCAL_BRANCH = "strengthen_local_branch"
    ORGANIZE_STATE_RALLY = "organize_state_rally"
    UNDERMINE_RIVAL = "undermine_rival"


# (influence, recognition) gained by the player.
ACTION_GAINS: dict[PlayerAction, tuple[float, float]] = {
    PlayerAction.PROMOTE_PARTY: (5.0, 2.0),
    PlayerAction.ADDRESS_LOCALS: (8.0, 4.0),
    PlayerAction.STRENGTHEN_LOCAL_BRANCH: (5.0, 0.0),
    PlayerAction.ORGANIZE_STATE_RALLY: (10.0, 5.0),
    PlayerAction.UNDERMINE_RIVAL: (0.0, 0.0),
}


@dataclass
class MergerOutcome:
    party: Party | None
    accepted_parties: list[str] = field(default_factory=list)
    accepted_affiliations: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.party is not None


def require_player(state: WorldState) -> Character:
    player = state.player()
    if player is None or not player.is_alive:
        raise ValueError("there is no living player character")
    return player


def _player_party(state: WorldState, player: Character) -> Party:
    party = state.party_of(player)
    if party is None:
        raise ValueError("the player does not belong to a party")
    return party


def perform_action(
    state: WorldState, action: PlayerAction | str, *, target_id: str | None = None
) -> Character:
    """Campaign action; gains are capped at 100.

    Undermining a rival gains nothing directly but costs ``target_id`` some
    influence.
    """

    player = require_player(state)
    action = PlayerAction(action)
    influence, recognition = ACTION_GAINS[action]
    player.boost(influence=influence, recognition=recognition)
    if action is PlayerAction.UNDERMINE_RIVAL and target_id is not None:
        rival = state.characters.get(target_id)
        if rival is None:
            raise KeyError(f"Unknown character '{target_id}'")
        rival.boost(influence=-UNDERMINE_PENALTY)
    state.log("Action Performed", f"{player.name} performed: {action.value}.", "personal")
    return player


def merger_acceptance_chance(player: Character) -> float:
    return STRONG_ACCEPTANCE if player.influence > STRONG_INFLUENCE else WEAK_ACCEPTANCE


def propose_merger(
    state: WorldState,
    rng: np.random.Generator,
    *,
    party_ids: Iterable[str] = (),
    affiliation_ids: Iterable[str] = (),
    name: str | None = None,
    mode: MergerMode = "merge",
) -> MergerOutcome:
    """Invite parties and affiliations to merge with, or be absorbed by, the player's party.

    Each invitee decides independently. Rejection by everyone is an outcome,
    not an error.
    """

    player = require_player(state)
    home = _player_party(state, player)
    parties = [party_id for party_id in dict.fromkeys(party_ids) if party_id != home.id]
    affiliations = [
        affiliation_id
        for affiliation_id in dict.fromkeys(affiliation_ids)
        if affiliation_id not in home.affiliation_ids
    ]
    for party_id in parties:
        if party_id not in state.parties:
            raise KeyError(f"Unknown party '{party_id}'")
    for affiliation_id in affiliations:
        if affiliation_id not in state.affiliations:
            raise KeyError(f"Unknown affiliation '{affiliation_id}'")
    if mode not in ("merge", "absorb"):
        raise ValueError(f"Unknown merger mode '{mode}'")
    if mode == "merge" and not name:
        raise ValueError("a merged party needs a name")

    chance = merger_acceptance_chance(player)
    outcome = MergerOutcome(None)
    for party_id in parties:
        (outcome.accepted_parties if rng.random() < chance else outcome.rejected).append(party_id)
    for affiliation_id in affiliations:
        target = outcome.accepted_affiliations if rng.random() < chance else outcome.rejected
        target.append(affiliation_id)

    if not outcome.accepted_parties and not outcome.accepted_affiliations:
        state.log("Merger Rejected", f"No one accepted {home.name}'s proposal.", "politics")
        return outcome

    if mode == "merge":
        outcome.party = merge_parties(
            state,
            home.id,
            rng,
            name=unique_party_name(state, name or home.name),
            leader_id=player.id,
            party_ids=outcome.accepted_parties,
            affiliation_ids=outcome.accepted_affiliations,
        )
        state.log("Party Merger", f"{outcome.party.name} has been founded by merger.", "politics")
    else:
        outcome.party = absorb_parties(
            state, home.id, outcome.accepted_parties, outcome.accepted_affiliations
        )
        state.log(
            "Party Absorption",
            f"{outcome.party.name} absorbed {len(outcome.accepted_parties)} part"
            f"{'y' if len(outcome.accepted_parties) == 1 else 'ies'} and "
            f"{len(outcome.accepted_affiliations)} affiliation(s).",
            "politics",
        )
    logger.info(
        "player_merger",
        mode=mode,
        accepted=len(outcome.accepted_parties) + len(outcome.accepted_affiliations),
        rejected=len(outcome.rejected),
    )
    return outcome


def player_secede(
    state: WorldState,
    rng: np.random.Generator,
    mode: SecessionMode,
    *,
    target_party_id: str | None = None,
    new_party_name: str | None = None,
    focus: Ethnicity | None = None,
) -> Party:
    """Lead the player's affiliation out of its party; only its leader may."""

    player = require_player(state)
    if not player.is_affiliation_leader:
        raise ValueError("only the affiliation leader can lead a secession")
    name = unique_party_name(state, new_party_name) if new_party_name else None
    party = secede(
        state,
        player.affiliation_id,
        player,
        mode,
        rng,
        target_party_id=target_party_id,
        new_party_name=name,
        focus=focus,
    )
    affiliation = state.affiliations[player.affiliation_id]
    state.log("Secession", f"{affiliation.name} has moved to {party.name}.", "politics")
    return party


def propose_alliance(
    state: WorldState,
    rng: np.random.Generator,
    target_ids: Iterable[str],
    name: str,
    alliance_type: AllianceType = AllianceType.ALLIANCE,
) -> AllianceOutcome:
    player = require_player(state)
    party = _player_party(state, player)
    if party.leader_id != player.id:
        raise ValueError("only the party leader can negotiate alliances")
    targets = list(target_ids)
    for target_id in targets:
        if target_id not in state.parties:
            raise KeyError(f"Unknown party '{target_id}'")
    return attempt_alliance_formation(state, party.id, targets, name, alliance_type, rng)


def order_crackdown(state: WorldState) -> GameEvent:
    """Chief Minister only: detain the leading opposition MP."""

    player = require_player(state)
    government = state.government
    if government is None or government.chief_minister_id != player.id:
        raise ValueError("only the Chief Minister can order a crackdown")
    return security_crackdown(state)


__all__ = [
    "ACTION_GAINS",
    "MergerOutcome",
    "PlayerAction",
    "merger_acceptance_chance",
    "order_crackdown",
    "perform_action",
    "player_secede",
    "propose_alliance",
    "propose_merger",
    "require_player",
]
