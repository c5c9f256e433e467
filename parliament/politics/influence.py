"""Effective influence of a character within a single constituency."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Mapping

from .models import Affiliation, AreaPreference, Character, Stronghold

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.constituencies import Constituency
    from ..world.state import WorldState

HOME_STATE_BONUS = 1.2
AWAY_STATE_PENALTY = 0.8
AREA_MATCH = 1.2
AREA_MISMATCH = 0.8
CANDIDATE_FOCUS = 1.25
ALLOCATED_FOCUS = 1.1
STRONGHOLD_STEP = 0.1


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def base_power(character: Character) -> float:
    return character.influence * 0.8 + character.recognition * 0.2


def effective_influence(
    character: Character,
    seat: Constituency | None,
    affiliations: Mapping[str, Affiliation],
    strongholds: Mapping[str, Stronghold],
    candidate_id: str | None = None,
    allocated_affiliation_id: str | None = None,
) -> int:
    """Return the non-negative political weight of ``character`` in ``seat``.

    ``base * state * ethnicity * area * focus * stronghold``, rounded half up.
    The ethnicity modifier follows the affiliation's community, not the
    character's own.
    """

    power = base_power(character)
    if seat is None or not seat.state:
        return max(0, round_half_up(power))

    state_modifier = HOME_STATE_BONUS if character.state == seat.state else AWAY_STATE_PENALTY

    affiliation = affiliations.get(character.affiliation_id)
    ethnicity_modifier = 1.0
    area_modifier = 1.0
    if affiliation is not None:
        share = seat.ethnic_share(affiliation.ethnicity)
        ethnicity_modifier = 0.2 + 0.8 * (share / 100.0)
        if affiliation.area is not AreaPreference.BOTH:
            wants_urban = affiliation.area is AreaPreference.URBAN
            area_modifier = AREA_MATCH if wants_urban == seat.is_urban else AREA_MISMATCH

    if candidate_id is not None and candidate_id == character.id:
        focus_modifier = CANDIDATE_FOCUS
    elif allocated_affiliation_id is not None and allocated_affiliation_id == character.affiliation_id:
        focus_modifier = ALLOCATED_FOCUS
    else:
        focus_modifier = 1.0

    stronghold = strongholds.get(seat.code)
    stronghold_modifier = 1.0
    if stronghold is not None and stronghold.affiliation_id == character.affiliation_id:
        stronghold_modifier = 1.0 + stronghold.terms * STRONGHOLD_STEP

    total = (
        power
        * state_modifier
        * ethnicity_modifier
        * area_modifier
        * focus_modifier
        * stronghold_modifier
    )
    return round_half_up(max(0.0, total))


def influence_in_seat(
    state: WorldState,
    character: Character,
    seat_code: str,
    *,
    candidate_id: str | None = None,
    allocated_affiliation_id: str | None = None,
) -> int:
    """Shortcut for :func:`effective_influence` against a ``WorldState``."""

    return effective_influence(
        character,
        state.constituencies.get(seat_code),
        state.affiliations,
        state.strongholds,
        candidate_id,
        allocated_affiliation_id,
    )


__all__ = ["base_power", "effective_influence", "influence_in_seat", "round_half_up"]
