"""Random political events and their one-shot effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from ..logging_setup import get_logger
from ..politics.models import clamp
from ..world.rng import pick

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.state import WorldState

logger = get_logger(__name__)

EVENT_DAYS = (1, 15)
RACIAL_TENSION_SHARE = 0.35
SCANDAL_SHARE = 0.60
ECONOMIC_SHARE = 0.80
WAVE_KEYWORDS = ("Socialist", "Islamist", "Nationalist", "Liberal")
SCANDAL_RECOGNITION_LOSS = 5.0
SCANDAL_UNITY_LOSS = 10.0
CRACKDOWN_UNITY_LOSS = 15.0


class EventType(str, Enum):
    RACIAL_TENSION = "racial_tension"
    SCANDAL = "scandal"
    ECONOMIC = "economic"
    POLITICAL = "political"
    CRACKDOWN_BACKLASH = "crackdown_backlash"


@dataclass
class GameEvent:
    """A newsworthy shock awaiting acknowledgement.

    ``effects`` are the human-readable consequences shown to the player;
    numeric changes happen in :func:`apply_event_effects`.
    """

    id: str
    title: str
    description: str
    date: date
    type: EventType
    magnitude: float = 10.0
    effects: list[str] = field(default_factory=list)
    affected_seat_codes: list[str] = field(default_factory=list)
    affected_party_ids: list[str] = field(default_factory=list)
    target_character_id: str | None = None
    keyword: str | None = None
    applied: bool = False


def _racial_tension(state: WorldState, rng: np.random.Generator) -> GameEvent | None:
    mixed = [seat for seat in state.constituencies.values() if seat.is_mixed]
    if not mixed:
        return None
    seat = pick(rng, mixed)
    return GameEvent(
        id=state.new_id("evt-racial"),
        title=f"Tensions in {seat.name}",
        description=(
            f"Simmering ethnic tensions have flared up in {seat.name} following a heated "
            "political rally. Communities are retreating to their own ethnic representatives."
        ),
        date=state.current_date,
        type=EventType.RACIAL_TENSION,
        magnitude=15.0,
        effects=[
            "Increased influence for ethnic-based parties in this seat.",
            "Decreased influence for multi-ethnic parties in this seat.",
        ],
        affected_seat_codes=[seat.code],
    )


def _scandal(state: WorldState, rng: np.random.Generator) -> GameEvent | None:
    exposed = [
        character
        for character in state.living_characters()
        if (character.influence > 70 or character.is_mp) and not character.is_player
    ]
    if not exposed:
        return None
    target = pick(rng, exposed)
    party = state.party_of(target)
    return GameEvent(
        id=state.new_id("evt-scandal"),
        title=f"Scandal: {target.name}",
        description=(
            f"Rumours of corruption involving {target.name} have surfaced. "
            "The public is demanding answers."
        ),
        date=state.current_date,
        type=EventType.SCANDAL,
        magnitude=20.0,
        effects=[
            f"{target.name} loses significant influence.",
            f"{party.name} loses support in associated regions." if party else "Reputation damaged.",
        ],
        affected_party_ids=[party.id] if party else [],
        target_character_id=target.id,
    )


def _economic(state: WorldState, rng: np.random.Generator) -> GameEvent:
    boom = rng.random() > 0.5
    if boom:
        title = "Rubber Prices Soar"
        description = "Global demand for rubber has increased, bringing prosperity to rural estates."
        effects = ["Increased support for the Government in rural areas."]
    else:
        title = "Tin Market Slump"
        description = "A drop in global tin prices threatens the livelihoods of urban mining communities."
        effects = ["Decreased support for the Government in urban areas."]
    return GameEvent(
        id=state.new_id("evt-eco"),
        title=title,
        description=description,
        date=state.current_date,
        type=EventType.ECONOMIC,
        magnitude=10.0,
        effects=effects,
    )


def _political_wave(state: WorldState, rng: np.random.Generator) -> GameEvent:
    keyword = pick(rng, WAVE_KEYWORDS)
    return GameEvent(
        id=state.new_id("evt-pol"),
        title=f"{keyword} Wave",
        description=(
            f"Grassroots movements aligned with {keyword.lower()} ideals are gaining "
            "traction across the country."
        ),
        date=state.current_date,
        type=EventType.POLITICAL,
        magnitude=10.0,
        effects=[f"Parties with {keyword} affiliations gain influence nationwide."],
        keyword=keyword,
    )


def generate_event(state: WorldState, rng: np.random.Generator) -> GameEvent:
    """Roll an event type; branches without a valid target fall through."""

    roll = rng.random()
    if roll < RACIAL_TENSION_SHARE:
        event = _racial_tension(state, rng)
        if event is not None:
            return event
    if roll < SCANDAL_SHARE:
        event = _scandal(state, rng)
        if event is not None:
            return event
    if roll < ECONOMIC_SHARE:
        return _economic(state, rng)
    return _political_wave(state, rng)


def check_for_event(
    state: WorldState, rng: np.random.Generator, *, chance: float = 0.05
) -> GameEvent | None:
    """Twice-monthly roll for a random event."""

    if state.current_date.day not in EVENT_DAYS:
        return None
    if rng.random() > chance:
        return None
    return generate_event(state, rng)


def crackdown_backlash_event(
    state: WorldState, detainee_name: str | None, party_ids: list[str]
) -> GameEvent:
    if detainee_name is None:
        description = "The government has initiated a security crackdown."
        effects = ["Government unity penalty."]
    else:
        description = (
            f"Opposition leader {detainee_name} has been detained under the Internal Security "
            "Act, citing threats to national stability."
        )
        effects = [
            f"{detainee_name} removed from active politics.",
            "Opposition anger rises.",
            "Government unity penalty.",
        ]
    return GameEvent(
        id=state.new_id("evt-crackdown"),
        title="Internal Security Crackdown",
        description=description,
        date=state.current_date,
        type=EventType.CRACKDOWN_BACKLASH,
        magnitude=CRACKDOWN_UNITY_LOSS,
        effects=effects,
        affected_party_ids=list(party_ids),
    )


def apply_event_effects(state: WorldState, event: GameEvent) -> None:
    """Mutate characters and parties for ``event``; each event applies once."""

    if event.applied:
        raise ValueError(f"event '{event.id}' has already been applied")
    magnitude = event.magnitude

    if event.type is EventType.RACIAL_TENSION:
        seats = set(event.affected_seat_codes)
        affiliation_party = state.affiliation_party_map()
        for character in state.living_characters():
            if character.seat not in seats:
                continue
            party_id = affiliation_party.get(character.affiliation_id)
            if party_id is None:
                continue
            if state.parties[party_id].ethnicity_focus is not None:
                character.boost(influence=magnitude)
            else:
                character.boost(influence=-magnitude)

    elif event.type is EventType.SCANDAL:
        implicated: set[str] = set()
        if event.target_character_id is not None:
            implicated.add(event.target_character_id)
        for party_id in event.affected_party_ids[:1]:
            party = state.parties.get(party_id)
            if party is None:
                continue
            implicated.update(
                leader_id for leader_id in (party.leader_id, party.deputy_leader_id) if leader_id
            )
            party.unity = clamp(party.unity - SCANDAL_UNITY_LOSS)
        for character_id in implicated:
            character = state.characters.get(character_id)
            if character is not None and character.is_alive:
                character.boost(influence=-magnitude, recognition=-SCANDAL_RECOGNITION_LOSS)

    elif event.type is EventType.POLITICAL:
        keyword = event.keyword or event.title.split(" ")[0]
        for character in state.living_characters():
            affiliation = state.affiliations.get(character.affiliation_id)
            if affiliation is not None and keyword in affiliation.name:
                character.boost(influence=magnitude)

    elif event.type is EventType.CRACKDOWN_BACKLASH:
        for party_id in event.affected_party_ids:
            party = state.parties.get(party_id)
            if party is not None:
                party.unity = clamp(party.unity - magnitude)

    # Economic shocks are descriptive only.
    event.applied = True
    state.log(event.title, event.description, "event")
    logger.info("event_applied", event_type=event.type.value, title=event.title)


__all__ = [
    "EventType",
    "GameEvent",
    "apply_event_effects",
    "check_for_event",
    "crackdown_backlash_event",
    "generate_event",
]
