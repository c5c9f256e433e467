"""The monthly political developments pass.

Phases run in a fixed order against the live ``WorldState`` so each one sees
the changes made by the one before it:

1. alliance integrity
2. unity random walk and schism
3. independent alignment
4. AI alliance formation
5. independent coalition founding
6. alliance full merger
7. zero-seat consolidation

Alliance cohesion and ideological drift follow the pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from ..logging_setup import get_logger
from ..world.graph import RelationsGraph, allied_parties, relationship
from .alliances import attempt_alliance_merger, consolidate_alliance_cohesion
from .ideology import apply_ideological_drift, ideological_distance
from .lifecycle import absorb_parties, merge_parties, secede, unique_party_name
from .models import AllianceType, Character, Ideology, Party, PoliticalAlliance

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.naming import NameGenerator
    from ..world.state import WorldState

logger = get_logger(__name__)

SCHISM_UNITY = 20.0
SCHISM_MIN_AFFILIATIONS = 3
SCHISM_CHANCE = 0.05
SCHISM_NEW_PARTY_CHANCE = 0.7
DEFECTION_DISTANCE = 40.0
ALIGNMENT_DISTANCE = 50.0
ALIGNMENT_CHANCE = 0.9
ALLIANCE_RELATION = 70.0
ALLIANCE_CROSS_ETHNIC_RELATION = 85.0
ALLIANCE_DISTANCE = 30.0
ALLIANCE_CHANCE = 0.05
BREAKUP_RELATION = 40.0
BREAKUP_DISTANCE = 40.0
FOUNDING_INFLUENCE = 20.0
FOUNDING_DISTANCE = 30.0
FOUNDING_CHANCE = 0.1
CONSOLIDATION_CHANCE = 0.02
CONSOLIDATION_DISTANCE = 25.0
CONSOLIDATION_RELATION = 40.0


@dataclass
class DevelopmentReport:
    """What happened during one developments pass."""

    departures: list[str] = field(default_factory=list)
    dissolved_alliances: list[str] = field(default_factory=list)
    schism: str | None = None
    aligned: list[str] = field(default_factory=list)
    new_alliances: list[str] = field(default_factory=list)
    founded: list[str] = field(default_factory=list)
    merged: str | None = None
    consolidated: list[str] = field(default_factory=list)
    drifted: int = 0


# ----------------------------------------------------------------------
# Phase 1
def enforce_alliance_integrity(state: WorldState, report: DevelopmentReport | None = None) -> None:
    """Members fall away when relations with the leader sour or ideologies diverge."""

    report = report if report is not None else DevelopmentReport()
    graph = state.relations_graph()
    for alliance in list(state.alliances.values()):
        leader = state.parties.get(alliance.leader_party_id)
        if leader is None:
            state.remove_alliance(alliance.id)
            report.dissolved_alliances.append(alliance.id)
            continue
        staying: list[str] = []
        for member_id in alliance.member_party_ids:
            if member_id == leader.id:
                staying.append(member_id)
                continue
            member = state.parties.get(member_id)
            if member is None:
                continue
            relation = relationship(graph, leader.id, member_id)
            distance = ideological_distance(leader.ideology, member.ideology)
            if relation < BREAKUP_RELATION or distance > BREAKUP_DISTANCE:
                state.log(
                    "Alliance Breakup",
                    f"{member.name} has withdrawn from the {alliance.name} due to disagreements.",
                )
                report.departures.append(member_id)
                continue
            staying.append(member_id)
        alliance.member_party_ids = staying
        if len(staying) < 2:
            state.remove_alliance(alliance.id)
            report.dissolved_alliances.append(alliance.id)
            state.log("Alliance Collapse", f"The {alliance.name} has collapsed due to lack of members.")


# ----------------------------------------------------------------------
# Phase 2
def update_party_unity(state: WorldState, rng: np.random.Generator) -> None:
    """Random walk: coalitions of factions drift down, single-faction parties up."""

    for party in state.parties.values():
        if len(party.affiliation_ids) > 1:
            step = rng.random() * 4 - 2.5
        else:
            step = rng.random() * 2 - 0.5
        party.unity = max(0.0, min(100.0, party.unity + step))


def schism_eligible(party: Party) -> bool:
    return party.unity < SCHISM_UNITY and len(party.affiliation_ids) >= SCHISM_MIN_AFFILIATIONS


def schism_triggered(party: Party, rng: np.random.Generator) -> bool:
    """Monthly schism roll; only eligible parties consume a draw."""

    return schism_eligible(party) and rng.random() < SCHISM_CHANCE


def _affiliation_ideology(state: WorldState, affiliation_id: str) -> Ideology:
    return state.affiliations[affiliation_id].ideology


def _dissident(state: WorldState, party: Party) -> Character | None:
    leader = state.characters.get(party.leader_id) if party.leader_id else None
    candidates = [
        member
        for member in state.members_of_party(party.id)
        if member.is_affiliation_leader
        and member.id != party.leader_id
        and (leader is None or member.affiliation_id != leader.affiliation_id)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda member: member.influence)


def rebel_affiliations(state: WorldState, party: Party, dissident: Character) -> list[str]:
    """The dissident's affiliation plus every faction closer to it than to the leader."""

    rebels = [dissident.affiliation_id]
    leader = state.characters.get(party.leader_id) if party.leader_id else None
    if leader is None:
        return rebels
    dissident_ideology = _affiliation_ideology(state, dissident.affiliation_id)
    leader_ideology = _affiliation_ideology(state, leader.affiliation_id)
    for affiliation_id in party.affiliation_ids:
        if affiliation_id in (dissident.affiliation_id, leader.affiliation_id):
            continue
        ideology = _affiliation_ideology(state, affiliation_id)
        if ideological_distance(ideology, dissident_ideology) < ideological_distance(
            ideology, leader_ideology
        ):
            rebels.append(affiliation_id)
    return rebels


def attempt_schism(
    state: WorldState,
    party: Party,
    rng: np.random.Generator,
    names: NameGenerator,
) -> Party | None:
    """Split a faction bloc off ``party`` into a new or an existing party."""

    dissident = _dissident(state, party)
    if dissident is None:
        return None
    rebels = rebel_affiliations(state, party, dissident)
    dissident_affiliation = state.affiliations[dissident.affiliation_id]
    dissident_ideology = dissident_affiliation.ideology

    target: Party | None = None
    if rng.random() >= SCHISM_NEW_PARTY_CHANCE:
        options = [
            other
            for other in state.parties.values()
            if other.id != party.id
            and other.accepts(dissident.ethnicity)
            and other.accepts(dissident_affiliation.ethnicity)
            and ideological_distance(other.ideology, dissident_ideology) < DEFECTION_DISTANCE
        ]
        if options:
            target = min(options, key=lambda other: ideological_distance(other.ideology, dissident_ideology))

    source_name = party.name
    if target is None:
        name = unique_party_name(state, names.party(dissident_affiliation))
        destination = secede(state, dissident.affiliation_id, dissident, "new", rng, new_party_name=name)
    else:
        destination = secede(
            state, dissident.affiliation_id, dissident, "join", rng, target_party_id=target.id
        )

    for affiliation_id in rebels[1:]:
        affiliation = state.affiliations[affiliation_id]
        faction_leader = state.affiliation_leader(affiliation_id)
        if faction_leader is None or not destination.accepts(affiliation.ethnicity):
            continue
        secede(state, affiliation_id, faction_leader, "join", rng, target_party_id=destination.id)

    if target is None:
        state.log(
            "Party Schism",
            f"{dissident.name} has led a faction split from {source_name} to form {destination.name}.",
        )
    else:
        state.log(
            "Party Defection",
            f"{dissident.name} has led a faction split from {source_name} to join {destination.name}.",
        )
    logger.info("party_schism", source=party.id, destination=destination.id, factions=len(rebels))
    return destination


def run_schisms(state: WorldState, rng: np.random.Generator, names: NameGenerator) -> Party | None:
    """At most one schism per pass, in party order."""

    for party_id in list(state.parties):
        party = state.parties.get(party_id)
        if party is None or not schism_triggered(party, rng):
            continue
        result = attempt_schism(state, party, rng, names)
        if result is not None:
            return result
    return None


# ----------------------------------------------------------------------
# Phase 3
def align_independents(state: WorldState, rng: np.random.Generator) -> list[str]:
    """Independent affiliations join the closest compatible party."""

    aligned: list[str] = []
    for affiliation in state.independent_affiliations():
        leader = state.affiliation_leader(affiliation.id)
        if leader is None:
            continue
        options = [
            party
            for party in state.parties.values()
            if party.accepts(affiliation.ethnicity)
            and ideological_distance(party.ideology, affiliation.ideology) < ALIGNMENT_DISTANCE
        ]
        if not options or rng.random() >= ALIGNMENT_CHANCE:
            continue
        target = min(options, key=lambda party: ideological_distance(party.ideology, affiliation.ideology))
        secede(state, affiliation.id, leader, "join", rng, target_party_id=target.id)
        state.log(
            "Political Alignment",
            f"The independent {affiliation.name} faction has aligned with {target.name}.",
        )
        aligned.append(affiliation.id)
    return aligned


# ----------------------------------------------------------------------
# Phase 4
def _alliance_partner(
    state: WorldState,
    graph: RelationsGraph,
    initiator: Party,
    candidates: list[Party],
    processed: set[str],
) -> Party | None:
    friendly = set(allied_parties(graph, initiator.id, ALLIANCE_RELATION))
    for other in candidates:
        if other.id == initiator.id or other.id in processed or other.id not in friendly:
            continue
        if state.alliance_of(other.id) is not None:
            continue
        relation = relationship(graph, initiator.id, other.id)
        if ideological_distance(initiator.ideology, other.ideology) > ALLIANCE_DISTANCE:
            continue
        if (
            initiator.ethnicity_focus is not None
            and other.ethnicity_focus is not None
            and initiator.ethnicity_focus != other.ethnicity_focus
            and relation < ALLIANCE_CROSS_ETHNIC_RELATION
        ):
            continue
        return other
    return None


def form_ai_alliances(
    state: WorldState, rng: np.random.Generator, names: NameGenerator
) -> list[str]:
    """Unaligned parties with a warm, like-minded partner occasionally pair up."""

    counts = state.seat_counts()
    viable = []
    for party in state.parties.values():
        alliance = state.alliance_of(party.id)
        if alliance is not None and alliance.leader_party_id != party.id:
            continue
        if counts.get(party.id, 0) > 0 or party.leader_id is not None:
            viable.append(party)

    graph = state.relations_graph()
    created: list[str] = []
    processed: set[str] = set()
    for initiator in viable:
        if initiator.id in processed or state.alliance_of(initiator.id) is not None:
            continue
        partner = _alliance_partner(state, graph, initiator, viable, processed)
        if partner is None or rng.random() >= ALLIANCE_CHANCE:
            continue
        alliance = state.add_alliance(
            PoliticalAlliance(
                id=state.new_id("alliance"),
                name=names.alliance(),
                member_party_ids=[initiator.id, partner.id],
                type=AllianceType.ALLIANCE,
                leader_party_id=initiator.id,
            )
        )
        processed.update((initiator.id, partner.id))
        created.append(alliance.id)
        state.log(
            "New Alliance",
            f'{initiator.name} and {partner.name} have formed the "{alliance.name}"!',
        )
    return created


# ----------------------------------------------------------------------
# Phase 5
def found_independent_parties(
    state: WorldState, rng: np.random.Generator, names: NameGenerator
) -> list[str]:
    """Strong independent factions rally kindred independents into a new party."""

    independents = state.independent_affiliations()
    independent_ids = {affiliation.id for affiliation in independents}
    totals: dict[str, float] = {}
    leaders: dict[str, Character] = {}
    for character in state.living_characters():
        if character.affiliation_id not in independent_ids:
            continue
        totals[character.affiliation_id] = totals.get(character.affiliation_id, 0.0) + character.influence
        current = leaders.get(character.affiliation_id)
        if current is None or character.influence > current.influence:
            leaders[character.affiliation_id] = character

    ordered = sorted(independents, key=lambda affiliation: -totals.get(affiliation.id, 0.0))
    processed: set[str] = set()
    founded: list[str] = []
    for initiator in ordered:
        if initiator.id in processed:
            continue
        leader = leaders.get(initiator.id)
        if leader is None or totals.get(initiator.id, 0.0) < FOUNDING_INFLUENCE:
            continue
        partners = [
            other
            for other in ordered
            if other.id != initiator.id
            and other.id not in processed
            and (
                other.ethnicity == initiator.ethnicity
                or ideological_distance(other.ideology, initiator.ideology) < FOUNDING_DISTANCE
            )
        ]
        if len(partners) < 2 or rng.random() > FOUNDING_CHANCE:
            continue

        name = unique_party_name(state, names.party(initiator), suffix=str(state.current_date.year))
        party = secede(state, initiator.id, leader, "new", rng, new_party_name=name)
        processed.add(initiator.id)
        joined: list[str] = []
        for partner in partners:
            partner_leader = leaders.get(partner.id)
            if partner_leader is None:
                continue
            secede(state, partner.id, partner_leader, "join", rng, target_party_id=party.id)
            processed.add(partner.id)
            joined.append(partner.name)
        founded.append(party.id)
        state.log(
            "Party Formation",
            f"The {initiator.name} has rallied {', '.join(joined)} to form the {party.name}!",
        )
    return founded


# ----------------------------------------------------------------------
# Phase 7
def _consolidation_target(
    state: WorldState, weak: Party, counts: dict[str, int], processed: set[str], player_party_id: str | None
) -> Party | None:
    graph = state.relations_graph()
    target: Party | None = None
    best = -1.0
    for other in state.parties.values():
        if other.id in (weak.id, player_party_id) or other.id in processed:
            continue
        if weak.ethnicity_focus is not None and other.ethnicity_focus != weak.ethnicity_focus:
            continue
        distance = ideological_distance(weak.ideology, other.ideology)
        if distance > CONSOLIDATION_DISTANCE:
            continue
        relation = relationship(graph, weak.id, other.id)
        if relation < CONSOLIDATION_RELATION:
            continue
        score = counts.get(other.id, 0) * 20 + (100 - distance) + relation
        if score > best:
            best = score
            target = other
    return target


def _senior_leader(state: WorldState, *parties: Party) -> str | None:
    leaders = [
        state.characters[party.leader_id]
        for party in parties
        if party.leader_id is not None and party.leader_id in state.characters
    ]
    if not leaders:
        members = [member for party in parties for member in state.members_of_party(party.id)]
        leaders = members
    if not leaders:
        return None
    return max(leaders, key=lambda character: character.influence).id


def consolidate_weak_parties(
    state: WorldState, rng: np.random.Generator, names: NameGenerator
) -> list[str]:
    """Seatless parties get absorbed by, or merge with, a close and friendly party."""

    counts = state.seat_counts()
    player = state.player()
    player_party = state.party_of(player) if player is not None else None
    player_party_id = player_party.id if player_party is not None else None
    weak_ids = [
        party_id for party_id, seats in counts.items() if seats == 0 and party_id != player_party_id
    ]
    processed: set[str] = set()
    consolidated: list[str] = []
    for weak_id in weak_ids:
        weak = state.parties.get(weak_id)
        if weak is None or weak_id in processed:
            continue
        if rng.random() > CONSOLIDATION_CHANCE:
            continue
        target = _consolidation_target(state, weak, counts, processed, player_party_id)
        if target is None:
            continue
        if counts.get(target.id, 0) > 0:
            absorb_parties(state, target.id, [weak.id])
            processed.add(weak.id)
            consolidated.append(weak.id)
            state.log(
                "Party Absorbed",
                f"{weak.name} has been absorbed by {target.name} due to poor performance.",
            )
            continue
        leader_id = _senior_leader(state, weak, target)
        if leader_id is None:
            continue
        founding = weak.affiliation_ids[0] if weak.affiliation_ids else target.affiliation_ids[0]
        name = unique_party_name(state, names.party(state.affiliations[founding]))
        merged = merge_parties(state, weak.id, rng, name=name, leader_id=leader_id, party_ids=[target.id])
        processed.update((weak.id, target.id))
        consolidated.extend((weak.id, target.id))
        state.log(
            "Party Merger",
            f"{weak.name} and {target.name} have merged to form {merged.name} to pool resources.",
        )
    return consolidated


# ----------------------------------------------------------------------
def run_political_developments(
    state: WorldState, rng: np.random.Generator, names: NameGenerator
) -> DevelopmentReport:
    """Run every phase in order, then cohesion and drift."""

    report = DevelopmentReport()
    enforce_alliance_integrity(state, report)
    update_party_unity(state, rng)
    schism = run_schisms(state, rng, names)
    report.schism = schism.id if schism is not None else None
    report.aligned = align_independents(state, rng)
    report.new_alliances = form_ai_alliances(state, rng, names)
    report.founded = found_independent_parties(state, rng, names)
    merged = attempt_alliance_merger(state, rng)
    report.merged = merged.id if merged is not None else None
    report.consolidated = consolidate_weak_parties(state, rng, names)
    consolidate_alliance_cohesion(state)
    report.drifted = apply_ideological_drift(state, rng)
    logger.debug(
        "political_developments",
        date=state.current_date.isoformat(),
        schism=report.schism,
        aligned=len(report.aligned),
        alliances=len(report.new_alliances),
        merged=report.merged,
    )
    return report


__all__ = [
    "DevelopmentReport",
    "align_independents",
    "attempt_schism",
    "consolidate_weak_parties",
    "enforce_alliance_integrity",
    "form_ai_alliances",
    "found_independent_parties",
    "rebel_affiliations",
    "run_political_developments",
    "run_schisms",
    "schism_eligible",
    "schism_triggered",
    "update_party_unity",
]
