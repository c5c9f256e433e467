"""The ``WorldState`` aggregate owning every political entity by id.

Engine functions mutate a ``WorldState`` in place; a simulated day is the
transaction boundary. Relationships that would otherwise form cycles
(character -> affiliation -> party) are derived on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from itertools import count
from typing import TYPE_CHECKING, Iterable, Iterator

from ..politics.models import (
    SPEAKER_SEAT,
    Affiliation,
    Character,
    Government,
    Party,
    PoliticalAlliance,
    Stronghold,
)
from ..ui.channels import LogEntry, PoliticalLog
from .config import ElectoralSystem
from .constituencies import Constituency, unique_states
from .graph import BlocGraph, RelationsGraph, build_alliance_graph, build_relations_graph

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..elections.general import ElectionHistoryEntry


@dataclass
class WorldState:
    """Every entity of the simulation, keyed by id."""

    constituencies: dict[str, Constituency]
    affiliations: dict[str, Affiliation]
    current_date: date
    characters: dict[str, Character] = field(default_factory=dict)
    parties: dict[str, Party] = field(default_factory=dict)
    alliances: dict[str, PoliticalAlliance] = field(default_factory=dict)
    election_results: dict[str, str] = field(default_factory=dict)
    strongholds: dict[str, Stronghold] = field(default_factory=dict)
    government: Government | None = None
    election_history: list[ElectionHistoryEntry] = field(default_factory=list)
    electoral_system: ElectoralSystem = ElectoralSystem.FPTP
    player_id: str | None = None
    last_election_date: date | None = None
    regime_start: date | None = None
    regime_leader_party: str | None = None
    big_tent_triggered: bool = False
    political_log: PoliticalLog = field(default_factory=PoliticalLog)
    _ids: Iterator[int] = field(default_factory=lambda: count(1), repr=False)

    # ------------------------------------------------------------------
    def new_id(self, prefix: str) -> str:
        """Return a fresh id such as ``party-12``."""

        while True:
            candidate = f"{prefix}-{next(self._ids)}"
            if (
                candidate not in self.characters
                and candidate not in self.parties
                and candidate not in self.alliances
            ):
                return candidate

    def log(self, title: str, description: str, category: str = "politics") -> LogEntry:
        return self.political_log.record(self.current_date, title, description, category)

    # ------------------------------------------------------------------
    @property
    def total_seats(self) -> int:
        return len(self.constituencies)

    @property
    def majority(self) -> int:
        return self.total_seats // 2 + 1

    @property
    def states(self) -> list[str]:
        return unique_states(self.constituencies)

    def seat_name(self, seat: str) -> str:
        constituency = self.constituencies.get(seat)
        return constituency.name if constituency is not None else seat

    def player(self) -> Character | None:
        if self.player_id is None:
            return None
        return self.characters.get(self.player_id)

    def living_characters(self) -> list[Character]:
        return [character for character in self.characters.values() if character.is_alive]

    def affiliation_members(self, affiliation_id: str, *, alive: bool = True) -> list[Character]:
        return [
            character
            for character in self.characters.values()
            if character.affiliation_id == affiliation_id and (character.is_alive or not alive)
        ]

    def affiliation_leader(self, affiliation_id: str) -> Character | None:
        for character in self.characters.values():
            if (
                character.affiliation_id == affiliation_id
                and character.is_alive
                and character.is_affiliation_leader
            ):
                return character
        return None

    def affiliation_party_map(self) -> dict[str, str]:
        """Map each affiliation id to the id of the party holding it."""

        mapping: dict[str, str] = {}
        for party in self.parties.values():
            for affiliation_id in party.affiliation_ids:
                mapping[affiliation_id] = party.id
        return mapping

    def party_of_affiliation(self, affiliation_id: str) -> Party | None:
        for party in self.parties.values():
            if affiliation_id in party.affiliation_ids:
                return party
        return None

    def party_of(self, character: Character) -> Party | None:
        return self.party_of_affiliation(character.affiliation_id)

    def members_of_party(self, party_id: str, *, alive: bool = True) -> list[Character]:
        party = self.parties.get(party_id)
        if party is None:
            return []
        affiliation_ids = set(party.affiliation_ids)
        return [
            character
            for character in self.characters.values()
            if character.affiliation_id in affiliation_ids and (character.is_alive or not alive)
        ]

    def independent_affiliations(self) -> list[Affiliation]:
        held = self.affiliation_party_map()
        return [affiliation for affiliation in self.affiliations.values() if affiliation.id not in held]

    def seat_counts(self) -> dict[str, int]:
        """Seats currently held per party; every live party is present."""

        counts = {party_id: 0 for party_id in self.parties}
        for party_id in self.election_results.values():
            if party_id in counts:
                counts[party_id] += 1
        return counts

    def alliance_of(self, party_id: str) -> PoliticalAlliance | None:
        for alliance in self.alliances.values():
            if party_id in alliance.member_party_ids:
                return alliance
        return None

    def mp_for_seat(self, seat: str) -> Character | None:
        for character in self.characters.values():
            if character.is_alive and character.is_mp and character.seat == seat:
                return character
        return None

    def speaker(self) -> Character | None:
        for character in self.characters.values():
            if character.is_alive and character.seat == SPEAKER_SEAT:
                return character
        return None

    def seat_population(self) -> dict[str, list[Character]]:
        """Living characters grouped by the seat they currently occupy."""

        population: dict[str, list[Character]] = {}
        for character in self.characters.values():
            if character.is_alive:
                population.setdefault(character.seat, []).append(character)
        return population

    def relations_graph(self) -> RelationsGraph:
        return build_relations_graph(self.parties)

    def alliance_graph(self) -> BlocGraph:
        return build_alliance_graph(self.alliances.values())

    # ------------------------------------------------------------------
    # Mutation primitives. Structural changes go through these so that an
    # affiliation is never held by two parties and a party never sits in two
    # alliances.
    def move_affiliation(self, affiliation_id: str, party_id: str | None) -> str | None:
        """Detach ``affiliation_id`` from its party and attach it to ``party_id``.

        Returns the id of the previous holder. ``None`` makes the affiliation
        independent.
        """

        if affiliation_id not in self.affiliations:
            raise KeyError(f"Unknown affiliation '{affiliation_id}'")
        if party_id is not None and party_id not in self.parties:
            raise KeyError(f"Unknown party '{party_id}'")
        previous: str | None = None
        for party in self.parties.values():
            if affiliation_id in party.affiliation_ids:
                previous = party.id
                party.affiliation_ids = [
                    member for member in party.affiliation_ids if member != affiliation_id
                ]
        if party_id is not None:
            self.parties[party_id].affiliation_ids.append(affiliation_id)
        return previous

    def add_party(self, party: Party) -> Party:
        if party.id in self.parties:
            raise ValueError(f"Party '{party.id}' already exists")
        for affiliation_id in list(party.affiliation_ids):
            holder = self.party_of_affiliation(affiliation_id)
            if holder is not None:
                holder.affiliation_ids.remove(affiliation_id)
        party.affiliation_ids = list(dict.fromkeys(party.affiliation_ids))
        self.parties[party.id] = party
        return party

    def remove_party(self, party_id: str) -> Party | None:
        """Dissolve a party, pruning alliances and dangling relations.

        Seats the party still holds follow their sitting MP's current party;
        a seat with no MP, or whose MP is independent, is cleared.
        """

        party = self.parties.pop(party_id, None)
        if party is None:
            return None
        for seat, holder in list(self.election_results.items()):
            if holder != party_id:
                continue
            mp = self.mp_for_seat(seat)
            heir = self.party_of(mp) if mp is not None else None
            if heir is None:
                del self.election_results[seat]
            else:
                self.election_results[seat] = heir.id
        for other in self.parties.values():
            other.relations.pop(party_id, None)
        self.leave_alliance(party_id)
        if self.regime_leader_party == party_id:
            self.regime_leader_party = None
        return party

    def remove_empty_parties(self) -> list[str]:
        empty = [party_id for party_id, party in self.parties.items() if not party.affiliation_ids]
        for party_id in empty:
            self.remove_party(party_id)
        return empty

    def add_alliance(self, alliance: PoliticalAlliance) -> PoliticalAlliance:
        """Register an alliance; each member must be free of other alliances."""

        members = list(dict.fromkeys(alliance.member_party_ids))
        if len(members) < 2:
            raise ValueError("an alliance needs at least two member parties")
        for party_id in members:
            if party_id not in self.parties:
                raise KeyError(f"Unknown party '{party_id}'")
            existing = self.alliance_of(party_id)
            if existing is not None and existing.id != alliance.id:
                raise ValueError(f"Party '{party_id}' already belongs to '{existing.name}'")
        if alliance.leader_party_id not in members:
            raise ValueError("alliance leader must be a member")
        alliance.member_party_ids = members
        self.alliances[alliance.id] = alliance
        return alliance

    def join_alliance(self, alliance_id: str, party_id: str) -> None:
        alliance = self.alliances[alliance_id]
        existing = self.alliance_of(party_id)
        if existing is not None and existing.id != alliance_id:
            raise ValueError(f"Party '{party_id}' already belongs to '{existing.name}'")
        if party_id not in alliance.member_party_ids:
            alliance.member_party_ids.append(party_id)

    def leave_alliance(self, party_id: str) -> PoliticalAlliance | None:
        """Remove ``party_id`` from its alliance, dissolving it below two members."""

        alliance = self.alliance_of(party_id)
        if alliance is None:
            return None
        alliance.member_party_ids = [
            member for member in alliance.member_party_ids if member != party_id
        ]
        if len(alliance.member_party_ids) < 2:
            self.alliances.pop(alliance.id, None)
        elif alliance.leader_party_id == party_id:
            alliance.leader_party_id = alliance.member_party_ids[0]
        return alliance

    def remove_alliance(self, alliance_id: str) -> PoliticalAlliance | None:
        return self.alliances.pop(alliance_id, None)

    def transfer_seats(self, from_party_ids: Iterable[str], to_party_id: str) -> int:
        """Reassign every seat held by ``from_party_ids`` to ``to_party_id``."""

        sources = set(from_party_ids)
        moved = 0
        for seat, holder in self.election_results.items():
            if holder in sources:
                self.election_results[seat] = to_party_id
                moved += 1
        return moved


__all__ = ["WorldState"]
