"""Plain records for the political entities of the simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

SPEAKER_SEAT = "SPEAKER"
DEFAULT_RELATION = 50.0


class Ethnicity(str, Enum):
    """Ethnic communities represented by affiliations and characters."""

    MALAY = "Malay"
    CHINESE = "Chinese"
    INDIAN = "Indian"
    OTHERS = "Others"
    NORTH_BORNEAN_NATIVE = "North-Bornean-native"
    SARAWAK_NATIVE = "Sarawak-native"


class AreaPreference(str, Enum):
    """Whether an affiliation draws support from towns, the countryside or both."""

    URBAN = "Urban"
    RURAL = "Rural"
    BOTH = "Both"


class AllianceType(str, Enum):
    """``ALLIANCE`` shares one seat strategy; ``PACT`` is seat-sharing only."""

    ALLIANCE = "Alliance"
    PACT = "Pact"


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, float(value)))


@dataclass(slots=True)
class Ideology:
    """Two-axis political position, both axes clamped to ``[0, 100]``.

    Low ``economic`` means a planned economy; high ``governance`` means
    centralised authority.
    """

    economic: float = 50.0
    governance: float = 50.0

    def __post_init__(self) -> None:
        self.economic = clamp(self.economic)
        self.governance = clamp(self.governance)

    def shifted(self, economic: float = 0.0, governance: float = 0.0) -> Ideology:
        """Return a new ideology moved by the given deltas."""

        return Ideology(self.economic + economic, self.governance + governance)

    def copy(self) -> Ideology:
        return Ideology(self.economic, self.governance)


@dataclass(slots=True)
class HistoryEntry:
    date: date
    text: str


@dataclass(slots=True)
class Affiliation:
    """Interest-group faction; identity is static, ideology follows its members."""

    id: str
    name: str
    ethnicity: Ethnicity
    area: AreaPreference
    base_ideology: Ideology
    ideology: Ideology = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.ideology is None:
            self.ideology = self.base_ideology.copy()


@dataclass(slots=True)
class Character:
    """A politician. Dead characters are retained for history."""

    id: str
    name: str
    seat: str
    affiliation_id: str
    ethnicity: Ethnicity
    state: str
    date_of_birth: date
    charisma: float
    influence: float
    recognition: float
    ideology: Ideology
    is_player: bool = False
    is_alive: bool = True
    is_affiliation_leader: bool = False
    is_mp: bool = False
    history: list[HistoryEntry] = field(default_factory=list)

    def add_history(self, when: date, text: str) -> None:
        self.history.append(HistoryEntry(when, text))

    def age_on(self, when: date) -> int:
        """Whole years lived, using a 365.25 day year."""

        return int((when - self.date_of_birth).days // 365.25)

    def boost(self, *, influence: float = 0.0, recognition: float = 0.0) -> None:
        """Adjust influence and recognition, keeping both within ``[0, 100]``."""

        self.influence = clamp(self.influence + influence)
        self.recognition = clamp(self.recognition + recognition)


@dataclass(slots=True)
class StateBranch:
    leader_id: str | None = None
    executive_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Contest:
    """A party's plan for one seat: which affiliation runs and who stands."""

    allocated_affiliation_id: str
    candidate_id: str | None = None


@dataclass(slots=True)
class LeaderTerm:
    leader_id: str
    leader_name: str
    start: date
    end: date | None = None


@dataclass(slots=True)
class Party:
    """A party is a set of affiliations plus its leadership and seat strategy."""

    id: str
    name: str
    color: str
    affiliation_ids: list[str]
    leader_id: str | None = None
    deputy_leader_id: str | None = None
    state_branches: dict[str, StateBranch] = field(default_factory=dict)
    contested_seats: dict[str, Contest] = field(default_factory=dict)
    leader_history: list[LeaderTerm] = field(default_factory=list)
    ethnicity_focus: Ethnicity | None = None
    relations: dict[str, float] = field(default_factory=dict)
    unity: float = 100.0
    ideology: Ideology = field(default_factory=Ideology)

    def relation_to(self, other_id: str, default: float = DEFAULT_RELATION) -> float:
        return self.relations.get(other_id, default)

    def open_term(self) -> LeaderTerm | None:
        if self.leader_history and self.leader_history[-1].end is None:
            return self.leader_history[-1]
        return None

    def accepts(self, ethnicity: Ethnicity | None) -> bool:
        """Single-ethnicity parties only take members of the same community."""

        return self.ethnicity_focus is None or self.ethnicity_focus == ethnicity


@dataclass(slots=True)
class PoliticalAlliance:
    id: str
    name: str
    member_party_ids: list[str]
    type: AllianceType
    leader_party_id: str


@dataclass(slots=True)
class Stronghold:
    affiliation_id: str
    terms: int = 1


@dataclass(slots=True)
class Minister:
    minister_id: str
    portfolio: str


@dataclass(slots=True)
class Government:
    chief_minister_id: str
    ruling_coalition_ids: list[str]
    cabinet: list[Minister]
    formed: date


__all__ = [
    "DEFAULT_RELATION",
    "SPEAKER_SEAT",
    "Affiliation",
    "AllianceType",
    "AreaPreference",
    "Character",
    "Contest",
    "Ethnicity",
    "Government",
    "HistoryEntry",
    "Ideology",
    "LeaderTerm",
    "Minister",
    "Party",
    "PoliticalAlliance",
    "StateBranch",
    "Stronghold",
    "clamp",
]
