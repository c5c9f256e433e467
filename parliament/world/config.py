"""Validated configuration models for simulation runs."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rng import SimulationRandomness


class ElectoralSystem(str, Enum):
    """Method used to convert votes into seats."""

    FPTP = "FPTP"
    PR = "PR"


class RandomnessSettings(BaseModel):
    """Configuration for deterministic RNG streams."""

    model_config = ConfigDict(extra="forbid")

    seed: int = Field(default=0, ge=0)
    salt: str | None = Field(default=None)

    def factory(self) -> SimulationRandomness:
        """Instantiate a :class:`~parliament.world.rng.SimulationRandomness` helper."""

        from .rng import SimulationRandomness

        return SimulationRandomness(seed=self.seed, salt=self.salt)


class CalendarSettings(BaseModel):
    """Key dates and cadences of the political calendar."""

    model_config = ConfigDict(extra="forbid")

    start_date: date = Field(default=date(1951, 1, 1))
    first_general_election: date = Field(default=date(1955, 7, 27))
    general_election_interval_days: int = Field(default=4 * 365, ge=1)
    first_party_election: date = Field(default=date(1953, 6, 15))
    party_election_interval_years: int = Field(default=3, ge=1)
    state_election_month: int = Field(default=5, ge=1, le=12)
    state_election_day: int = Field(default=1, ge=1, le=28)
    strategy_delay_days: int = Field(default=21, ge=0)
    election_clamp_days: int = Field(default=20, ge=0)

    @model_validator(mode="after")
    def _check_ordering(self) -> CalendarSettings:
        if self.first_general_election < self.start_date:
            raise ValueError("first_general_election must not precede start_date")
        if self.first_party_election < self.start_date:
            raise ValueError("first_party_election must not precede start_date")
        return self


class ElectoralSettings(BaseModel):
    """Parameters of the per-seat vote simulation."""

    model_config = ConfigDict(extra="forbid")

    system: ElectoralSystem = Field(default=ElectoralSystem.FPTP)
    turnout_min: float = Field(default=0.65, gt=0.0, le=1.0)
    turnout_max: float = Field(default=0.85, gt=0.0, le=1.0)
    variance: float = Field(default=0.15, ge=0.0, lt=1.0)
    default_electorate: int = Field(default=10000, ge=0)

    @model_validator(mode="after")
    def _check_turnout(self) -> ElectoralSettings:
        if self.turnout_min > self.turnout_max:
            raise ValueError("turnout_min must not exceed turnout_max")
        return self


class PopulationSettings(BaseModel):
    """Mortality sampling, NPC seeding and demographic growth."""

    model_config = ConfigDict(extra="forbid")

    npcs_per_seat: int = Field(default=40, ge=1)
    mortality_sample_rate: float = Field(default=0.25, ge=0.0, le=1.0)
    urban_growth_rate: float = Field(default=0.004, ge=0.0)
    rural_growth_rate: float = Field(default=0.002, ge=0.0)


class EventSettings(BaseModel):
    """Random political event cadence."""

    model_config = ConfigDict(extra="forbid")

    event_chance: float = Field(default=0.05, ge=0.0, le=1.0)
    observe_mode: bool = Field(default=True)


class SimulationConfig(BaseModel):
    """Top-level configuration payload describing a simulation run."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="Federation of Malaya")
    description: str | None = Field(default=None)
    randomness: RandomnessSettings = Field(default_factory=RandomnessSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    electoral: ElectoralSettings = Field(default_factory=ElectoralSettings)
    population: PopulationSettings = Field(default_factory=PopulationSettings)
    events: EventSettings = Field(default_factory=EventSettings)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _ensure_metadata_mapping(cls, value: object) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError("metadata must be a mapping")
        return {str(key): item for key, item in value.items()}

    @property
    def seed(self) -> int:
        """Expose the configured simulation seed."""

        return self.randomness.seed

    def randomness_factory(self) -> SimulationRandomness:
        """Return a new :class:`~parliament.world.rng.SimulationRandomness` instance."""

        return self.randomness.factory()


__all__ = [
    "CalendarSettings",
    "ElectoralSettings",
    "ElectoralSystem",
    "EventSettings",
    "PopulationSettings",
    "RandomnessSettings",
    "SimulationConfig",
]
