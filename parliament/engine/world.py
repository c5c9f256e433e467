"""ECS world abstraction and the daily phase systems of the simulation."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Protocol,
    Type,
    TypeVar,
)

import esper

from ..elections.general import run_general_election
from ..elections.parliament import (
    conduct_bill_vote,
    conduct_confidence_vote,
    elect_speaker,
    form_government,
)
from ..events.event_queue import EventQueue
from ..events.political import GameEvent, apply_event_effects, check_for_event
from ..logging_setup import get_logger
from ..politics.ai import run_character_ai
from ..politics.alliances import check_big_tent
from ..politics.developments import run_political_developments
from ..politics.ideology import update_affiliation_ideologies, update_party_ideologies
from ..politics.legislation import VoteDirection, bill_by_id, generate_bill
from ..politics.lifecycle import (
    run_party_leadership_election,
    run_state_branch_elections,
    update_affiliation_leaders,
)
from ..politics.models import AllianceType, Ethnicity
from ..politics.player import (
    PlayerAction,
    order_crackdown,
    perform_action,
    player_secede,
    propose_alliance,
    propose_merger,
    require_player,
)
from ..politics.strategy import run_ai_strategies
from ..population.dynamics import apply_growth, run_mortality
from ..time.calendar import SimulationClock, add_years

if TYPE_CHECKING:  # pragma: no cover - imported only for typing
    from ..world.config import SimulationConfig
    from ..world.naming import NameGenerator
    from ..world.rng import SimulationRandomness
    from ..world.state import WorldState
    from .turn_engine import TurnContext

PhaseName = str

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(slots=True)
class WorldStateComponent:
    """Singleton component exposing the political world."""

    state: WorldState


@dataclass(slots=True)
class CalendarComponent:
    """Singleton component holding the clock and the fixture queue."""

    clock: SimulationClock
    queue: EventQueue

    def next_fixture(self, event_type: str) -> date | None:
        event = self.queue.next_event(event_type)
        if event is None:
            return None
        return self.queue.date_for(event.day)


@dataclass(slots=True)
class ServicesComponent:
    """Configuration, random streams and name generation."""

    config: SimulationConfig
    randomness: SimulationRandomness
    names: NameGenerator


@dataclass(slots=True)
class PendingEventsComponent:
    """Random events waiting for the player to acknowledge them."""

    events: List[GameEvent] = field(default_factory=list)

    def take(self, event_id: str) -> GameEvent:
        for index, event in enumerate(self.events):
            if event.id == event_id:
                return self.events.pop(index)
        raise KeyError(f"Unknown pending event '{event_id}'")


class SystemCallback(Protocol):
    """Callable protocol describing a world system."""

    def __call__(self, world: "GameWorld", context: "TurnContext") -> None:  # noqa: D401
        ...


@dataclass(slots=True)
class _SystemEntry:
    priority: int
    order: int
    callback: SystemCallback


class GameWorld:
    """Wrapper around :class:`esper.World` providing ordered system execution."""

    def __init__(self) -> None:
        self._world = esper.World()
        self._singletons: Dict[Type[Any], int] = {}
        self._systems: Dict[PhaseName, List[_SystemEntry]] = {}
        self._system_counter = 0

    # ------------------------------------------------------------------
    def create_entity(self, *components: object) -> int:
        """Create an entity with the provided components."""

        return self._world.create_entity(*components)

    def add_component(self, entity: int, component: object) -> None:
        """Attach ``component`` to ``entity`` inside the world."""

        self._world.add_component(entity, component)

    def add_singleton(self, component: object) -> int:
        """Register ``component`` as the singleton instance for its type."""

        component_type = type(component)
        entity = self._singletons.get(component_type)
        if entity is None:
            entity = self._world.create_entity(component)
            self._singletons[component_type] = entity
        else:
            if self._world.has_component(entity, component_type):
                self._world.remove_component(entity, component_type)
            self._world.add_component(entity, component)
        return entity

    def get_singleton(self, component_type: Type[T]) -> T | None:
        """Retrieve the singleton component for ``component_type`` if registered."""

        entity = self._singletons.get(component_type)
        if entity is None:
            return None
        try:
            return self._world.component_for_entity(entity, component_type)
        except KeyError:
            self._singletons.pop(component_type, None)
            return None

    def require_singleton(self, component_type: Type[T]) -> T:
        component = self.get_singleton(component_type)
        if component is None:
            raise KeyError(f"no {component_type.__name__} registered")
        return component

    def has_system_type(self, system_type: Type[object]) -> bool:
        """Return ``True`` if any registered system is an instance of ``system_type``."""

        for entries in self._systems.values():
            for entry in entries:
                if isinstance(getattr(entry.callback, "__self__", entry.callback), system_type):
                    return True
        return False

    # ------------------------------------------------------------------
    def register_system(
        self,
        phase: PhaseName,
        system: SystemCallback | object,
        *,
        priority: int = 100,
    ) -> None:
        """Register ``system`` to execute during ``phase`` with ``priority`` ordering."""

        if hasattr(system, "process") and callable(getattr(system, "process")):
            callback = getattr(system, "process")
        elif callable(system):
            callback = system
        else:
            raise TypeError("system must be callable or expose a process() method")

        self._system_counter += 1
        entry = _SystemEntry(priority=priority, order=self._system_counter, callback=callback)
        phase_systems = self._systems.setdefault(phase, [])
        phase_systems.append(entry)
        phase_systems.sort(key=lambda item: (item.priority, item.order))

    def process_phase(self, phase: PhaseName, context: "TurnContext") -> None:
        """Execute all systems registered for ``phase`` in priority order."""

        for entry in self._systems.get(phase, []):
            entry.callback(self, context)

    def systems_for(self, phase: PhaseName) -> list[SystemCallback]:
        return [entry.callback for entry in self._systems.get(phase, [])]

    # ------------------------------------------------------------------
    @property
    def raw(self) -> esper.World:
        """Expose the underlying :class:`esper.World` instance."""

        return self._world


@contextmanager
def paused(clock: SimulationClock) -> Iterator[None]:
    """Hold the clock while a multi-step political sequence runs."""

    clock.pause()
    try:
        yield
    finally:
        clock.resume()


def _fired(context: "TurnContext", event_type: str) -> bool:
    return any(event.event_type == event_type for event in context.events)


def _apply_or_queue(world: GameWorld, context: "TurnContext", event: GameEvent) -> None:
    services = world.require_singleton(ServicesComponent)
    if services.config.events.observe_mode:
        apply_event_effects(context.state, event)
        context.log(f"Event: {event.title}")
        return
    pending = world.require_singleton(PendingEventsComponent)
    pending.events.append(event)
    context.notify(event.title, category="event", payload={"event_id": event.id})


# ----------------------------------------------------------------------
# command
class PlayerCommandSystem:
    """Carry out the player's order for the day, if any."""

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        action = context.command.get("action")
        if action is None:
            return
        state = context.state
        services = world.require_singleton(ServicesComponent)
        rng = services.randomness.generator("player")
        command = context.command

        if action in {member.value for member in PlayerAction}:
            outcome: Any = perform_action(state, action, target_id=command.get("target"))
        elif action in ("merge", "absorb"):
            outcome = propose_merger(
                state,
                rng,
                party_ids=command.get("parties", ()),
                affiliation_ids=command.get("affiliations", ()),
                name=command.get("name"),
                mode=action,
            )
        elif action == "secede":
            focus = command.get("focus")
            outcome = player_secede(
                state,
                rng,
                command.get("mode", "new"),
                target_party_id=command.get("target"),
                new_party_name=command.get("name"),
                focus=Ethnicity(focus) if focus else None,
            )
        elif action in ("alliance", "pact"):
            alliance_type = AllianceType.PACT if action == "pact" else AllianceType.ALLIANCE
            outcome = propose_alliance(
                state,
                rng,
                command.get("parties", ()),
                command.get("name") or services.names.alliance(),
                alliance_type,
            )
        elif action == "crackdown":
            outcome = order_crackdown(state)
            _apply_or_queue(world, context, outcome)
        elif action == "acknowledge":
            outcome = world.require_singleton(PendingEventsComponent).take(command["event_id"])
            apply_event_effects(state, outcome)
        elif action == "propose_bill":
            player = require_player(state)
            party = state.party_of(player)
            if party is None:
                raise ValueError("the player does not belong to a party")
            bill = bill_by_id(command["bill_id"]).proposed_by(party.id)
            outcome = conduct_bill_vote(
                state,
                bill,
                rng,
                player_vote=VoteDirection(command.get("bill_vote", VoteDirection.AYE.value)),
            )
        else:
            raise ValueError(f"Unknown player action '{action}'")

        context.outcomes["command"] = outcome
        context.log(f"Player action: {action}")
        logger.info("player_command", action=action, date=context.date.isoformat())


# ----------------------------------------------------------------------
# calendar
class ElectionClampSystem:
    """Keep the player from racing past a general election."""

    def __init__(self, threshold_days: int = 20) -> None:
        self.threshold_days = threshold_days

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        calendar = world.require_singleton(CalendarComponent)
        upcoming = calendar.next_fixture("general_election")
        if calendar.clock.clamp_for_election(upcoming, self.threshold_days):
            context.notify(
                "A general election is near; the clock has been slowed.",
                category="election",
                payload={"election": upcoming.isoformat() if upcoming else None},
            )


# ----------------------------------------------------------------------
# population
class GrowthSystem:
    """Monthly electorate growth on the first of the month."""

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if context.date.day != 1:
            return
        settings = world.require_singleton(ServicesComponent).config.population
        added = apply_growth(
            context.state,
            urban_rate=settings.urban_growth_rate,
            rural_rate=settings.rural_growth_rate,
        )
        context.outcomes["growth"] = added


class MortalitySystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        services = world.require_singleton(ServicesComponent)
        deaths = run_mortality(
            context.state,
            services.randomness.generator("mortality"),
            services.names,
            sample_rate=services.config.population.mortality_sample_rate,
        )
        if deaths:
            context.outcomes["deaths"] = deaths
            for deceased, successor in deaths:
                context.log(f"{deceased.name} died; {successor.name} emerges")


# ----------------------------------------------------------------------
# elections
class GeneralElectionSystem:
    """Polling day, then government formation and the opening votes of parliament.

    The opening confidence vote and government bill only run in observe mode;
    a human player drives legislation through commands.
    """

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if not _fired(context, "general_election"):
            return
        state = context.state
        services = world.require_singleton(ServicesComponent)
        calendar = world.require_singleton(CalendarComponent)
        rng = services.randomness.generator("elections")

        with paused(calendar.clock):
            entry = run_general_election(state, rng, services.config.electoral)
            government = form_government(state, context.command.get("coalition"), rng)
            speaker = elect_speaker(state, player_vote=context.command.get("speaker_vote"))
            context.outcomes["general_election"] = entry
            context.outcomes["government"] = government
            context.outcomes["speaker"] = speaker
            if services.config.events.observe_mode:
                context.outcomes["confidence"] = conduct_confidence_vote(state)
                context.outcomes["bill"] = conduct_bill_vote(state, generate_bill(rng, state), rng)

        settings = services.config.calendar
        context.schedule_on(
            context.date + timedelta(days=settings.general_election_interval_days),
            "general_election",
        )
        context.schedule_event_in(settings.strategy_delay_days, "strategy_pass")
        context.log(f"General election: {len(entry.results)} seats declared")
        context.notify(
            "General election results are in.",
            category="election",
            payload={"seats": entry.total_seats, "system": entry.system.value},
        )


class PartyElectionSystem:
    """Triennial leadership contests in every party."""

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if not _fired(context, "party_election"):
            return
        state = context.state
        services = world.require_singleton(ServicesComponent)
        calendar = world.require_singleton(CalendarComponent)
        rng = services.randomness.generator("party_elections")
        player = state.player()
        player_party = state.party_of(player) if player is not None else None

        with paused(calendar.clock):
            results = {}
            for party in list(state.parties.values()):
                vote = None
                if player_party is not None and party.id == player_party.id:
                    vote = context.command.get("leader_vote")
                results[party.id] = run_party_leadership_election(
                    state, party, rng, player_vote=vote
                )
        state.log(
            "Party Elections",
            f"Leadership contests were held in {len(results)} parties.",
            "election",
        )
        context.outcomes["party_elections"] = results

        settings = services.config.calendar
        upcoming = add_years(context.date, settings.party_election_interval_years)
        context.schedule_on(upcoming, "party_election")
        branch_day = date(upcoming.year, settings.state_election_month, settings.state_election_day)
        if branch_day > context.date:
            context.schedule_on(branch_day, "state_branch_election")
        context.log("Party leadership elections held")


class StateBranchElectionSystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if not _fired(context, "state_branch_election"):
            return
        run_state_branch_elections(context.state)
        context.state.log(
            "State Branch Elections",
            "Parties have chosen new state leaders and executive committees.",
            "election",
        )
        context.log("State branch elections held")


class StrategySystem:
    """Parties re-plan which seats to fight and whom to field."""

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if not _fired(context, "strategy_pass"):
            return
        reports = run_ai_strategies(context.state)
        context.outcomes["strategy"] = reports
        context.log(f"Party strategies revised for {len(reports)} parties")


# ----------------------------------------------------------------------
# politics
class MonthlyUpkeepSystem:
    """Affiliation leaders and faction ideologies refresh on the first of the month."""

    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if context.date.day != 1:
            return
        state = context.state
        update_affiliation_leaders(state)
        update_affiliation_ideologies(state)
        update_party_ideologies(state)


class PoliticalDevelopmentsSystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        if context.date.day != 15:
            return
        services = world.require_singleton(ServicesComponent)
        calendar = world.require_singleton(CalendarComponent)
        with paused(calendar.clock):
            report = run_political_developments(
                context.state, services.randomness.generator("developments"), services.names
            )
        context.outcomes["developments"] = report
        schism = context.state.parties.get(report.schism) if report.schism else None
        if schism is not None:
            context.log(f"Schism: {schism.name} breaks away")
        if report.new_alliances:
            context.log(f"{len(report.new_alliances)} new alliance(s) formed")


class BigTentSystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        names = world.require_singleton(ServicesComponent).names
        alliance = check_big_tent(context.state, names)
        if alliance is not None:
            context.outcomes["big_tent"] = alliance
            context.notify(
                f"The opposition has united as {alliance.name}.",
                category="politics",
                payload={"alliance_id": alliance.id},
            )


# ----------------------------------------------------------------------
# events
class RandomEventSystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        services = world.require_singleton(ServicesComponent)
        event = check_for_event(
            context.state,
            services.randomness.generator("events"),
            chance=services.config.events.event_chance,
        )
        if event is None:
            return
        context.outcomes["event"] = event
        _apply_or_queue(world, context, event)


# ----------------------------------------------------------------------
# characters
class CharacterAISystem:
    def process(self, world: GameWorld, context: "TurnContext") -> None:
        services = world.require_singleton(ServicesComponent)
        tally = run_character_ai(context.state, services.randomness.generator("ai"))
        context.outcomes["characters"] = tally


__all__ = [
    "BigTentSystem",
    "CalendarComponent",
    "CharacterAISystem",
    "ElectionClampSystem",
    "GameWorld",
    "GeneralElectionSystem",
    "GrowthSystem",
    "MonthlyUpkeepSystem",
    "MortalitySystem",
    "PartyElectionSystem",
    "PendingEventsComponent",
    "PlayerCommandSystem",
    "PoliticalDevelopmentsSystem",
    "RandomEventSystem",
    "ServicesComponent",
    "StateBranchElectionSystem",
    "StrategySystem",
    "WorldStateComponent",
    "paused",
]
