"""Turn engine coordinating the daily simulation phases."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, Literal

from ..events.event_queue import EventQueue, QueuedEvent
from ..logging_setup import get_logger
from ..time.calendar import SimulationClock, Speed
from ..ui.channels import NotificationChannel, NotificationRecord, TurnLogChannel
from ..world.naming import NameGenerator
from .world import (
    BigTentSystem,
    CalendarComponent,
    CharacterAISystem,
    ElectionClampSystem,
    GameWorld,
    GeneralElectionSystem,
    GrowthSystem,
    MonthlyUpkeepSystem,
    MortalitySystem,
    PartyElectionSystem,
    PendingEventsComponent,
    PlayerCommandSystem,
    PoliticalDevelopmentsSystem,
    RandomEventSystem,
    ServicesComponent,
    StateBranchElectionSystem,
    StrategySystem,
    WorldStateComponent,
)

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..events.political import GameEvent
    from ..population.dynamics import PlayerProfile
    from ..world.config import SimulationConfig
    from ..world.constituencies import Constituency
    from ..world.rng import SimulationRandomness
    from ..world.state import WorldState

logger = get_logger(__name__)

CommandPayload = dict[str, Any]
PhaseName = Literal[
    "command", "calendar", "population", "elections", "politics", "events", "characters"
]
PhaseHandler = Callable[["TurnContext"], None]


@dataclass
class TurnContext:
    """Shared state passed to each phase handler."""

    date: date
    day: int
    command: CommandPayload
    events: list[QueuedEvent]
    state: WorldState
    world: GameWorld
    _schedule_callback: Callable[[int, str, dict[str, Any] | None], Any]
    log_channel: TurnLogChannel | None = None
    notification_channel: NotificationChannel | None = None
    scheduled_events: list[QueuedEvent] = field(default_factory=list)
    summary_lines: list[str] = field(default_factory=list)
    notifications: list[NotificationRecord] = field(default_factory=list)
    outcomes: dict[str, Any] = field(default_factory=dict)

    def schedule_event_in(
        self,
        days_from_now: int,
        event_type: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Queue a new event relative to the current day."""

        if days_from_now < 0:
            raise ValueError("days_from_now must be non-negative")
        target_day = self.day + days_from_now
        payload = payload or {}
        self._schedule_callback(target_day, event_type, payload)
        self.scheduled_events.append(
            QueuedEvent(day=target_day, event_type=event_type, payload=payload)
        )

    def schedule_on(
        self, when: date, event_type: str, payload: dict[str, Any] | None = None
    ) -> None:
        self.schedule_event_in((when - self.date).days, event_type, payload)

    def log(self, message: str) -> None:
        self.summary_lines.append(str(message))

    def notify(
        self,
        message: str,
        *,
        category: str = "info",
        payload: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        record = NotificationRecord(
            day=self.date,
            message=str(message),
            category=category,
            payload=dict(payload or {}),
        )
        self.notifications.append(record)
        if self.notification_channel is not None:
            self.notification_channel.push(record)
        return record


class TurnEngine:
    """Coordinates the daily phases of the simulation.

    Each call to :meth:`run_day` advances the clock by one day and then runs
    every phase to completion against the shared :class:`WorldState`.
    """

    PHASE_ORDER: list[PhaseName] = [
        "command",
        "calendar",
        "population",
        "elections",
        "politics",
        "events",
        "characters",
    ]

    def __init__(
        self,
        state: WorldState,
        config: SimulationConfig,
        *,
        randomness: SimulationRandomness | None = None,
        clock: SimulationClock | None = None,
        event_queue: EventQueue | None = None,
        log_channel: TurnLogChannel | None = None,
        notification_channel: NotificationChannel | None = None,
        world: GameWorld | None = None,
    ) -> None:
        self.state = state
        self.config = config
        self.randomness = randomness or config.randomness_factory()
        self.clock = clock or SimulationClock(state.current_date)
        self.event_queue = event_queue or EventQueue(start_date=self.clock.start_date)
        self._log_channel = log_channel
        self._notification_channel = notification_channel
        self.world = world or GameWorld()
        self.world.add_singleton(WorldStateComponent(state))
        self.world.add_singleton(CalendarComponent(self.clock, self.event_queue))
        self.world.add_singleton(
            ServicesComponent(
                config, self.randomness, NameGenerator(self.randomness.generator("names"))
            )
        )
        if self.world.get_singleton(PendingEventsComponent) is None:
            self.world.add_singleton(PendingEventsComponent())
        self._phase_handlers: dict[PhaseName, list[PhaseHandler]] = {
            phase: [] for phase in self.PHASE_ORDER
        }
        self._register_default_systems()
        if not self.event_queue.has_events():
            self.schedule_fixtures()

    def register_handler(self, phase: PhaseName, handler: PhaseHandler) -> None:
        """Register a callback for a specific phase."""

        if phase not in self._phase_handlers:
            raise ValueError(f"Unknown phase '{phase}'")
        self._phase_handlers[phase].append(handler)

    def schedule_fixtures(self) -> None:
        """Queue the first general election, party elections and strategy pass."""

        settings = self.config.calendar
        today = self.clock.current_date
        queue = self.event_queue
        queue.schedule_on(max(settings.first_general_election, today), "general_election")
        queue.schedule_on(max(settings.first_party_election, today), "party_election")
        branch_day = date(
            settings.first_party_election.year,
            settings.state_election_month,
            settings.state_election_day,
        )
        if branch_day > today:
            queue.schedule_on(branch_day, "state_branch_election")
        queue.schedule_on(today + timedelta(days=settings.strategy_delay_days), "strategy_pass")

    # ------------------------------------------------------------------
    @property
    def pending_events(self) -> list[GameEvent]:
        return list(self.world.require_singleton(PendingEventsComponent).events)

    def has_pending_events(self) -> bool:
        return self.event_queue.has_events()

    @property
    def next_general_election(self) -> date | None:
        return self.world.require_singleton(CalendarComponent).next_fixture("general_election")

    def set_speed(self, speed: Speed) -> None:
        self.clock.set_speed(speed)

    # ------------------------------------------------------------------
    def run_day(self, command: Mapping[str, Any] | None = None) -> TurnContext:
        """Advance one day and run all phases for it."""

        current = self.clock.advance_day()
        self.state.current_date = current
        current_day = self.clock.day_index
        events_today = list(self.event_queue.pop_events_for_day(current_day))

        context = TurnContext(
            date=current,
            day=current_day,
            command=dict(command or {}),
            events=events_today,
            state=self.state,
            world=self.world,
            _schedule_callback=self.event_queue.schedule,
            log_channel=self._log_channel,
            notification_channel=self._notification_channel,
        )

        for phase in self.PHASE_ORDER:
            for handler in self._phase_handlers[phase]:
                handler(context)
            self.world.process_phase(phase, context)

        self._record_turn(context)
        return context

    def run(
        self,
        days: int,
        *,
        commands: Mapping[date, Mapping[str, Any]] | None = None,
    ) -> list[TurnContext]:
        """Run ``days`` consecutive days, feeding any command keyed by its date."""

        if days < 0:
            raise ValueError("days must be non-negative")
        commands = commands or {}
        contexts = []
        for _ in range(days):
            upcoming = self.clock.current_date + timedelta(days=1)
            contexts.append(self.run_day(commands.get(upcoming)))
        return contexts

    # ------------------------------------------------------------------
    def _record_turn(self, context: TurnContext) -> None:
        summary = self._build_summary(context)
        if self._log_channel is not None:
            self._log_channel.record_context(context, summary=summary)
        if self._notification_channel is not None:
            fixtures = [event for event in context.events if event.event_type != "strategy_pass"]
            self._notification_channel.extend_from_events(context.date, fixtures)

    def _build_summary(self, context: TurnContext) -> str:
        parts: list[str] = []
        if context.summary_lines:
            parts.extend(context.summary_lines)
        if context.events:
            parts.append("Fixtures: " + ", ".join(event.event_type for event in context.events))
        if context.scheduled_events:
            parts.append(f"Scheduled {len(context.scheduled_events)} future event(s)")
        return " | ".join(parts)

    def _register_default_systems(self) -> None:
        defaults: list[tuple[PhaseName, type, int]] = [
            ("command", PlayerCommandSystem, 100),
            ("calendar", ElectionClampSystem, 100),
            ("population", GrowthSystem, 50),
            ("population", MortalitySystem, 100),
            ("elections", GeneralElectionSystem, 10),
            ("elections", PartyElectionSystem, 50),
            ("elections", StateBranchElectionSystem, 60),
            ("elections", StrategySystem, 100),
            ("politics", MonthlyUpkeepSystem, 10),
            ("politics", PoliticalDevelopmentsSystem, 50),
            ("politics", BigTentSystem, 100),
            ("events", RandomEventSystem, 100),
            ("characters", CharacterAISystem, 100),
        ]
        for phase, system_type, priority in defaults:
            if self.world.has_system_type(system_type):
                continue
            if system_type is ElectionClampSystem:
                system = ElectionClampSystem(self.config.calendar.election_clamp_days)
            else:
                system = system_type()
            self.world.register_system(phase, system, priority=priority)


def run_simulation(
    config: SimulationConfig,
    days: int,
    *,
    constituencies: Mapping[str, Constituency] | None = None,
    player: PlayerProfile | None = None,
    seats: int = 52,
    log_channel: TurnLogChannel | None = None,
    notification_channel: NotificationChannel | None = None,
) -> TurnEngine:
    """Build a world from ``config`` and run it for ``days`` days.

    Without ``constituencies`` a synthetic map of ``seats`` seats is generated
    from the configured seed.
    """

    from ..population.dynamics import build_initial_state
    from ..world.constituencies import synthetic_constituencies

    randomness = config.randomness_factory()
    if constituencies is None:
        constituencies = synthetic_constituencies(randomness.generator("map"), seats)
    state = build_initial_state(config, constituencies, randomness, player=player)
    engine = TurnEngine(
        state,
        config,
        randomness=randomness,
        log_channel=log_channel,
        notification_channel=notification_channel,
    )
    engine.run(days)
    logger.info(
        "simulation_complete",
        days=days,
        date=state.current_date.isoformat(),
        elections=len(state.election_history),
    )
    return engine


__all__ = ["CommandPayload", "PhaseName", "TurnContext", "TurnEngine", "run_simulation"]
