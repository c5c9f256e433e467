from __future__ import annotations

from datetime import date, timedelta

import pytest

from parliament.engine.turn_engine import TurnEngine, run_simulation
from parliament.engine.world import PendingEventsComponent
from parliament.population.dynamics import PlayerProfile, build_initial_state
from parliament.ui.channels import NotificationChannel, TurnLogChannel
from parliament.world.config import (
    CalendarSettings,
    EventSettings,
    PopulationSettings,
    RandomnessSettings,
    SimulationConfig,
)
from parliament.world.constituencies import synthetic_constituencies


def _config(**events) -> SimulationConfig:
    return SimulationConfig(
        randomness=RandomnessSettings(seed=3),
        calendar=CalendarSettings(
            first_general_election=date(1951, 3, 1),
            first_party_election=date(1951, 2, 1),
        ),
        population=PopulationSettings(npcs_per_seat=6),
        events=EventSettings(**({"event_chance": 0.0} | events)),
    )


def _engine(config: SimulationConfig, **channels) -> TurnEngine:
    randomness = config.randomness_factory()
    seats = synthetic_constituencies(randomness.generator("map"), 10)
    state = build_initial_state(config, seats, randomness)
    return TurnEngine(state, config, randomness=randomness, **channels)


def test_fixtures_are_scheduled_on_construction():
    engine = _engine(_config())

    assert engine.next_general_election == date(1951, 3, 1)
    assert engine.has_pending_events()


def test_first_general_election_forms_a_parliament():
    log = TurnLogChannel()
    notifications = NotificationChannel()
    engine = _engine(_config(), log_channel=log, notification_channel=notifications)

    contexts = engine.run(59)

    state = engine.state
    assert len(contexts) == 59
    assert state.current_date == date(1951, 3, 1)
    assert len(state.election_history) == 1
    assert state.government is not None
    assert state.speaker() is not None
    assert engine.next_general_election == date(1951, 3, 1) + timedelta(days=4 * 365)
    titles = state.political_log.titles()
    assert "Party Elections" in titles
    assert titles.index("Party Elections") < titles.index("General Election")
    assert "confidence" in contexts[-1].outcomes
    assert len(log.entries) == 59
    assert any(record.message == "General election results are in." for record in notifications.notifications)


def test_events_wait_for_the_player_outside_observe_mode():
    engine = _engine(_config(event_chance=1.0, observe_mode=False))

    engine.run(14)

    pending = engine.pending_events
    assert len(pending) == 1
    assert pending[0].date == date(1951, 1, 15)
    assert not pending[0].applied

    engine.run_day({"action": "acknowledge", "event_id": pending[0].id})
    assert engine.pending_events == []
    assert pending[0].applied
    with pytest.raises(KeyError):
        engine.world.require_singleton(PendingEventsComponent).take(pending[0].id)


def test_player_commands_run_before_the_ai():
    config = _config()
    engine = run_simulation(
        config, 0, seats=8, player=PlayerProfile("Tan Ah Kow", "chinese-edu", "P001")
    )
    player = engine.state.player()

    context = engine.run_day({"action": "address_locals"})

    assert (player.influence, player.recognition) == (38.0, 24.0)
    assert context.summary_lines[0] == "Player action: address_locals"
    with pytest.raises(ValueError):
        engine.run_day({"action": "filibuster"})


def test_registered_handlers_run_in_phase_order():
    engine = _engine(_config())
    seen: list[str] = []
    engine.register_handler("events", lambda context: seen.append("events"))
    engine.register_handler("command", lambda context: seen.append("command"))

    engine.run_day()

    assert seen == ["command", "events"]
    with pytest.raises(ValueError):
        engine.register_handler("lunch", lambda context: None)
    with pytest.raises(ValueError):
        engine.run(-1)


def test_simulation_is_reproducible():
    first = run_simulation(_config(), 20, seats=8)
    second = run_simulation(_config(), 20, seats=8)

    def snapshot(engine):
        return {key: (c.influence, c.seat, c.is_alive) for key, c in engine.state.characters.items()}

    assert snapshot(first) == snapshot(second)
