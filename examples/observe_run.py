"""Run ten simulated years over the bundled 1955 seat map and print the results."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from parliament.engine.turn_engine import run_simulation
from parliament.logging_setup import setup_logging
from parliament.ui.reports import election_summary, government_panel, seat_table
from parliament.world.config import RandomnessSettings, SimulationConfig
from parliament.world.constituencies import load_constituencies_csv

DATA = Path(__file__).with_name("constituencies_1955.csv")


def main() -> None:
    setup_logging("INFO")
    config = SimulationConfig(randomness=RandomnessSettings(seed=1955))
    engine = run_simulation(config, 365 * 10, constituencies=load_constituencies_csv(DATA))
    state = engine.state

    console = Console()
    history = state.election_history
    for previous, current in zip([None, *history], history):
        console.print(election_summary(state, current, previous=previous))
    console.print(seat_table(state))
    console.print(government_panel(state))


if __name__ == "__main__":
    main()
