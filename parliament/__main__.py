"""Command line entry point for running the simulation headless."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .logging_setup import get_logger, setup_logging

app = typer.Typer(help="Simulate decades of parliamentary politics.", no_args_is_help=True)
logger = get_logger(__name__)


@app.command()
def run(
    days: int = typer.Option(365 * 5, min=0, help="Number of days to simulate."),
    seed: int = typer.Option(0, min=0, help="Seed for every random stream."),
    csv: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Constituency CSV."),
    seats: int = typer.Option(52, min=1, help="Synthetic seat count when no CSV is given."),
    system: str = typer.Option("FPTP", help="Electoral system: FPTP or PR."),
    log_limit: int = typer.Option(40, min=1, help="Political log lines to print."),
) -> None:
    """Run the simulation in observe mode and print the outcome."""

    from .engine.turn_engine import run_simulation
    from .ui.channels import NotificationChannel, TurnLogChannel
    from .ui.reports import election_summary, government_panel, party_roster, seat_table
    from .world.config import ElectoralSettings, ElectoralSystem, RandomnessSettings, SimulationConfig
    from .world.constituencies import load_constituencies_csv

    config = SimulationConfig(
        randomness=RandomnessSettings(seed=seed),
        electoral=ElectoralSettings(system=ElectoralSystem(system.upper())),
    )
    constituencies = load_constituencies_csv(csv) if csv is not None else None
    logger.info("simulation_started", days=days, seed=seed, system=config.electoral.system.value)
    engine = run_simulation(
        config,
        days,
        constituencies=constituencies,
        seats=seats,
        log_channel=TurnLogChannel(),
        notification_channel=NotificationChannel(),
    )

    state = engine.state
    console = Console()
    console.print(state.political_log.render_table(limit=log_limit))
    history = state.election_history
    if history:
        previous = history[-2] if len(history) > 1 else None
        console.print(election_summary(state, history[-1], previous=previous))
    console.print(seat_table(state))
    console.print(party_roster(state))
    console.print(government_panel(state))


@app.command()
def bills() -> None:
    """List the bill catalog."""

    from .politics.legislation import BILLS
    from .ui.reports import bill_catalog_table

    Console().print(bill_catalog_table(BILLS))


def main() -> None:
    setup_logging()
    app()


if __name__ == "__main__":  # pragma: no cover - module entry point
    main()
