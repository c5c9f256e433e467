"""Rich renderables summarising parliament, parties and elections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from rich import box
from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table

from ..elections.general import national_summary, swing
from ..politics.ideology import ideology_name

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..elections.general import ElectionHistoryEntry
    from ..politics.legislation import Bill
    from ..world.state import WorldState


def _name(state: WorldState, character_id: str | None) -> str:
    if character_id is None:
        return "-"
    character = state.characters.get(character_id)
    return character.name if character is not None else "-"


def _party_label(state: WorldState, party_id: str) -> str:
    party = state.parties.get(party_id)
    if party is None:
        return party_id
    return f"[{party.color}]{party.name}[/]"


def _stats_panel(stats: dict[str, str], *, title: str, border_style: str) -> RenderableType:
    table = Table.grid(padding=(0, 1), expand=True)
    for key, value in stats.items():
        table.add_row(f"[bold]{key}[/bold]", str(value))
    return Panel(table, title=title, border_style=border_style)


def seat_table(state: WorldState, *, title: str = "Seats") -> RenderableType:
    """Seats held by each party, largest first, with its alliance."""

    counts = state.seat_counts()
    table = Table(expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("Party", no_wrap=True)
    table.add_column("Alliance", no_wrap=True)
    table.add_column("Seats", justify="right")
    table.add_column("Share", justify="right")

    total = state.total_seats or 1
    for party_id, seats in sorted(counts.items(), key=lambda item: -item[1]):
        if seats == 0:
            continue
        alliance = state.alliance_of(party_id)
        table.add_row(
            _party_label(state, party_id),
            alliance.name if alliance is not None else "-",
            str(seats),
            f"{seats / total:.0%}",
        )
    table.add_row("[bold]Majority[/bold]", "", str(state.majority), "")
    return Panel(table, title=title, border_style="green")


def party_roster(state: WorldState, *, title: str = "Parties") -> RenderableType:
    table = Table(expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("Party", no_wrap=True)
    table.add_column("Leader", no_wrap=True)
    table.add_column("Deputy", no_wrap=True)
    table.add_column("Affiliations", justify="right")
    table.add_column("Members", justify="right")
    table.add_column("Unity", justify="right")
    table.add_column("Ideology", no_wrap=True)

    for party in state.parties.values():
        table.add_row(
            _party_label(state, party.id),
            _name(state, party.leader_id),
            _name(state, party.deputy_leader_id),
            str(len(party.affiliation_ids)),
            str(len(state.members_of_party(party.id))),
            f"{party.unity:.0f}",
            ideology_name(party.ideology),
        )
    return Panel(table, title=title, border_style="cyan")


def government_panel(state: WorldState, *, title: str = "Government") -> RenderableType:
    government = state.government
    if government is None:
        return Panel("No government has been formed.", title=title, border_style="red")
    coalition = ", ".join(
        state.parties[party_id].name
        for party_id in government.ruling_coalition_ids
        if party_id in state.parties
    )
    speaker = state.speaker()
    stats = {
        "Chief Minister": _name(state, government.chief_minister_id),
        "Coalition": coalition or "-",
        "Formed": government.formed.isoformat(),
        "Speaker": speaker.name if speaker is not None else "-",
    }
    for minister in government.cabinet:
        stats[minister.portfolio] = _name(state, minister.minister_id)
    return _stats_panel(stats, title=title, border_style="yellow")


def election_summary(
    state: WorldState,
    entry: ElectionHistoryEntry,
    *,
    previous: ElectionHistoryEntry | None = None,
) -> RenderableType:
    """National votes and seats for one election, with swing when ``previous`` is given."""

    frame = national_summary(entry) if previous is None else swing(previous, entry)
    table = Table(expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("Party", no_wrap=True)
    table.add_column("Seats", justify="right")
    table.add_column("Vote share", justify="right")
    if previous is not None:
        table.add_column("Seat swing", justify="right")

    seats_column = "seats" if previous is None else "seats_after"
    share_column = "share" if previous is None else "share_after"
    for row in frame.sort(seats_column, descending=True).iter_rows(named=True):
        cells = [
            _party_label(state, row["party"]),
            str(row[seats_column]),
            f"{row[share_column]:.1%}",
        ]
        if previous is not None:
            cells.append(f"{row['seat_swing']:+d}")
        table.add_row(*cells)
    return Panel(
        table,
        title=f"{entry.system.value} election of {entry.date.isoformat()}",
        border_style="green",
    )


def bill_catalog_table(bills: Sequence[Bill], *, title: str = "Bills") -> RenderableType:
    table = Table(expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("Id", no_wrap=True)
    table.add_column("Title", no_wrap=True)
    table.add_column("Constitutional", justify="center")
    table.add_column("Tags", overflow="fold")
    for bill in bills:
        table.add_row(
            bill.id,
            bill.title,
            "yes" if bill.is_constitutional else "",
            ", ".join(bill.tags),
        )
    return Panel(table, title=title, border_style="blue")


__all__ = [
    "bill_catalog_table",
    "election_summary",
    "government_panel",
    "party_roster",
    "seat_table",
]
