from __future__ import annotations

from datetime import date
import io

from rich.console import Console

from parliament.elections.general import ElectionHistoryEntry
from parliament.elections.parliament import elect_speaker, form_government
from parliament.politics.legislation import BILLS
from parliament.ui.reports import (
    bill_catalog_table,
    election_summary,
    government_panel,
    party_roster,
    seat_table,
)
from parliament.world.config import ElectoralSystem


def _render(renderable) -> str:
    console = Console(record=True, width=120, file=io.StringIO())
    console.print(renderable)
    return console.export_text()


def test_seat_table_lists_seated_parties(small_state):
    text = _render(seat_table(small_state))

    assert "Alpha" in text
    assert "75%" in text
    assert "Gamma" not in text
    assert "Majority" in text


def test_party_roster_and_government(small_state):
    assert "No government" in _render(government_panel(small_state))

    form_government(small_state)
    elect_speaker(small_state)
    roster = _render(party_roster(small_state))
    panel = _render(government_panel(small_state))

    assert "Gamma" in roster
    assert "A1" in roster
    assert "Chief Minister" in panel
    assert "Home Affairs" in panel
    assert "Speaker" in panel


def test_election_summary_with_swing(small_state):
    first = ElectionHistoryEntry(
        date(1955, 7, 27), ElectoralSystem.FPTP, {"S1": "beta", "S2": "alpha"},
        {"S1": {"alpha": 40, "beta": 60}, "S2": {"alpha": 70, "beta": 30}},
    )
    second = ElectionHistoryEntry(
        date(1959, 7, 27), ElectoralSystem.FPTP, {"S1": "alpha", "S2": "alpha"},
        {"S1": {"alpha": 55, "beta": 45}, "S2": {"alpha": 80, "beta": 20}},
    )

    single = _render(election_summary(small_state, first))
    assert "FPTP election of 1955-07-27" in single
    assert "55.0%" in single

    text = _render(election_summary(small_state, second, previous=first))
    assert "+1" in text
    assert "-1" in text


def test_bill_catalog_table():
    text = _render(bill_catalog_table(BILLS))

    assert "const_prop_rep" in text
    assert "yes" in text
