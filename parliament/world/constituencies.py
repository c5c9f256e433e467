"""Constituency demographics and the CSV loader that produces them."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
from typing import Iterable, Mapping, Sequence

import numpy as np
import polars as pl
from polars._typing import PolarsDataType

from ..politics.models import Ethnicity

URBAN_SEATS: frozenset[str] = frozenset(
    {
        "GEORGE TOWN",
        "KUALA LUMPUR BARAT",
        "KUALA LUMPUR TIMOR",
        "IPOH AND MENGLEMBU",
        "JOHORE BAHRU",
        "MALACCA CENTRAL",
        "SEREMBAN",
        "KINTA UTARA",
        "KINTA SELATAN",
        "PENANG ISLAND",
        "TELOK ANSON",
        "DINDINGS",
        "SELANGOR TENGAH",
        "LANGAT",
    }
)

_URBAN_SEAT_STATES: dict[str, str] = {
    "GEORGE TOWN": "Penang",
    "PENANG ISLAND": "Penang",
    "KUALA LUMPUR BARAT": "Selangor",
    "KUALA LUMPUR TIMOR": "Selangor",
    "SELANGOR TENGAH": "Selangor",
    "LANGAT": "Selangor",
    "IPOH AND MENGLEMBU": "Perak",
    "KINTA UTARA": "Perak",
    "KINTA SELATAN": "Perak",
    "TELOK ANSON": "Perak",
    "DINDINGS": "Perak",
    "JOHORE BAHRU": "Johore",
    "MALACCA CENTRAL": "Malacca",
    "SEREMBAN": "Negri Sembilan",
}

DEFAULT_STATES: tuple[str, ...] = (
    "Johore",
    "Kedah",
    "Kelantan",
    "Malacca",
    "Negri Sembilan",
    "Pahang",
    "Penang",
    "Perak",
    "Perlis",
    "Selangor",
    "Trengganu",
)

_REQUIRED_COLUMNS = (
    "uniqueCode",
    "state",
    "federalLegislativeCouncil",
    "totalElectorate",
    "malayPercent",
    "chinesePercent",
    "indianPercent",
    "othersPercent",
)
_CLASSIFICATION_COLUMN = "urbanRuralClassification"

_CONSTITUENCY_SCHEMA: dict[str, PolarsDataType] = {
    "uniqueCode": pl.String,
    "state": pl.String,
    "federalLegislativeCouncil": pl.String,
    "totalElectorate": pl.Int64,
    "malayPercent": pl.Float64,
    "chinesePercent": pl.Float64,
    "indianPercent": pl.Float64,
    "othersPercent": pl.Float64,
    _CLASSIFICATION_COLUMN: pl.String,
}


@dataclass(slots=True)
class Constituency:
    """A single-member seat with its electorate and ethnic composition."""

    code: str
    name: str
    state: str
    electorate: int
    malay_percent: float = 0.0
    chinese_percent: float = 0.0
    indian_percent: float = 0.0
    others_percent: float = 0.0
    classification: str | None = None

    @property
    def is_urban(self) -> bool:
        """Explicit classification wins; otherwise fall back to the named urban seats."""

        if self.classification:
            return self.classification.strip().upper() == "URBAN"
        return self.name.strip().upper() in URBAN_SEATS

    def ethnic_share(self, ethnicity: Ethnicity) -> float:
        """Percentage of the electorate belonging to ``ethnicity``."""

        if ethnicity is Ethnicity.MALAY:
            return self.malay_percent
        if ethnicity is Ethnicity.CHINESE:
            return self.chinese_percent
        if ethnicity is Ethnicity.INDIAN:
            return self.indian_percent
        # Bornean natives are counted in the residual share.
        return self.others_percent

    @property
    def is_mixed(self) -> bool:
        """No single major community holds 65% or more."""

        return (
            self.malay_percent < 65
            and self.chinese_percent < 65
            and self.indian_percent < 65
        )


def normalise_header(header: str) -> str:
    """Convert a spreadsheet header such as ``"Malay (%)"`` to ``malayPercent``."""

    text = header.lower().replace("(%)", " percent")
    text = re.sub(r"\(.*\)", "", text).strip()
    return re.sub(r"[^a-z0-9]+(.)", lambda match: match.group(1).upper(), text)


def load_constituencies_csv(path: str | Path) -> dict[str, Constituency]:
    """Load constituency demographics from ``path`` keyed by unique code."""

    raw = pl.read_csv(Path(path), infer_schema_length=0)
    frame = raw.rename({column: normalise_header(column) for column in raw.columns})
    missing = [column for column in _REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(f"constituency file is missing columns: {', '.join(missing)}")
    if _CLASSIFICATION_COLUMN not in frame.columns:
        frame = frame.with_columns(pl.lit(None, dtype=pl.String).alias(_CLASSIFICATION_COLUMN))

    numeric = [
        column
        for column, dtype in _CONSTITUENCY_SCHEMA.items()
        if dtype in (pl.Int64, pl.Float64)
    ]
    frame = frame.select(list(_CONSTITUENCY_SCHEMA)).with_columns(
        [
            pl.col(column)
            .str.replace_all(",", "")
            .str.strip_chars()
            .cast(pl.Float64, strict=False)
            .fill_null(0.0)
            for column in numeric
        ]
    ).with_columns(pl.col("totalElectorate").cast(pl.Int64))

    constituencies: dict[str, Constituency] = {}
    for row in frame.iter_rows(named=True):
        code = str(row["uniqueCode"]).strip()
        if not code:
            continue
        constituencies[code] = Constituency(
            code=code,
            name=str(row["federalLegislativeCouncil"] or code).strip(),
            state=str(row["state"] or "").strip(),
            electorate=int(row["totalElectorate"]),
            malay_percent=float(row["malayPercent"]),
            chinese_percent=float(row["chinesePercent"]),
            indian_percent=float(row["indianPercent"]),
            others_percent=float(row["othersPercent"]),
            classification=row[_CLASSIFICATION_COLUMN] or None,
        )
    return constituencies


def constituencies_frame(constituencies: Iterable[Constituency]) -> pl.DataFrame:
    """Return the constituencies as a DataFrame using the loader's column names."""

    rows = [
        {
            "uniqueCode": seat.code,
            "state": seat.state,
            "federalLegislativeCouncil": seat.name,
            "totalElectorate": seat.electorate,
            "malayPercent": seat.malay_percent,
            "chinesePercent": seat.chinese_percent,
            "indianPercent": seat.indian_percent,
            "othersPercent": seat.others_percent,
            _CLASSIFICATION_COLUMN: seat.classification,
        }
        for seat in constituencies
    ]
    if not rows:
        return pl.DataFrame(schema=_CONSTITUENCY_SCHEMA)
    return pl.DataFrame(rows, schema=_CONSTITUENCY_SCHEMA)


def unique_states(constituencies: Mapping[str, Constituency]) -> list[str]:
    """States in first-seen order."""

    seen: dict[str, None] = {}
    for seat in constituencies.values():
        if seat.state:
            seen.setdefault(seat.state, None)
    return list(seen)


def synthetic_constituencies(
    rng: np.random.Generator,
    count: int = 52,
    *,
    states: Sequence[str] = DEFAULT_STATES,
) -> dict[str, Constituency]:
    """Generate a plausible seat map for demos and tests.

    The named urban seats come first and lean Chinese; the remainder are rural
    seats with a Malay majority more often than not.
    """

    if count <= 0:
        raise ValueError("count must be positive")
    if not states:
        raise ValueError("at least one state is required")

    seats: dict[str, Constituency] = {}
    urban_names = sorted(_URBAN_SEAT_STATES)
    for index in range(count):
        code = f"P{index + 1:03d}"
        if index < len(urban_names) and index < count // 3:
            name = urban_names[index]
            state = _URBAN_SEAT_STATES[name]
            weights = rng.dirichlet([3.0, 5.0, 1.5, 0.5])
            classification = "URBAN"
        else:
            state = states[index % len(states)]
            name = f"{state.upper()} {index + 1}"
            weights = rng.dirichlet([7.0, 2.0, 1.0, 0.4])
            classification = "RURAL"
        shares = [round(float(value) * 100, 1) for value in weights]
        electorate = int(rng.integers(8000, 30000))
        seats[code] = Constituency(
            code=code,
            name=name,
            state=state,
            electorate=electorate,
            malay_percent=shares[0],
            chinese_percent=shares[1],
            indian_percent=shares[2],
            others_percent=shares[3],
            classification=classification,
        )
    return seats


__all__ = [
    "DEFAULT_STATES",
    "URBAN_SEATS",
    "Constituency",
    "constituencies_frame",
    "load_constituencies_csv",
    "normalise_header",
    "synthetic_constituencies",
    "unique_states",
]
