"""Static starting data: affiliations, founding parties and the colour palette."""

from __future__ import annotations

from ..politics.models import (
    Affiliation,
    AllianceType,
    AreaPreference,
    Ethnicity,
    Ideology,
    Party,
    PoliticalAlliance,
)

COLOR_PALETTE: tuple[str, ...] = (
    "#e6194B", "#3cb44b", "#ffe119", "#4363d8", "#f58231",
    "#911eb4", "#42d4f4", "#f032e6", "#bfef45", "#fabed4",
    "#469990", "#dcbeff", "#9A6324", "#fffac8", "#800000",
    "#aaffc3", "#808000", "#ffd8b1", "#000075", "#a9a9a9",
    "#fdb462", "#bebada", "#fb8072", "#80b1d3", "#b3de69",
    "#fccde5", "#d9d9d9", "#bc80bd", "#ccebc5", "#ffed6f",
)

_U, _R, _B = AreaPreference.URBAN, AreaPreference.RURAL, AreaPreference.BOTH

# (id, name, area, economic, governance)
_AFFILIATION_ROWS: dict[Ethnicity, tuple[tuple[str, str, AreaPreference, float, float], ...]] = {
    Ethnicity.MALAY: (
        ("malay-nat", "Malay Nationalist", _R, 40, 80),
        ("malay-prog", "Malay Progressive", _B, 60, 40),
        ("malay-islamist", "Islamist", _R, 30, 90),
        ("malay-socialist", "Malay Socialist", _B, 20, 70),
        ("malay-royalist", "Malay Royalist", _B, 50, 85),
        ("malay-civil", "Malay Civil Service", _U, 50, 90),
        ("malay-biz", "Malay Industrialist", _U, 85, 60),
        ("malay-edu", "Malay Teachers", _U, 35, 50),
        ("malay-labour", "Malay Trade Unionist", _U, 15, 40),
        ("malay-intel", "Malay Intellectual", _U, 40, 40),
        ("malay-merchant", "Malay Merchant Guild", _U, 80, 50),
        ("malay-professional", "Malay Professionals", _U, 65, 50),
        ("malay-farmer", "Malay Farmers Association", _R, 30, 60),
        ("malay-youth", "Malay Youth Movement", _B, 45, 45),
        ("malay-religious", "Religious Scholars", _R, 25, 95),
        ("malay-veteran", "Malay Veterans", _B, 40, 90),
    ),
    Ethnicity.CHINESE: (
        ("chinese-biz", "Chinese Industrialist", _U, 95, 60),
        ("chinese-edu", "Chinese Teachers", _U, 40, 40),
        ("chinese-labour", "Chinese Trade Unionist", _U, 10, 30),
        ("chinese-intel", "Chinese Intellectual", _U, 45, 35),
        ("chinese-merchant", "Chinese Merchant Guild", _U, 90, 50),
        ("chinese-youth", "Chinese Youth Wing", _B, 60, 40),
        ("chinese-professional", "Chinese Professionals", _U, 75, 50),
        ("chinese-chamber", "Chinese Chamber of Commerce", _U, 90, 70),
        ("chinese-clan", "Chinese Clan Associations", _B, 70, 80),
        ("chinese-rural", "Chinese Rural Community", _R, 50, 60),
        ("chinese-progressive", "Chinese Progressives", _U, 55, 30),
    ),
    Ethnicity.INDIAN: (
        ("indian-trad", "Indian Traditionalist", _R, 40, 75),
        ("indian-reform", "Indian Reformist", _B, 50, 35),
        ("indian-prog", "Indian Progressive", _U, 55, 30),
        ("indian-estate", "Estate Workers Union", _R, 15, 40),
        ("indian-professional", "Indian Professionals", _U, 65, 50),
        ("indian-merchant", "Indian Merchants", _U, 85, 50),
        ("indian-youth", "Indian Youth League", _B, 45, 40),
        ("indian-labour", "Indian Labour Movement", _U, 10, 35),
    ),
    Ethnicity.OTHERS: (
        ("indigenous-chiefs", "Native Chiefs Council", _R, 60, 85),
        ("indigenous-farmers", "Native Farmers Association", _R, 45, 70),
        ("indigenous-youth", "Native Youth Movement", _B, 50, 55),
        ("indigenous-longhouse", "Longhouse Community Leaders", _R, 40, 80),
        ("indigenous-educated", "Native Graduates Association", _U, 55, 45),
        ("indigenous-civil", "Native Civil Servants", _U, 60, 65),
        ("indigenous-church", "Native Christian Fellowship", _B, 50, 75),
        ("indigenous-rights", "Native Land Rights Activists", _R, 30, 40),
        ("indigenous-traders", "Native Traders Association", _B, 75, 60),
        ("indigenous-cultural", "Native Cultural Preservation Society", _B, 50, 70),
        ("indigenous-professional", "Native Professionals Network", _U, 70, 50),
        ("indigenous-fishermen", "Native Fishermen Cooperative", _R, 40, 65),
        ("indigenous-veterans", "Native Veterans Association", _B, 55, 80),
        ("indigenous-entrepreneurs", "Native Entrepreneurs Guild", _U, 80, 60),
    ),
}

# (id, name, palette index, affiliations, focus, unity, economic, governance)
_PARTY_ROWS: tuple[tuple[str, str, int, tuple[str, ...], Ethnicity | None, float, float, float], ...] = (
    (
        "umno",
        "UMNO",
        3,
        (
            "malay-nat",
            "malay-prog",
            "malay-royalist",
            "malay-civil",
            "malay-edu",
            "malay-merchant",
            "malay-professional",
        ),
        Ethnicity.MALAY,
        90,
        50,
        75,
    ),
    ("mca", "MCA", 2, ("chinese-biz", "chinese-edu"), Ethnicity.CHINESE, 85, 80, 60),
    ("mic", "MIC", 4, ("indian-trad", "indian-reform"), Ethnicity.INDIAN, 80, 45, 55),
    ("pmip", "PMIP", 1, ("malay-islamist", "malay-intel"), Ethnicity.MALAY, 95, 35, 85),
    ("pr", "Parti Rakyat", 17, ("malay-socialist", "malay-labour"), Ethnicity.MALAY, 70, 20, 50),
    ("labour", "Labour Party", 9, ("chinese-labour", "chinese-intel"), None, 75, 20, 30),
)

INITIAL_ALLIANCE_ID = "alliance"
INITIAL_ALLIANCE_MEMBERS: tuple[str, ...] = ("umno", "mca", "mic")
INITIAL_REGIME_PARTY = "umno"


def default_affiliations() -> dict[str, Affiliation]:
    """Return fresh affiliation records keyed by id."""

    affiliations: dict[str, Affiliation] = {}
    for ethnicity, rows in _AFFILIATION_ROWS.items():
        for identifier, name, area, economic, governance in rows:
            affiliations[identifier] = Affiliation(
                id=identifier,
                name=name,
                ethnicity=ethnicity,
                area=area,
                base_ideology=Ideology(economic, governance),
            )
    return affiliations


def default_parties() -> dict[str, Party]:
    """Return the founding parties keyed by id."""

    parties: dict[str, Party] = {}
    for identifier, name, color_index, members, focus, unity, economic, governance in _PARTY_ROWS:
        parties[identifier] = Party(
            id=identifier,
            name=name,
            color=COLOR_PALETTE[color_index],
            affiliation_ids=list(members),
            ethnicity_focus=focus,
            unity=float(unity),
            ideology=Ideology(economic, governance),
        )
    return parties


def default_alliances() -> dict[str, PoliticalAlliance]:
    return {
        INITIAL_ALLIANCE_ID: PoliticalAlliance(
            id=INITIAL_ALLIANCE_ID,
            name="The Alliance",
            member_party_ids=list(INITIAL_ALLIANCE_MEMBERS),
            type=AllianceType.ALLIANCE,
            leader_party_id="umno",
        )
    }


__all__ = [
    "COLOR_PALETTE",
    "INITIAL_ALLIANCE_ID",
    "INITIAL_ALLIANCE_MEMBERS",
    "INITIAL_REGIME_PARTY",
    "default_affiliations",
    "default_alliances",
    "default_parties",
]
