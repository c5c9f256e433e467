"""Name generation for characters, parties and alliances."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..politics.models import Affiliation, Ethnicity
from .rng import pick

_MALAY_MALE = ("Ahmad", "Ismail", "Hassan", "Ali", "Rahman", "Jamal", "Idris", "Osman", "Yusof", "Mahmud", "Tunku", "Razak", "Hussein")
_MALAY_FEMALE = ("Siti", "Fatima", "Nur", "Zainab", "Aminah", "Aishah", "Halimah", "Salmah", "Rohani", "Jamilah", "Azizah")
_CHINESE_SURNAMES = ("Tan", "Lee", "Wong", "Lim", "Chan", "Ng", "Goh", "Ong", "Teo", "Yap", "Lau", "Wee", "Chong", "Low")
_CHINESE_GIVEN = ("Wei", "Mei", "Chen", "Li", "Jian", "Ling", "Hui", "Jin", "Ming", "Xiao", "Ah", "Kim", "Seng", "Hock", "Keong")
_INDIGENOUS_SURNAMES = ("Tudan", "Mojilip", "Damit", "Lasimbang", "Siambun", "Ginibun", "Gimbad", "Gantuong", "Mandimin", "Sumping", "Jugah", "Jinggut", "Riboh", "Munan", "Masing", "Baki", "Numpang")
_INDIGENOUS_GIVEN = ("Jovita", "Janelle", "Julius", "Jeffrey", "Dayang", "Awang", "Empiang", "Chambai", "Remy", "Nicholas", "Jennifer", "Jabu", "Salang", "Rentap")
_INDIAN_MALE = ("Ravi", "Kumar", "Suresh", "Rajesh", "Mani", "Arjun", "Ganesh", "Muthu", "Raju", "Sambanthan", "Manickam")
_INDIAN_FEMALE = ("Priya", "Anjali", "Deepa", "Lakshmi", "Sita", "Parvathi", "Geetha", "Kamala", "Devi")
_INDIAN_PATRONYMS = ("Krishnan", "Singh", "Pillai", "Rao", "Naidu", "Murthy", "Subramaniam", "Ramasamy", "Menon")

_MALAY_PREFIXES = ("Parti", "Barisan", "Angkatan", "Gagasan", "Perikatan", "Kesatuan", "Gerakan", "Front", "Ikatan")
_ENGLISH_PREFIXES = ("United", "National", "Democratic", "People's", "Progressive", "Social", "Malaysian", "Federal", "Independent")
_MALAY_SUFFIXES = ("Bersatu", "Rakyat", "Kebangsaan", "Se-Malaysia", "Maju")
_ENGLISH_SUFFIXES = ("Party", "Front", "Alliance", "Union", "Congress", "League", "Movement", "Association")

# ideology key -> (malay keywords, english keywords)
_KEYWORDS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "socialist": (
        ("Sosialis", "Buruh", "Pekerja", "Rakyat", "Marhaen"),
        ("Socialist", "Labour", "Workers", "People's", "Proletarian"),
    ),
    "islamist": (
        ("Islam", "Muslimin", "Ummah", "Sejahtera", "Hizbul"),
        ("Islamic", "Muslim", "Unity", "Theocratic"),
    ),
    "nationalist": (
        ("Kebangsaan", "Melayu", "Bumiputera", "Watan", "Pribumi", "Pusaka"),
        ("National", "Patriotic", "Indigenous", "Heritage", "Malay"),
    ),
    "liberal": (
        ("Demokratik", "Keadilan", "Bebas", "Liberal", "Harapan"),
        ("Democratic", "Liberal", "Justice", "Freedom", "Hope"),
    ),
    "conservative": (
        ("Konservatif", "Tradisi", "Setia", "Warisan"),
        ("Conservative", "Traditional", "Heritage", "Loyalist"),
    ),
    "progressive": (
        ("Maju", "Progresif", "Pembaharuan", "Reformasi"),
        ("Progressive", "Reform", "Action", "Forward"),
    ),
}

_ALLIANCE_MALAY = (
    ("Gagasan", "Pakatan", "Barisan", "Muafakat", "Angkatan"),
    ("Rakyat", "Nasional", "Harapan", "Perpaduan", "Sejahtera", "Wawasan"),
)
_ALLIANCE_ENGLISH = (
    ("National", "Democratic", "United", "People's", "Grand"),
    ("Front", "Coalition", "Alliance", "Pact", "Bloc"),
)


def ideology_key(affiliation: Affiliation | None) -> str:
    """Classify an affiliation into one of the naming keyword families."""

    if affiliation is None:
        return "progressive"
    name = affiliation.name.lower()
    if "islam" in name:
        return "islamist"
    if "social" in name or "labour" in name:
        return "socialist"
    if "nat" in name or "royal" in name:
        return "nationalist"
    ideology = affiliation.ideology
    if ideology.economic < 30:
        return "socialist"
    if ideology.economic > 80:
        return "conservative"
    if ideology.governance > 80:
        return "nationalist"
    if ideology.governance < 40:
        return "liberal"
    return "progressive"


@dataclass
class NameGenerator:
    """Produces culturally flavoured names from an injected generator."""

    rng: np.random.Generator

    def character(self, ethnicity: Ethnicity) -> str:
        male = self.rng.random() > 0.5
        if ethnicity is Ethnicity.MALAY:
            first = pick(self.rng, _MALAY_MALE if male else _MALAY_FEMALE)
            father = pick(self.rng, [name for name in _MALAY_MALE if name != first])
            return f"{first} {'bin' if male else 'binti'} {father}"
        if ethnicity is Ethnicity.CHINESE:
            surname = pick(self.rng, _CHINESE_SURNAMES)
            given = pick(self.rng, _CHINESE_GIVEN)
            if self.rng.random() > 0.7:
                return f"{surname} {given}"
            second = pick(self.rng, [name for name in _CHINESE_GIVEN if name != given])
            return f"{surname} {given} {second}"
        if ethnicity is Ethnicity.INDIAN:
            first = pick(self.rng, _INDIAN_MALE if male else _INDIAN_FEMALE)
            return f"{first} {'a/l' if male else 'a/p'} {pick(self.rng, _INDIAN_PATRONYMS)}"
        return f"{pick(self.rng, _INDIGENOUS_SURNAMES)} {pick(self.rng, _INDIGENOUS_GIVEN)}"

    def party(self, affiliation: Affiliation | None = None) -> str:
        malay_keywords, english_keywords = _KEYWORDS[ideology_key(affiliation)]
        if self.rng.random() > 0.4:
            prefix = pick(self.rng, _MALAY_PREFIXES)
            keyword = pick(self.rng, malay_keywords)
            suffix = pick(self.rng, _MALAY_SUFFIXES) if self.rng.random() > 0.6 else ""
            return f"{prefix} {keyword} {suffix}".strip()
        prefix = pick(self.rng, _ENGLISH_PREFIXES)
        keyword = pick(self.rng, english_keywords)
        return f"{prefix} {keyword} {pick(self.rng, _ENGLISH_SUFFIXES)}"

    def alliance(self) -> str:
        first, second = _ALLIANCE_MALAY if self.rng.random() < 0.5 else _ALLIANCE_ENGLISH
        return f"{pick(self.rng, first)} {pick(self.rng, second)}"


__all__ = ["NameGenerator", "ideology_key"]
