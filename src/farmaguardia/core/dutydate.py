from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterator, Optional

from zoneinfo import ZoneInfo

from farmaguardia.core.constants import (
    ABBREVIATION_NUMBERS,
    DATE_DASH,
    DEFAULT_TZ,
    MONTH_ABBREVIATIONS,
    MONTH_NUMBERS,
    MONTHS,
    WEEKDAYS,
    fold_accents,
)

_WEEKDAY_ALT = "lunes|martes|mi[ée]rcoles|jueves|viernes|s[áa]bado|domingo"
_MONTH_ALT = "|".join(MONTHS)
_ABBR_ALT = "|".join(MONTH_ABBREVIATIONS)

LONG_DATE = re.compile(
    rf"({_WEEKDAY_ALT}),\s*(\d{{1,2}})\s*de\s*({_MONTH_ALT})(?:\s+(?:de\s+)?(\d{{4}}))?",
    re.IGNORECASE,
)
SHORT_DATE = re.compile(rf"\b(\d{{1,2}}){DATE_DASH}({_ABBR_ALT})\b", re.IGNORECASE)
RURAL_DATE = re.compile(rf"\b(\d{{1,2}})-({_ABBR_ALT})-(\d{{2}})\b", re.IGNORECASE)
# "DOMINGO 31 DE AGOSTO Y LUNES 1 DE SEPTIEMBRE": long form without the comma.
SPELLED_DATE = re.compile(
    rf"\b({_WEEKDAY_ALT})\s+(\d{{1,2}})\s+de\s+({_MONTH_ALT})\b", re.IGNORECASE
)

_WEEKDAY_BY_FOLDED = {fold_accents(name): name for name in WEEKDAYS}


def month_to_number(name: str) -> Optional[int]:
    return MONTH_NUMBERS.get((name or "").strip().lower())


def abbreviation_to_number(abbr: str) -> Optional[int]:
    return ABBREVIATION_NUMBERS.get((abbr or "").strip().lower()[:3])


def month_name(number: int) -> str:
    if not 1 <= number <= 12:
        raise ValueError(f"Month out of range: {number}")
    return MONTHS[number - 1]


def weekday_name(day: int, month: int, year: int) -> str:
    return WEEKDAYS[date(year, month, day).weekday()]


def iter_short_dates(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(day, month)`` for every ``DD-mon`` token in ``text``."""
    for m in SHORT_DATE.finditer(text or ""):
        month = abbreviation_to_number(m.group(2))
        if month is not None:
            yield int(m.group(1)), month


def iter_spelled_dates(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(day, month)`` for every ``<weekday> D DE <mes>`` in ``text``."""
    for m in SPELLED_DATE.finditer(text or ""):
        month = month_to_number(m.group(3))
        if month is not None:
            yield int(m.group(2)), month


def _canonical_weekday(raw: str) -> str:
    folded = fold_accents(raw.strip().lower())
    return _WEEKDAY_BY_FOLDED.get(folded, raw.strip().lower())


@dataclass(frozen=True)
class DutyDate:
    """A roster date with its Spanish weekday and month names.

    ``year`` may stay ``None`` while a strategy is still working out the
    roll-over; everything that compares or sorts dates needs it resolved.
    """

    day_of_week: str
    day: int
    month: str
    year: Optional[int] = None

    @property
    def month_number(self) -> Optional[int]:
        return month_to_number(self.month)

    @property
    def key(self) -> tuple:
        return (self.year, self.month_number, self.day)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        if self.year is None:
            raise ValueError(f"Unresolved year for {self}")
        return (self.year, self.month_number or 0, self.day)

    def with_year(self, year: int) -> "DutyDate":
        return replace(self, year=year)

    def same_day(self, other: "DutyDate") -> bool:
        return self.key == other.key

    def to_date(self, default_year: Optional[int] = None) -> Optional[date]:
        month = self.month_number
        year = self.year if self.year is not None else default_year
        if month is None or year is None:
            return None
        try:
            return date(year, month, self.day)
        except ValueError:
            return None

    def to_timestamp(self, tz: Optional[ZoneInfo] = None) -> Optional[float]:
        """Epoch seconds at local midnight; a missing year means this year."""
        zone = tz or ZoneInfo(DEFAULT_TZ)
        day = self.to_date(default_year=datetime.now(tz=zone).year)
        if day is None:
            return None
        return datetime(day.year, day.month, day.day, tzinfo=zone).timestamp()

    def __str__(self) -> str:
        text = f"{self.day_of_week}, {self.day} de {self.month}"
        return f"{text} de {self.year}" if self.year is not None else text

    @classmethod
    def parse(cls, text: str, *, year: Optional[int] = None) -> Optional["DutyDate"]:
        """Parse ``"lunes, 15 de julio [de 2025]"``; an explicit year wins."""
        m = LONG_DATE.search(text or "")
        if not m:
            return None
        weekday, day, month, explicit = m.groups()
        resolved = int(explicit) if explicit else year
        return cls(_canonical_weekday(weekday), int(day), month.lower(), resolved)

    @classmethod
    def from_parts(cls, day: int, month: int, year: int) -> Optional["DutyDate"]:
        try:
            return cls(weekday_name(day, month, year), day, month_name(month), year)
        except ValueError:
            return None

    @classmethod
    def parse_short(cls, token: str, year: int) -> Optional["DutyDate"]:
        m = SHORT_DATE.search(token or "")
        if not m:
            return None
        month = abbreviation_to_number(m.group(2))
        if month is None:
            return None
        return cls.from_parts(int(m.group(1)), month, year)

    @classmethod
    def parse_rural(cls, token: str) -> Optional["DutyDate"]:
        m = RURAL_DATE.search(token or "")
        if not m:
            return None
        month = abbreviation_to_number(m.group(2))
        if month is None:
            return None
        return cls.from_parts(int(m.group(1)), month, 2000 + int(m.group(3)))
