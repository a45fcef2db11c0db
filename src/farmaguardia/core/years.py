"""Year bookkeeping for rosters that print day and month only."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from farmaguardia.core.constants import DATE_DASH

LOGGER = logging.getLogger(__name__)

MAX_YEAR_DRIFT = 2

_URL_YEAR = re.compile(r"(?<!\d)(20[2-3]\d)(?!\d)")
_TEXT_YEAR = re.compile(r"\b(20[2-3]\d)(?:\s*-\s*20[2-3]\d)?\b")
_LOOSE_YEAR = re.compile(r"2\D?0\D?([2-3])\D?(\d)")
_DECEMBER_DATE = re.compile(rf"\b\d{{1,2}}{DATE_DASH}dic\b", re.IGNORECASE)
_DECEMBER_WINDOW = 500


class YearRollover:
    """Working year that moves forward each time 1 January goes by."""

    def __init__(self, start_year: int) -> None:
        self.year = start_year

    def resolve(self, day: int, month: int) -> int:
        if day == 1 and month == 1:
            self.year += 1
            LOGGER.debug("Year rolled over to %s", self.year)
        return self.year


@dataclass(frozen=True)
class YearDetection:
    year: int
    source: str
    is_valid: bool
    warning: Optional[str] = None


def _plausible(year: int, current_year: int) -> bool:
    return abs(year - current_year) <= MAX_YEAR_DRIFT


def _from_url(pdf_url: Optional[str], current_year: int) -> Optional[int]:
    if not pdf_url:
        return None
    candidates = [int(m.group(1)) for m in _URL_YEAR.finditer(pdf_url)]
    for year in reversed(candidates):
        if _plausible(year, current_year):
            return year
    return None


def _from_text(text: str, current_year: int) -> Optional[int]:
    for m in _TEXT_YEAR.finditer(text):
        year = int(m.group(1))
        if _plausible(year, current_year):
            return year
    return None


def _from_loose_text(text: str, current_year: int) -> Optional[int]:
    for m in _LOOSE_YEAR.finditer(text):
        year = 2000 + int(m.group(1) + m.group(2))
        if _plausible(year, current_year):
            return year
    return None


def detect_year(text: str, pdf_url: Optional[str] = None, *, current_year: int) -> YearDetection:
    """Work out which year a roster starts in.

    Sources are tried in order: the file URL, a year printed in the text, a
    year printed with separators between its digits, and finally the current
    year. A roster that opens with December dates started the year before.
    """
    text = text or ""
    source = "fallback-current"
    year = current_year
    for name, finder in (
        ("url", lambda: _from_url(pdf_url, current_year)),
        ("text", lambda: _from_text(text, current_year)),
        ("text-loose", lambda: _from_loose_text(text, current_year)),
    ):
        found = finder()
        if found is not None:
            year, source = found, name
            break

    warning = None
    if _DECEMBER_DATE.search(text[:_DECEMBER_WINDOW]):
        year -= 1
        if source == "fallback-current":
            source = "fallback-december"
        warning = f"Roster opens in December; starting from {year}"

    drift = abs(year - current_year)
    if drift == MAX_YEAR_DRIFT and warning is None:
        warning = f"Detected year {year} is {drift} years away from {current_year}"
    is_valid = drift <= MAX_YEAR_DRIFT
    if warning:
        LOGGER.info(warning)
    LOGGER.debug("Detected roster year %s from %s", year, source)
    return YearDetection(year=year, source=source, is_valid=is_valid, warning=warning)
