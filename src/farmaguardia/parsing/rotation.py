"""Single-site weekly rotations (El Espinar, Cuéllar).

These rosters are free-flowing text: a line naming the pharmacy's street and
one or more lines of ``DD-mon`` dates. The scanner keeps the last site seen
and the dates collected since, and emits a full-day schedule per date as
soon as it holds both.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from farmaguardia.core import catalog
from farmaguardia.core.aggregate import sort_schedules
from farmaguardia.core.catalog import RosterEntry
from farmaguardia.core.constants import (
    MISSING_ADDRESS,
    MISSING_PHONE,
    fold_accents,
    normalize_spaces,
)
from farmaguardia.core.dutydate import DutyDate, iter_short_dates, iter_spelled_dates
from farmaguardia.core.models import Pharmacy, PharmacySchedule
from farmaguardia.core.timespan import FULL_DAY
from farmaguardia.core.years import YearRollover, detect_year
from farmaguardia.parsing.base import ScheduleMap
from farmaguardia.pdf.engine_base import PdfPages

LOGGER = logging.getLogger(__name__)

SiteMatcher = Callable[[str], Optional[str]]


def espinar_site(line: str) -> Optional[str]:
    text = fold_accents(normalize_spaces(line)).upper()
    if "HONTANILLA" in text:
        return "AV. HONTANILLA 18"
    if "MARQUES PERALES" in text:
        return "C/ MARQUES PERALES"
    if text.endswith("SAN RAFAEL"):
        return "SAN RAFAEL"
    return None


def token_site(tokens: List[str]) -> SiteMatcher:
    """Match any of ``tokens`` as a case-insensitive substring."""
    needles = [(token, normalize_spaces(token).upper()) for token in tokens]

    def match(line: str) -> Optional[str]:
        text = normalize_spaces(line).upper()
        for token, needle in needles:
            if needle in text:
                return token
        return None

    return match


def placeholder(key: str) -> Pharmacy:
    return Pharmacy(f"Farmacia {key}", MISSING_ADDRESS, MISSING_PHONE)


@dataclass
class _ScanState:
    years: YearRollover
    key: Optional[str] = None
    dates: List[Tuple[int, int]] = field(default_factory=list)


class RotationStrategy:
    """Line scanner shared by the weekly rotation rosters.

    ``dates_first`` checks each line for dates before looking for a site, so
    a single line can carry both. ``dedupe_dates`` drops repeated dates
    inside one batch before any year is resolved, so a repeated 1 January
    only rolls the year once. ``spelled_dates`` also reads long-form dates
    such as ``DOMINGO 31 DE AGOSTO``. ``detect_start_year`` seeds the year
    from the roster itself instead of starting a year behind
    ``reference_year``.
    """

    def __init__(
        self,
        region_id: str,
        site_matcher: SiteMatcher,
        roster: Dict[str, RosterEntry],
        reference_year: int,
        *,
        dates_first: bool = False,
        dedupe_dates: bool = True,
        detect_start_year: bool = False,
        spelled_dates: bool = False,
        pdf_url: Optional[str] = None,
    ) -> None:
        self.region_id = region_id
        self.site_matcher = site_matcher
        self.roster = roster
        self.reference_year = reference_year
        self.dates_first = dates_first
        self.dedupe_dates = dedupe_dates
        self.detect_start_year = detect_start_year
        self.spelled_dates = spelled_dates
        self.pdf_url = pdf_url

    def start_year(self, first_page_text: str) -> int:
        if not self.detect_start_year:
            return self.reference_year - 1
        detection = detect_year(first_page_text, self.pdf_url, current_year=self.reference_year)
        return detection.year

    def pharmacy_for(self, key: str) -> Pharmacy:
        entry = self.roster.get(key)
        if entry is None:
            LOGGER.warning("Unknown pharmacy site %r; using placeholder", key)
            return placeholder(key)
        return entry.to_pharmacy()

    def _collect_dates(self, line: str, state: _ScanState) -> bool:
        found = list(iter_short_dates(line))
        if self.spelled_dates:
            found.extend(iter_spelled_dates(line))
        state.dates.extend(found)
        return bool(found)

    def _emit(self, state: _ScanState, out: List[PharmacySchedule]) -> None:
        tokens = state.dates
        if self.dedupe_dates:
            tokens = list(dict.fromkeys(tokens))
        pharmacy = self.pharmacy_for(state.key or "")
        emitted = 0
        for day, month in tokens:
            year = state.years.resolve(day, month)
            date = DutyDate.from_parts(day, month, year)
            if date is None:
                LOGGER.debug("Dropping impossible date %02d-%02d-%d", day, month, year)
                continue
            out.append(PharmacySchedule(date, {FULL_DAY: [pharmacy]}))
            emitted += 1
        LOGGER.debug("Site %s on duty for %d dates", state.key, emitted)
        state.key = None
        state.dates = []

    def scan_line(self, line: str, state: _ScanState, out: List[PharmacySchedule]) -> None:
        if self.dates_first:
            had_dates = self._collect_dates(line, state)
            site = self.site_matcher(line)
            if site:
                state.key = site
            if not had_dates and not site:
                LOGGER.debug("Skipping line: %r", line)
        else:
            site = self.site_matcher(line)
            if site:
                state.key = site
            elif not self._collect_dates(line, state):
                LOGGER.debug("Skipping line: %r", line)
        if state.key and state.dates:
            self._emit(state, out)

    def parse_lines(self, pages_lines: List[List[str]]) -> List[PharmacySchedule]:
        first_page = "\n".join(pages_lines[0]) if pages_lines else ""
        state = _ScanState(years=YearRollover(self.start_year(first_page)))
        out: List[PharmacySchedule] = []
        for lines in pages_lines:
            for line in lines:
                self.scan_line(line, state, out)
        if state.dates:
            LOGGER.debug("Dropping %d dates with no pharmacy at end of roster", len(state.dates))
        return sort_schedules(out)

    def parse(self, pages: PdfPages) -> ScheduleMap:
        schedules = self.parse_lines(pages.all_lines())
        if not schedules:
            return {}
        return {catalog.locations_for(self.region_id)[0]: schedules}


def el_espinar_strategy(reference_year: int) -> RotationStrategy:
    return RotationStrategy(
        "el-espinar",
        espinar_site,
        catalog.rotation_roster("el-espinar"),
        reference_year,
    )


def cuellar_strategy(reference_year: int) -> RotationStrategy:
    roster = catalog.rotation_roster("cuellar")
    return RotationStrategy(
        "cuellar",
        token_site(list(roster)),
        roster,
        reference_year,
        dates_first=True,
        dedupe_dates=False,
        detect_start_year=True,
        spelled_dates=True,
        pdf_url=catalog.region("cuellar").pdf_url,
    )
