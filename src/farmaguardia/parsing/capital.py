"""Segovia Capital: one row per date with a day and a night pharmacy.

The roster is a three column grid (date, day shift, night shift). Columns are
read by clipping the page; when clipping yields nothing (scanned layouts,
engines without geometry) the page text is split with a weaker heuristic.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from farmaguardia.core import catalog
from farmaguardia.core.aggregate import dedupe_dates, resolve_years, sort_schedules
from farmaguardia.core.constants import WEEKDAYS, fold_accents
from farmaguardia.core.dutydate import LONG_DATE, DutyDate
from farmaguardia.core.models import Pharmacy, PharmacySchedule
from farmaguardia.core.pharmacy_parse import (
    PHONE_PATTERN,
    group_column_lines,
    is_pharmacy_name,
    parse_batch,
    parse_triples,
)
from farmaguardia.core.years import YearRollover
from farmaguardia.parsing.base import ScheduleMap
from farmaguardia.pdf.engine_base import PdfPages
from farmaguardia.pdf.layout import capital_columns

LOGGER = logging.getLogger(__name__)

REGION_ID = "segovia-capital"

_SEPARATORS = (re.compile(r"^[\s\-_=]+$"), re.compile(r"^[\d\s\-]+$"))
_YEAR_LINE = re.compile(r"^(20\d{2})$")
_STREET_PREFIX = re.compile(
    r"^(?:C/|C\.|Calle\b|Avda\.?|Avenida\b|Av\.|Pl\.|Plaza\b|Pza\.?|Paseo\b|Pº|Po\.|Ctra\.?|Carretera\b|Trav)",
    re.IGNORECASE,
)
_FOLDED_WEEKDAYS = tuple(fold_accents(w) for w in WEEKDAYS)


def is_separator(line: str) -> bool:
    return any(p.match(line) for p in _SEPARATORS)


def is_date_line(line: str) -> bool:
    folded = fold_accents(line.lower())
    return len(line) > 15 and " de " in folded and any(w in folded for w in _FOLDED_WEEKDAYS)


def pharmacy_column_lines(lines: Sequence[str]) -> List[str]:
    return [line for line in lines if len(line) > 3 and not is_separator(line)]


def date_column_lines(lines: Sequence[str]) -> List[str]:
    """Keep date rows, folding a standalone year line into the next date."""
    out: List[str] = []
    pending_year: Optional[str] = None
    for line in lines:
        year = _YEAR_LINE.match(line.strip())
        if year:
            pending_year = year.group(1)
            continue
        if not is_date_line(line):
            LOGGER.debug("Skipping non-date line in date column: %r", line)
            continue
        if pending_year and not re.search(r"\b\d{4}\b", line):
            line = f"{line} {pending_year}"
        pending_year = None
        if line not in out:
            out.append(line)
    return out


def pharmacies_from_column(lines: Sequence[str]) -> List[Pharmacy]:
    """Top-down column text opens with a FARMACIA line; bottom-up text ends with one."""
    cleaned = pharmacy_column_lines(lines)
    if not cleaned:
        return []
    if is_pharmacy_name(cleaned[0]):
        return parse_triples(group_column_lines(cleaned))
    return parse_batch(cleaned)


def columns_from_text(lines: Sequence[str]) -> Tuple[List[str], List[str], List[str]]:
    """Split plain page text into date lines and day/night pharmacy lines.

    Pharmacy blocks alternate day, night, day, night in reading order.
    """
    date_lines: List[str] = []
    pharmacy_lines: List[str] = []
    after_name = False
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if _YEAR_LINE.match(line) or LONG_DATE.search(line):
            date_lines.append(line)
            after_name = False
            continue
        if is_separator(line):
            continue
        if is_pharmacy_name(line):
            pharmacy_lines.append(line)
            after_name = True
            continue
        if after_name or _STREET_PREFIX.match(line) or PHONE_PATTERN.search(line):
            pharmacy_lines.append(line)
        else:
            LOGGER.debug("Skipping unrecognised line: %r", line)
        after_name = False

    day_lines: List[str] = []
    night_lines: List[str] = []
    for idx, (name, address, info) in enumerate(group_column_lines(pharmacy_lines)):
        target = day_lines if idx % 2 == 0 else night_lines
        target.extend(part for part in (name, address, info) if part)
    return date_lines, day_lines, night_lines


def build_schedules(
    dates: Sequence[DutyDate], day: Sequence[Pharmacy], night: Sequence[Pharmacy]
) -> List[PharmacySchedule]:
    count = min(len(dates), len(day), len(night))
    if not (len(dates) == len(day) == len(night)):
        LOGGER.warning(
            "Column mismatch: %d dates, %d day, %d night; keeping %d rows",
            len(dates),
            len(day),
            len(night),
            count,
        )
    return [PharmacySchedule.day_night(dates[i], [day[i]], [night[i]]) for i in range(count)]


class SegoviaCapitalStrategy:
    region_id = REGION_ID

    def __init__(self, reference_year: int) -> None:
        self.reference_year = reference_year

    def _dates(self, lines: Sequence[str], years: YearRollover) -> List[DutyDate]:
        dates: List[DutyDate] = []
        for line in lines:
            parsed = DutyDate.parse(line)
            if parsed is None:
                LOGGER.debug("Unparseable date line: %r", line)
                continue
            if parsed.year is not None:
                years.year = parsed.year
            else:
                month = parsed.month_number or 0
                parsed = parsed.with_year(years.resolve(parsed.day, month))
            dates.append(parsed)
        return dedupe_dates(dates)

    def parse_columns(
        self,
        date_lines: Sequence[str],
        day_lines: Sequence[str],
        night_lines: Sequence[str],
        *,
        years: Optional[YearRollover] = None,
    ) -> List[PharmacySchedule]:
        tracker = years or YearRollover(self.reference_year - 1)
        dates = self._dates(date_column_lines(date_lines), tracker)
        return build_schedules(
            dates, pharmacies_from_column(day_lines), pharmacies_from_column(night_lines)
        )

    def _page_columns(self, pages: PdfPages, index: int) -> Tuple[List[str], List[str], List[str]]:
        width, height = pages.page_size(index)
        if width > 0 and height > 0:
            cols = capital_columns(width, height)
            date_lines = pages.clip_lines(index, cols.date)
            if date_lines:
                return (
                    date_lines,
                    pages.clip_lines(index, cols.day),
                    pages.clip_lines(index, cols.night),
                )
        LOGGER.debug("Page %d: no column geometry, scanning plain text", index + 1)
        return columns_from_text(pages.page_lines(index))

    def parse(self, pages: PdfPages) -> ScheduleMap:
        years = YearRollover(self.reference_year - 1)
        schedules: List[PharmacySchedule] = []
        for index in range(pages.page_count):
            date_lines, day_lines, night_lines = self._page_columns(pages, index)
            page_schedules = self.parse_columns(date_lines, day_lines, night_lines, years=years)
            LOGGER.debug("Page %d: %d schedules", index + 1, len(page_schedules))
            schedules.extend(page_schedules)
        if not schedules:
            return {}
        ordered = sort_schedules(resolve_years(schedules, self.reference_year))
        return {catalog.locations_for(REGION_ID)[0]: ordered}
