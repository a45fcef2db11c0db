from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, TypeVar

from farmaguardia.core.dutydate import DutyDate
from farmaguardia.core.models import PharmacySchedule

LOGGER = logging.getLogger(__name__)

K = TypeVar("K")


def dedupe_dates(dates: Iterable[DutyDate]) -> List[DutyDate]:
    """Drop repeated ``(day, month, year)`` keys, first occurrence wins."""
    seen = set()
    out: List[DutyDate] = []
    for d in dates:
        if d.key in seen:
            LOGGER.debug("Dropping repeated date %s", d)
            continue
        seen.add(d.key)
        out.append(d)
    return out


def resolve_years(schedules: Iterable[PharmacySchedule], year: int) -> List[PharmacySchedule]:
    """Fill in a year for schedules whose date still lacks one."""
    out: List[PharmacySchedule] = []
    for schedule in schedules:
        if schedule.date.year is None:
            LOGGER.warning("Date %s has no year; assuming %s", schedule.date, year)
            schedule = PharmacySchedule(schedule.date.with_year(year), schedule.shifts)
        out.append(schedule)
    return out


def sort_schedules(schedules: Iterable[PharmacySchedule]) -> List[PharmacySchedule]:
    """Chronological order; equal dates keep the order they arrived in.

    Raises ValueError when a date has no year, so callers must run
    :func:`resolve_years` first.
    """
    indexed = list(enumerate(schedules))
    indexed.sort(key=lambda pair: (pair[1].date.sort_key, pair[0]))
    return [schedule for _, schedule in indexed]


def merge_schedule(existing: PharmacySchedule, new: PharmacySchedule) -> PharmacySchedule:
    shifts = {span: list(pharmacies) for span, pharmacies in existing.shifts.items()}
    for span, pharmacies in new.shifts.items():
        shifts.setdefault(span, []).extend(pharmacies)
    return PharmacySchedule(existing.date, shifts)


def merge_by_date(schedules: Iterable[PharmacySchedule]) -> List[PharmacySchedule]:
    """Collapse same-date schedules by concatenating their shift lists."""
    slots: Dict[tuple, int] = {}
    out: List[PharmacySchedule] = []
    for schedule in schedules:
        key = schedule.date.key
        idx: Optional[int] = slots.get(key)
        if idx is None:
            slots[key] = len(out)
            out.append(schedule)
        else:
            out[idx] = merge_schedule(out[idx], schedule)
    return out


def merge_maps(
    first: Dict[K, List[PharmacySchedule]], second: Dict[K, List[PharmacySchedule]]
) -> Dict[K, List[PharmacySchedule]]:
    merged: Dict[K, List[PharmacySchedule]] = {}
    for source in (first, second):
        for location, schedules in source.items():
            merged.setdefault(location, []).extend(schedules)
    return {location: merge_by_date(schedules) for location, schedules in merged.items()}
