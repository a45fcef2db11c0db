"""Segovia Rural: one roster, eight health zones (ZBS).

Every useful line carries a ``DD-mon-YY`` date followed by the towns on duty
that day across all zones. Each zone recognises its own town tokens on the
line. La Granja and Cantalejo have no reliable rows of their own; their
calendars are borrowed from Navas de la Asunción.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from farmaguardia.core import catalog
from farmaguardia.core.aggregate import merge_schedule, sort_schedules
from farmaguardia.core.catalog import RosterEntry
from farmaguardia.core.constants import fold_accents
from farmaguardia.core.dutydate import DutyDate
from farmaguardia.core.models import PharmacySchedule, ShiftMap
from farmaguardia.parsing.base import ScheduleMap
from farmaguardia.pdf.engine_base import PdfPages

LOGGER = logging.getLogger(__name__)

REGION_ID = "segovia-rural"
NAVAS_ZONE = "navas-asuncion"
LA_GRANJA_ZONE = "la-granja"
CANTALEJO_ZONE = "cantalejo"

ZoneSchedules = Dict[str, List[PharmacySchedule]]


def _fold(text: str) -> str:
    return fold_accents(text or "").upper()


class ZoneAccumulator:
    """Per-zone schedules; same-date entries merge by concatenation."""

    def __init__(self) -> None:
        self._schedules: ZoneSchedules = {}
        self._slots: Dict[Tuple[str, tuple], int] = {}

    def add(self, zone: str, schedule: PharmacySchedule) -> None:
        bucket = self._schedules.setdefault(zone, [])
        slot = (zone, schedule.date.key)
        idx = self._slots.get(slot)
        if idx is None:
            self._slots[slot] = len(bucket)
            bucket.append(schedule)
        else:
            bucket[idx] = merge_schedule(bucket[idx], schedule)

    def result(self) -> ZoneSchedules:
        return {zone: sort_schedules(items) for zone, items in self._schedules.items()}


def first_la_granja(
    lines: Sequence[str], pharmacies: Tuple[RosterEntry, RosterEntry]
) -> Optional[int]:
    """Index (0 or 1) of the La Granja pharmacy printed first, if any.

    The first line mentioning either token decides; when both share that
    line the leftmost wins.
    """
    tokens = [p.token for p in pharmacies]
    for line in lines:
        hits = [(line.find(token), idx) for idx, token in enumerate(tokens)]
        hits = [hit for hit in hits if hit[0] >= 0]
        if hits:
            return min(hits)[1]
    return None


def alternate_weekly(
    template: Sequence[PharmacySchedule], odd: RosterEntry, even: RosterEntry
) -> List[PharmacySchedule]:
    """Clone ``template`` dates; odd weeks go to ``odd``, even weeks to ``even``."""
    out: List[PharmacySchedule] = []
    for index, schedule in enumerate(template):
        week = index // 7 + 1
        entry = odd if week % 2 == 1 else even
        out.append(PharmacySchedule(schedule.date, {entry.span: [entry.to_pharmacy()]}))
    return out


def all_week(template: Sequence[PharmacySchedule], entries: Sequence[RosterEntry]) -> List[PharmacySchedule]:
    out: List[PharmacySchedule] = []
    for schedule in template:
        shifts: ShiftMap = {}
        for entry in entries:
            shifts.setdefault(entry.span, []).append(entry.to_pharmacy())
        out.append(PharmacySchedule(schedule.date, shifts))
    return out


class SegoviaRuralStrategy:
    region_id = REGION_ID

    def __init__(
        self,
        rosters: Optional[Dict[str, Dict[str, RosterEntry]]] = None,
        la_granja: Optional[Tuple[RosterEntry, RosterEntry]] = None,
        cantalejo: Optional[List[RosterEntry]] = None,
    ) -> None:
        self.rosters = rosters if rosters is not None else catalog.rural_rosters()
        self.la_granja = la_granja if la_granja is not None else catalog.la_granja_pharmacies()
        self.cantalejo = cantalejo if cantalejo is not None else catalog.cantalejo_pharmacies()
        self._needles = {
            zone: [(_fold(token), entry) for token, entry in table.items()]
            for zone, table in self.rosters.items()
        }

    def zone_shifts(self, line: str) -> Dict[str, ShiftMap]:
        """Pharmacies each zone has on ``line``, grouped by duty span."""
        text = _fold(line)
        out: Dict[str, ShiftMap] = {}
        for zone, needles in self._needles.items():
            shifts: ShiftMap = {}
            for needle, entry in needles:
                if needle in text:
                    shifts.setdefault(entry.span, []).append(entry.to_pharmacy())
            out[zone] = shifts
        return out

    def scan(self, lines: Sequence[str], acc: ZoneAccumulator) -> None:
        for line in lines:
            date = DutyDate.parse_rural(line)
            if date is None:
                LOGGER.debug("Skipping line without date: %r", line)
                continue
            for zone, shifts in self.zone_shifts(line).items():
                acc.add(zone, PharmacySchedule(date, shifts))

    def derived_zones(self, zones: ZoneSchedules, lines: Sequence[str]) -> ZoneSchedules:
        template = zones.get(NAVAS_ZONE)
        if not template:
            LOGGER.debug("No %s calendar to borrow; skipping derived zones", NAVAS_ZONE)
            return {}
        derived: ZoneSchedules = {}
        first = first_la_granja(lines, self.la_granja)
        if first is None:
            LOGGER.warning("Could not tell which La Granja pharmacy starts; zone omitted")
        else:
            # The pharmacy printed first takes the even weeks.
            odd = self.la_granja[1 - first]
            even = self.la_granja[first]
            derived[LA_GRANJA_ZONE] = alternate_weekly(template, odd, even)
        derived[CANTALEJO_ZONE] = all_week(template, self.cantalejo)
        return derived

    def parse_lines(self, pages_lines: Sequence[Sequence[str]]) -> ZoneSchedules:
        acc = ZoneAccumulator()
        for page_number, lines in enumerate(pages_lines, start=1):
            LOGGER.debug("Scanning rural page %d (%d lines)", page_number, len(lines))
            self.scan(lines, acc)
        zones = acc.result()
        all_lines = [line for lines in pages_lines for line in lines]
        zones.update(self.derived_zones(zones, all_lines))
        return zones

    def parse(self, pages: PdfPages) -> ScheduleMap:
        zones = self.parse_lines(pages.all_lines())
        out: ScheduleMap = {}
        for zbs in catalog.zbs_list():
            schedules = zones.get(zbs.id)
            if schedules:
                out[catalog.zone_location(zbs.id)] = schedules
        return out
