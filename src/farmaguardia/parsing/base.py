from __future__ import annotations

from typing import Dict, List, Protocol

from farmaguardia.core.models import DutyLocation, PharmacySchedule
from farmaguardia.pdf.engine_base import PdfPages

ScheduleMap = Dict[DutyLocation, List[PharmacySchedule]]


class ParseStrategy(Protocol):
    """One roster layout. ``parse`` never raises on bad input text."""

    region_id: str

    def parse(self, pages: PdfPages) -> ScheduleMap:
        ...
