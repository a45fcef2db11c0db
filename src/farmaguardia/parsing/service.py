from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from zoneinfo import ZoneInfo

from farmaguardia.core.constants import DEFAULT_TZ
from farmaguardia.core.models import DutyLocation, PharmacySchedule
from farmaguardia.core.timespan import Instant, SpanAnchor
from farmaguardia.core.timeutil import OnDuty, find_current_schedule
from farmaguardia.parsing.base import ParseStrategy, ScheduleMap
from farmaguardia.parsing.capital import SegoviaCapitalStrategy
from farmaguardia.parsing.rotation import cuellar_strategy, el_espinar_strategy
from farmaguardia.parsing.rural import SegoviaRuralStrategy
from farmaguardia.pdf.engine_base import TextPages
from farmaguardia.pdf.reader import DEFAULT_ENGINES, open_pdf

LOGGER = logging.getLogger(__name__)


class UnknownRegion(KeyError):
    """No parsing strategy is registered for a region id."""


def _current_year(tz_name: str) -> int:
    return datetime.now(tz=ZoneInfo(tz_name)).year


@dataclass(frozen=True)
class ParserSettings:
    timezone: str = DEFAULT_TZ
    engines: Tuple[str, ...] = DEFAULT_ENGINES
    reference_year: int = field(default_factory=lambda: _current_year(DEFAULT_TZ))
    span_anchor: SpanAnchor = SpanAnchor.START_DAY

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "ParserSettings":
        tz_name = os.environ.get("FARMAGUARDIA_TZ") or DEFAULT_TZ
        engines_raw = os.environ.get("FARMAGUARDIA_ENGINES")
        engines = (
            tuple(e.strip() for e in engines_raw.split(",") if e.strip())
            if engines_raw
            else DEFAULT_ENGINES
        )
        year_raw = os.environ.get("FARMAGUARDIA_YEAR")
        year = int(year_raw) if year_raw and year_raw.isdigit() else _current_year(tz_name)
        anchor = SpanAnchor(os.environ.get("FARMAGUARDIA_SPAN_ANCHOR", SpanAnchor.START_DAY.value))
        return cls(timezone=tz_name, engines=engines, reference_year=year, span_anchor=anchor)


def default_strategies(settings: ParserSettings) -> Dict[str, ParseStrategy]:
    year = settings.reference_year
    return {
        "segovia-capital": SegoviaCapitalStrategy(year),
        "el-espinar": el_espinar_strategy(year),
        "cuellar": cuellar_strategy(year),
        "segovia-rural": SegoviaRuralStrategy(),
    }


class ScheduleService:
    """Turns a local roster PDF into schedules for one region.

    Construct one per caller and pass it around; it holds no global state.
    """

    def __init__(
        self,
        settings: Optional[ParserSettings] = None,
        strategies: Optional[Dict[str, ParseStrategy]] = None,
    ) -> None:
        self.settings = settings or ParserSettings()
        self.strategies = strategies if strategies is not None else default_strategies(self.settings)

    def strategy_for(self, region_id: str) -> ParseStrategy:
        try:
            return self.strategies[region_id]
        except KeyError:
            raise UnknownRegion(region_id) from None

    def parse_pdf(self, region_id: str, path: str, *, force_refresh: bool = False) -> ScheduleMap:
        """Parse ``path`` with the region's strategy; failures return ``{}``.

        ``force_refresh`` belongs to the download cache and is ignored here.
        """
        try:
            strategy = self.strategy_for(region_id)
            with open_pdf(path, self.settings.engines) as pages:
                result = strategy.parse(pages)
        except Exception as exc:
            LOGGER.warning("Could not parse %s for %s: %s", path, region_id, exc)
            return {}
        if not result:
            LOGGER.warning("No schedules found in %s for %s", path, region_id)
        return result

    def parse_lines(self, region_id: str, pages_lines: Sequence[Sequence[str]]) -> ScheduleMap:
        """Same as :meth:`parse_pdf` for text that is already extracted."""
        try:
            strategy = self.strategy_for(region_id)
            result = strategy.parse(TextPages([list(lines) for lines in pages_lines]))
        except Exception as exc:
            LOGGER.warning("Could not parse text for %s: %s", region_id, exc)
            return {}
        if not result:
            LOGGER.warning("No schedules found in text for %s", region_id)
        return result

    def schedules_for(self, location: DutyLocation, path: str) -> List[PharmacySchedule]:
        return self.parse_pdf(location.region_id, path).get(location, [])

    def current_schedule(self, schedules: Sequence[PharmacySchedule], when: Instant) -> Optional[OnDuty]:
        return find_current_schedule(
            schedules, when, anchor=self.settings.span_anchor, tz=self.settings.tz
        )
