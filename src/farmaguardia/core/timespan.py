"""Duty intervals and their cross-midnight semantics."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

from zoneinfo import ZoneInfo

from farmaguardia.core.constants import DEFAULT_TZ

Instant = Union[datetime, float, int]

_KEY_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})\s*$")


class SpanAnchor(str, Enum):
    """Which calendar day a cross-midnight span's date refers to.

    ``START_DAY``: the date is the evening the shift starts (22:00 on the
    date until 10:15 the next morning).
    ``END_DAY``: the date is the morning the shift ends (22:00 the day
    before until 10:15 on the date).
    """

    START_DAY = "start"
    END_DAY = "end"


@dataclass(frozen=True)
class DutyTimeSpan:
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int

    @property
    def spans_multiple_days(self) -> bool:
        return (self.end_hour, self.end_minute) < (self.start_hour, self.start_minute)

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute

    @property
    def is_full_day(self) -> bool:
        return self.start_minutes == 0 and self.end_minutes == 23 * 60 + 59

    def contains_time_of_day(self, hour: int, minute: int) -> bool:
        t = hour * 60 + minute
        if self.spans_multiple_days:
            return t >= self.start_minutes or t <= self.end_minutes
        return self.start_minutes <= t <= self.end_minutes

    def window(
        self,
        day: date,
        *,
        anchor: SpanAnchor = SpanAnchor.START_DAY,
        tz: Optional[ZoneInfo] = None,
    ) -> tuple[datetime, datetime]:
        zone = tz or ZoneInfo(DEFAULT_TZ)
        start_day = end_day = day
        if self.spans_multiple_days:
            if anchor is SpanAnchor.START_DAY:
                end_day = day + timedelta(days=1)
            else:
                start_day = day - timedelta(days=1)
        start = datetime.combine(start_day, time(self.start_hour, self.start_minute), tzinfo=zone)
        end = datetime.combine(end_day, time(self.end_hour, self.end_minute), tzinfo=zone)
        return start, end

    def contains(
        self,
        duty_date,
        when: Instant,
        *,
        anchor: SpanAnchor = SpanAnchor.START_DAY,
        tz: Optional[ZoneInfo] = None,
    ) -> bool:
        """Return True when ``when`` falls inside this span on ``duty_date``.

        ``duty_date`` is a :class:`DutyDate` (or a plain ``datetime.date``).
        Both ends are inclusive. Dates that cannot be placed on a calendar
        never contain anything.
        """
        zone = tz or ZoneInfo(DEFAULT_TZ)
        day = _as_date(duty_date)
        if day is None:
            return False
        moment = _as_datetime(when, zone)
        start, end = self.window(day, anchor=anchor, tz=zone)
        return start <= moment <= end

    def is_same_day(self, duty_date, when: Instant, *, tz: Optional[ZoneInfo] = None) -> bool:
        zone = tz or ZoneInfo(DEFAULT_TZ)
        day = _as_date(duty_date)
        if day is None:
            return False
        return _as_datetime(when, zone).date() == day

    @property
    def display_name(self) -> str:
        return f"{self.start_hour:02d}:{self.start_minute:02d} - {self.end_hour:02d}:{self.end_minute:02d}"

    def to_key(self) -> str:
        return f"{self.start_hour:02d}:{self.start_minute:02d}-{self.end_hour:02d}:{self.end_minute:02d}"

    @classmethod
    def from_key(cls, key: str) -> "DutyTimeSpan":
        m = _KEY_RE.match(key or "")
        if not m:
            raise ValueError(f"Invalid time span key: {key!r}")
        sh, sm, eh, em = (int(g) for g in m.groups())
        if sh > 23 or eh > 23 or sm > 59 or em > 59:
            raise ValueError(f"Invalid time span key: {key!r}")
        return cls(sh, sm, eh, em)

    @property
    def shift_label(self) -> str:
        return _describe(self)[0]

    @property
    def shift_info(self) -> str:
        return _describe(self)[1]


CAPITAL_DAY = DutyTimeSpan(10, 15, 22, 0)
CAPITAL_NIGHT = DutyTimeSpan(22, 0, 10, 15)
FULL_DAY = DutyTimeSpan(0, 0, 23, 59)
RURAL_DAYTIME = DutyTimeSpan(10, 0, 20, 0)
RURAL_EXTENDED_DAYTIME = DutyTimeSpan(10, 0, 22, 0)


# (full_day, multi_day, extended) -> (label, info template)
_DESCRIPTIONS = {
    (True, False, False): (
        "Guardia de 24 horas",
        "La guardia cubre las 24 horas del día, de {start} a {end}.",
    ),
    (False, True, False): (
        "Guardia nocturna",
        "El turno nocturno empieza a las {start} y se extiende hasta las {end} del día siguiente.",
    ),
    (False, False, False): (
        "Guardia diurna",
        "El turno diurno empieza a las {start} y se extiende hasta las {end} del mismo día.",
    ),
    (False, False, True): (
        "Guardia diurna extendida",
        "El turno diurno extendido empieza a las {start} y se extiende hasta las {end} del mismo día.",
    ),
}
_FALLBACK_DESCRIPTION = ("Guardia", "Guardia de {start} a {end}.")


def _describe(span: DutyTimeSpan) -> tuple[str, str]:
    # Only the rural 10:00 start counts as "extended" when it runs to 22:00;
    # the capital day shift (10:15-22:00) is the regular day shift.
    extended = (
        not span.spans_multiple_days
        and span.end_minutes >= 22 * 60
        and span.start_minutes < CAPITAL_DAY.start_minutes
        and not span.is_full_day
    )
    flags = (span.is_full_day, span.spans_multiple_days, extended)
    label, template = _DESCRIPTIONS.get(flags, _FALLBACK_DESCRIPTION)
    start = f"{span.start_hour:02d}:{span.start_minute:02d}"
    end = f"{span.end_hour:02d}:{span.end_minute:02d}"
    return label, template.format(start=start, end=end)


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    to_date = getattr(value, "to_date", None)
    if callable(to_date):
        return to_date()
    return None


def _as_datetime(value: Instant, zone: ZoneInfo) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=zone)
        return value.astimezone(zone)
    return datetime.fromtimestamp(float(value), tz=zone)
