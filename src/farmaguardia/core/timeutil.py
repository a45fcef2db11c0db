"""Clock helpers anchored to the Europe/Madrid timezone."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence, Tuple

from zoneinfo import ZoneInfo

from farmaguardia.core.constants import DEFAULT_TZ
from farmaguardia.core.models import PharmacySchedule
from farmaguardia.core.timespan import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    DutyTimeSpan,
    Instant,
    SpanAnchor,
)

MADRID = ZoneInfo(DEFAULT_TZ)

OnDuty = Tuple[PharmacySchedule, DutyTimeSpan]


def now_local(tz: Optional[ZoneInfo] = None) -> datetime:
    return datetime.now(tz=tz or MADRID)


def combine_local(day: date, when: time, tz: Optional[ZoneInfo] = None) -> datetime:
    return datetime.combine(day, when, tzinfo=tz or MADRID)


def as_local(when: Instant, tz: Optional[ZoneInfo] = None) -> datetime:
    zone = tz or MADRID
    if isinstance(when, datetime):
        return when.replace(tzinfo=zone) if when.tzinfo is None else when.astimezone(zone)
    return datetime.fromtimestamp(float(when), tz=zone)


def _on(schedules: Sequence[PharmacySchedule], day: date) -> Optional[PharmacySchedule]:
    for schedule in schedules:
        if schedule.date.to_date() == day:
            return schedule
    return None


def find_current_schedule(
    schedules: Sequence[PharmacySchedule],
    when: Instant,
    *,
    anchor: SpanAnchor = SpanAnchor.START_DAY,
    tz: Optional[ZoneInfo] = None,
) -> Optional[OnDuty]:
    """Return the schedule and shift on duty at ``when``.

    Day/night rosters hand over at 10:15 and 22:00: before 10:15 the night
    shift of the previous date is still on. Full-day rosters match the
    calendar day. Anything else is matched with ``DutyTimeSpan.contains``
    and, failing that, falls back to the first shift dated today.
    """
    zone = tz or MADRID
    local = as_local(when, zone)
    today = local.date()

    todays = _on(schedules, today)
    if todays is not None and FULL_DAY in todays.shifts:
        return todays, FULL_DAY

    minutes = local.hour * 60 + local.minute
    if CAPITAL_DAY.start_minutes <= minutes < CAPITAL_NIGHT.start_minutes:
        if todays is not None and CAPITAL_DAY in todays.shifts:
            return todays, CAPITAL_DAY
    else:
        evening = minutes >= CAPITAL_NIGHT.start_minutes
        if anchor is SpanAnchor.START_DAY:
            night_date = today if evening else today - timedelta(days=1)
        else:
            night_date = today + timedelta(days=1) if evening else today
        night = _on(schedules, night_date)
        if night is not None and CAPITAL_NIGHT in night.shifts:
            return night, CAPITAL_NIGHT

    for schedule in schedules:
        for span in schedule.shifts:
            if span.contains(schedule.date, local, anchor=anchor, tz=zone):
                return schedule, span

    if todays is not None and todays.shifts:
        return todays, next(iter(todays.shifts))
    return None
