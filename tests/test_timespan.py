from __future__ import annotations

from datetime import date, datetime

import pytest

from farmaguardia.core.timespan import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    RURAL_DAYTIME,
    RURAL_EXTENDED_DAYTIME,
    DutyTimeSpan,
    SpanAnchor,
)
from farmaguardia.core.timeutil import MADRID


def test_only_night_span_crosses_midnight():
    assert CAPITAL_NIGHT.spans_multiple_days
    for span in (CAPITAL_DAY, FULL_DAY, RURAL_DAYTIME, RURAL_EXTENDED_DAYTIME):
        assert not span.spans_multiple_days


@pytest.mark.parametrize(
    "hour, minute, expected",
    [(23, 0, True), (10, 0, True), (10, 15, True), (15, 0, False), (22, 0, True), (10, 16, False)],
)
def test_night_contains_time_of_day_wraps(hour, minute, expected):
    assert CAPITAL_NIGHT.contains_time_of_day(hour, minute) is expected


def test_day_contains_time_of_day_inclusive_edges():
    assert CAPITAL_DAY.contains_time_of_day(10, 15)
    assert CAPITAL_DAY.contains_time_of_day(22, 0)
    assert not CAPITAL_DAY.contains_time_of_day(10, 14)


def test_cross_midnight_anchor_start_day():
    after_midnight = datetime(2025, 7, 26, 0, 5, tzinfo=MADRID)
    assert CAPITAL_NIGHT.contains(date(2025, 7, 25), after_midnight)
    assert not CAPITAL_NIGHT.contains(date(2025, 7, 26), after_midnight)


def test_cross_midnight_anchor_end_day():
    after_midnight = datetime(2025, 7, 26, 0, 5, tzinfo=MADRID)
    assert CAPITAL_NIGHT.contains(date(2025, 7, 26), after_midnight, anchor=SpanAnchor.END_DAY)
    assert not CAPITAL_NIGHT.contains(date(2025, 7, 25), after_midnight, anchor=SpanAnchor.END_DAY)


def test_contains_accepts_epoch_seconds():
    noon = datetime(2025, 7, 25, 12, 0, tzinfo=MADRID)
    assert CAPITAL_DAY.contains(date(2025, 7, 25), noon.timestamp())
    assert not CAPITAL_NIGHT.contains(date(2025, 7, 25), noon.timestamp())


def test_contains_unplaceable_date_is_false():
    assert not FULL_DAY.contains(object(), datetime(2025, 7, 25, 12, 0, tzinfo=MADRID))


@pytest.mark.parametrize(
    "span, label",
    [
        (CAPITAL_DAY, "Guardia diurna"),
        (RURAL_DAYTIME, "Guardia diurna"),
        (CAPITAL_NIGHT, "Guardia nocturna"),
        (FULL_DAY, "Guardia de 24 horas"),
        (RURAL_EXTENDED_DAYTIME, "Guardia diurna extendida"),
    ],
)
def test_shift_labels(span, label):
    assert span.shift_label == label


def test_shift_info_sentences():
    assert CAPITAL_NIGHT.shift_info == (
        "El turno nocturno empieza a las 22:00 y se extiende hasta las 10:15 del día siguiente."
    )
    assert CAPITAL_DAY.shift_info == (
        "El turno diurno empieza a las 10:15 y se extiende hasta las 22:00 del mismo día."
    )


def test_display_name_and_key():
    assert CAPITAL_NIGHT.display_name == "22:00 - 10:15"
    assert CAPITAL_NIGHT.to_key() == "22:00-10:15"
    assert DutyTimeSpan.from_key("22:00-10:15") == CAPITAL_NIGHT


@pytest.mark.parametrize("bad", ["", "25:00-10:00", "10-12", "aa:bb-cc:dd"])
def test_from_key_rejects_garbage(bad):
    with pytest.raises(ValueError):
        DutyTimeSpan.from_key(bad)


def test_spans_are_usable_as_keys():
    shifts = {DutyTimeSpan(10, 15, 22, 0): ["x"]}
    assert shifts[CAPITAL_DAY] == ["x"]
