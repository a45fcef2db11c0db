from __future__ import annotations

from datetime import datetime

import pytest

from farmaguardia.core.dutydate import (
    DutyDate,
    abbreviation_to_number,
    iter_short_dates,
    iter_spelled_dates,
    month_to_number,
)
from farmaguardia.core.timeutil import MADRID


def test_month_tables():
    assert month_to_number("enero") == 1
    assert month_to_number("Diciembre") == 12
    assert month_to_number("smarch") is None
    assert abbreviation_to_number("ago") == 8
    assert abbreviation_to_number("DIC") == 12


def test_parse_long_form_with_explicit_year():
    d = DutyDate.parse("miércoles, 19 de febrero de 2025", year=2030)
    assert d == DutyDate("miércoles", 19, "febrero", 2025)


def test_parse_long_form_without_year_uses_argument():
    d = DutyDate.parse("Lunes, 3 de marzo", year=2025)
    assert (d.day_of_week, d.day, d.month, d.year) == ("lunes", 3, "marzo", 2025)


def test_parse_long_form_accentless_weekday():
    d = DutyDate.parse("miercoles, 1 de enero 2025")
    assert d.day_of_week == "miércoles"
    assert d.year == 2025


def test_parse_long_form_rejects_noise():
    assert DutyDate.parse("FARMACIA LOPEZ") is None


def test_parse_short_handles_unicode_hyphen():
    d = DutyDate.parse_short("07\u2010jul", 2025)
    assert d == DutyDate("lunes", 7, "julio", 2025)


def test_iter_short_dates_finds_every_token():
    assert list(iter_short_dates("29-dic 30-dic  01-ene")) == [(29, 12), (30, 12), (1, 1)]


def test_parse_rural_computes_weekday():
    d = DutyDate.parse_rural("15-jul-25 RIAZA")
    assert d == DutyDate("martes", 15, "julio", 2025)


def test_parse_rural_rejects_bad_month():
    assert DutyDate.parse_rural("15-xyz-25") is None


def test_to_timestamp_is_local_midnight():
    d = DutyDate("martes", 15, "julio", 2025)
    assert d.to_timestamp() == datetime(2025, 7, 15, tzinfo=MADRID).timestamp()


def test_sort_key_requires_year():
    with pytest.raises(ValueError):
        DutyDate("lunes", 1, "enero").sort_key
    assert DutyDate("lunes", 1, "enero", 2024).sort_key == (2024, 1, 1)


def test_to_date_invalid_day_is_none():
    assert DutyDate("lunes", 31, "febrero", 2025).to_date() is None


def test_iter_spelled_dates():
    line = "DOMINGO 31 DE AGOSTO Y LUNES 1 DE SEPTIEMBRE  STA. MARINA"
    assert list(iter_spelled_dates(line)) == [(31, 8), (1, 9)]
    assert list(iter_spelled_dates("31 DE AGOSTO")) == []
