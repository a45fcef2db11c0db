from __future__ import annotations

from datetime import datetime

import pytest

from conftest import ESPINAR_LINES

from farmaguardia.core import catalog
from farmaguardia.core.timespan import FULL_DAY, SpanAnchor
from farmaguardia.parsing.service import ParserSettings, ScheduleService, UnknownRegion
from farmaguardia.pdf.reader import DEFAULT_ENGINES


class _Broken:
    region_id = "el-espinar"

    def parse(self, pages):
        raise ValueError("unexpected layout")


def test_missing_file_gives_empty_map(service, tmp_path):
    assert service.parse_pdf("el-espinar", str(tmp_path / "missing.pdf")) == {}


def test_unknown_region():
    service = ScheduleService(ParserSettings(reference_year=2026))
    with pytest.raises(UnknownRegion):
        service.strategy_for("madrid")
    assert service.parse_lines("madrid", [["01-ene"]]) == {}


def test_strategy_errors_are_contained():
    service = ScheduleService(ParserSettings(reference_year=2026), {"el-espinar": _Broken()})
    assert service.parse_lines("el-espinar", [ESPINAR_LINES]) == {}


def test_parse_lines_uses_region_strategy(service):
    result = service.parse_lines("el-espinar", [ESPINAR_LINES])
    assert len(result[catalog.location("el-espinar")]) == 8


def test_schedules_for_location(service, espinar_pdf):
    schedules = service.schedules_for(catalog.location("el-espinar"), str(espinar_pdf))
    assert len(schedules) == 8
    assert service.schedules_for(catalog.location("cuellar"), str(espinar_pdf)) == []


def test_current_schedule_uses_settings(service):
    schedules = service.parse_lines("el-espinar", [ESPINAR_LINES])[catalog.location("el-espinar")]
    schedule, span = service.current_schedule(schedules, datetime(2026, 1, 3, 12, 0))
    assert span == FULL_DAY
    assert schedule.date.day == 3


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("FARMAGUARDIA_TZ", "Atlantic/Canary")
    monkeypatch.setenv("FARMAGUARDIA_ENGINES", "pdfminer, mupdf")
    monkeypatch.setenv("FARMAGUARDIA_YEAR", "2030")
    monkeypatch.setenv("FARMAGUARDIA_SPAN_ANCHOR", "end")
    settings = ParserSettings.from_env()
    assert settings.engines == ("pdfminer", "mupdf")
    assert settings.reference_year == 2030
    assert settings.span_anchor is SpanAnchor.END_DAY
    assert settings.tz.key == "Atlantic/Canary"


def test_settings_defaults(monkeypatch):
    for name in ("FARMAGUARDIA_TZ", "FARMAGUARDIA_ENGINES", "FARMAGUARDIA_YEAR", "FARMAGUARDIA_SPAN_ANCHOR"):
        monkeypatch.delenv(name, raising=False)
    settings = ParserSettings.from_env()
    assert settings.engines == DEFAULT_ENGINES
    assert settings.timezone == "Europe/Madrid"
    assert settings.span_anchor is SpanAnchor.START_DAY
