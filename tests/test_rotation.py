from __future__ import annotations

from conftest import ESPINAR_LINES

from farmaguardia.core.constants import MISSING_PHONE
from farmaguardia.core.timespan import FULL_DAY
from farmaguardia.parsing.rotation import (
    RotationStrategy,
    cuellar_strategy,
    el_espinar_strategy,
    espinar_site,
    token_site,
)


def _keys(schedules):
    return [(s.date.day, s.date.month, s.date.year) for s in schedules]


def test_espinar_site_tokens():
    assert espinar_site("Avda. de la Hontanilla, 18") == "AV. HONTANILLA 18"
    assert espinar_site("C/ Marqués Perales") == "C/ MARQUES PERALES"
    assert espinar_site("SAN RAFAEL") == "SAN RAFAEL"
    assert espinar_site("SAN RAFAEL 2025") is None


def test_espinar_rolls_year_and_dedupes():
    schedules = el_espinar_strategy(2026).parse_lines([ESPINAR_LINES])
    assert _keys(schedules) == [
        (29, "diciembre", 2025),
        (30, "diciembre", 2025),
        (31, "diciembre", 2025),
        (1, "enero", 2026),
        (2, "enero", 2026),
        (3, "enero", 2026),
        (4, "enero", 2026),
        (5, "enero", 2026),
    ]
    assert schedules[0].date.day_of_week == "lunes"
    assert schedules[0].shifts[FULL_DAY][0].name == "FARMACIA ANA MARÍA APARICIO HERNAN"
    assert schedules[-1].shifts[FULL_DAY][0].name == "Farmacia San Rafael"


def test_espinar_pdf_carries_year_across_pages(service, espinar_pdf):
    result = service.parse_pdf("el-espinar", str(espinar_pdf))
    ((location, schedules),) = result.items()
    assert location.id == "el-espinar"
    assert len(schedules) == 8
    assert schedules[5].date.year == 2026
    assert schedules[5].shifts[FULL_DAY][0].name == "Farmacia Lda M J. Bartolomé Sánchez"


def test_unknown_site_gets_placeholder():
    strategy = RotationStrategy("el-espinar", token_site(["C/ NUEVA"]), {}, 2026)
    (schedule,) = strategy.parse_lines([["C/ NUEVA", "07-jul"]])
    pharmacy = schedule.shifts[FULL_DAY][0]
    assert pharmacy.name == "Farmacia C/ NUEVA"
    assert pharmacy.phone == MISSING_PHONE
    assert (schedule.date.day, schedule.date.year) == (7, 2025)


def test_dates_without_site_are_dropped():
    assert el_espinar_strategy(2026).parse_lines([["29-dic 30-dic"]]) == []


def test_cuellar_reads_dates_and_site_on_one_line():
    lines = [
        "GUARDIAS CUELLAR",
        "29-dic 30-dic Ctra.\u00a0BAHABON",
        "31-dic 01-ene",
        "C/ RESINA 05-ene",
    ]
    schedules = cuellar_strategy(2025).parse_lines([lines])
    assert _keys(schedules) == [
        (29, "diciembre", 2024),
        (30, "diciembre", 2024),
        (31, "diciembre", 2024),
        (1, "enero", 2025),
        (5, "enero", 2025),
    ]
    names = [s.shifts[FULL_DAY][0].name for s in schedules]
    assert names[:2] == ["Farmacia San Andrés"] * 2
    assert names[2:] == ["Farmacia Ldo. Fco. Javier Alcaraz García de la Barrera"] * 3


def test_cuellar_keeps_repeated_dates():
    schedules = cuellar_strategy(2025).parse_lines([["STA. MARINA 07-jul 07-jul"]])
    assert len(schedules) == 2


def test_repeated_new_year_rolls_once():
    lines = ["AV. HONTANILLA 18", "31-dic 01-ene 01-ene 02-ene", "SAN RAFAEL", "03-ene"]
    schedules = el_espinar_strategy(2026).parse_lines([lines])
    assert _keys(schedules) == [
        (31, "diciembre", 2025),
        (1, "enero", 2026),
        (2, "enero", 2026),
        (3, "enero", 2026),
    ]


def test_cuellar_reads_spelled_transition_line():
    lines = [
        "25-ago 26-ago Av C.J. CELA",
        "DOMINGO 31 DE AGOSTO Y LUNES 1 DE SEPTIEMBRE  STA. MARINA",
    ]
    schedules = cuellar_strategy(2025).parse_lines([lines])
    assert _keys(schedules) == [
        (25, "agosto", 2025),
        (26, "agosto", 2025),
        (31, "agosto", 2025),
        (1, "septiembre", 2025),
    ]
    assert schedules[2].date.day_of_week == "domingo"
    assert schedules[3].shifts[FULL_DAY][0].name == "Farmacia Ldo. César Cabrerizo Izquierdo"
