from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

from farmaguardia.parsing.service import ParserSettings, ScheduleService
from farmaguardia.pdf._mupdf import import_fitz

fitz = import_fitz(optional=True)  # PyMuPDF

# A4 portrait; the capital column grid is derived from these.
_PAGE_W, _PAGE_H = 595.0, 842.0

CAPITAL_ROWS: List[Tuple[str, Sequence[str], Sequence[str]]] = [
    (
        "lunes, 14 de julio de 2025",
        ["FARMACIA ALONSO", "C/ Real 12", "Tfno: 921 111111"],
        ["FARMACIA BERMEJO", "Av. Fernandez Ladreda 3", "Tfno: 921 222222 (24h)"],
    ),
    (
        "martes, 15 de julio de 2025",
        ["FARMACIA CASTRO", "Pl. Mayor 1", "Tfno: 921 333333"],
        ["FARMACIA DUQUE", "C/ Gobernador 8", "Tfno: 921 444444"],
    ),
    (
        "jueves, 17 de julio de 2025",
        ["FARMACIA ESTEBAN", "Paseo del Salon 4", "Tfno: 921 555555"],
        ["FARMACIA FUENTES", "C/ Cervantes 20", "Tfno: 921 666666"],
    ),
]

ESPINAR_LINES = [
    "GUARDIAS EL ESPINAR",
    "AV. HONTANILLA 18",
    "29-dic 30-dic 31-dic 01-ene 02-ene",
    "C/ MARQUES PERALES",
    "03-ene 04-ene",
    "SAN RAFAEL",
    "05-ene 05-ene",
]

RURAL_LINES = [
    "SERVICIOS DE URGENCIA RURALES",
    "14-jul-25 RIAZA COCA ARCONES Plaza los Dolores",
    "15-jul-25 SEPULVEDA NIEVA NAVAFRIA C/ Valenciana",
    "16-jul-25 CEREZO ABAJO BOCEGUILLAS COCA",
]


def _write_lines(path: Path, pages: Sequence[Sequence[str]]) -> None:
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page(width=_PAGE_W, height=_PAGE_H)
        y = 72.0
        for line in lines:
            page.insert_text(fitz.Point(40, y), line, fontsize=10, fontname="helv")
            y += 16.0
    doc.save(path)
    doc.close()


def _write_capital(path: Path) -> None:
    doc = fitz.open()
    page = doc.new_page(width=_PAGE_W, height=_PAGE_H)
    page.insert_text(fitz.Point(150, 60), "CALENDARIO GUARDIAS SEGOVIA CAPITAL", fontsize=12, fontname="helv")
    y = 130.0
    for date_text, day, night in CAPITAL_ROWS:
        page.insert_text(fitz.Point(45, y), date_text, fontsize=7, fontname="helv")
        for offset, (day_line, night_line) in enumerate(zip(day, night)):
            line_y = y + offset * 12.0
            page.insert_text(fitz.Point(165, line_y), day_line, fontsize=8, fontname="helv")
            page.insert_text(fitz.Point(370, line_y), night_line, fontsize=8, fontname="helv")
        y += 48.0
    doc.save(path)
    doc.close()


def _require_fitz() -> None:
    if fitz is None:
        pytest.skip("PyMuPDF not installed; synthetic PDF generation requires fitz")


@pytest.fixture(scope="session")
def capital_pdf(tmp_path_factory: pytest.TempPathFactory) -> Path:
    _require_fitz()
    out = tmp_path_factory.mktemp("pdfs") / "capital.pdf"
    _write_capital(out)
    return out


@pytest.fixture(scope="session")
def espinar_pdf(tmp_path_factory: pytest.TempPathFactory) -> Path:
    _require_fitz()
    out = tmp_path_factory.mktemp("pdfs") / "espinar.pdf"
    # Split across pages so the year has to carry over.
    _write_lines(out, [ESPINAR_LINES[:3], ESPINAR_LINES[3:]])
    return out


@pytest.fixture(scope="session")
def rural_pdf(tmp_path_factory: pytest.TempPathFactory) -> Path:
    _require_fitz()
    out = tmp_path_factory.mktemp("pdfs") / "rural.pdf"
    _write_lines(out, [RURAL_LINES])
    return out


@pytest.fixture
def settings() -> ParserSettings:
    return ParserSettings(reference_year=2026)


@pytest.fixture
def service(settings: ParserSettings) -> ScheduleService:
    return ScheduleService(settings)
