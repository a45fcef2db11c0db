from __future__ import annotations

import re
from typing import Dict, Tuple

DEFAULT_TZ = "Europe/Madrid"

PHARMACY_MARKER = "FARMACIA"
PHONE_LABEL = "Tfno:"
MISSING_PHONE = "No disponible"
MISSING_ADDRESS = "Dirección no disponible"

MONTHS: Tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)
MONTH_NUMBERS: Dict[str, int] = {name: idx for idx, name in enumerate(MONTHS, start=1)}

MONTH_ABBREVIATIONS: Tuple[str, ...] = (
    "ene",
    "feb",
    "mar",
    "abr",
    "may",
    "jun",
    "jul",
    "ago",
    "sep",
    "oct",
    "nov",
    "dic",
)
ABBREVIATION_NUMBERS: Dict[str, int] = {
    abbr: idx for idx, abbr in enumerate(MONTH_ABBREVIATIONS, start=1)
}

# Monday first, matching datetime.date.weekday().
WEEKDAYS: Tuple[str, ...] = (
    "lunes",
    "martes",
    "miércoles",
    "jueves",
    "viernes",
    "sábado",
    "domingo",
)

# Hyphen-minus plus U+2010, both show up in the rotation rosters.
DATE_DASH = "[\u2010-]"

# Non-breaking, thin and ideographic spaces leak out of some PDF exports.
WHITESPACE_RUN = re.compile(r"[\s\u00A0\u2000-\u200A\u2028\u2029\u202F\u205F\u3000]+")


def normalize_spaces(text: str) -> str:
    return WHITESPACE_RUN.sub(" ", text or "").strip()


def fold_accents(text: str) -> str:
    table = str.maketrans("áéíóúüÁÉÍÓÚÜ", "aeiouuAEIOUU")
    return (text or "").translate(table)
