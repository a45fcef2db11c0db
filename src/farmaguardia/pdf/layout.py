from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .engine_base import Rect, Word

PAGE_MARGIN = 40.0
DATE_COLUMN_RATIO = 0.22
COLUMN_GAP = 5.0
CONTENT_TOP = 100.0


@dataclass(frozen=True)
class CapitalColumns:
    date: Rect
    day: Rect
    night: Rect


def capital_columns(width: float, height: float) -> CapitalColumns:
    """Date, day-shift and night-shift column rectangles of a capital roster page."""
    content_width = width - 2 * PAGE_MARGIN
    date_width = content_width * DATE_COLUMN_RATIO
    pharmacy_width = (content_width - date_width - 2 * COLUMN_GAP) / 2
    bottom = height - PAGE_MARGIN

    date_x0 = PAGE_MARGIN
    day_x0 = date_x0 + date_width + COLUMN_GAP
    night_x0 = day_x0 + pharmacy_width + COLUMN_GAP
    return CapitalColumns(
        date=(date_x0, CONTENT_TOP, date_x0 + date_width, bottom),
        day=(day_x0, CONTENT_TOP, day_x0 + pharmacy_width, bottom),
        night=(night_x0, CONTENT_TOP, night_x0 + pharmacy_width, bottom),
    )


def words_to_lines(words: Iterable[Word], *, y_tolerance: float = 3.0) -> List[str]:
    """Rebuild reading-order lines from positioned words."""
    ordered = sorted(words, key=lambda w: (w.page, w.center[1], w.x0))
    rows: List[List[Word]] = []
    for word in ordered:
        if rows:
            last = rows[-1]
            if last[0].page == word.page and abs(last[0].center[1] - word.center[1]) <= y_tolerance:
                last.append(word)
                continue
        rows.append([word])
    lines: List[str] = []
    for row in rows:
        text = " ".join(w.text for w in sorted(row, key=lambda w: w.x0)).strip()
        if text:
            lines.append(text)
    return lines


def clamp_rect(rect: Rect, width: float, height: float) -> Rect:
    x0, y0, x1, y1 = rect
    return (max(0.0, x0), max(0.0, y0), min(width, x1), min(height, y1))
