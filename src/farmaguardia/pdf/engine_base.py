from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

# (x0, top, x1, bottom) with the origin at the top-left corner of the page.
Rect = Tuple[float, float, float, float]


class EngineUnavailable(RuntimeError):
    """Raised when a PDF extraction engine cannot be used."""


@dataclass(frozen=True)
class Word:
    x0: float
    y0: float
    x1: float
    y1: float
    text: str
    page: int

    @property
    def height(self) -> float:
        return max(0.0, self.y1 - self.y0)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x0 + self.x1) / 2.0, (self.y0 + self.y1) / 2.0

    def inside(self, rect: Rect) -> bool:
        cx, cy = self.center
        x0, y0, x1, y1 = rect
        return x0 <= cx <= x1 and y0 <= cy <= y1


def normalize_lines(text: str) -> List[str]:
    lines: List[str] = []
    for raw in (text or "").splitlines():
        cleaned = raw.strip()
        if cleaned:
            lines.append(cleaned)
    return lines


class PdfPages:
    """Page-level text access shared by every extraction engine."""

    name = "unknown"

    def __init__(self) -> None:
        self._lines: Dict[int, List[str]] = {}

    @property
    def page_count(self) -> int:
        raise NotImplementedError

    def page_size(self, index: int) -> Tuple[float, float]:
        raise NotImplementedError

    def _page_text(self, index: int) -> str:
        raise NotImplementedError

    def clip_lines(self, index: int, rect: Rect) -> List[str]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def page_lines(self, index: int) -> List[str]:
        if index not in self._lines:
            self._lines[index] = normalize_lines(self._page_text(index))
        return self._lines[index]

    def all_lines(self) -> List[List[str]]:
        return [self.page_lines(i) for i in range(self.page_count)]

    def has_text(self) -> bool:
        return any(self.page_lines(i) for i in range(self.page_count))


class TextPages(PdfPages):
    """Pages already extracted to text; there is no geometry to clip."""

    name = "text"

    def __init__(self, pages: List[List[str]]) -> None:
        super().__init__()
        self._pages = [list(p) for p in pages]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_size(self, index: int) -> Tuple[float, float]:
        return 0.0, 0.0

    def _page_text(self, index: int) -> str:
        return "\n".join(self._pages[index])

    def clip_lines(self, index: int, rect: Rect) -> List[str]:
        return []
