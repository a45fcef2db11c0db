from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from ..engine_base import EngineUnavailable, PdfPages, Rect, normalize_lines
from ..layout import clamp_rect


class PlumberPages(PdfPages):
    name = "pdfplumber"

    def __init__(self, path: str) -> None:
        super().__init__()
        try:
            import pdfplumber
        except ImportError as exc:  # pragma: no cover - import guard
            raise EngineUnavailable("pdfplumber not available") from exc
        doc_path = Path(path)
        if not doc_path.exists():
            raise FileNotFoundError(path)
        self._pdf = pdfplumber.open(str(doc_path))

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def page_size(self, index: int) -> Tuple[float, float]:
        page = self._pdf.pages[index]
        return float(page.width), float(page.height)

    def _page_text(self, index: int) -> str:
        return self._pdf.pages[index].extract_text() or ""

    def clip_lines(self, index: int, rect: Rect) -> List[str]:
        page = self._pdf.pages[index]
        bbox = clamp_rect(rect, float(page.width), float(page.height))
        if bbox[0] >= bbox[2] or bbox[1] >= bbox[3]:
            return []
        region = page.crop(bbox, relative=False)
        return normalize_lines(region.extract_text() or "")

    def close(self) -> None:
        self._pdf.close()
