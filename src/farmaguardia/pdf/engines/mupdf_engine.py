from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from .._mupdf import import_fitz
from ..engine_base import EngineUnavailable, PdfPages, Rect, normalize_lines


class MuPdfPages(PdfPages):
    name = "mupdf"

    def __init__(self, path: str) -> None:
        super().__init__()
        try:
            self._fitz = import_fitz()
        except ImportError as exc:  # pragma: no cover - import guard
            raise EngineUnavailable("MuPDF (PyMuPDF) not available") from exc
        doc_path = Path(path)
        if not doc_path.exists():
            raise FileNotFoundError(path)
        self._doc = self._fitz.open(str(doc_path))

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page_size(self, index: int) -> Tuple[float, float]:
        rect = self._doc.load_page(index).rect
        return float(rect.width), float(rect.height)

    def _page_text(self, index: int) -> str:
        return self._doc.load_page(index).get_text("text") or ""

    def clip_lines(self, index: int, rect: Rect) -> List[str]:
        page = self._doc.load_page(index)
        return normalize_lines(page.get_text("text", clip=self._fitz.Rect(*rect)) or "")

    def close(self) -> None:
        self._doc.close()
