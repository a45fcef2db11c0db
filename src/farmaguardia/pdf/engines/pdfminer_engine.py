from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..engine_base import EngineUnavailable, PdfPages, Rect, Word
from ..layout import words_to_lines

try:
    from pdfminer.high_level import extract_pages
    from pdfminer.layout import LAParams, LTAnno, LTChar, LTTextContainer, LTTextLine
except ImportError:  # pragma: no cover - optional import
    extract_pages = None  # type: ignore


class _Page:
    def __init__(self, width: float, height: float, lines: List[str], words: List[Word]) -> None:
        self.width = width
        self.height = height
        self.lines = lines
        self.words = words


class PdfMinerPages(PdfPages):
    """pdfminer.six has no clipping, so words are kept with their boxes."""

    name = "pdfminer"

    def __init__(self, path: str) -> None:
        super().__init__()
        if extract_pages is None:
            raise EngineUnavailable("pdfminer.six not available")
        doc_path = Path(path)
        if not doc_path.exists():
            raise FileNotFoundError(path)
        laparams = LAParams(char_margin=2.0, line_margin=0.5, word_margin=0.1)
        self._pages = [
            self._read_page(index, layout)
            for index, layout in enumerate(extract_pages(str(doc_path), laparams=laparams))
        ]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_size(self, index: int) -> Tuple[float, float]:
        page = self._pages[index]
        return page.width, page.height

    def _page_text(self, index: int) -> str:
        return "\n".join(self._pages[index].lines)

    def clip_lines(self, index: int, rect: Rect) -> List[str]:
        return words_to_lines(w for w in self._pages[index].words if w.inside(rect))

    def _read_page(self, index: int, layout) -> _Page:
        height = float(getattr(layout, "height", layout.bbox[3]))
        width = float(getattr(layout, "width", layout.bbox[2]))
        lines: List[str] = []
        words: List[Word] = []
        for element in layout:
            if not isinstance(element, LTTextContainer):
                continue
            for text_line in element:
                if not isinstance(text_line, LTTextLine):
                    continue
                line_text = text_line.get_text().strip()
                if line_text:
                    lines.append(line_text)
                words.extend(self._words_from_line(text_line, index, height))
        return _Page(width, height, lines, words)

    def _words_from_line(self, line: LTTextLine, page_index: int, page_height: Optional[float]) -> Iterator[Word]:
        buffer: List[str] = []
        box: List[float] = []

        def flush() -> Iterator[Word]:
            if buffer:
                text = "".join(buffer).strip()
                if text:
                    x0, y0, x1, y1 = box
                    if page_height is not None:
                        # pdfminer measures from the bottom edge
                        y0, y1 = page_height - y1, page_height - y0
                    yield Word(x0, y0, x1, y1, text, page=page_index)
            buffer.clear()
            box.clear()

        for item in line:
            if isinstance(item, LTChar):
                char = item.get_text()
                if char.isspace():
                    yield from flush()
                    continue
                if not box:
                    box.extend([item.x0, item.y0, item.x1, item.y1])
                else:
                    box[0] = min(box[0], item.x0)
                    box[1] = min(box[1], item.y0)
                    box[2] = max(box[2], item.x1)
                    box[3] = max(box[3], item.y1)
                buffer.append(char)
            elif isinstance(item, LTAnno):
                yield from flush()
        yield from flush()
