from __future__ import annotations

import logging
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .engine_base import EngineUnavailable, PdfPages
from .engines import MuPdfPages, PdfMinerPages, PlumberPages

LOGGER = logging.getLogger(__name__)

ENGINES: Dict[str, Callable[[str], PdfPages]] = {
    "mupdf": MuPdfPages,
    "pdfplumber": PlumberPages,
    "pdfminer": PdfMinerPages,
}
DEFAULT_ENGINES = ("mupdf", "pdfplumber", "pdfminer")


def _format_engine_warning(name: str, exc: Exception) -> str:
    return f"{name} engine unavailable: {exc}"


def _open_first(path: str, engines: Sequence[str], notes: List[str]) -> PdfPages:
    last_error: Optional[Exception] = None
    for name in engines:
        factory = ENGINES.get(name)
        if factory is None:
            notes.append(f"unknown engine {name!r}")
            continue
        pages: Optional[PdfPages] = None
        try:
            pages = factory(path)
            if pages.page_count == 0 or not pages.has_text():
                raise EngineUnavailable(f"{name} produced no text")
            return pages
        except FileNotFoundError:
            raise
        except Exception as exc:
            if pages is not None:
                pages.close()
            last_error = exc
            notes.append(_format_engine_warning(name, exc))
            LOGGER.debug("Engine %s failed on %s: %s", name, path, exc)

    if last_error is None:
        raise EngineUnavailable("No PDF engine configured")
    if isinstance(last_error, EngineUnavailable):
        raise last_error
    raise EngineUnavailable("Unable to extract text from PDF") from last_error


@contextmanager
def open_pdf(path: str, engines: Sequence[str] = DEFAULT_ENGINES) -> Iterator[PdfPages]:
    """Open ``path`` with the first engine that yields text; always closes it.

    Engines that fail are reported through ``RuntimeWarning`` before the
    next one is tried. A missing file raises ``FileNotFoundError``; no usable
    engine raises ``EngineUnavailable``.
    """
    if not Path(path).exists():
        raise FileNotFoundError(str(path))
    notes: List[str] = []
    try:
        pages = _open_first(str(path), engines, notes)
    finally:
        for message in notes:
            warnings.warn(message, RuntimeWarning, stacklevel=3)
    LOGGER.debug("Opened %s with %s (%d pages)", path, pages.name, pages.page_count)
    try:
        yield pages
    finally:
        pages.close()
