from __future__ import annotations

import importlib
import warnings
from types import ModuleType
from typing import Optional

_SWIG_WARNING = r"builtin type .* has no __module__ attribute"


def import_fitz(*, optional: bool = False) -> Optional[ModuleType]:
    """
    Import PyMuPDF (``fitz``) with its SWIG DeprecationWarnings muted.

    With ``optional=True`` an import failure yields ``None`` so the reader
    can move on to pdfplumber or pdfminer.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=_SWIG_WARNING, category=DeprecationWarning)
        try:
            return importlib.import_module("fitz")
        except ImportError:
            if optional:
                return None
            raise


__all__ = ["import_fitz"]
