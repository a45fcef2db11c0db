from .mupdf_engine import MuPdfPages
from .pdfminer_engine import PdfMinerPages
from .plumber_engine import PlumberPages

__all__ = ["MuPdfPages", "PdfMinerPages", "PlumberPages"]
