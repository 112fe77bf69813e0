# --- anchortab_lib/document.py ---
"""
anchortab_lib/document.py: Page access for the locator and grid detector.

Pages are opened with pdfplumber, which drives pdfminer.six underneath. Text
runs come from the pdfminer layout tree (LTTextLine objects) and are turned
into top-down coordinates to match pdfplumber's cropping space.
"""
import logging
import os
from io import BytesIO

import pdfplumber
from pdfminer.layout import LTTextLine
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfminer.pdfparser import PDFSyntaxError
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from .errors import DocumentDecodeError
from .models import PageGeometry, TextRun

log_document = logging.getLogger("anchortab.document")

DECODE_ERRORS = (PdfminerException, PDFSyntaxError, PSException, PDFPasswordIncorrect)


def find_elements_by_type(obj, t):
    """Recursively finds all layout elements of a specific type."""
    e = []
    if isinstance(obj, t):
        e.append(obj)
    if hasattr(obj, "_objs"):
        for child in obj:
            e.extend(find_elements_by_type(child, t))
    return e


class PDFDocument:
    """
    A decoded PDF document exposing page geometry and positioned text runs.

    Args:
        source: A file path, the raw document bytes, or a binary file object.
        password (str): Password for encrypted files. The empty password is
            used when none is given.
    """

    def __init__(self, source, password=""):
        if isinstance(source, (str, os.PathLike)) and not os.path.exists(source):
            raise FileNotFoundError(f"PDF file not found: {source}")
        self.name = os.fspath(source) if isinstance(source, (str, os.PathLike)) else "<stream>"
        stream = BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
        try:
            self._pdf = pdfplumber.open(stream, password=password or "", laparams={})
            self._page_count = len(self._pdf.pages)
        except DECODE_ERRORS as e:
            raise DocumentDecodeError(f"Could not decode {self.name}: {e}") from e
        self._runs_cache = {}
        log_document.info("Opened %s (%d pages)", self.name, self._page_count)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self._pdf.close()

    @property
    def page_count(self) -> int:
        return self._page_count

    def page(self, page_no):
        """Returns the 1-based pdfplumber page."""
        if not 1 <= page_no <= self._page_count:
            raise IndexError(f"Page {page_no} out of range 1..{self._page_count}")
        return self._pdf.pages[page_no - 1]

    def page_geometry(self, page_no) -> PageGeometry:
        x0, top, x1, bottom = self.page(page_no).bbox
        return PageGeometry(page_no, float(x0), float(top), float(x1), float(bottom))

    def text_runs(self, page_no) -> list[TextRun]:
        """Returns the page's text lines sorted top-to-bottom, left-to-right."""
        if page_no in self._runs_cache:
            return self._runs_cache[page_no]
        page = self.page(page_no)
        height = float(page.height)
        runs = []
        try:
            layout = page.layout
        except DECODE_ERRORS as e:
            raise DocumentDecodeError(f"Could not decode page {page_no}: {e}") from e
        for line in find_elements_by_type(layout, LTTextLine):
            text = line.get_text().strip()
            if not text:
                continue
            runs.append(
                TextRun(
                    text=text,
                    page=page_no,
                    x0=float(line.x0),
                    top=height - float(line.y1),
                    x1=float(line.x1),
                    bottom=height - float(line.y0),
                )
            )
        runs.sort(key=lambda r: (round(r.top, 1), r.x0))
        log_document.debug("Page %d: %d text runs", page_no, len(runs))
        self._runs_cache[page_no] = runs
        return runs
