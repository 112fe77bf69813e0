# --- anchortab_lib/grid.py ---
"""
anchortab_lib/grid.py: Turns located page rectangles into raw cell grids.

Four algorithms are available:
- text:        whitespace-delimited rows; each phrase on a line is a cell.
- stream:      pdfplumber's text-alignment table finder (falls back to text).
- spreadsheet: pdfplumber's ruling-line table finder.
- auto:        spreadsheet when the rectangle has ruled tables, else text.
"""
import logging
from enum import Enum

from .constants import (
    LINE_Y_TOLERANCE,
    SPREADSHEET_TABLE_SETTINGS,
    STREAM_TABLE_SETTINGS,
    WORD_X_TOLERANCE,
)
from .models import RawTable

log_grid = logging.getLogger("anchortab.grid")


class GridAlgorithm(Enum):
    TEXT = "text"
    STREAM = "stream"
    SPREADSHEET = "spreadsheet"
    AUTO = "auto"


def group_words_into_lines(words, y_tolerance=LINE_Y_TOLERANCE):
    """Groups pdfplumber word dicts into lines by their 'top' coordinate."""
    lines = []
    for word in sorted(words, key=lambda w: (w["top"], w["x0"])):
        if lines and abs(word["top"] - lines[-1][0]["top"]) <= y_tolerance:
            lines[-1].append(word)
        else:
            lines.append([word])
    return [sorted(line, key=lambda w: w["x0"]) for line in lines]


class GridDetector:
    """
    Detects tables inside the rectangles of a located region.

    Args:
        algorithm (GridAlgorithm | str): Which detection heuristic to use.
    """

    def __init__(self, algorithm=GridAlgorithm.TEXT):
        self.algorithm = GridAlgorithm(algorithm)

    def detect(self, document, region) -> list[RawTable]:
        """Returns the tables found in every rectangle, in rectangle order."""
        tables = []
        for rect in region:
            area = rect.clamp(document.page_geometry(rect.page))
            if area.is_empty:
                log_grid.debug("Skipping empty rectangle on page %d: %s", rect.page, rect.bbox)
                continue
            cropped = document.page(rect.page).crop(area.bbox)
            found = self._detect_in_area(cropped, rect.page)
            log_grid.debug(
                "Page %d %s: %d table(s) via %s",
                rect.page,
                tuple(round(v, 1) for v in area.bbox),
                len(found),
                self.algorithm.value,
            )
            tables.extend(found)
        return tables

    def _detect_in_area(self, area, page_no):
        if self.algorithm is GridAlgorithm.TEXT:
            return self._text_rows(area, page_no)
        if self.algorithm is GridAlgorithm.STREAM:
            return self._pdfplumber_tables(area, page_no, STREAM_TABLE_SETTINGS) or self._text_rows(
                area, page_no
            )
        if self.algorithm is GridAlgorithm.SPREADSHEET:
            return self._pdfplumber_tables(area, page_no, SPREADSHEET_TABLE_SETTINGS)
        # AUTO
        if area.find_tables(table_settings=SPREADSHEET_TABLE_SETTINGS):
            return self._pdfplumber_tables(area, page_no, SPREADSHEET_TABLE_SETTINGS)
        return self._text_rows(area, page_no)

    def _pdfplumber_tables(self, area, page_no, settings):
        tables = []
        for rows in area.extract_tables(table_settings=settings):
            if rows:
                tables.append(RawTable.from_texts(page_no, rows))
        return tables

    def _text_rows(self, area, page_no):
        words = area.extract_words(
            keep_blank_chars=True,
            x_tolerance=WORD_X_TOLERANCE,
            y_tolerance=LINE_Y_TOLERANCE,
        )
        lines = group_words_into_lines(words)
        if not lines:
            return []
        rows = [[w["text"] for w in line] for line in lines]
        return [RawTable.from_texts(page_no, rows)]
