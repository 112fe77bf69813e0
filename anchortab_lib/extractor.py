# --- anchortab_lib/extractor.py ---
"""
anchortab_lib/extractor.py: Walks the section tree and builds the result.

Sections are declared in document order, so the walk keeps a page cursor:
every located section moves the cursor to its last page and later sections
start searching from there. The cursor lives in an ExtractionContext created
for each run and passed explicitly through the recursion.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .errors import RegionTruncated, RowShapeMismatch, SectionNotFound
from .grid import GridDetector
from .locator import RegionLocator
from .models import TableOrientation, to_key
from .normalizer import RowNormalizer, render_rows

log_extract = logging.getLogger("anchortab.extract")


@dataclass
class ExtractionContext:
    """Mutable state of one extraction run."""

    document: Any
    cursor: int = 1
    issues: List[Exception] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """The nested result of a run plus the non-fatal issues it hit."""

    data: dict
    issues: List[Exception]
    cursor: int


class SectionExtractor:
    """
    Extracts a whole section tree from one document.

    Args:
        locator (RegionLocator): Finds section rectangles.
        grid_detector (GridDetector): Finds cell grids inside rectangles.
        normalizer (RowNormalizer): Flattens and corrects rows.
    """

    def __init__(self, locator=None, grid_detector=None, normalizer=None):
        self.locator = locator or RegionLocator()
        self.grid_detector = grid_detector or GridDetector()
        self.normalizer = normalizer or RowNormalizer()

    def run(self, root, document) -> ExtractionResult:
        """Extracts `root` and its descendants from `document`."""
        ctx = ExtractionContext(document)
        log_extract.info("--- Extracting sections from %s ---", getattr(document, "name", "document"))
        data = self._extract_section(root, ctx)
        if not isinstance(data, dict):
            data = {root.key: data}
        log_extract.info(
            "--- Extraction finished: cursor on page %d, %d issue(s) ---",
            ctx.cursor,
            len(ctx.issues),
        )
        return ExtractionResult(data, ctx.issues, ctx.cursor)

    def extract(self, root, document) -> dict:
        return self.run(root, document).data

    def extract_tables(self, sections, document) -> dict:
        """Returns the normalized rows of each section, searching from page 1.

        Sections are independent of each other here: no cursor is shared and
        no shaping is applied.
        """
        tables = {}
        for section in sections:
            rows = None
            if section.has_identifiers:
                rows = self._locate_rows(section, ExtractionContext(document))
            else:
                log_extract.info("'%s' has no identifiers; nothing to locate", section.name)
            tables[section.key] = rows or []
        return tables

    # --- Tree walk ---
    def _extract_section(self, section, ctx):
        mapping, records, text = {}, [], None

        if section.has_identifiers:
            rows = self._locate_rows(section, ctx)
            if rows is not None:
                if section.orientation is TableOrientation.HORIZONTAL:
                    mapping.update(self.shape_horizontal(section, rows))
                elif section.orientation is TableOrientation.VERTICAL:
                    records = self.shape_vertical(section, rows, ctx.issues)
                else:
                    text = "\n".join(r.to_simple_string() for r in rows if not r.is_blank)

        for child in section.children:
            mapping[child.key] = self._extract_section(child, ctx)

        if mapping:
            if records:
                log_extract.warning(
                    "'%s': %d record(s) dropped in favour of child sections",
                    section.name,
                    len(records),
                )
            return mapping
        if section.orientation is TableOrientation.VERTICAL:
            return records
        if section.orientation is TableOrientation.NONE and section.has_identifiers:
            return text or ""
        return {}

    def _locate_rows(self, section, ctx):
        """Locates a section and returns its rows, or None when not found."""
        region = self.locator.locate(section, ctx.cursor, ctx.document)
        if not region:
            issue = SectionNotFound(section.name, ctx.cursor)
            log_extract.info("%s", issue)
            ctx.issues.append(issue)
            return None
        if region.truncated:
            ctx.issues.append(
                RegionTruncated(section.name, region.last_page + 1, ctx.document.page_count)
            )

        tables = self.grid_detector.detect(ctx.document, region)
        rows = self.normalizer.normalize(tables, section.name, ctx.issues)
        ctx.cursor = region.last_page
        log_extract.info(
            "'%s': %d rectangle(s) on pages %d-%d, %d row(s)",
            section.name,
            len(region),
            region[0].page,
            region.last_page,
            len(rows),
        )
        if log_extract.isEnabledFor(logging.DEBUG) and rows:
            log_extract.debug("'%s' rows:\n%s", section.name, render_rows(rows, fixed_width=True))
        return rows

    # --- Shaping ---
    def is_boundary_row(self, section, row):
        """True if the row is an excluded top or bottom anchor."""
        text = row.to_simple_string()
        if section.top is not None and not section.top.included and section.top.matches(text):
            return True
        if (
            section.bottom is not None
            and not section.bottom.included
            and section.bottom.matches(text)
        ):
            return True
        return False

    def shape_horizontal(self, section, rows) -> dict:
        """Turns 'label value...' rows into a {label: value} mapping."""
        fields = {}
        for row in rows:
            if self.is_boundary_row(section, row):
                log_extract.debug("'%s': skipping boundary row %r", section.name, str(row))
                continue
            cells = row.non_blank
            if not cells:
                continue
            key, value = to_key(cells[0]), " ".join(cells[1:]).strip()
            if key in fields:
                log_extract.debug(
                    "'%s': field '%s' repeated, %r replaces %r",
                    section.name,
                    key,
                    value,
                    fields[key],
                )
            fields[key] = value
        return fields

    def shape_vertical(self, section, rows, issues=None) -> list:
        """Turns a header row plus data rows into a list of records."""
        header, start = None, 0
        for i, row in enumerate(rows):
            if row.is_blank or self.is_boundary_row(section, row):
                continue
            header, start = [to_key(t) for t in row.texts], i + 1
            break
        if header is None:
            log_extract.debug("'%s': no header row", section.name)
            return []

        records = []
        for row in rows[start:]:
            if row.is_blank or self.is_boundary_row(section, row):
                continue
            if len(row) != len(header):
                mismatch = RowShapeMismatch(section.name, len(header), row.texts)
                log_extract.warning("%s", mismatch)
                if issues is not None:
                    issues.append(mismatch)
                continue
            records.append({h: t.strip() for h, t in zip(header, row.texts)})
        return records
