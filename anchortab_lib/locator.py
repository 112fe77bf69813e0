# --- anchortab_lib/locator.py ---
"""
anchortab_lib/locator.py: Finds the page rectangles that bound a section.

The locator makes one forward pass over the text runs of the document,
starting at the page cursor, and records where the section's four anchors
appear, the top margin of every scanned page and how many page turns lie
between the top and bottom anchors. A second, purely geometric step turns
those findings into one rectangle per page.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import DEFAULT_BOTTOM_DETACH, DEFAULT_LAST_PAGE_INSET
from .models import LocatedRegion, PageRect, TextRun, ceil_point, floor_point

log_locate = logging.getLogger("anchortab.locate")


@dataclass(frozen=True)
class LocatorTolerances:
    """Offsets used to push an excluded bottom anchor out of the region."""

    bottom_detach: float = DEFAULT_BOTTOM_DETACH
    last_page_inset: float = DEFAULT_LAST_PAGE_INSET


@dataclass
class AnchorScan:
    """Everything the forward text scan learned about one section."""

    start_page: int
    top: Optional[TextRun] = None
    left: Optional[TextRun] = None
    bottom: Optional[TextRun] = None
    right: Optional[TextRun] = None
    page_turns: int = 0
    top_margins: List[float] = field(default_factory=list)

    @property
    def pages_scanned(self) -> int:
        return len(self.top_margins)


class RegionLocator:
    """
    Locates a section's region from a start page.

    Args:
        tolerances (LocatorTolerances): Detach offsets for excluded bottom
            anchors. Defaults to 1 and 10 page units.
    """

    def __init__(self, tolerances=None):
        self.tolerances = tolerances or LocatorTolerances()

    def locate(self, section, start_page, document) -> LocatedRegion:
        """Returns the rectangles bounding `section`, searching from `start_page`."""
        scan = self.scan(section, start_page, document)
        if scan.start_page > document.page_count:
            log_locate.debug(
                "'%s': top anchor not found from page %d", section.name, start_page
            )
            return LocatedRegion()

        margin_top = self._working_top_margin(section, scan)
        log_locate.debug(
            "'%s': start page %d, %d page turn(s), working top margin %.1f",
            section.name,
            scan.start_page,
            scan.page_turns,
            margin_top,
        )
        return self._assemble(section, scan, margin_top, document)

    # --- Pass 1: text scan ---
    def scan(self, section, start_page, document) -> AnchorScan:
        """Scans every page from `start_page` to the end of the document."""
        scan = AnchorScan(start_page=start_page)
        for page_no in range(start_page, document.page_count + 1):
            runs = document.text_runs(page_no)
            if runs:
                scan.top_margins.append(runs[0].bottom)
            for run in runs:
                self._inspect_run(section, scan, run)
            self._end_page(section, scan)
        return scan

    def _top_satisfied(self, section, scan):
        return section.top is None or scan.top is not None

    def _left_satisfied(self, section, scan):
        return section.left is None or scan.left is not None

    def _inspect_run(self, section, scan, run):
        text = run.text
        if section.top is not None and scan.top is None and section.top.matches(text):
            scan.top = run
            log_locate.debug("'%s': top anchor on page %d: %r", section.name, run.page, text)

        if section.left is not None and scan.left is None and section.left.matches(text):
            scan.left = run
            log_locate.debug("'%s': left anchor on page %d: %r", section.name, run.page, text)

        # Bottom/right are only searched once their opposite edge is known, so
        # an anchor sitting above the top (or left of the left) is ignored.
        if (
            section.bottom is not None
            and scan.bottom is None
            and self._top_satisfied(section, scan)
            and section.bottom.matches(text)
        ):
            scan.bottom = run
            log_locate.debug("'%s': bottom anchor on page %d: %r", section.name, run.page, text)

        if (
            section.right is not None
            and scan.right is None
            and self._left_satisfied(section, scan)
            and section.right.matches(text)
        ):
            scan.right = run
            log_locate.debug("'%s': right anchor on page %d: %r", section.name, run.page, text)

    def _end_page(self, section, scan):
        if not self._top_satisfied(section, scan):
            scan.start_page += 1
        elif scan.bottom is None:
            scan.page_turns += 1

    # --- Pass 2: geometry ---
    def _working_top_margin(self, section, scan):
        if not scan.top_margins:
            return section.top_margin
        average = math.floor(sum(scan.top_margins) / len(scan.top_margins))
        return max(float(average), section.top_margin)

    def top_left(self, section, scan, geometry):
        """Returns (left, top) of the region on its first page."""
        if scan.top is not None:
            top = scan.top.top if section.top_included else scan.top.bottom
        else:
            top = geometry.top
        if scan.left is not None:
            left = scan.left.x0 if section.left_included else scan.left.x1
        else:
            left = geometry.x0
        return floor_point(left), floor_point(top)

    def bottom_right(self, section, scan, geometry):
        """Returns (right, bottom) of the region on its last page."""
        if scan.bottom is not None:
            if section.bottom_included:
                bottom = scan.bottom.bottom
            else:
                bottom = scan.bottom.top - self.tolerances.bottom_detach
        else:
            bottom = geometry.bottom
        if scan.right is not None:
            right = scan.right.x1 if section.right_included else scan.right.x0
        else:
            right = geometry.x1
        return ceil_point(right), ceil_point(bottom)

    def _assemble(self, section, scan, margin_top, document):
        first = scan.start_page
        first_geometry = document.page_geometry(first)
        left, top = self.top_left(section, scan, first_geometry)

        if scan.page_turns == 0:
            right, bottom = self.bottom_right(section, scan, first_geometry)
            return LocatedRegion([PageRect(first, left, top, right, bottom)])

        rects = [
            PageRect(
                first,
                left,
                top,
                first_geometry.x1,
                first_geometry.bottom - section.bottom_margin,
            )
        ]
        for page_no in range(first + 1, first + scan.page_turns):
            geometry = document.page_geometry(page_no)
            rects.append(
                PageRect(
                    page_no,
                    left,
                    margin_top,
                    geometry.x1,
                    geometry.bottom - section.bottom_margin,
                )
            )

        last = first + scan.page_turns
        if last > document.page_count:
            log_locate.warning(
                "'%s': region runs to page %d of %d; last rectangle omitted",
                section.name,
                last,
                document.page_count,
            )
            return LocatedRegion(rects, truncated=True)

        right, bottom = self.bottom_right(section, scan, document.page_geometry(last))
        if not section.bottom_included:
            bottom -= self.tolerances.last_page_inset
        rects.append(PageRect(last, left, margin_top, right, bottom))
        return LocatedRegion(rects)
