# --- anchortab_lib/models.py ---
"""
anchortab_lib/models.py: Data models for section schemas and located regions.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


def to_key(text: str) -> str:
    """Turns a label into a result key by collapsing whitespace into '_'."""
    return "_".join(text.split())


# --- SCHEMA MODEL ---
class MatchMode(Enum):
    """How an anchor text is compared against a text run."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    ANY = "any"


class TableOrientation(Enum):
    """How the rows of a located section are shaped into a result."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    NONE = "none"


@dataclass(frozen=True)
class Anchor:
    """A literal text fragment marking one edge of a section."""

    text: str
    mode: MatchMode = MatchMode.ANY

    def matches(self, run_text: str) -> bool:
        if self.mode is MatchMode.EXACT:
            return run_text == self.text
        if self.mode is MatchMode.PREFIX:
            return run_text.startswith(self.text)
        if self.mode is MatchMode.SUFFIX:
            return run_text.endswith(self.text)
        return (
            run_text == self.text
            or run_text.startswith(self.text)
            or run_text.endswith(self.text)
        )


@dataclass(frozen=True)
class Boundary:
    """One edge of a section: alternative anchors plus an inclusion flag."""

    anchors: Tuple[Anchor, ...]
    included: bool

    def matches(self, run_text: str) -> Optional[Anchor]:
        """Returns the first anchor (in declared order) matching the text."""
        for anchor in self.anchors:
            if anchor.matches(run_text):
                return anchor
        return None

    @property
    def texts(self) -> List[str]:
        return [a.text for a in self.anchors]


@dataclass(frozen=True)
class RegionDescriptor:
    """A node in the section tree.

    Top/left anchors are usually field labels and belong to the section by
    default; bottom/right anchors usually label the *next* section and are
    excluded by default.
    """

    name: str
    top: Optional[Boundary] = None
    bottom: Optional[Boundary] = None
    left: Optional[Boundary] = None
    right: Optional[Boundary] = None
    top_margin: float = 0.0
    bottom_margin: float = 0.0
    orientation: TableOrientation = TableOrientation.NONE
    children: Tuple["RegionDescriptor", ...] = ()

    @property
    def key(self) -> str:
        return to_key(self.name)

    @property
    def has_identifiers(self) -> bool:
        return any(b is not None for b in (self.top, self.bottom, self.left, self.right))

    @property
    def top_included(self) -> bool:
        return self.top.included if self.top else True

    @property
    def left_included(self) -> bool:
        return self.left.included if self.left else True

    @property
    def bottom_included(self) -> bool:
        return self.bottom.included if self.bottom else False

    @property
    def right_included(self) -> bool:
        return self.right.included if self.right else False

    def walk(self) -> Iterator["RegionDescriptor"]:
        """Yields this descriptor and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def describe(self) -> str:
        """Returns a one-line summary used in log messages."""

        def fmt(b):
            if b is None:
                return "-"
            return "|".join(b.texts) + ("" if b.included else " (excl)")

        return (
            f"{self.name} [top={fmt(self.top)}, bottom={fmt(self.bottom)}, "
            f"left={fmt(self.left)}, right={fmt(self.right)}, "
            f"type={self.orientation.value}, children={len(self.children)}]"
        )


# --- PAGE GEOMETRY ---
@dataclass(frozen=True)
class TextRun:
    """A positioned run of text in top-down page coordinates."""

    text: str
    page: int
    x0: float
    top: float
    x1: float
    bottom: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class PageGeometry:
    """The edges of one page."""

    page: int
    x0: float
    top: float
    x1: float
    bottom: float


@dataclass(frozen=True)
class PageRect:
    """A rectangle on a single page."""

    page: int
    x0: float
    top: float
    x1: float
    bottom: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        return (self.x0, self.top, self.x1, self.bottom)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def clamp(self, geometry: PageGeometry) -> "PageRect":
        """Returns a copy clipped to the page edges."""
        return PageRect(
            self.page,
            max(self.x0, geometry.x0),
            max(self.top, geometry.top),
            min(self.x1, geometry.x1),
            min(self.bottom, geometry.bottom),
        )


@dataclass
class LocatedRegion:
    """The rectangles, one per page, that together bound a section."""

    rects: List[PageRect] = field(default_factory=list)
    truncated: bool = False

    def __iter__(self):
        return iter(self.rects)

    def __len__(self):
        return len(self.rects)

    def __getitem__(self, index):
        return self.rects[index]

    def __bool__(self):
        return bool(self.rects)

    @property
    def last_page(self) -> Optional[int]:
        return self.rects[-1].page if self.rects else None


def floor_point(value: float) -> float:
    return float(math.floor(value))


def ceil_point(value: float) -> float:
    return float(math.ceil(value))


# --- GRID MODEL ---
class TableCell:
    """A single detected cell."""

    def __init__(self, text):
        self.text = text if text is not None else ""

    def __repr__(self):
        return f"TableCell({self.text!r})"


class TableRow:
    """A single row of a detected table."""

    def __init__(self, cells):
        self.cells: list[TableCell] = cells

    @property
    def texts(self) -> list[str]:
        return [cell.text for cell in self.cells]


class RawTable:
    """A table found by the grid detector inside one page rectangle."""

    def __init__(self, page, rows):
        self.page = page
        self.rows: list[TableRow] = rows
        self.num_cols = max((len(r.cells) for r in rows), default=0)

    @classmethod
    def from_texts(cls, page, rows):
        """Builds a table from nested lists of cell strings (None allowed)."""
        return cls(page, [TableRow([TableCell(t) for t in row]) for row in rows])
