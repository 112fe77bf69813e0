# --- anchortab_lib/normalizer.py ---
"""
anchortab_lib/normalizer.py: Converts raw grids into uniform rows.

Sections can register a row correction that reshapes their rows before they
are turned into results (merge wrapped lines, split glued cells, drop noise).
Corrections are best effort: a failing correction is logged and the
uncorrected rows are used.
"""
import logging
from abc import ABC, abstractmethod

from .constants import ROW_DELIMITER, TABULAR_COLUMN_WIDTH, TABULAR_DELIMITER
from .errors import CorrectionHookFailure

log_rows = logging.getLogger("anchortab.rows")


def fit_to_width(text, width):
    """Truncates or symmetrically pads text to exactly `width` characters."""
    if len(text) > width:
        return text[:width]
    padding = width - len(text)
    left = padding // 2
    return " " * left + text + " " * (padding - left)


class NormalizedRow:
    """An ordered list of cell texts; rows may differ in length."""

    def __init__(self, texts):
        self.texts: list[str] = list(texts)

    def __len__(self):
        return len(self.texts)

    def __getitem__(self, column):
        return self.texts[column]

    def __iter__(self):
        return iter(self.texts)

    def __eq__(self, other):
        if isinstance(other, NormalizedRow):
            return self.texts == other.texts
        return NotImplemented

    def __repr__(self):
        return f"NormalizedRow({self.texts!r})"

    def __str__(self):
        return ROW_DELIMITER.join(self.texts)

    def to_tabular_string(self, width=TABULAR_COLUMN_WIDTH):
        """Renders the row with every cell fitted to a fixed column width."""
        return TABULAR_DELIMITER.join(fit_to_width(t, width) for t in self.texts)

    def to_simple_string(self):
        """Returns the stripped cells joined by single spaces."""
        return " ".join(t.strip() for t in self.texts)

    @property
    def non_blank(self) -> list[str]:
        return [t.strip() for t in self.texts if t.strip()]

    @property
    def is_blank(self) -> bool:
        return not self.non_blank


def render_rows(rows, fixed_width=False, width=TABULAR_COLUMN_WIDTH):
    """Formats rows for logs or console output, one row per line."""
    if fixed_width:
        return "\n".join(row.to_tabular_string(width) for row in rows)
    return "\n".join(str(row) for row in rows)


# --- CORRECTIONS ---
class RowTransformer(ABC):
    """Reshapes the rows of one section."""

    @abstractmethod
    def transform(self, rows):
        """Receives NormalizedRow objects, returns a list of lists of text."""


class FunctionTransformer(RowTransformer):
    """Adapts a plain `rows -> rows` callable to the RowTransformer interface."""

    def __init__(self, func):
        self.func = func

    def transform(self, rows):
        return self.func(rows)

    def __repr__(self):
        return f"FunctionTransformer({getattr(self.func, '__name__', self.func)!r})"


class CorrectionRegistry:
    """Maps section names to the row transformer that corrects them."""

    def __init__(self):
        self._transformers = {}

    @classmethod
    def from_mapping(cls, mapping):
        registry = cls()
        for name, transformer in (mapping or {}).items():
            registry.register(name, transformer)
        return registry

    def register(self, section_name, transformer):
        if not isinstance(transformer, RowTransformer):
            if not callable(transformer):
                raise TypeError(f"Correction for '{section_name}' must be callable")
            transformer = FunctionTransformer(transformer)
        self._transformers[section_name] = transformer
        return transformer

    def correction(self, section_name):
        """Decorator registering a function as the correction for a section."""

        def decorator(func):
            self.register(section_name, func)
            return func

        return decorator

    def get(self, section_name):
        return self._transformers.get(section_name)

    def __contains__(self, section_name):
        return section_name in self._transformers

    def __len__(self):
        return len(self._transformers)


class RowNormalizer:
    """
    Flattens raw tables into NormalizedRow objects and applies corrections.

    Args:
        corrections (CorrectionRegistry | dict | None): Per-section row
            corrections.
    """

    def __init__(self, corrections=None):
        if isinstance(corrections, CorrectionRegistry):
            self.corrections = corrections
        else:
            self.corrections = CorrectionRegistry.from_mapping(corrections)

    @staticmethod
    def _as_row(row):
        if isinstance(row, NormalizedRow):
            return NormalizedRow(row.texts)
        if not isinstance(row, (list, tuple)):
            raise TypeError(f"correction returned {type(row).__name__} where a row was expected")
        return NormalizedRow([str(t) for t in row])

    def normalize(self, tables, section_name=None, issues=None):
        """Returns the rows of every table, corrected for `section_name`."""
        rows = [NormalizedRow(row.texts) for table in tables for row in table.rows]
        transformer = self.corrections.get(section_name) if section_name else None
        if transformer is None:
            return rows
        working_copy = [NormalizedRow(row.texts) for row in rows]
        try:
            corrected = [self._as_row(row) for row in transformer.transform(working_copy)]
        except Exception as e:
            failure = CorrectionHookFailure(section_name, e)
            log_rows.error("%s; using uncorrected rows", failure, exc_info=True)
            if issues is not None:
                issues.append(failure)
            return rows
        log_rows.debug(
            "Correction for '%s': %d row(s) -> %d row(s)", section_name, len(rows), len(corrected)
        )
        return corrected
