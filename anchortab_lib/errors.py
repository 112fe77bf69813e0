# --- anchortab_lib/errors.py ---
"""
anchortab_lib/errors.py: Exceptions raised or recorded during extraction.

Only SchemaError and DocumentDecodeError abort a run. The remaining classes
describe conditions that are logged and collected on the run's issue list
while extraction carries on.
"""


class AnchortabError(Exception):
    """Base class for all anchortab errors."""


class SchemaError(AnchortabError):
    """The schema resource is missing or cannot be turned into sections."""


class DocumentDecodeError(AnchortabError):
    """The document bytes cannot be decoded into pages."""


class SectionNotFound(AnchortabError):
    """A section's anchors did not resolve to any page region."""

    def __init__(self, section_name, start_page):
        super().__init__(f"Section '{section_name}' not found (searched from page {start_page})")
        self.section_name = section_name
        self.start_page = start_page


class RegionTruncated(AnchortabError):
    """A multi-page region runs past the last page of the document."""

    def __init__(self, section_name, last_page, page_count):
        super().__init__(
            f"Section '{section_name}' ends on page {last_page} but the document "
            f"has {page_count} page(s); last rectangle omitted"
        )
        self.section_name = section_name
        self.last_page = last_page
        self.page_count = page_count


class CorrectionHookFailure(AnchortabError):
    """A registered row correction raised or returned malformed rows."""

    def __init__(self, section_name, cause):
        super().__init__(f"Correction for '{section_name}' failed: {cause}")
        self.section_name = section_name


class RowShapeMismatch(AnchortabError):
    """A vertical-table row does not have as many cells as the header."""

    def __init__(self, section_name, expected, row):
        super().__init__(
            f"Row in '{section_name}' has {len(row)} cell(s), header has {expected}: {row}"
        )
        self.section_name = section_name
        self.expected = expected
        self.row = row
