# --- anchortab_lib/api.py ---
"""
anchortab_lib/api.py: Public entry points for schema-driven extraction.
"""
import json
import logging
from dataclasses import dataclass, field

from .constants import DEFAULT_ALGORITHM
from .document import PDFDocument
from .extractor import SectionExtractor
from .grid import GridDetector
from .locator import LocatorTolerances, RegionLocator
from .models import RegionDescriptor
from .normalizer import RowNormalizer
from .schema import build_descriptor, load_schema

log = logging.getLogger("anchortab.api")


@dataclass
class ExtractionOptions:
    """Run-time knobs that are not part of the schema."""

    algorithm: str = DEFAULT_ALGORITHM
    tolerances: LocatorTolerances = field(default_factory=LocatorTolerances)
    password: str = ""


def resolve_schema(schema_resource) -> RegionDescriptor:
    """Accepts a built descriptor, a schema dict, or a schema file path."""
    if isinstance(schema_resource, RegionDescriptor):
        return schema_resource
    if isinstance(schema_resource, dict):
        return build_descriptor(schema_resource)
    return load_schema(schema_resource)


def build_extractor(corrections=None, options=None) -> SectionExtractor:
    options = options or ExtractionOptions()
    return SectionExtractor(
        locator=RegionLocator(options.tolerances),
        grid_detector=GridDetector(options.algorithm),
        normalizer=RowNormalizer(corrections),
    )


def extract_with_issues(schema_resource, document_resource, corrections=None, options=None):
    """Runs a full extraction and returns an ExtractionResult."""
    options = options or ExtractionOptions()
    # The schema is resolved first so a broken schema never touches the PDF.
    root = resolve_schema(schema_resource)
    extractor = build_extractor(corrections, options)
    with PDFDocument(document_resource, password=options.password) as document:
        result = extractor.run(root, document)
    for issue in result.issues:
        log.debug("Issue: %s", issue)
    return result


def extract(schema_resource, document_resource, corrections=None, options=None) -> dict:
    """
    Extracts the nested result described by a schema from one PDF.

    Args:
        schema_resource: Schema file path, schema dict, or RegionDescriptor.
        document_resource: PDF path, raw bytes, or binary file object.
        corrections (CorrectionRegistry | dict | None): Per-section row
            corrections, keyed by section name.
        options (ExtractionOptions | None): Grid algorithm, tolerances and
            password.

    Returns:
        dict: Mappings, lists of records and strings, keyed by section and
        field names.
    """
    return extract_with_issues(schema_resource, document_resource, corrections, options).data


def extract_section_tables(sections, document_resource, corrections=None, options=None) -> dict:
    """Returns the normalized rows of each given section, keyed by section."""
    options = options or ExtractionOptions()
    extractor = build_extractor(corrections, options)
    with PDFDocument(document_resource, password=options.password) as document:
        return extractor.extract_tables(list(sections), document)


def to_json(result, indent=2) -> str:
    return json.dumps(result, indent=indent, ensure_ascii=False)
