# --- anchortab_lib/schema.py ---
"""
anchortab_lib/schema.py: Reads schema files and builds the section tree.

A schema is a nested mapping. Every key whose value is itself a mapping is a
child section; the scalar keys 'top', 'bottom', 'left', 'right',
'top_margin', 'bottom_margin', 'type' and 'match' describe the section that
contains them:

    balance_sheet:
      top: "Balance Sheet|false"
      bottom: "Notes|Remarks"
      type: horizontal
      totals:
        top: Total Assets
"""
import logging
import os

import yaml

from .constants import (
    FLAG_SEPARATOR,
    IDENTIFIER_KEYS,
    MATCH_KEY,
    MULTI_ANCHOR_KEYS,
    ROOT_SECTION_NAME,
    TYPE_ALIASES,
    TYPE_KEY,
)
from .errors import SchemaError
from .models import Anchor, Boundary, MatchMode, RegionDescriptor, TableOrientation

log_schema = logging.getLogger("anchortab.schema")

# Inclusion defaults: labels above/left of a section belong to it, labels
# below/right of it start the next section.
DEFAULT_INCLUDED = {"top": True, "left": True, "bottom": False, "right": False}


def load_schema_tree(resource):
    """Reads a YAML (or JSON) schema file into a plain nested dict."""
    path = os.fspath(resource)
    if not os.path.isfile(path):
        raise SchemaError(f"Schema file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            tree = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaError(f"Could not parse schema {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(f"Could not read schema {path}: {e}") from e
    if not isinstance(tree, dict):
        raise SchemaError(f"Schema {path} must contain a mapping at the top level")
    log_schema.debug("Loaded schema tree from %s (%d top-level keys)", path, len(tree))
    return tree


def load_schema(resource):
    """Loads a schema file and builds the root RegionDescriptor."""
    descriptor = build_descriptor(load_schema_tree(resource))
    log_schema.info(
        "Schema ready: %d section(s) below root",
        sum(1 for _ in descriptor.walk()) - 1,
    )
    return descriptor


def split_flag(value):
    """Splits 'text|true' style values into (text, flag).

    The flag is None when the last '|' token is not a boolean literal, in
    which case the whole value is returned as text.
    """
    text = str(value).strip()
    items = text.split(FLAG_SEPARATOR)
    if len(items) >= 2:
        last = items[-1].strip().lower()
        if last in ("true", "false"):
            return text[: text.rindex(FLAG_SEPARATOR)].strip(), last == "true"
    return text, None


def parse_boundary(key, value, mode=MatchMode.ANY):
    """Decodes one identifier value into a Boundary, or None if empty."""
    if value is None:
        return None
    text, flag = split_flag(value)
    if key in MULTI_ANCHOR_KEYS:
        texts = [t.strip() for t in text.split(FLAG_SEPARATOR) if t.strip()]
    else:
        texts = [text] if text else []
    if not texts:
        log_schema.debug("Ignoring empty '%s' identifier", key)
        return None
    included = DEFAULT_INCLUDED[key] if flag is None else flag
    return Boundary(tuple(Anchor(t, mode) for t in texts), included)


def parse_margin(value):
    """Parses a margin; malformed values count as 0, negatives clamp to 0."""
    if value is None:
        return 0.0
    try:
        margin = float(str(value).strip())
    except (TypeError, ValueError):
        log_schema.debug("Malformed margin %r, using 0", value)
        return 0.0
    if margin != margin:  # NaN
        return 0.0
    return max(0.0, margin)


def parse_orientation(value, section_name):
    if value is None:
        return TableOrientation.NONE
    alias = TYPE_ALIASES.get(str(value).strip().lower())
    if alias is None:
        log_schema.warning(
            "Section '%s': unknown type %r, treating as 'none'", section_name, value
        )
        return TableOrientation.NONE
    return TableOrientation(alias)


def parse_match_mode(value, section_name):
    if value is None:
        return MatchMode.ANY
    try:
        return MatchMode(str(value).strip().lower())
    except ValueError:
        log_schema.warning(
            "Section '%s': unknown match mode %r, using 'any'", section_name, value
        )
        return MatchMode.ANY


def build_descriptor(node, name=ROOT_SECTION_NAME):
    """Recursively converts a schema mapping into a RegionDescriptor."""
    if not isinstance(node, dict):
        raise SchemaError(f"Section '{name}' must be a mapping, got {type(node).__name__}")
    if not str(name).strip():
        raise SchemaError("Section names must not be empty")
    name = str(name)

    children = []
    for key, value in node.items():
        if isinstance(value, dict):
            children.append(build_descriptor(value, key))
        elif isinstance(value, list):
            log_schema.warning("Section '%s': list value for '%s' ignored", name, key)

    mode = parse_match_mode(node.get(MATCH_KEY), name)
    boundaries = {}
    for key in IDENTIFIER_KEYS:
        value = node.get(key)
        boundaries[key] = None if isinstance(value, (dict, list)) else parse_boundary(key, value, mode)

    descriptor = RegionDescriptor(
        name=name,
        top=boundaries["top"],
        bottom=boundaries["bottom"],
        left=boundaries["left"],
        right=boundaries["right"],
        top_margin=parse_margin(node.get("top_margin")),
        bottom_margin=parse_margin(node.get("bottom_margin")),
        orientation=parse_orientation(node.get(TYPE_KEY), name),
        children=tuple(children),
    )
    log_schema.debug("Built section %s", descriptor.describe())
    return descriptor
