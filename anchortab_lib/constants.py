# --- anchortab_lib/constants.py ---
"""
anchortab_lib/constants.py: Schema keywords and default tuning values.
"""

# --- SCHEMA KEYWORDS ---
ROOT_SECTION_NAME = "root"
IDENTIFIER_KEYS = ("top", "bottom", "left", "right")
MULTI_ANCHOR_KEYS = ("top", "bottom")
TYPE_KEY = "type"
MATCH_KEY = "match"
FLAG_SEPARATOR = "|"

TYPE_ALIASES = {
    "0": "horizontal",
    "h": "horizontal",
    "horizontal": "horizontal",
    "1": "vertical",
    "v": "vertical",
    "vertical": "vertical",
    "none": "none",
}

# --- LOCATOR TOLERANCES ---
# Offsets (page units) that push an excluded bottom anchor out of the region.
DEFAULT_BOTTOM_DETACH = 1.0
DEFAULT_LAST_PAGE_INSET = 10.0

# --- GRID DETECTION ---
DEFAULT_ALGORITHM = "text"
WORD_X_TOLERANCE = 3
LINE_Y_TOLERANCE = 3

STREAM_TABLE_SETTINGS = {
    "vertical_strategy": "text",
    "horizontal_strategy": "text",
    "snap_tolerance": 3,
    "join_tolerance": 3,
}

SPREADSHEET_TABLE_SETTINGS = {
    "vertical_strategy": "lines",
    "horizontal_strategy": "lines",
}

# --- ROW PRESENTATION ---
ROW_DELIMITER = "  |  "
TABULAR_DELIMITER = "|"
TABULAR_COLUMN_WIDTH = 30
