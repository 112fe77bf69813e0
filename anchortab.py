#!/usr/bin/env python3
"""
anchortab: Schema-driven extraction of tables and fields from PDF files.

A schema names the anchor texts that open and close each section of a
document ("Balance Sheet" ... "Notes"), whether the section is a key/value
(horizontal) or header/records (vertical) table, and which sub-sections it
contains. This script locates every section, reads the grid inside it and
prints the nested result as JSON.
"""

import argparse
import importlib
import logging
import os
import sys

from rich.console import Console

from anchortab_lib.api import (
    ExtractionOptions,
    extract_section_tables,
    extract_with_issues,
    resolve_schema,
    to_json,
)
from anchortab_lib.errors import DocumentDecodeError, SchemaError
from anchortab_lib.grid import GridAlgorithm
from anchortab_lib.locator import LocatorTolerances
from anchortab_lib.normalizer import CorrectionRegistry, render_rows
from anchortab_lib.constants import DEFAULT_BOTTOM_DETACH, DEFAULT_LAST_PAGE_INSET
from core.log_utils import ContextFilter, setup_logging

app_log = logging.getLogger("anchortab")


class CustomHelpFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawTextHelpFormatter
):
    """Shows default values and keeps newlines in help text."""

    pass


class Application:
    """Runs one extraction based on command-line arguments."""

    def __init__(self, args):
        self.args = args
        self.console = Console()

    def run(self):
        """Main entry point for the application logic. Returns an exit status."""
        setup_logging(
            project_name="anchortab",
            level=logging.INFO if self.args.verbose else logging.WARNING,
            color_logs=self.args.color_logs,
            debug_topics=self.args.debug_topics,
            log_file=self.args.log_file,
        )
        log_filter = ContextFilter(os.path.basename(self.args.pdf_file))
        for handler in logging.getLogger().handlers:
            handler.addFilter(log_filter)

        try:
            options = ExtractionOptions(
                algorithm=self.args.algorithm,
                tolerances=LocatorTolerances(
                    bottom_detach=self.args.bottom_detach,
                    last_page_inset=self.args.last_page_inset,
                ),
                password=self.args.password,
            )
            corrections = self._load_corrections()
            if self.args.tables:
                self._print_tables(corrections, options)
            else:
                self._write_result(corrections, options)
        except (SchemaError, DocumentDecodeError, FileNotFoundError) as e:
            app_log.critical("%s", e)
            return 1
        return 0

    def _load_corrections(self):
        """Imports the --corrections module and returns its CORRECTIONS."""
        if not self.args.corrections:
            return None
        try:
            module = importlib.import_module(self.args.corrections)
        except ImportError as e:
            raise SchemaError(f"Could not import corrections module: {e}") from e
        corrections = getattr(module, "CORRECTIONS", None)
        if corrections is None:
            raise SchemaError(f"Module '{self.args.corrections}' has no CORRECTIONS")
        if not isinstance(corrections, CorrectionRegistry):
            corrections = CorrectionRegistry.from_mapping(corrections)
        app_log.info("Loaded %d correction(s) from %s", len(corrections), self.args.corrections)
        return corrections

    def _write_result(self, corrections, options):
        result = extract_with_issues(
            self.args.schema_file, self.args.pdf_file, corrections, options
        )
        if result.issues:
            app_log.info("%d section issue(s) recorded", len(result.issues))
        text = to_json(result.data)
        if self.args.output_file:
            with open(self.args.output_file, "w", encoding="utf-8") as f:
                f.write(text + "\n")
            app_log.info("Result written to %s", self.args.output_file)
        else:
            self.console.print_json(text)

    def _print_tables(self, corrections, options):
        """Prints the rows of every top-level section in fixed-width form."""
        root = resolve_schema(self.args.schema_file)
        sections = root.children or (root,)
        tables = extract_section_tables(sections, self.args.pdf_file, corrections, options)
        for name, rows in tables.items():
            self.console.rule(name)
            if rows:
                self.console.print(render_rows(rows, fixed_width=True), markup=False)
            else:
                self.console.print("(not found)", style="dim")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Extract anchored sections from a PDF into JSON.",
        formatter_class=CustomHelpFormatter,
    )
    parser.add_argument("schema_file", help="YAML/JSON schema describing the sections.")
    parser.add_argument("pdf_file", help="The PDF document to read.")
    parser.add_argument(
        "-o", "--output-file", default=None, help="Write the JSON result here instead of stdout."
    )
    parser.add_argument(
        "-a",
        "--algorithm",
        choices=[a.value for a in GridAlgorithm],
        default=GridAlgorithm.TEXT.value,
        help="Grid detection algorithm:\n"
        "  text        whitespace-delimited rows\n"
        "  stream      text-alignment tables\n"
        "  spreadsheet ruled-line tables\n"
        "  auto        spreadsheet if ruled tables are found, else text",
    )
    parser.add_argument("--password", default="", help="Password for encrypted PDFs.")
    parser.add_argument(
        "--corrections",
        default=None,
        help="Python module exposing CORRECTIONS (registry or dict of callables).",
    )
    parser.add_argument(
        "--tables",
        action="store_true",
        help="Print the normalized rows of each top-level section instead of JSON.",
    )
    parser.add_argument(
        "--bottom-detach",
        type=float,
        default=DEFAULT_BOTTOM_DETACH,
        help="Offset that detaches an excluded bottom anchor from its region.",
    )
    parser.add_argument(
        "--last-page-inset",
        type=float,
        default=DEFAULT_LAST_PAGE_INSET,
        help="Extra inset above an excluded bottom anchor on a region's last page.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress (INFO).")
    parser.add_argument(
        "-d",
        "--debug-topics",
        default=None,
        help="Comma-separated debug topics (schema, document, locate, grid, rows,\n"
        "extract, api) or 'all'.",
    )
    parser.add_argument("--color-logs", action="store_true", help="Colorize log output.")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    return Application(args).run()


if __name__ == "__main__":
    sys.exit(main())
