#!/usr/bin/env python3
"""
Convert an XML event log into a flat CSV (or Excel) table.

Every top-level <Event> becomes one row. Columns are the union of the
flattened fields of all events, in order of first appearance.

Usage:
    # Windows event export to CSV
    python scripts/convert_events.py data/security.xml data/security.csv

    # Excel output (selected by suffix, or with --format xlsx)
    python scripts/convert_events.py data/security.xml data/security.xlsx

    # Records with another tag and custom marker tags
    python scripts/convert_events.py in.xml out.csv --record-tag Record \\
        --named-variant-tag Field --positional-variant-tag Slot

    # Settings from a YAML file
    python scripts/convert_events.py in.xml out.csv --config eventlog.yaml
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from event_log_flattener.config import Settings, get_settings
from event_log_flattener.ingestion import FlattenerError
from event_log_flattener.pipeline import EventLogConverter, setup_logging

logger = logging.getLogger(__name__)


def build_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply command-line overrides."""
    settings = get_settings(str(args.config) if args.config else None)

    overrides = {}
    if args.record_tag:
        overrides["record_tags"] = tuple(args.record_tag)
    if args.named_variant_tag:
        overrides["named_variant_tag"] = args.named_variant_tag
    if args.positional_variant_tag:
        overrides["positional_variant_tag"] = args.positional_variant_tag

    if overrides:
        settings = replace(settings, flattening=replace(settings.flattening, **overrides))
    return settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Flatten an XML event log into a CSV or Excel table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert to CSV
  python scripts/convert_events.py events.xml events.csv

  # Convert to Excel
  python scripts/convert_events.py events.xml events.xlsx

  # Gzip-compressed input
  python scripts/convert_events.py events.xml.gz events.csv
        """,
    )

    parser.add_argument("input", type=Path, help="Input XML file (optionally .gz)")
    parser.add_argument(
        "output",
        type=Path,
        help="Output file; must not exist (it is never overwritten)",
    )
    parser.add_argument(
        "--format",
        choices=["auto", "csv", "xlsx"],
        default="auto",
        help="Output format (default: auto, from the output suffix)",
    )
    parser.add_argument(
        "--record-tag",
        action="append",
        help="Accepted top-level element tag; repeatable (default: Event)",
    )
    parser.add_argument(
        "--named-variant-tag",
        help="Tag whose repeated siblings are named by their Name attribute (default: Data)",
    )
    parser.add_argument(
        "--positional-variant-tag",
        help="Parent tag whose child is named by its index attribute (default: Substitution)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file (default: eventlog.yaml if present, else env vars)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    print("Processing files:")
    print(f"  Input: {args.input}")
    print(f"  Output: {args.output}")

    try:
        settings = build_settings(args)
        converter = EventLogConverter(settings=settings)
        result = converter.convert(args.input, args.output, output_format=args.format)
    except (FlattenerError, FileNotFoundError, ValueError) as e:
        logger.error(f"Conversion failed: {e}")
        return 1

    print(f"Collected data columns: {result.column_count}, rows: {result.row_count}")
    print(f"Finished in {result.duration_seconds:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
