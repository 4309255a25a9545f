"""Extract catalog SNPs from a genome file on the command line.

Uses the bundled free SNP list (or ``--catalog``); the licensed tiers are not
available here.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from genomegist.catalog import CatalogLoader
from genomegist.config import (
    ALL_CATEGORIES,
    CATEGORY_PRESETS,
    TOOL_NAME,
    VERSION,
    CategoryPreset,
    OutputFormat,
    SNPCategory,
    parse_categories,
)
from genomegist.errors import CatalogValidationError, ParseError, user_message
from genomegist.extraction import ExtractionEngine
from genomegist.parsers import format_display_name
from genomegist.registry import parse_genome_file
from genomegist.serializers import calculate_size, generate_filename, serialize
from genomegist.workspace import check_upload, read_genome_text

logger = logging.getLogger("genomegist.cli")

DEFAULT_CATEGORIES = CategoryPreset.WELLNESS.value


def resolve_categories(value: str) -> tuple[SNPCategory, ...]:
    """Accept a preset name, ``all`` or a comma-separated category list."""

    name = value.strip().lower()
    if name == "all":
        return ALL_CATEGORIES
    if name in {preset.value for preset in CategoryPreset}:
        return CATEGORY_PRESETS[CategoryPreset(name)]

    categories = parse_categories(value)
    if not categories:
        raise ValueError("No categories selected")
    return categories


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="genomegist",
        description="Extract curated SNPs from a 23andMe or AncestryDNA raw data file",
    )
    parser.add_argument("genome_file", help="Path to the raw genome export (.txt or .csv)")
    parser.add_argument(
        "--format",
        default=OutputFormat.DETAILED.value,
        choices=[item.value for item in OutputFormat],
        help="Output format",
    )
    parser.add_argument(
        "--categories",
        default=DEFAULT_CATEGORIES,
        help="Preset (demo, wellness, full), 'all', or comma-separated categories",
    )
    parser.add_argument("--output", default=None, help="Write output to this file instead of stdout")
    parser.add_argument("--json", action="store_true", help="Emit the extraction result as JSON")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress informational messages")
    parser.add_argument("--catalog", default=None, help="Path to an alternative SNP list JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    parser.add_argument("-v", "--version", action="version", version=f"{TOOL_NAME} v{VERSION}")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> str:
    """Execute one extraction and return the rendered output."""

    categories = resolve_categories(args.categories)

    loader = CatalogLoader()
    catalog = loader.load_path(args.catalog) if args.catalog else loader.load_free()

    genome_path = Path(args.genome_file)
    check_upload(genome_path)
    logger.info("Reading genome file: %s", genome_path)
    content = read_genome_text(genome_path)

    parse_result = parse_genome_file(content)
    logger.info(
        "Detected format: %s with %d variants",
        format_display_name(parse_result.format),
        len(parse_result.variants),
    )

    logger.info("Extracting variants (%d categories)", len(categories))
    result = ExtractionEngine(parse_result).extract(catalog, categories)

    if args.json:
        return json.dumps(result.to_dict(), indent=2)
    return serialize(result, args.format)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        output = run(args)
    except (ParseError, CatalogValidationError, ValueError) as exc:
        print(f"Error: {user_message(exc)}", file=sys.stderr)
        return 1

    if args.output:
        try:
            Path(args.output).write_text(output, encoding="utf-8")
        except OSError as exc:
            print(f"Error: Could not write {args.output}: {exc.strerror or exc}", file=sys.stderr)
            return 1
        logger.info("Wrote %s to %s", calculate_size(output), args.output)
    else:
        sys.stdout.write(output if output.endswith("\n") else output + "\n")
        logger.info("Suggested filename: %s", generate_filename(args.format))
        logger.info("Output size: %s", calculate_size(output))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
