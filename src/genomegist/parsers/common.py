"""Shared field validation for vendor genome parsers."""

from __future__ import annotations

import re

RSID_PATTERN = re.compile(r"^(?:rs|i)\d+$")
LINE_SPLIT_PATTERN = re.compile(r"\r?\n")

GENERATED_AT_PATTERN = re.compile(
    r"(?:generated|created|downloaded)(?:\s+by\s+[\w.&-]+)?\s*(?:at|on)?\s*:?\s*(.+)",
    re.IGNORECASE,
)
BUILD_PATTERN = re.compile(r"(?:build|assembly)\s*:?\s*(GRCh\d+|\d+)", re.IGNORECASE)

STANDARD_CHROMOSOMES: frozenset[str] = frozenset(
    [str(number) for number in range(1, 23)] + ["X", "Y", "MT"]
)

# AncestryDNA encodes sex and mitochondrial chromosomes numerically.
NUMERIC_CHROMOSOME_ALIASES: dict[str, str] = {
    "23": "X",
    "24": "Y",
    "25": "MT",
    "26": "MT",
}

DETAILS_LIMIT = 100


def split_lines(content: str) -> list[str]:
    """Split on both Unix and Windows line endings."""

    return LINE_SPLIT_PATTERN.split(content)


def normalize_rsid(value: str) -> str | None:
    """Return the lowercase rsid, or None when it is not an ``rs``/``i`` identifier."""

    cleaned = value.strip().lower()
    if not RSID_PATTERN.match(cleaned):
        return None
    return cleaned


def normalize_chromosome(value: str, *, numeric_aliases: bool = False) -> str | None:
    """Map a chromosome label onto 1-22, X, Y or MT."""

    cleaned = value.strip().upper()
    if cleaned.startswith("CHR"):
        cleaned = cleaned[3:]
    if cleaned == "M":
        cleaned = "MT"
    if numeric_aliases and cleaned in NUMERIC_CHROMOSOME_ALIASES:
        return NUMERIC_CHROMOSOME_ALIASES[cleaned]
    if cleaned in STANDARD_CHROMOSOMES:
        return cleaned
    return None


def parse_position(value: str) -> int | None:
    """Genomic coordinates are 1-based; zero and negatives are invalid."""

    cleaned = value.strip()
    if not cleaned.isdigit():
        return None
    position = int(cleaned)
    return position if position > 0 else None


def extract_comment_metadata(comment: str) -> tuple[str | None, str | None]:
    """Return ``(generated_at, build)`` found in a ``#`` comment line."""

    generated_at = None
    build = None

    date_match = GENERATED_AT_PATTERN.search(comment)
    if date_match:
        generated_at = date_match.group(1).strip() or None

    build_match = BUILD_PATTERN.search(comment)
    if build_match:
        build = build_match.group(1)

    return generated_at, build


def is_column_header(line: str) -> bool:
    return line.lower().startswith("rsid\t")


def truncate_details(line: str) -> str:
    return line[:DETAILS_LIMIT]
