"""Base interface for vendor genome file parsers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from genomegist.config import GenomeFormat
from genomegist.errors import ParseError, ParseErrorKind, ParseWarning, summarize_warnings
from genomegist.models import GenomicVariant, ParseMetadata, ParseResult
from genomegist.parsers.common import (
    extract_comment_metadata,
    is_column_header,
    split_lines,
    truncate_details,
)

logger = logging.getLogger(__name__)


class GenomeParser(ABC):
    """Parser that converts one vendor's raw export into normalized variants.

    Subclasses only describe how a single tab-separated data line maps onto a
    :class:`GenomicVariant`; comment handling, header skipping and warning
    bookkeeping are shared here.
    """

    name: str
    format: GenomeFormat
    expected_columns: int

    def parse(self, content: str, *, detected_format: GenomeFormat | None = None) -> ParseResult:
        variants: list[GenomicVariant] = []
        warnings: list[ParseWarning] = []
        generated_at: str | None = None
        build: str | None = None

        for index, raw_line in enumerate(split_lines(content), start=1):
            line = raw_line.strip()
            if not line:
                continue

            if line.startswith("#"):
                line_date, line_build = extract_comment_metadata(line)
                generated_at = line_date or generated_at
                build = line_build or build
                continue

            if is_column_header(line):
                continue

            variant = self._parse_fields(line.split("\t"))
            if variant is None:
                warnings.append(
                    ParseWarning(
                        line=index,
                        message="Failed to parse line",
                        details=truncate_details(line),
                    )
                )
                continue

            variants.append(variant)

        if not variants:
            raise ParseError(
                ParseErrorKind.NO_VALID_VARIANTS,
                "No valid variants found in file. Please check the file format.",
            )

        summary = summarize_warnings(warnings)
        if summary:
            logger.warning("%s: %s (first at line %d)", self.name, summary, warnings[0].line)

        return ParseResult(
            format=detected_format or self.format,
            variants=tuple(variants),
            metadata=ParseMetadata(generated_at=generated_at, build=build),
            warnings=tuple(warnings),
        )

    def _parse_fields(self, fields: list[str]) -> GenomicVariant | None:
        if len(fields) < self.expected_columns:
            return None
        return self.parse_fields([item.strip() for item in fields[: self.expected_columns]])

    @abstractmethod
    def parse_fields(self, fields: list[str]) -> GenomicVariant | None:
        """Return a variant for one data line, or None when the line is malformed."""
