"""Format detection for raw genome exports."""

from __future__ import annotations

from genomegist.config import DETECTION_WINDOW, GenomeFormat

TWENTYTHREEANDME_HEADER = "# rsid\tchromosome\tposition\tgenotype"
ANCESTRY_HEADER = "rsid\tchromosome\tposition\tallele1\tallele2"

# Checked in order; the first marker found decides the 23andMe version.
TWENTYTHREEANDME_VERSION_MARKERS: tuple[tuple[str, GenomeFormat], ...] = (
    ("Annotation Release 104", GenomeFormat.TWENTYTHREEANDME_V5),
    ("Annotation Release 103", GenomeFormat.TWENTYTHREEANDME_V4),
    ("build 36", GenomeFormat.TWENTYTHREEANDME_V3),
)
DEFAULT_23ANDME_VERSION = GenomeFormat.TWENTYTHREEANDME_V5

DISPLAY_NAMES: dict[GenomeFormat, str] = {
    GenomeFormat.TWENTYTHREEANDME_V5: "23andMe (v5)",
    GenomeFormat.TWENTYTHREEANDME_V4: "23andMe (v4)",
    GenomeFormat.TWENTYTHREEANDME_V3: "23andMe (v3)",
    GenomeFormat.ANCESTRY: "AncestryDNA",
    GenomeFormat.UNKNOWN: "Unknown format",
}


def detect_format(content: str) -> GenomeFormat:
    """Classify a file from its first ~2 KB of text.

    ``UNKNOWN`` must be treated as an unsupported file, never as a partial match.
    """

    header = content[:DETECTION_WINDOW]

    if "23andMe" in header or TWENTYTHREEANDME_HEADER in header:
        return _detect_23andme_version(header)

    if "AncestryDNA" in header or ANCESTRY_HEADER in header:
        return GenomeFormat.ANCESTRY

    return GenomeFormat.UNKNOWN


def _detect_23andme_version(header: str) -> GenomeFormat:
    for marker, genome_format in TWENTYTHREEANDME_VERSION_MARKERS:
        if marker in header:
            return genome_format
    return DEFAULT_23ANDME_VERSION


def format_display_name(genome_format: GenomeFormat) -> str:
    return DISPLAY_NAMES[GenomeFormat(genome_format)]
