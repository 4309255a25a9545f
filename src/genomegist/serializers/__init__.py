"""Report serializers and download helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

from genomegist.config import OutputFormat
from genomegist.models import ExtractionResult

from .base import ResultSerializer
from .minimal import MinimalCsvSerializer
from .yaml_report import CompactYamlSerializer, DetailedYamlSerializer

FILENAME_PREFIX = "genomegist-results"

SERIALIZERS: dict[OutputFormat, ResultSerializer] = {
    OutputFormat.DETAILED: DetailedYamlSerializer(),
    OutputFormat.COMPACT: CompactYamlSerializer(),
    OutputFormat.MINIMAL: MinimalCsvSerializer(),
}


def get_serializer(fmt: OutputFormat | str) -> ResultSerializer:
    try:
        return SERIALIZERS[OutputFormat(fmt)]
    except ValueError:
        raise ValueError(
            f"Invalid format: {fmt}. Must be: {', '.join(item.value for item in OutputFormat)}"
        ) from None


def serialize(result: ExtractionResult, fmt: OutputFormat | str = OutputFormat.DETAILED) -> str:
    """Render ``result`` in the requested encoding."""

    return get_serializer(fmt).render(result)


def media_type(fmt: OutputFormat | str) -> str:
    return get_serializer(fmt).media_type


def generate_filename(fmt: OutputFormat | str = OutputFormat.DETAILED, today: date | None = None) -> str:
    """``genomegist-results[-<format>]-YYYY-MM-DD.<ext>``; detailed has no suffix."""

    serializer = get_serializer(fmt)
    day = (today or datetime.now(timezone.utc).date()).isoformat()
    suffix = "" if serializer.format is OutputFormat.DETAILED else f"-{serializer.format.value}"
    return f"{FILENAME_PREFIX}{suffix}-{day}.{serializer.extension}"


def calculate_size(content: str) -> str:
    """Human-readable UTF-8 size: ``N B``, ``N.N KB`` or ``N.N MB``."""

    size = len(content.encode("utf-8"))
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


__all__ = [
    "ResultSerializer",
    "DetailedYamlSerializer",
    "CompactYamlSerializer",
    "MinimalCsvSerializer",
    "SERIALIZERS",
    "calculate_size",
    "generate_filename",
    "get_serializer",
    "media_type",
    "serialize",
]
