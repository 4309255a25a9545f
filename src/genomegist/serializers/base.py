"""Serializer interface for GenomeGist reports."""

from __future__ import annotations

from abc import ABC, abstractmethod

from genomegist.config import OutputFormat
from genomegist.models import ExtractionResult


class ResultSerializer(ABC):
    """Renders an extraction result into one text encoding.

    Implementations must be pure: the same result always yields the same
    string.
    """

    format: OutputFormat
    extension: str
    media_type: str

    @abstractmethod
    def render(self, result: ExtractionResult) -> str:
        """Return the serialized report."""
