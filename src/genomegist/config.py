"""Configuration contracts for GenomeGist extraction and licensing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

TOOL_NAME = "GenomeGist"
VERSION = "1.0.0"

DISCLAIMER = (
    "DISCLAIMER: This file contains genetic information extracted for research and "
    "educational purposes only. This is NOT medical advice. Genetic variants may have "
    "different effects depending on other genetic and environmental factors. Consult a "
    "healthcare provider or genetic counselor for interpretation of genetic data. The "
    "annotations are derived from public databases and may not reflect the most current "
    "scientific understanding."
)
SHORT_DISCLAIMER = "For research/educational use only. Not medical advice."

MAX_GENOME_FILE_BYTES = 100 * 1024 * 1024
ACCEPTED_EXTENSIONS: tuple[str, ...] = (".txt", ".csv")
DETECTION_WINDOW = 2000

NO_CALL = "--"


class GenomeFormat(str, Enum):
    """Vendor and version tag of a raw genome export."""

    TWENTYTHREEANDME_V5 = "23andme-v5"
    TWENTYTHREEANDME_V4 = "23andme-v4"
    TWENTYTHREEANDME_V3 = "23andme-v3"
    ANCESTRY = "ancestry"
    UNKNOWN = "unknown"


class SNPCategory(str, Enum):
    """Closed set of reference catalog categories."""

    METHYLATION = "methylation"
    DETOXIFICATION = "detoxification"
    CARDIOVASCULAR = "cardiovascular"
    PHARMACOGENOMICS = "pharmacogenomics"
    NEUROTRANSMITTERS = "neurotransmitters"
    IMMUNE = "immune"
    NUTRITION = "nutrition"
    OTHER = "other"


ALL_CATEGORIES: tuple[SNPCategory, ...] = tuple(SNPCategory)


class OutputFormat(str, Enum):
    """Serialized report encodings."""

    DETAILED = "detailed"
    COMPACT = "compact"
    MINIMAL = "minimal"


class CategoryPreset(str, Enum):
    """Named category selections offered to users."""

    DEMO = "demo"
    WELLNESS = "wellness"
    FULL = "full"


CATEGORY_PRESETS: Mapping[CategoryPreset, tuple[SNPCategory, ...]] = {
    CategoryPreset.DEMO: ALL_CATEGORIES,
    CategoryPreset.WELLNESS: tuple(
        category for category in ALL_CATEGORIES if category is not SNPCategory.PHARMACOGENOMICS
    ),
    CategoryPreset.FULL: ALL_CATEGORIES,
}

PRESET_REQUIRES_LICENSE: Mapping[CategoryPreset, bool] = {
    CategoryPreset.DEMO: False,
    CategoryPreset.WELLNESS: True,
    CategoryPreset.FULL: True,
}


def parse_categories(values: str | list[str] | tuple[str, ...] | None) -> tuple[SNPCategory, ...] | None:
    """Turn comma-separated or listed category names into enum members.

    ``None`` means "all categories". Unknown names raise ``ValueError``.
    """

    if values is None:
        return None
    if isinstance(values, str):
        values = values.split(",")

    categories: list[SNPCategory] = []
    for raw in values:
        name = str(raw).strip().lower()
        if not name:
            continue
        try:
            category = SNPCategory(name)
        except ValueError:
            raise ValueError(
                f"Unknown category '{raw}'. Available: {', '.join(c.value for c in ALL_CATEGORIES)}"
            ) from None
        if category not in categories:
            categories.append(category)
    return tuple(categories)


@dataclass(frozen=True)
class LicenseServiceConfig:
    """Connection settings for the remote License Service."""

    base_url: str = "https://api.genomegist.com/api"
    timeout: float = 15.0
    key_prefix: str = "gg_"
    min_key_length: int = 10

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LicenseServiceConfig":
        """Build settings from ``GENOMEGIST_API_*`` environment variables."""

        env = os.environ if environ is None else environ
        defaults = cls()
        base_url = env.get("GENOMEGIST_API_BASE_URL", "").strip() or defaults.base_url
        raw_timeout = env.get("GENOMEGIST_API_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else defaults.timeout
        except ValueError:
            raise ValueError(f"GENOMEGIST_API_TIMEOUT must be a number, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError("GENOMEGIST_API_TIMEOUT must be positive")
        return cls(base_url=base_url.rstrip("/"), timeout=timeout)

    def is_well_formed_key(self, key: str) -> bool:
        """Cheap local shape check before any network call."""

        return key.startswith(self.key_prefix) and len(key) >= self.min_key_length
