"""Canonical in-memory data models used by GenomeGist."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from genomegist.config import GenomeFormat, NO_CALL, SNPCategory
from genomegist.errors import ParseWarning


@dataclass(frozen=True)
class GenomicVariant:
    """Single normalized row from a raw genome export."""

    rsid: str
    chromosome: str
    position: int
    genotype: str

    @property
    def is_no_call(self) -> bool:
        return self.genotype == NO_CALL


@dataclass(frozen=True)
class ParseMetadata:
    """Optional facts recovered from comment lines."""

    generated_at: str | None = None
    build: str | None = None


@dataclass(frozen=True)
class ParseResult:
    """Variants recovered from one uploaded file."""

    format: GenomeFormat
    variants: tuple[GenomicVariant, ...]
    metadata: ParseMetadata = field(default_factory=ParseMetadata)
    warnings: tuple[ParseWarning, ...] = ()


@dataclass(frozen=True)
class ReferenceEntry:
    """One curated variant of interest from a reference catalog."""

    rsid: str
    gene: str
    category: SNPCategory
    annotation: str
    sources: tuple[str, ...] = ()
    risk_allele: str | None = None
    chromosome: str | None = None
    position: int | None = None


@dataclass(frozen=True)
class ReferenceCatalog:
    """Versioned list of reference entries (free or premium tier)."""

    version: str
    generated_at: str
    count: int
    entries: tuple[ReferenceEntry, ...]


class MatchStatus(str, Enum):
    FOUND = "found"
    NO_CALL = "no-call"


class UnmatchedReason(str, Enum):
    NOT_IN_FILE = "not-in-file"


@dataclass(frozen=True)
class MatchedVariant:
    """Reference entry paired with the genotype observed in the file."""

    rsid: str
    gene: str
    genotype: str
    category: SNPCategory
    annotation: str
    sources: tuple[str, ...]
    status: MatchStatus
    risk_allele: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "rsid": self.rsid,
            "gene": self.gene,
            "genotype": self.genotype,
            "category": self.category.value,
            "annotation": self.annotation,
            "sources": list(self.sources),
            "status": self.status.value,
        }
        if self.risk_allele is not None:
            payload["riskAllele"] = self.risk_allele
        return payload


@dataclass(frozen=True)
class UnmatchedEntry:
    """Reference entry that could not be found in the genome file."""

    rsid: str
    gene: str
    category: SNPCategory
    reason: UnmatchedReason = UnmatchedReason.NOT_IN_FILE

    def to_dict(self) -> dict[str, Any]:
        return {
            "rsid": self.rsid,
            "gene": self.gene,
            "category": self.category.value,
            "reason": self.reason.value,
        }


@dataclass(frozen=True)
class ExtractionMetadata:
    tool: str
    version: str
    timestamp: str
    source_format: GenomeFormat
    source_variant_count: int
    catalog_version: str
    disclaimer: str
    categories_included: tuple[SNPCategory, ...] | None = None

    @property
    def date(self) -> str:
        """Calendar date portion of the extraction timestamp."""

        return self.timestamp[:10]


@dataclass(frozen=True)
class ExtractionSummary:
    found: int
    no_call: int
    missing: int
    total: int


@dataclass(frozen=True)
class ExtractionResult:
    """Read-only outcome of one extraction action."""

    metadata: ExtractionMetadata
    matched: tuple[MatchedVariant, ...]
    unmatched: tuple[UnmatchedEntry, ...]
    summary: ExtractionSummary

    def to_dict(self) -> dict[str, Any]:
        """Serialize into plain JSON-compatible structures."""

        categories = self.metadata.categories_included
        return {
            "metadata": {
                "tool": self.metadata.tool,
                "version": self.metadata.version,
                "date": self.metadata.timestamp,
                "sourceFormat": self.metadata.source_format.value,
                "sourceVariantCount": self.metadata.source_variant_count,
                "snpListVersion": self.metadata.catalog_version,
                "disclaimer": self.metadata.disclaimer,
                "categoriesIncluded": (
                    [category.value for category in categories] if categories is not None else None
                ),
            },
            "variants": [variant.to_dict() for variant in self.matched],
            "missing": [entry.to_dict() for entry in self.unmatched],
            "summary": {
                "found": self.summary.found,
                "noCall": self.summary.no_call,
                "missing": self.summary.missing,
                "total": self.summary.total,
            },
        }


@dataclass(frozen=True)
class CategoryMatchEstimate:
    """Preview counts of catalog entries present in the file."""

    total: int
    by_category: dict[SNPCategory, int]
