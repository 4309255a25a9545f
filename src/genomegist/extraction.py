"""Match parsed genome variants against a reference catalog."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from enum import Enum

from genomegist.config import ALL_CATEGORIES, DISCLAIMER, TOOL_NAME, VERSION, SNPCategory
from genomegist.models import (
    CategoryMatchEstimate,
    ExtractionMetadata,
    ExtractionResult,
    ExtractionSummary,
    GenomicVariant,
    MatchedVariant,
    MatchStatus,
    ParseResult,
    ReferenceCatalog,
    ReferenceEntry,
    UnmatchedEntry,
    UnmatchedReason,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class DuplicatePolicy(str, Enum):
    """Which row wins when an rsid occurs more than once in a file."""

    LAST_WINS = "last-wins"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_variant_index(variants: Iterable[GenomicVariant]) -> tuple[dict[str, GenomicVariant], int]:
    """Index variants by lowercase rsid; later rows overwrite earlier ones.

    Returns the index and the number of overwritten duplicates.
    """

    index: dict[str, GenomicVariant] = {}
    duplicates = 0
    for variant in variants:
        key = variant.rsid.lower()
        if key in index:
            duplicates += 1
        index[key] = variant
    return index, duplicates


class ExtractionEngine:
    """Reconcile reference entries with one parsed genome file.

    The rsid index is built once per parse result; :meth:`extract` and
    :meth:`estimate` both reuse it.
    """

    duplicate_policy = DuplicatePolicy.LAST_WINS

    def __init__(self, parse_result: ParseResult, *, clock: Clock | None = None) -> None:
        self.parse_result = parse_result
        self.clock = clock or _utc_now
        self._index, duplicates = build_variant_index(parse_result.variants)
        if duplicates:
            logger.debug(
                "Genome file repeats %d rsids; keeping the last occurrence (%s)",
                duplicates,
                self.duplicate_policy.value,
            )

    @property
    def indexed_rsids(self) -> int:
        return len(self._index)

    def lookup(self, rsid: str) -> GenomicVariant | None:
        return self._index.get(rsid.lower())

    def extract(
        self,
        catalog: ReferenceCatalog,
        categories: Iterable[SNPCategory] | None = None,
    ) -> ExtractionResult:
        category_filter = tuple(categories) if categories is not None else None
        entries = self._filter_entries(catalog, category_filter)

        matched: list[MatchedVariant] = []
        unmatched: list[UnmatchedEntry] = []
        found = 0
        no_call = 0

        for entry in entries:
            variant = self.lookup(entry.rsid)
            if variant is None:
                unmatched.append(
                    UnmatchedEntry(
                        rsid=entry.rsid,
                        gene=entry.gene,
                        category=entry.category,
                        reason=UnmatchedReason.NOT_IN_FILE,
                    )
                )
                continue

            if variant.is_no_call:
                status = MatchStatus.NO_CALL
                no_call += 1
            else:
                status = MatchStatus.FOUND
                found += 1

            matched.append(
                MatchedVariant(
                    rsid=entry.rsid,
                    gene=entry.gene,
                    genotype=variant.genotype,
                    category=entry.category,
                    annotation=entry.annotation,
                    sources=entry.sources,
                    status=status,
                    risk_allele=entry.risk_allele,
                )
            )

        metadata = ExtractionMetadata(
            tool=TOOL_NAME,
            version=VERSION,
            timestamp=format_timestamp(self.clock()),
            source_format=self.parse_result.format,
            source_variant_count=len(self.parse_result.variants),
            catalog_version=catalog.version,
            disclaimer=DISCLAIMER,
            categories_included=category_filter,
        )

        return ExtractionResult(
            metadata=metadata,
            matched=tuple(matched),
            unmatched=tuple(unmatched),
            summary=ExtractionSummary(
                found=found,
                no_call=no_call,
                missing=len(unmatched),
                total=len(entries),
            ),
        )

    def estimate(
        self,
        catalog: ReferenceCatalog,
        categories: Iterable[SNPCategory] | None = None,
    ) -> CategoryMatchEstimate:
        """Count catalog entries present in the file, per category."""

        selected = set(categories) if categories is not None else set(ALL_CATEGORIES)
        by_category = {category: 0 for category in ALL_CATEGORIES}

        for entry in catalog.entries:
            if entry.category not in selected:
                continue
            if entry.rsid.lower() in self._index:
                by_category[entry.category] += 1

        return CategoryMatchEstimate(total=sum(by_category.values()), by_category=by_category)

    @staticmethod
    def _filter_entries(
        catalog: ReferenceCatalog,
        categories: tuple[SNPCategory, ...] | None,
    ) -> list[ReferenceEntry]:
        if categories is None:
            return list(catalog.entries)
        selected = set(categories)
        return [entry for entry in catalog.entries if entry.category in selected]


def extract_variants(
    parse_result: ParseResult,
    catalog: ReferenceCatalog,
    categories: Iterable[SNPCategory] | None = None,
    *,
    clock: Clock | None = None,
) -> ExtractionResult:
    """One-shot helper for callers that do not keep an engine around."""

    return ExtractionEngine(parse_result, clock=clock).extract(catalog, categories)
