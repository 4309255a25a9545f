"""YAML report serializers (detailed and compact)."""

from __future__ import annotations

from typing import Any

import yaml

from genomegist.config import SHORT_DISCLAIMER, OutputFormat
from genomegist.models import ExtractionResult, MatchedVariant, MatchStatus
from genomegist.serializers.base import ResultSerializer


def dump_yaml(payload: dict[str, Any]) -> str:
    """Dump with insertion order preserved and a fixed line width."""

    return yaml.safe_dump(
        payload,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=120,
    )


class DetailedYamlSerializer(ResultSerializer):
    """Full metadata, summary, annotated variants and missing entries."""

    format = OutputFormat.DETAILED
    extension = "yaml"
    media_type = "text/yaml"

    def render(self, result: ExtractionResult) -> str:
        metadata = result.metadata
        payload: dict[str, Any] = {
            "metadata": {
                "tool": metadata.tool,
                "version": metadata.version,
                "extraction_date": metadata.timestamp,
                "source_format": metadata.source_format.value,
                "source_variant_count": metadata.source_variant_count,
                "snp_list_version": metadata.catalog_version,
                "disclaimer": metadata.disclaimer,
            },
            "summary": {
                "variants_found": result.summary.found,
                "variants_no_call": result.summary.no_call,
                "variants_missing": result.summary.missing,
                "total_in_snp_list": result.summary.total,
            },
            "variants": [self._format_variant(variant) for variant in result.matched],
        }

        if result.unmatched:
            payload["missing_variants"] = [
                {
                    "rsid": entry.rsid,
                    "gene": entry.gene,
                    "category": entry.category.value,
                    "reason": entry.reason.value,
                }
                for entry in result.unmatched
            ]

        return dump_yaml(payload)

    @staticmethod
    def _format_variant(variant: MatchedVariant) -> dict[str, Any]:
        formatted: dict[str, Any] = {
            "rsid": variant.rsid,
            "gene": variant.gene,
            "genotype": variant.genotype,
            "category": variant.category.value,
        }
        if variant.status is MatchStatus.NO_CALL:
            formatted["status"] = variant.status.value
        formatted["annotation"] = variant.annotation
        formatted["sources"] = list(variant.sources)
        return formatted


class CompactYamlSerializer(ResultSerializer):
    """Date-only metadata and rsid/gene/genotype triples."""

    format = OutputFormat.COMPACT
    extension = "yaml"
    media_type = "text/yaml"

    def render(self, result: ExtractionResult) -> str:
        metadata = result.metadata
        payload: dict[str, Any] = {
            "metadata": {
                "tool": metadata.tool,
                "version": metadata.version,
                "date": metadata.date,
                "source": metadata.source_format.value,
                "snp_list": metadata.catalog_version,
                "disclaimer": SHORT_DISCLAIMER,
            },
            "summary": {
                "found": result.summary.found,
                "no_call": result.summary.no_call,
                "missing": result.summary.missing,
                "total": result.summary.total,
            },
            "variants": [
                {"rsid": variant.rsid, "gene": variant.gene, "genotype": variant.genotype}
                for variant in result.matched
            ],
        }

        if result.unmatched:
            payload["missing"] = [entry.rsid for entry in result.unmatched]

        return dump_yaml(payload)
