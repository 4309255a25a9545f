import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from genomegist.catalog import CatalogLoader  # noqa: E402
from genomegist.config import SHORT_DISCLAIMER, OutputFormat  # noqa: E402
from genomegist.extraction import extract_variants  # noqa: E402
from genomegist.registry import parse_genome_file  # noqa: E402
from genomegist.serializers import (  # noqa: E402
    calculate_size,
    generate_filename,
    get_serializer,
    media_type,
    serialize,
)

GENOME = "\n".join(
    [
        "# This data file generated by 23andMe",
        "rs1801133\t1\t11856378\tCT",
        "rs4680\t22\t19951271\tAG",
        "rs999999\t1\t12345\t--",
    ]
)

FIXED_NOW = datetime(2025, 1, 23, 10, 30, 15, tzinfo=timezone.utc)


def _result(include_missing: bool = True):
    entries = [
        ("rs1801133", "MTHFR", "methylation"),
        ("rs4680", "COMT", "neurotransmitters"),
        ("rs999999", "TEST", "other"),
    ]
    if include_missing:
        entries.append(("rs777777", "MISSING", "other"))
    payload = {
        "version": "2025.01",
        "generatedAt": "2025-01-01T00:00:00Z",
        "count": len(entries),
        "variants": [
            {
                "rsid": rsid,
                "gene": gene,
                "category": category,
                "annotation": f"{gene} annotation",
                "sources": ["ClinVar", "dbSNP"],
            }
            for rsid, gene, category in entries
        ],
    }
    catalog = CatalogLoader().load_text(json.dumps(payload))
    return extract_variants(parse_genome_file(GENOME), catalog, clock=lambda: FIXED_NOW)


def test_serialization_is_deterministic() -> None:
    result = _result()

    for fmt in OutputFormat:
        assert serialize(result, fmt) == serialize(result, fmt)


def test_minimal_is_smaller_than_compact_smaller_than_detailed() -> None:
    result = _result()

    minimal = serialize(result, "minimal")
    compact = serialize(result, "compact")
    detailed = serialize(result, "detailed")

    assert len(minimal) < len(compact) < len(detailed)


def test_detailed_report_structure() -> None:
    document = yaml.safe_load(serialize(_result(), OutputFormat.DETAILED))

    assert list(document) == ["metadata", "summary", "variants", "missing_variants"]
    assert document["metadata"]["tool"] == "GenomeGist"
    assert document["metadata"]["version"] == "1.0.0"
    assert document["metadata"]["extraction_date"] == "2025-01-23T10:30:15.000Z"
    assert document["metadata"]["source_format"] == "23andme-v5"
    assert document["metadata"]["source_variant_count"] == 3
    assert document["metadata"]["snp_list_version"] == "2025.01"
    assert document["metadata"]["disclaimer"].startswith("DISCLAIMER:")
    assert document["summary"] == {
        "variants_found": 2,
        "variants_no_call": 1,
        "variants_missing": 1,
        "total_in_snp_list": 4,
    }
    assert document["variants"][0] == {
        "rsid": "rs1801133",
        "gene": "MTHFR",
        "genotype": "CT",
        "category": "methylation",
        "annotation": "MTHFR annotation",
        "sources": ["ClinVar", "dbSNP"],
    }
    assert document["variants"][2]["status"] == "no-call"
    assert "status" not in document["variants"][1]
    assert document["missing_variants"] == [
        {"rsid": "rs777777", "gene": "MISSING", "category": "other", "reason": "not-in-file"}
    ]


def test_detailed_omits_missing_section_when_empty() -> None:
    document = yaml.safe_load(serialize(_result(include_missing=False), "detailed"))

    assert "missing_variants" not in document


def test_compact_report_structure() -> None:
    document = yaml.safe_load(serialize(_result(), OutputFormat.COMPACT))

    assert document["metadata"] == {
        "tool": "GenomeGist",
        "version": "1.0.0",
        "date": "2025-01-23",
        "source": "23andme-v5",
        "snp_list": "2025.01",
        "disclaimer": SHORT_DISCLAIMER,
    }
    assert document["summary"] == {"found": 2, "no_call": 1, "missing": 1, "total": 4}
    assert document["variants"][1] == {"rsid": "rs4680", "gene": "COMT", "genotype": "AG"}
    assert document["missing"] == ["rs777777"]


def test_minimal_report_lines() -> None:
    lines = serialize(_result(), OutputFormat.MINIMAL).splitlines()

    assert lines == [
        f"# GenomeGist v1.0.0 | 2025-01-23 | {SHORT_DISCLAIMER}",
        "# rsid,gene,genotype",
        "rs1801133,MTHFR,CT",
        "rs4680,COMT,AG",
        "rs999999,TEST,--",
        "# missing: rs777777",
    ]


def test_minimal_omits_missing_line_when_empty() -> None:
    text = serialize(_result(include_missing=False), "minimal")

    assert "# missing" not in text


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError, match="Invalid format: yaml"):
        get_serializer("yaml")


def test_media_types_and_filenames() -> None:
    day = date(2025, 1, 23)

    assert media_type("detailed") == "text/yaml"
    assert media_type(OutputFormat.MINIMAL) == "text/csv"
    assert generate_filename("detailed", today=day) == "genomegist-results-2025-01-23.yaml"
    assert generate_filename("compact", today=day) == "genomegist-results-compact-2025-01-23.yaml"
    assert generate_filename("minimal", today=day) == "genomegist-results-minimal-2025-01-23.csv"


def test_calculate_size_thresholds() -> None:
    assert calculate_size("a" * 1023) == "1023 B"
    assert calculate_size("a" * 1024) == "1.0 KB"
    assert calculate_size("a" * 1536) == "1.5 KB"
    assert calculate_size("a" * (1024 * 1024)) == "1.0 MB"
    assert calculate_size("é" * 600) == "1.2 KB"
