"""Comment-prefixed CSV serializer."""

from __future__ import annotations

import csv
import io

from genomegist.config import SHORT_DISCLAIMER, OutputFormat
from genomegist.models import ExtractionResult
from genomegist.serializers.base import ResultSerializer

COLUMN_HEADER = "# rsid,gene,genotype"


class MinimalCsvSerializer(ResultSerializer):
    """One header comment, then ``rsid,gene,genotype`` rows."""

    format = OutputFormat.MINIMAL
    extension = "csv"
    media_type = "text/csv"

    def render(self, result: ExtractionResult) -> str:
        metadata = result.metadata
        stream = io.StringIO()
        stream.write(
            f"# {metadata.tool} v{metadata.version} | {metadata.date} | {SHORT_DISCLAIMER}\n"
        )
        stream.write(COLUMN_HEADER + "\n")

        writer = csv.writer(stream, lineterminator="\n")
        for variant in result.matched:
            writer.writerow([variant.rsid, variant.gene, variant.genotype])

        if result.unmatched:
            stream.write("# missing: " + ",".join(entry.rsid for entry in result.unmatched) + "\n")

        return stream.getvalue()
