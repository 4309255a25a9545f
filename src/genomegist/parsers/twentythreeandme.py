"""Parser for 23andMe raw data exports.

Layout: ``rsid<TAB>chromosome<TAB>position<TAB>genotype`` with ``#`` comments.
The column header is itself a comment in every known export version.
"""

from __future__ import annotations

import re

from genomegist.config import GenomeFormat, NO_CALL
from genomegist.models import GenomicVariant
from genomegist.parsers.base import GenomeParser
from genomegist.parsers.common import normalize_chromosome, normalize_rsid, parse_position

# Hemizygous X/Y/MT calls carry a single allele.
GENOTYPE_PATTERN = re.compile(r"^[ACGTDI]{1,2}$")


class TwentyThreeAndMeParser(GenomeParser):
    """Single genotype column, passed through uppercased."""

    name = "23andme"
    format = GenomeFormat.TWENTYTHREEANDME_V5
    expected_columns = 4

    def parse_fields(self, fields: list[str]) -> GenomicVariant | None:
        rsid_raw, chromosome_raw, position_raw, genotype_raw = fields

        rsid = normalize_rsid(rsid_raw)
        chromosome = normalize_chromosome(chromosome_raw)
        position = parse_position(position_raw)
        genotype = genotype_raw.upper()

        if rsid is None or chromosome is None or position is None:
            return None
        if genotype != NO_CALL and not GENOTYPE_PATTERN.match(genotype):
            return None

        return GenomicVariant(
            rsid=rsid,
            chromosome=chromosome,
            position=position,
            genotype=genotype,
        )
