"""Parser for AncestryDNA raw data exports.

Layout: ``rsid<TAB>chromosome<TAB>position<TAB>allele1<TAB>allele2``. Sex and
mitochondrial chromosomes use numeric codes (23=X, 24=Y, 25/26=MT) and a
failed read is written as ``0`` (or ``-``) in either allele column.
"""

from __future__ import annotations

from genomegist.config import GenomeFormat, NO_CALL
from genomegist.models import GenomicVariant
from genomegist.parsers.base import GenomeParser
from genomegist.parsers.common import normalize_chromosome, normalize_rsid, parse_position

NO_CALL_ALLELES = frozenset({"0", "-"})
NUCLEOTIDES = frozenset("ACGT")
INDEL_ALLELES = frozenset("DI")


def combine_alleles(allele1: str, allele2: str) -> str | None:
    """Join two allele columns into one genotype, or None if either is invalid.

    Alleles keep file order. A no-call marker on either side wins.
    """

    first = allele1.strip().upper()
    second = allele2.strip().upper()

    if first in NO_CALL_ALLELES or second in NO_CALL_ALLELES:
        return NO_CALL
    if first in NUCLEOTIDES and second in NUCLEOTIDES:
        return first + second
    if first in INDEL_ALLELES and second in INDEL_ALLELES:
        return first + second
    return None


class AncestryDNAParser(GenomeParser):
    """Two allele columns combined into a genotype."""

    name = "ancestry"
    format = GenomeFormat.ANCESTRY
    expected_columns = 5

    def parse_fields(self, fields: list[str]) -> GenomicVariant | None:
        rsid_raw, chromosome_raw, position_raw, allele1, allele2 = fields

        rsid = normalize_rsid(rsid_raw)
        chromosome = normalize_chromosome(chromosome_raw, numeric_aliases=True)
        position = parse_position(position_raw)
        if rsid is None or chromosome is None or position is None:
            return None
        if not allele1 or not allele2:
            return None

        genotype = combine_alleles(allele1, allele2)
        if genotype is None:
            return None

        return GenomicVariant(
            rsid=rsid,
            chromosome=chromosome,
            position=position,
            genotype=genotype,
        )
