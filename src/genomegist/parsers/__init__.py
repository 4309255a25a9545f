"""Vendor genome file parsers for GenomeGist."""

from .ancestry import AncestryDNAParser, combine_alleles
from .base import GenomeParser
from .detector import detect_format, format_display_name
from .twentythreeandme import TwentyThreeAndMeParser

__all__ = [
    "GenomeParser",
    "TwentyThreeAndMeParser",
    "AncestryDNAParser",
    "combine_alleles",
    "detect_format",
    "format_display_name",
]
