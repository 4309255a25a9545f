"""Core GenomeGist extraction primitives.

This package provides the reusable building blocks for GenomeGist: vendor
genome parsers, reference catalog loading, extraction, report serialization
and the licensed premium catalog session.
"""

from .catalog import CatalogLoader, CatalogValidator
from .config import (
    ALL_CATEGORIES,
    CATEGORY_PRESETS,
    PRESET_REQUIRES_LICENSE,
    TOOL_NAME,
    VERSION,
    CategoryPreset,
    GenomeFormat,
    LicenseServiceConfig,
    OutputFormat,
    SNPCategory,
)
from .errors import (
    CatalogValidationError,
    ParseError,
    ParseErrorKind,
    ParseWarning,
    WorkspaceError,
    user_message,
)
from .extraction import DuplicatePolicy, ExtractionEngine, extract_variants
from .models import (
    CategoryMatchEstimate,
    ExtractionResult,
    GenomicVariant,
    MatchedVariant,
    ParseResult,
    ReferenceCatalog,
    ReferenceEntry,
    UnmatchedEntry,
)
from .parsers import detect_format, format_display_name
from .registry import ParserPluginSpec, ParserRegistry, build_default_parser_registry, parse_genome_file
from .serializers import calculate_size, generate_filename, serialize
from .workspace import GenomeGistWorkspace, RenderedReport

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORY_PRESETS",
    "PRESET_REQUIRES_LICENSE",
    "TOOL_NAME",
    "VERSION",
    "CategoryPreset",
    "GenomeFormat",
    "LicenseServiceConfig",
    "OutputFormat",
    "SNPCategory",
    "CatalogLoader",
    "CatalogValidator",
    "CatalogValidationError",
    "ParseError",
    "ParseErrorKind",
    "ParseWarning",
    "WorkspaceError",
    "user_message",
    "DuplicatePolicy",
    "ExtractionEngine",
    "extract_variants",
    "CategoryMatchEstimate",
    "ExtractionResult",
    "GenomicVariant",
    "MatchedVariant",
    "ParseResult",
    "ReferenceCatalog",
    "ReferenceEntry",
    "UnmatchedEntry",
    "detect_format",
    "format_display_name",
    "ParserPluginSpec",
    "ParserRegistry",
    "build_default_parser_registry",
    "parse_genome_file",
    "calculate_size",
    "generate_filename",
    "serialize",
    "GenomeGistWorkspace",
    "RenderedReport",
]
