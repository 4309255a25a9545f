"""Parser registry mapping detected genome formats to vendor parsers."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass

from genomegist.config import GenomeFormat
from genomegist.errors import ParseError, ParseErrorKind
from genomegist.models import ParseResult
from genomegist.parsers import (
    AncestryDNAParser,
    GenomeParser,
    TwentyThreeAndMeParser,
    detect_format,
)

ParserFactory = Callable[[], GenomeParser]

UNSUPPORTED_FORMAT_MESSAGE = (
    "Unable to detect file format. Please upload a raw data file from 23andMe or AncestryDNA."
)
SUPPORTED_FORMATS_DETAILS = "Supported formats: 23andMe (.txt), AncestryDNA (.txt)"


@dataclass(frozen=True)
class ParserPluginSpec:
    """Import path of a parser implementation registered at runtime."""

    genome_format: GenomeFormat
    module: str
    class_name: str


class ParserRegistry:
    """Registry that maps genome formats to parser constructors."""

    def __init__(self) -> None:
        self._factories: dict[GenomeFormat, ParserFactory] = {}

    def register(self, genome_format: GenomeFormat | str, factory: ParserFactory) -> None:
        """Register a parser factory for one format tag."""

        key = GenomeFormat(genome_format)
        if key is GenomeFormat.UNKNOWN:
            raise ValueError("Cannot register a parser for the unknown format")
        if key in self._factories:
            raise ValueError(f"Parser already registered: {key.value}")
        self._factories[key] = factory

    def register_plugin(self, plugin: ParserPluginSpec) -> None:
        """Register a parser by importing a module/class at runtime."""

        module = importlib.import_module(plugin.module)
        parser_cls = getattr(module, plugin.class_name)
        self.register(plugin.genome_format, parser_cls)

    def create(self, genome_format: GenomeFormat | str) -> GenomeParser:
        """Instantiate the parser registered for a format."""

        key = GenomeFormat(genome_format)
        if key not in self._factories:
            raise ParseError(
                ParseErrorKind.UNSUPPORTED_FORMAT,
                UNSUPPORTED_FORMAT_MESSAGE,
                details=SUPPORTED_FORMATS_DETAILS,
            )
        return self._factories[key]()

    def available(self) -> list[str]:
        """Return sorted list of supported format tags."""

        return sorted(key.value for key in self._factories)


def build_default_parser_registry() -> ParserRegistry:
    """Create a registry preloaded with the built-in vendor parsers."""

    registry = ParserRegistry()
    for genome_format in (
        GenomeFormat.TWENTYTHREEANDME_V5,
        GenomeFormat.TWENTYTHREEANDME_V4,
        GenomeFormat.TWENTYTHREEANDME_V3,
    ):
        registry.register(genome_format, TwentyThreeAndMeParser)
    registry.register(GenomeFormat.ANCESTRY, AncestryDNAParser)
    return registry


def parse_genome_file(content: str, registry: ParserRegistry | None = None) -> ParseResult:
    """Detect the vendor format and parse the whole file.

    Raises :class:`ParseError` for unsupported files and files without any
    valid variant rows.
    """

    genome_format = detect_format(content)
    if genome_format is GenomeFormat.UNKNOWN:
        raise ParseError(
            ParseErrorKind.UNSUPPORTED_FORMAT,
            UNSUPPORTED_FORMAT_MESSAGE,
            details=SUPPORTED_FORMATS_DETAILS,
        )

    parser = (registry or build_default_parser_registry()).create(genome_format)
    return parser.parse(content, detected_format=genome_format)
