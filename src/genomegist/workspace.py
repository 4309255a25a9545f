"""Composable GenomeGist workspace orchestrator."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from genomegist.catalog import CatalogLoader
from genomegist.config import (
    ACCEPTED_EXTENSIONS,
    CATEGORY_PRESETS,
    MAX_GENOME_FILE_BYTES,
    PRESET_REQUIRES_LICENSE,
    CategoryPreset,
    OutputFormat,
    SNPCategory,
)
from genomegist.errors import ParseError, ParseErrorKind, WorkspaceError
from genomegist.extraction import Clock, ExtractionEngine
from genomegist.license.client import LicenseServiceClient
from genomegist.license.models import LicenseOutcome, LicenseState
from genomegist.license.session import LicenseSessionManager
from genomegist.models import CategoryMatchEstimate, ExtractionResult, ParseResult, ReferenceCatalog
from genomegist.parsers import format_display_name
from genomegist.registry import ParserRegistry, build_default_parser_registry, parse_genome_file
from genomegist.serializers import calculate_size, generate_filename, get_serializer
from genomegist.state import WorkspaceState
from genomegist.storage import InMemoryPreferenceStore, PreferenceStore

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "No file loaded. Please upload a genome file first."
LICENSE_REQUIRED_MESSAGE = "Please enter a valid token for Full Access reports."


@dataclass(frozen=True)
class RenderedReport:
    """Serialized report plus what a download needs."""

    content: str
    filename: str
    media_type: str
    size: str


def check_upload(path: Path, max_bytes: int = MAX_GENOME_FILE_BYTES) -> int:
    """Reject files by extension and size before reading them; return the size."""

    if path.suffix.lower() not in ACCEPTED_EXTENSIONS:
        raise ParseError(
            ParseErrorKind.UNSUPPORTED_EXTENSION,
            "Unsupported file format. Please upload a .txt file from 23andMe or AncestryDNA.",
        )
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise ParseError(
            ParseErrorKind.UNREADABLE,
            "Failed to read file. Please try again.",
            details=str(exc),
        ) from exc
    if size > max_bytes:
        raise ParseError(
            ParseErrorKind.FILE_TOO_LARGE,
            f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
        )
    return size


def read_genome_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ParseError(
            ParseErrorKind.UNREADABLE,
            "Failed to read file. Please try again.",
            details=str(exc),
        ) from exc


class GenomeGistWorkspace:
    """Own one upload, the category selection and the license session.

    All mutable state sits on :class:`WorkspaceState`; the parsers, the
    extraction engine and the serializers stay pure.
    """

    def __init__(
        self,
        *,
        state: WorkspaceState | None = None,
        loader: CatalogLoader | None = None,
        registry: ParserRegistry | None = None,
        client: LicenseServiceClient | None = None,
        store: PreferenceStore | None = None,
        clock: Clock | None = None,
        max_file_bytes: int = MAX_GENOME_FILE_BYTES,
    ) -> None:
        self.state = state or WorkspaceState()
        self.loader = loader or CatalogLoader()
        self.registry = registry or build_default_parser_registry()
        self.store = store or InMemoryPreferenceStore()
        self.clock = clock
        self.max_file_bytes = max_file_bytes
        self.license = LicenseSessionManager(
            client or LicenseServiceClient(),
            state=self.state,
            store=self.store,
            loader=self.loader,
            clock=clock,
        )
        self._free_catalog: ReferenceCatalog | None = None
        self._restore_preferences()

    @property
    def free_catalog(self) -> ReferenceCatalog:
        if self._free_catalog is None:
            self._free_catalog = self.loader.load_free()
        return self._free_catalog

    @property
    def parse_result(self) -> ParseResult | None:
        return self.state.parse_result

    @property
    def categories(self) -> tuple[SNPCategory, ...]:
        return self.state.categories

    async def load_genome_file(self, path: str | Path) -> ParseResult | None:
        """Read and parse ``path``.

        Returns ``None`` when a newer load started while this one was reading;
        the newer load owns the state.
        """

        path = Path(path)
        ticket = self.state.next_read_ticket()
        size = check_upload(path, self.max_file_bytes)
        logger.info("Reading %s (%d bytes)", path.name, size)

        try:
            text = await asyncio.to_thread(read_genome_text, path)
        except ParseError:
            if ticket != self.state.read_ticket:
                return None
            self.state.clear_upload()
            raise

        if ticket != self.state.read_ticket:
            logger.info("Discarding superseded read of %s", path.name)
            return None
        return self._apply_text(text)

    def load_genome_text(self, text: str) -> ParseResult:
        """Parse already-read file text and make it the current upload."""

        self.state.next_read_ticket()
        return self._apply_text(text)

    def _apply_text(self, text: str) -> ParseResult:
        try:
            parse_result = parse_genome_file(text, self.registry)
        except ParseError:
            self.state.clear_upload()
            raise

        self.state.parse_result = parse_result
        self.state.engine = ExtractionEngine(parse_result, clock=self.clock)
        self.state.last_result = None
        logger.info(
            "Detected format: %s with %d variants",
            format_display_name(parse_result.format),
            len(parse_result.variants),
        )
        return parse_result

    def select_preset(self, preset: CategoryPreset | str) -> tuple[SNPCategory, ...]:
        preset = CategoryPreset(preset)
        self.state.preset = preset
        self.state.categories = CATEGORY_PRESETS[preset]
        self.store.update(preset=preset)
        return self.state.categories

    def select_categories(
        self, categories: list[SNPCategory] | tuple[SNPCategory, ...]
    ) -> tuple[SNPCategory, ...]:
        """Custom selection within the current preset's tier."""

        self.state.categories = tuple(SNPCategory(category) for category in categories)
        return self.state.categories

    def select_output_format(self, fmt: OutputFormat | str) -> OutputFormat:
        self.state.output_format = get_serializer(fmt).format
        self.store.update(output_format=self.state.output_format)
        return self.state.output_format

    def requires_license(self) -> bool:
        return PRESET_REQUIRES_LICENSE[self.state.preset]

    def preview(self) -> CategoryMatchEstimate:
        """Live match counts for the current selection against the best known catalog."""

        engine = self._require_engine()
        catalog = self.license.cached_catalog() if self.requires_license() else None
        return engine.estimate(catalog or self.free_catalog, self.state.categories)

    async def extract(self) -> ExtractionResult | None:
        """Run a fresh extraction; earlier results are never mutated.

        Returns ``None`` when another file was loaded while the catalog was
        being fetched; the result would describe the previous upload.
        """

        engine = self._require_engine()
        ticket = self.state.read_ticket
        catalog = await self.active_catalog()
        if ticket != self.state.read_ticket:
            logger.info("Discarding extraction for a superseded upload")
            return None
        result = engine.extract(catalog, self.state.categories)
        self.state.last_result = result
        logger.info(
            "Found %d of %d variants (%d no-call, %d missing)",
            result.summary.found,
            result.summary.total,
            result.summary.no_call,
            result.summary.missing,
        )
        return result

    async def active_catalog(self) -> ReferenceCatalog:
        """Premium list for licensed presets when it can be unlocked, else the free list."""

        if not self.requires_license():
            return self.free_catalog
        if self.state.license_key is None:
            raise WorkspaceError(LICENSE_REQUIRED_MESSAGE)

        outcome = await self.license.ensure_premium_catalog()
        if outcome.catalog is not None:
            return outcome.catalog
        if outcome.error is not None:
            logger.warning("Using the free SNP list: %s", outcome.message)
        return self.free_catalog

    def render(self, fmt: OutputFormat | str | None = None) -> RenderedReport:
        if self.state.last_result is None:
            raise WorkspaceError("No results to export. Run an extraction first.")

        serializer = get_serializer(fmt or self.state.output_format)
        content = serializer.render(self.state.last_result)
        return RenderedReport(
            content=content,
            filename=generate_filename(serializer.format),
            media_type=serializer.media_type,
            size=calculate_size(content),
        )

    async def restore_license(self) -> LicenseOutcome:
        return await self.license.restore()

    async def enter_license(self, key: str) -> LicenseOutcome:
        return await self.license.enter_key(key)

    def logout(self) -> None:
        """Forget the license; licensed presets fall back to the demo selection."""

        self.license.logout()
        if self.requires_license():
            self.select_preset(CategoryPreset.DEMO)

    def reset(self) -> None:
        """Drop the current upload and invalidate any read in flight."""

        self.state.next_read_ticket()
        self.state.clear_upload()

    @property
    def license_state(self) -> LicenseState:
        return self.state.license_state

    def _require_engine(self) -> ExtractionEngine:
        if self.state.engine is None:
            raise WorkspaceError(NO_FILE_MESSAGE)
        return self.state.engine

    def _restore_preferences(self) -> None:
        preferences = self.store.load()
        self.state.output_format = preferences.output_format
        preset = preferences.preset
        if PRESET_REQUIRES_LICENSE[preset] and not preferences.license_key:
            preset = CategoryPreset.DEMO
        self.state.preset = preset
        self.state.categories = CATEGORY_PRESETS[preset]
