"""Single mutable state object shared by the workspace and license manager."""

from __future__ import annotations

from dataclasses import dataclass, field

from genomegist.config import CATEGORY_PRESETS, CategoryPreset, OutputFormat, SNPCategory
from genomegist.extraction import ExtractionEngine
from genomegist.license.models import LicenseSession, LicenseState
from genomegist.models import ExtractionResult, ParseResult


@dataclass
class WorkspaceState:
    """Everything that changes while a user works with one upload.

    ``read_ticket`` and ``license_key`` identify the in-flight file read and
    license request; completions carrying an older identity are discarded.
    """

    parse_result: ParseResult | None = None
    engine: ExtractionEngine | None = None
    read_ticket: int = 0
    last_result: ExtractionResult | None = None

    output_format: OutputFormat = OutputFormat.DETAILED
    preset: CategoryPreset = CategoryPreset.DEMO
    categories: tuple[SNPCategory, ...] = field(
        default_factory=lambda: CATEGORY_PRESETS[CategoryPreset.DEMO]
    )

    license_key: str | None = None
    license_state: LicenseState = LicenseState.NO_LICENSE
    license_session: LicenseSession | None = None

    def next_read_ticket(self) -> int:
        self.read_ticket += 1
        return self.read_ticket

    def clear_upload(self) -> None:
        self.parse_result = None
        self.engine = None
        self.last_result = None

    def clear_license(self, state: LicenseState = LicenseState.NO_LICENSE) -> None:
        """Drop the session and its decrypted catalog."""

        self.license_session = None
        self.license_state = state

    def session_for(self, key: str) -> LicenseSession | None:
        session = self.license_session
        if session is not None and session.key == key:
            return session
        return None
