"""Error taxonomy shared by parsing, catalog loading and the workspace."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ParseErrorKind(str, Enum):
    """Why a genome file could not be turned into variants."""

    UNSUPPORTED_FORMAT = "unsupported-format"
    NO_VALID_VARIANTS = "no-valid-variants"
    FILE_TOO_LARGE = "file-too-large"
    UNSUPPORTED_EXTENSION = "unsupported-extension"
    UNREADABLE = "unreadable"


class ParseError(Exception):
    """Fatal genome file problem, tagged with a :class:`ParseErrorKind`."""

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        *,
        line: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.line = line
        self.details = details

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"kind": self.kind.value, "message": self.message}
        if self.line is not None:
            payload["line"] = self.line
        if self.details is not None:
            payload["details"] = self.details
        return payload


class CatalogValidationError(Exception):
    """Reference catalog payload does not satisfy the catalog contract."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message if path is None else f"{message} (at {path})")
        self.message = message
        self.path = path


class WorkspaceError(Exception):
    """An action was requested before its preconditions were met."""


@dataclass(frozen=True)
class ParseWarning:
    """A skipped line. Non-fatal; aggregated on the parse result."""

    line: int
    message: str
    details: str | None = None


def summarize_warnings(warnings: list[ParseWarning] | tuple[ParseWarning, ...]) -> str | None:
    """Return the user-facing summary for skipped lines, if any."""

    count = len(warnings)
    if count == 0:
        return None
    return f"{count} line{'' if count == 1 else 's'} could not be parsed"


def user_message(error: Exception) -> str:
    """Translate a pipeline error into the message shown to the user."""

    if isinstance(error, ParseError):
        if error.details:
            return f"{error.message} {error.details}"
        return error.message
    if isinstance(error, CatalogValidationError):
        return f"SNP list could not be loaded: {error}"
    return str(error) or "An unexpected error occurred. Please try again."
