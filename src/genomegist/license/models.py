"""License Service wire records and client-side session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from genomegist.models import ReferenceCatalog


class WireError(str, Enum):
    """``error`` values sent by the License Service."""

    INVALID_TOKEN = "invalid_token"
    EXHAUSTED = "exhausted"
    NETWORK_ERROR = "network_error"


class LicenseErrorKind(str, Enum):
    """Distinguishable license failures surfaced to callers."""

    INVALID = "invalid"
    EXHAUSTED = "exhausted"
    NETWORK = "network"
    DECRYPT_FAILURE = "decrypt-failure"


class LicenseState(str, Enum):
    NO_LICENSE = "no-license"
    PENDING_VALIDATION = "pending-validation"
    VALIDATED = "validated"
    INVALID = "invalid"
    EXHAUSTED = "exhausted"


ERROR_MESSAGES: dict[LicenseErrorKind, str] = {
    LicenseErrorKind.INVALID: "Invalid token. Please check and try again.",
    LicenseErrorKind.EXHAUSTED: "This token has no remaining sessions.",
    LicenseErrorKind.NETWORK: "Network error. Please try again.",
    LicenseErrorKind.DECRYPT_FAILURE: "The Full Access SNP list could not be unlocked. Please try again.",
}


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the wire; ``Z`` is accepted."""

    if not isinstance(value, str) or not value.strip():
        return None
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _wire_error(payload: dict[str, Any]) -> WireError | None:
    if payload.get("valid") is True:
        return None
    try:
        return WireError(payload.get("error"))
    except ValueError:
        return WireError.INVALID_TOKEN


@dataclass(frozen=True)
class CheckLicenseResponse:
    """Reply to the non-consuming ``/check-license`` call."""

    valid: bool
    sessions_remaining: int | None = None
    has_active_session: bool = False
    session_expires_at: datetime | None = None
    error: WireError | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CheckLicenseResponse":
        return cls(
            valid=payload.get("valid") is True,
            sessions_remaining=_optional_int(payload.get("sessionsRemaining")),
            has_active_session=payload.get("hasActiveSession") is True,
            session_expires_at=parse_timestamp(payload.get("sessionExpiresAt")),
            error=_wire_error(payload),
        )

    @classmethod
    def network_failure(cls) -> "CheckLicenseResponse":
        return cls(valid=False, error=WireError.NETWORK_ERROR)


@dataclass(frozen=True)
class ValidateSessionResponse:
    """Reply to the consuming ``/validate-session`` call."""

    valid: bool
    sessions_remaining: int | None = None
    session_expires_at: datetime | None = None
    encrypted_catalog: str | None = None
    iv: str | None = None
    error: WireError | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ValidateSessionResponse":
        encrypted = payload.get("encryptedCatalog")
        iv = payload.get("iv")
        return cls(
            valid=payload.get("valid") is True,
            sessions_remaining=_optional_int(payload.get("sessionsRemaining")),
            session_expires_at=parse_timestamp(payload.get("sessionExpiresAt")),
            encrypted_catalog=encrypted if isinstance(encrypted, str) else None,
            iv=iv if isinstance(iv, str) else None,
            error=_wire_error(payload),
        )

    @classmethod
    def network_failure(cls) -> "ValidateSessionResponse":
        return cls(valid=False, error=WireError.NETWORK_ERROR)


@dataclass(frozen=True)
class LicenseSession:
    """Client view of a validated key.

    The decrypted premium catalog is held here only, in memory, and goes away
    with the session.
    """

    key: str
    sessions_remaining: int | None
    session_expires_at: datetime | None
    has_active_session: bool
    validated: bool = True
    premium_catalog: ReferenceCatalog | None = field(default=None, repr=False, compare=False)

    def is_active(self, now: datetime | None = None) -> bool:
        if not self.has_active_session or self.session_expires_at is None:
            return False
        moment = now or datetime.now(timezone.utc)
        return self.session_expires_at > moment

    def hours_left(self, now: datetime | None = None) -> int:
        """Whole hours left in the window, rounded up; 0 when inactive."""

        if not self.is_active(now) or self.session_expires_at is None:
            return 0
        moment = now or datetime.now(timezone.utc)
        seconds = (self.session_expires_at - moment).total_seconds()
        return int(-(-seconds // 3600))


@dataclass(frozen=True)
class LicenseOutcome:
    """Result of a license operation; expected failures are values, not raises.

    ``stale`` marks a response that arrived after the current key changed and
    was therefore not applied.
    """

    state: LicenseState
    session: LicenseSession | None = None
    error: LicenseErrorKind | None = None
    stale: bool = False
    catalog: ReferenceCatalog | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale

    @property
    def message(self) -> str | None:
        if self.error is None:
            return None
        return ERROR_MESSAGES[self.error]
