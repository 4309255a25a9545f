"""Client-side license/session state machine.

States move between ``NO_LICENSE``, ``PENDING_VALIDATION``, ``VALIDATED``,
``INVALID`` and ``EXHAUSTED``. Every request remembers the key it was issued
for; when ``state.license_key`` has changed by the time the reply arrives,
the reply is reported as stale and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from genomegist.catalog import CatalogLoader
from genomegist.config import LicenseServiceConfig
from genomegist.errors import CatalogValidationError
from genomegist.license.client import LicenseServiceClient, mask_key
from genomegist.license.crypto import CatalogDecryptionError, decrypt_catalog
from genomegist.license.models import (
    LicenseErrorKind,
    LicenseOutcome,
    LicenseSession,
    LicenseState,
    WireError,
)
from genomegist.models import ReferenceCatalog
from genomegist.state import WorkspaceState
from genomegist.storage import InMemoryPreferenceStore, PreferenceStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LicenseSessionManager:
    """Validate license keys and unlock the premium catalog."""

    def __init__(
        self,
        client: LicenseServiceClient,
        *,
        state: WorkspaceState | None = None,
        store: PreferenceStore | None = None,
        loader: CatalogLoader | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.state = state or WorkspaceState()
        self.store = store or InMemoryPreferenceStore()
        self.loader = loader or CatalogLoader()
        self.clock = clock or _utc_now

    @property
    def config(self) -> LicenseServiceConfig:
        return self.client.config

    @property
    def status(self) -> LicenseState:
        return self.state.license_state

    @property
    def session(self) -> LicenseSession | None:
        return self.state.license_session

    def session_active(self) -> bool:
        session = self.state.license_session
        return session is not None and session.is_active(self.clock())

    def cached_catalog(self) -> ReferenceCatalog | None:
        """Premium catalog for the current key, if one is unlocked and in window."""

        key = self.state.license_key
        if key is None:
            return None
        session = self.state.session_for(key)
        if session is None or session.premium_catalog is None:
            return None
        if not session.is_active(self.clock()):
            return None
        return session.premium_catalog

    async def restore(self) -> LicenseOutcome:
        """Re-validate a stored key on start without consuming a session."""

        key = self.store.load().license_key
        if not key:
            return self._outcome()

        if self.state.license_key != key:
            self.state.clear_license(LicenseState.PENDING_VALIDATION)
            self.state.license_key = key
        return await self.check(key)

    async def enter_key(self, key: str) -> LicenseOutcome:
        """Validate a newly entered key; supersedes any in-flight request."""

        key = key.strip()
        if not self.config.is_well_formed_key(key):
            return self._outcome(error=LicenseErrorKind.INVALID)

        if self.state.license_key != key:
            self.state.clear_license()
        self.state.license_key = key
        if self.state.license_session is None:
            self.state.license_state = LicenseState.PENDING_VALIDATION
        return await self.check(key)

    async def check(self, key: str) -> LicenseOutcome:
        """Non-consuming validity check for ``key``."""

        response = await self.client.check_license(key)
        if self.state.license_key != key:
            logger.info("Discarding stale license check for %s", mask_key(key))
            return self._outcome(stale=True)

        if not response.valid:
            return self._apply_failure(key, response.error)

        previous = self.state.session_for(key)
        catalog = None
        if previous is not None and response.has_active_session:
            catalog = previous.premium_catalog

        self.state.license_session = LicenseSession(
            key=key,
            sessions_remaining=response.sessions_remaining,
            session_expires_at=response.session_expires_at,
            has_active_session=response.has_active_session,
            validated=True,
            premium_catalog=catalog,
        )
        self.state.license_state = LicenseState.VALIDATED
        self.store.update(license_key=key)
        logger.info(
            "License %s validated (%s sessions remaining, active=%s)",
            mask_key(key),
            response.sessions_remaining,
            response.has_active_session,
        )
        return self._outcome()

    async def ensure_premium_catalog(self) -> LicenseOutcome:
        """Return the premium catalog, starting a session only when needed."""

        cached = self.cached_catalog()
        if cached is not None:
            return self._outcome(catalog=cached)

        key = self.state.license_key
        if key is None:
            return self._outcome(error=LicenseErrorKind.INVALID)
        return await self.start_session_and_fetch(key)

    async def start_session_and_fetch(self, key: str) -> LicenseOutcome:
        """Consume (or reuse) a session window and decrypt the premium catalog.

        A missing payload or a failed decrypt or schema check is reported as
        ``DECRYPT_FAILURE``; the session is dropped and the key is kept for a
        retry.
        """

        response = await self.client.validate_session(key)
        if self.state.license_key != key:
            logger.info("Discarding stale session start for %s", mask_key(key))
            return self._outcome(stale=True)

        if not response.valid:
            return self._apply_failure(key, response.error)

        self.state.license_session = LicenseSession(
            key=key,
            sessions_remaining=response.sessions_remaining,
            session_expires_at=response.session_expires_at,
            has_active_session=response.session_expires_at is not None,
            validated=True,
        )
        self.state.license_state = LicenseState.VALIDATED
        self.store.update(license_key=key)

        if response.encrypted_catalog is None or response.iv is None:
            logger.warning("Session for %s started without a catalog payload", mask_key(key))
            self.state.clear_license(LicenseState.PENDING_VALIDATION)
            return self._outcome(error=LicenseErrorKind.DECRYPT_FAILURE)

        try:
            catalog = await asyncio.to_thread(
                decrypt_catalog,
                response.encrypted_catalog,
                response.iv,
                key,
                self.loader,
            )
        except (CatalogDecryptionError, CatalogValidationError) as exc:
            logger.warning("Premium catalog for %s rejected: %s", mask_key(key), exc)
            if self.state.license_key != key:
                return self._outcome(stale=True)
            self.state.clear_license(LicenseState.PENDING_VALIDATION)
            return self._outcome(error=LicenseErrorKind.DECRYPT_FAILURE)

        session = self.state.session_for(key)
        if self.state.license_key != key or session is None:
            logger.info("Discarding stale premium catalog for %s", mask_key(key))
            return self._outcome(stale=True)

        self.state.license_session = LicenseSession(
            key=session.key,
            sessions_remaining=session.sessions_remaining,
            session_expires_at=session.session_expires_at,
            has_active_session=session.has_active_session,
            validated=True,
            premium_catalog=catalog,
        )
        logger.info(
            "Unlocked premium SNP list v%s (%d variants) for %s",
            catalog.version,
            catalog.count,
            mask_key(key),
        )
        return self._outcome(catalog=catalog)

    def logout(self) -> None:
        """Forget the key, the session and any decrypted catalog."""

        self.state.license_key = None
        self.state.clear_license()
        self.store.update(license_key=None)

    def _apply_failure(self, key: str, error: WireError | None) -> LicenseOutcome:
        if error is WireError.NETWORK_ERROR:
            # Transient: keep whatever session was already established.
            if self.state.session_for(key) is not None:
                self.state.license_state = LicenseState.VALIDATED
            return self._outcome(error=LicenseErrorKind.NETWORK)

        if error is WireError.EXHAUSTED:
            self.state.clear_license(LicenseState.EXHAUSTED)
            logger.info("License %s has no remaining sessions", mask_key(key))
            return self._outcome(error=LicenseErrorKind.EXHAUSTED)

        self.state.clear_license(LicenseState.INVALID)
        self.state.license_key = None
        self.store.update(license_key=None)
        logger.info("License %s rejected as invalid", mask_key(key))
        return self._outcome(error=LicenseErrorKind.INVALID)

    def _outcome(
        self,
        *,
        error: LicenseErrorKind | None = None,
        stale: bool = False,
        catalog: ReferenceCatalog | None = None,
    ) -> LicenseOutcome:
        return LicenseOutcome(
            state=self.state.license_state,
            session=self.state.license_session,
            error=error,
            stale=stale,
            catalog=catalog,
        )
