import asyncio
import base64
import json
import sys
from datetime import timedelta
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from license_double import (  # noqa: E402
    BASE_URL,
    PREMIUM_CATALOG,
    SESSION_WINDOW,
    FakeLicenseService,
    encrypt_for,
)

from genomegist.config import LicenseServiceConfig  # noqa: E402
from genomegist.errors import CatalogValidationError  # noqa: E402
from genomegist.license import (  # noqa: E402
    CatalogDecryptionError,
    LicenseErrorKind,
    LicenseServiceClient,
    LicenseState,
    WireError,
    decrypt_catalog,
    mask_key,
)
from genomegist.license.session import LicenseSessionManager  # noqa: E402
from genomegist.state import WorkspaceState  # noqa: E402
from genomegist.storage import InMemoryPreferenceStore, Preferences  # noqa: E402

KEY = "gg_test_key_0001"
OTHER_KEY = "gg_test_key_0002"


def _client(service: FakeLicenseService) -> LicenseServiceClient:
    return LicenseServiceClient(LicenseServiceConfig(base_url=BASE_URL), transport=service.transport())


def _manager(service: FakeLicenseService, store=None) -> LicenseSessionManager:
    return LicenseSessionManager(
        _client(service),
        state=WorkspaceState(),
        store=store or InMemoryPreferenceStore(),
        clock=service.clock,
    )


def test_mask_key_hides_middle() -> None:
    assert mask_key(KEY) == "gg_...0001"
    assert mask_key("short") == "***"


def test_decrypt_catalog_round_trip_and_wrong_key() -> None:
    ciphertext, iv = encrypt_for(KEY, json.dumps(PREMIUM_CATALOG))

    catalog = decrypt_catalog(ciphertext, iv, KEY)

    assert catalog.version == "2025.01-full"
    assert [entry.rsid for entry in catalog.entries] == ["rs1801133", "rs4680", "rs4244285"]

    with pytest.raises(CatalogDecryptionError):
        decrypt_catalog(ciphertext, iv, OTHER_KEY)


def test_decrypt_catalog_rejects_malformed_inputs() -> None:
    ciphertext, iv = encrypt_for(KEY, json.dumps(PREMIUM_CATALOG))

    with pytest.raises(CatalogDecryptionError, match="IV"):
        decrypt_catalog(ciphertext, base64.b64encode(b"short").decode(), KEY)
    with pytest.raises(CatalogDecryptionError, match="base64"):
        decrypt_catalog("not base64!!", iv, KEY)


def test_decrypted_catalog_goes_through_schema_validation() -> None:
    broken = dict(PREMIUM_CATALOG, variants=[{"rsid": "rs1", "gene": "X", "category": "nope"}])
    ciphertext, iv = encrypt_for(KEY, json.dumps(broken))

    with pytest.raises(CatalogValidationError):
        decrypt_catalog(ciphertext, iv, KEY)


def test_client_maps_transport_failures_to_network_error() -> None:
    def _raise(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def _html(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    for handler in (_raise, _html, lambda request: httpx.Response(502)):
        client = LicenseServiceClient(
            LicenseServiceConfig(base_url=BASE_URL), transport=httpx.MockTransport(handler)
        )
        check = asyncio.run(client.check_license(KEY))
        start = asyncio.run(client.validate_session(KEY))

        assert check.valid is False and check.error is WireError.NETWORK_ERROR
        assert start.valid is False and start.error is WireError.NETWORK_ERROR


def test_client_posts_license_key_and_parses_reply() -> None:
    seen = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), json.loads(request.content)))
        return httpx.Response(
            200,
            json={
                "valid": True,
                "sessionsRemaining": 3,
                "hasActiveSession": True,
                "sessionExpiresAt": "2025-01-24T12:00:00Z",
            },
        )

    client = LicenseServiceClient(
        LicenseServiceConfig(base_url=BASE_URL), transport=httpx.MockTransport(_handler)
    )
    response = asyncio.run(client.check_license(KEY))

    assert seen == [(f"{BASE_URL}/check-license", {"licenseKey": KEY})]
    assert response.valid and response.sessions_remaining == 3
    assert response.has_active_session
    assert response.session_expires_at.isoformat() == "2025-01-24T12:00:00+00:00"


def test_client_treats_unknown_error_as_invalid_token() -> None:
    client = LicenseServiceClient(
        LicenseServiceConfig(base_url=BASE_URL),
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"valid": False, "error": "banned"})
        ),
    )

    assert asyncio.run(client.check_license(KEY)).error is WireError.INVALID_TOKEN


def test_session_reused_within_window() -> None:
    service = FakeLicenseService()
    started = service.now - timedelta(hours=23)
    service.add(KEY, sessions=5, last_session_start=started)
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))

    outcome = asyncio.run(manager.ensure_premium_catalog())

    assert outcome.ok and outcome.catalog.version == "2025.01-full"
    assert service.count("/validate-session") == 1
    assert manager.session.sessions_remaining == 5
    assert manager.session.session_expires_at == started + SESSION_WINDOW
    assert manager.session.hours_left(service.now) == 1


def test_session_consumed_after_window_expires() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=5, last_session_start=service.now - timedelta(hours=25))
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))
    assert not manager.session_active()

    outcome = asyncio.run(manager.ensure_premium_catalog())

    assert outcome.ok
    assert manager.session.sessions_remaining == 4
    assert manager.session.session_expires_at == service.now + SESSION_WINDOW
    assert manager.session_active()


def test_enter_key_validates_and_stores() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    store = InMemoryPreferenceStore()
    manager = _manager(service, store)

    outcome = asyncio.run(manager.enter_key(f"  {KEY} "))

    assert outcome.ok
    assert manager.status is LicenseState.VALIDATED
    assert manager.session.sessions_remaining == 3
    assert not manager.session_active()
    assert store.load().license_key == KEY
    assert service.count("/validate-session") == 0


def test_enter_key_rejects_malformed_key_without_network() -> None:
    service = FakeLicenseService()
    manager = _manager(service)

    outcome = asyncio.run(manager.enter_key("abc123"))

    assert outcome.error is LicenseErrorKind.INVALID
    assert manager.status is LicenseState.NO_LICENSE
    assert service.calls == []


def test_invalid_key_clears_session_and_store() -> None:
    service = FakeLicenseService()
    store = InMemoryPreferenceStore(Preferences(license_key=OTHER_KEY))
    manager = _manager(service, store)

    outcome = asyncio.run(manager.enter_key(OTHER_KEY))

    assert outcome.error is LicenseErrorKind.INVALID
    assert outcome.message == "Invalid token. Please check and try again."
    assert manager.status is LicenseState.INVALID
    assert manager.session is None
    assert manager.state.license_key is None
    assert store.load().license_key is None


def test_exhausted_key_clears_session() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=0)
    manager = _manager(service)

    outcome = asyncio.run(manager.enter_key(KEY))

    assert outcome.error is LicenseErrorKind.EXHAUSTED
    assert manager.status is LicenseState.EXHAUSTED
    assert manager.session is None


def test_network_failure_on_check_keeps_previous_session() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))
    session = manager.session

    service.unavailable = True
    outcome = asyncio.run(manager.check(KEY))

    assert outcome.error is LicenseErrorKind.NETWORK
    assert manager.status is LicenseState.VALIDATED
    assert manager.session == session


def test_premium_catalog_fetched_once_per_window() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))

    first = asyncio.run(manager.ensure_premium_catalog())
    second = asyncio.run(manager.ensure_premium_catalog())

    assert first.ok and first.catalog.version == "2025.01-full"
    assert second.catalog is first.catalog
    assert service.count("/validate-session") == 1
    assert manager.session.sessions_remaining == 2
    assert manager.session_active()
    assert manager.session.hours_left(service.now) == 24


def test_premium_catalog_refetched_after_window() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))
    asyncio.run(manager.ensure_premium_catalog())

    service.now += timedelta(hours=25)

    assert manager.cached_catalog() is None
    outcome = asyncio.run(manager.ensure_premium_catalog())

    assert outcome.ok
    assert service.count("/validate-session") == 2
    assert manager.session.sessions_remaining == 1


def test_network_failure_on_fetch_is_transient() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    manager = _manager(service)
    asyncio.run(manager.enter_key(KEY))

    service.unavailable = True
    outcome = asyncio.run(manager.ensure_premium_catalog())

    assert outcome.error is LicenseErrorKind.NETWORK
    assert outcome.message == "Network error. Please try again."
    assert manager.status is LicenseState.VALIDATED
    assert manager.state.license_key == KEY


def test_decrypt_failure_is_distinct_and_drops_session() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    service.corrupt_catalog = True
    store = InMemoryPreferenceStore()
    manager = _manager(service, store)
    asyncio.run(manager.enter_key(KEY))

    outcome = asyncio.run(manager.ensure_premium_catalog())

    assert outcome.error is LicenseErrorKind.DECRYPT_FAILURE
    assert outcome.catalog is None
    assert manager.status is LicenseState.PENDING_VALIDATION
    assert manager.session is None
    assert manager.cached_catalog() is None
    assert manager.state.license_key == KEY
    assert store.load().license_key == KEY


def test_stale_check_is_discarded() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    manager = _manager(service)

    def _switch_key(request: httpx.Request) -> None:
        manager.state.license_key = OTHER_KEY

    service.on_request = _switch_key
    outcome = asyncio.run(manager.enter_key(KEY))

    assert outcome.stale
    assert not outcome.ok
    assert manager.session is None
    assert manager.state.license_key == OTHER_KEY
    assert manager.status is LicenseState.PENDING_VALIDATION


def test_stale_invalid_reply_does_not_clear_new_key() -> None:
    service = FakeLicenseService()
    service.add(OTHER_KEY, sessions=3)
    store = InMemoryPreferenceStore()
    manager = _manager(service, store)
    asyncio.run(manager.enter_key(OTHER_KEY))

    def _logout_then_reenter(request: httpx.Request) -> None:
        manager.state.license_key = OTHER_KEY

    service.on_request = _logout_then_reenter
    outcome = asyncio.run(manager.enter_key("gg_unknown_key"))

    assert outcome.stale
    assert manager.state.license_key == OTHER_KEY
    assert store.load().license_key == OTHER_KEY


def test_restore_uses_non_consuming_check() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=4, last_session_start=service.now - timedelta(hours=2))
    store = InMemoryPreferenceStore(Preferences(license_key=KEY))
    manager = _manager(service, store)

    outcome = asyncio.run(manager.restore())

    assert outcome.ok
    assert manager.status is LicenseState.VALIDATED
    assert manager.session_active()
    assert manager.session.sessions_remaining == 4
    assert service.count("/check-license") == 1
    assert service.count("/validate-session") == 0


def test_restore_without_stored_key_is_a_no_op() -> None:
    service = FakeLicenseService()
    manager = _manager(service)

    outcome = asyncio.run(manager.restore())

    assert manager.status is LicenseState.NO_LICENSE
    assert outcome.error is None
    assert service.calls == []


def test_logout_forgets_everything() -> None:
    service = FakeLicenseService()
    service.add(KEY, sessions=3)
    store = InMemoryPreferenceStore()
    manager = _manager(service, store)
    asyncio.run(manager.enter_key(KEY))
    asyncio.run(manager.ensure_premium_catalog())

    manager.logout()

    assert manager.status is LicenseState.NO_LICENSE
    assert manager.session is None
    assert manager.cached_catalog() is None
    assert store.load().license_key is None
