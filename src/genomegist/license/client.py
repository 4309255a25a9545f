"""HTTP client for the external License Service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from genomegist.config import LicenseServiceConfig
from genomegist.license.models import CheckLicenseResponse, ValidateSessionResponse

logger = logging.getLogger(__name__)

CHECK_LICENSE_PATH = "/check-license"
VALIDATE_SESSION_PATH = "/validate-session"


def mask_key(key: str) -> str:
    """Log-safe rendering of a license key."""

    if len(key) <= 7:
        return "***"
    return f"{key[:3]}...{key[-4:]}"


class LicenseServiceClient:
    """Thin async wrapper over the two License Service endpoints.

    Transport failures, 5xx replies and unreadable bodies all come back as a
    ``network_error`` response so callers can branch on one value.
    """

    def __init__(
        self,
        config: LicenseServiceConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or LicenseServiceConfig.from_env()
        self._transport = transport

    async def check_license(self, key: str) -> CheckLicenseResponse:
        """Non-consuming validity check."""

        payload = await self._post(CHECK_LICENSE_PATH, key)
        if payload is None:
            return CheckLicenseResponse.network_failure()
        return CheckLicenseResponse.from_payload(payload)

    async def validate_session(self, key: str) -> ValidateSessionResponse:
        """Consuming call; idempotent while the key's 24h window is open."""

        payload = await self._post(VALIDATE_SESSION_PATH, key)
        if payload is None:
            return ValidateSessionResponse.network_failure()
        return ValidateSessionResponse.from_payload(payload)

    async def _post(self, path: str, key: str) -> dict[str, Any] | None:
        url = f"{self.config.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json={"licenseKey": key})
        except httpx.HTTPError as exc:
            logger.warning("License request %s failed for %s: %s", path, mask_key(key), exc)
            return None

        if response.status_code >= 500:
            logger.warning(
                "License service returned %s for %s (%s)", response.status_code, path, mask_key(key)
            )
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("License service sent a non-JSON body for %s", path)
            return None

        if not isinstance(payload, dict):
            logger.warning("License service sent an unexpected body for %s", path)
            return None
        return payload
