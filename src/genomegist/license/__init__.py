"""License Service client, session records and premium catalog decryption.

The session manager lives in :mod:`genomegist.license.session`; it is not
re-exported here because it depends on :mod:`genomegist.state`.
"""

from .client import LicenseServiceClient, mask_key
from .crypto import CatalogDecryptionError, decrypt_catalog, decrypt_payload, derive_catalog_key
from .models import (
    CheckLicenseResponse,
    LicenseErrorKind,
    LicenseOutcome,
    LicenseSession,
    LicenseState,
    ValidateSessionResponse,
    WireError,
)

__all__ = [
    "LicenseServiceClient",
    "mask_key",
    "CatalogDecryptionError",
    "decrypt_catalog",
    "decrypt_payload",
    "derive_catalog_key",
    "CheckLicenseResponse",
    "ValidateSessionResponse",
    "LicenseErrorKind",
    "LicenseOutcome",
    "LicenseSession",
    "LicenseState",
    "WireError",
]
