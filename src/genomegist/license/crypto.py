"""Decryption of the premium reference catalog.

The License Service encrypts the catalog with AES-256-GCM under
``SHA-256(license key)`` and a fresh 96-bit IV per response. Ciphertext and
IV travel base64-encoded; the GCM tag is appended to the ciphertext.
"""

from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from genomegist.catalog import CatalogLoader
from genomegist.models import ReferenceCatalog

IV_LENGTH = 12


class CatalogDecryptionError(Exception):
    """Ciphertext could not be authenticated or decoded."""


def derive_catalog_key(license_key: str) -> bytes:
    return hashlib.sha256(license_key.encode("utf-8")).digest()


def _b64decode(value: str, label: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CatalogDecryptionError(f"{label} is not valid base64") from exc


def decrypt_payload(ciphertext: str, iv: str, license_key: str) -> bytes:
    nonce = _b64decode(iv, "IV")
    if len(nonce) != IV_LENGTH:
        raise CatalogDecryptionError(f"IV must be {IV_LENGTH} bytes, got {len(nonce)}")
    data = _b64decode(ciphertext, "Ciphertext")

    aesgcm = AESGCM(derive_catalog_key(license_key))
    try:
        return aesgcm.decrypt(nonce, data, None)
    except InvalidTag as exc:
        raise CatalogDecryptionError("Catalog authentication failed") from exc


def decrypt_catalog(
    ciphertext: str,
    iv: str,
    license_key: str,
    loader: CatalogLoader | None = None,
) -> ReferenceCatalog:
    """Decrypt and validate the premium catalog.

    Raises :class:`CatalogDecryptionError` or
    :class:`~genomegist.errors.CatalogValidationError`.
    """

    plaintext = decrypt_payload(ciphertext, iv, license_key)
    return (loader or CatalogLoader()).load_text(plaintext)
