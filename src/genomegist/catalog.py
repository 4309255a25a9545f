"""Reference SNP catalog loading and schema validation.

The same validator is applied to the bundled free list and to the decrypted
premium list, so both tiers honour one contract.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import FormatChecker
from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

from genomegist.config import SNPCategory
from genomegist.errors import CatalogValidationError
from genomegist.models import ReferenceCatalog, ReferenceEntry

logger = logging.getLogger(__name__)

FREE_CATALOG_RESOURCE = "snp-list-free.json"
SCHEMA_RESOURCE = "snp-list.schema.json"


def _read_resource(name: str) -> str:
    return resources.files("genomegist").joinpath("data").joinpath(name).read_text(encoding="utf-8")


def compile_validator(schema: dict[str, Any] | None = None):
    """Return a validator for the catalog schema's declared draft."""

    if schema is None:
        schema = json.loads(_read_resource(SCHEMA_RESOURCE))
    Validator = validator_for(schema)
    Validator.check_schema(schema)
    return Validator(schema, format_checker=FormatChecker())


def _pointer(error: jsex.ValidationError) -> str:
    return "/" + "/".join(str(part) for part in error.absolute_path)


def _path_sort_key(error: jsex.ValidationError) -> tuple[tuple[int, int, str], ...]:
    # Array indexes sort numerically so the first broken entry is reported.
    return tuple(
        (0, part, "") if isinstance(part, int) else (1, 0, str(part))
        for part in error.absolute_path
    )


class CatalogValidator:
    """Validate raw catalog payloads and convert them into models."""

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self._validator = compile_validator(schema)

    def validate(self, payload: Any) -> ReferenceCatalog:
        if not isinstance(payload, dict):
            raise CatalogValidationError("Invalid SNP list: expected an object")

        errors = sorted(self._validator.iter_errors(payload), key=_path_sort_key)
        if errors:
            raise self._to_error(payload, errors[0])

        variants = payload["variants"]
        actual_count = len(variants)
        declared_count = payload.get("count")
        if declared_count is not None and declared_count != actual_count:
            logger.warning(
                "SNP list count mismatch: JSON says %s, but array has %s entries",
                declared_count,
                actual_count,
            )

        generated_at = payload.get("generatedAt")
        if not generated_at:
            generated_at = datetime.now(timezone.utc).isoformat()

        return ReferenceCatalog(
            version=payload["version"],
            generated_at=generated_at,
            count=actual_count,
            entries=tuple(self._to_entry(item) for item in variants),
        )

    @staticmethod
    def _to_entry(item: dict[str, Any]) -> ReferenceEntry:
        return ReferenceEntry(
            rsid=item["rsid"],
            gene=item["gene"],
            category=SNPCategory(item["category"]),
            annotation=item["annotation"],
            sources=tuple(item["sources"]),
            risk_allele=item.get("riskAllele"),
            chromosome=item.get("chromosome"),
            position=item.get("position"),
        )

    @staticmethod
    def _to_error(payload: dict[str, Any], error: jsex.ValidationError) -> CatalogValidationError:
        path = list(error.absolute_path)
        pointer = _pointer(error)

        if len(path) >= 2 and path[0] == "variants" and isinstance(path[1], int):
            entry = payload["variants"][path[1]]
            rsid = entry.get("rsid") if isinstance(entry, dict) else None
            label = rsid if isinstance(rsid, str) else f"entry {path[1]}"

            field_name = path[2] if len(path) >= 3 else None

            if error.validator == "required":
                missing = error.message.split("'")[1] if "'" in error.message else "field"
                return CatalogValidationError(
                    f"Invalid SNP entry: missing {missing} for {label}", path=pointer
                )
            if field_name == "category" and error.validator == "enum":
                return CatalogValidationError(
                    f'Invalid SNP entry: unknown category "{error.instance}" for {label}',
                    path=pointer,
                )
            if field_name == "rsid":
                return CatalogValidationError(
                    f'Invalid SNP entry: invalid rsid "{error.instance}"', path=pointer
                )
            return CatalogValidationError(
                f"Invalid SNP entry for {label}: {error.message}", path=pointer
            )

        return CatalogValidationError(f"Invalid SNP list: {error.message}", path=pointer)


class CatalogLoader:
    """Load reference catalogs from the bundled resource, files or text."""

    def __init__(self, validator: CatalogValidator | None = None) -> None:
        self.validator = validator or CatalogValidator()

    def load_free(self) -> ReferenceCatalog:
        """Load the free-tier catalog bundled with the package."""

        catalog = self.load_text(_read_resource(FREE_CATALOG_RESOURCE))
        logger.info("Loaded SNP list v%s with %d variants", catalog.version, catalog.count)
        return catalog

    def load_path(self, path: str | Path) -> ReferenceCatalog:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogValidationError(f"Failed to read SNP list from {path}: {exc}") from exc
        return self.load_text(text)

    def load_text(self, text: str | bytes) -> ReferenceCatalog:
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CatalogValidationError("Failed to parse SNP list: invalid JSON format") from exc
        return self.validator.validate(payload)
