"""JSON file preference store."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from genomegist.config import CategoryPreset, OutputFormat
from genomegist.storage.base import PreferenceStore, Preferences

logger = logging.getLogger(__name__)


def default_preferences_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "genomegist" / "preferences.json"


class JsonFilePreferenceStore(PreferenceStore):
    """Persist preferences in a small JSON document."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_preferences_path()

    def load(self) -> Preferences:
        if not self.path.exists():
            return Preferences()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return Preferences()

        if not isinstance(payload, dict):
            return Preferences()
        return self._parse(payload)

    def save(self, preferences: Preferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "licenseKey": preferences.license_key,
            "outputFormat": preferences.output_format.value,
            "preset": preferences.preset.value,
        }
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @staticmethod
    def _parse(payload: dict[str, Any]) -> Preferences:
        defaults = Preferences()

        key = payload.get("licenseKey")
        license_key = key.strip() if isinstance(key, str) and key.strip() else None

        try:
            output_format = OutputFormat(payload.get("outputFormat", defaults.output_format.value))
        except ValueError:
            output_format = defaults.output_format

        try:
            preset = CategoryPreset(payload.get("preset", defaults.preset.value))
        except ValueError:
            preset = defaults.preset

        return Preferences(license_key=license_key, output_format=output_format, preset=preset)
