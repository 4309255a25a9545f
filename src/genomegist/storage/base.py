"""Base class for persisted user preferences."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from genomegist.config import CategoryPreset, OutputFormat


@dataclass(frozen=True)
class Preferences:
    """What survives between runs: the license key and last selections."""

    license_key: str | None = None
    output_format: OutputFormat = OutputFormat.DETAILED
    preset: CategoryPreset = CategoryPreset.DEMO


class PreferenceStore(ABC):
    """Persists :class:`Preferences` in a backend-specific location."""

    @abstractmethod
    def load(self) -> Preferences:
        """Return stored preferences, or defaults when nothing is stored."""

    @abstractmethod
    def save(self, preferences: Preferences) -> None:
        """Replace stored preferences."""

    def update(self, **changes: object) -> Preferences:
        updated = replace(self.load(), **changes)
        self.save(updated)
        return updated


class InMemoryPreferenceStore(PreferenceStore):
    """Process-local store, used by tests and one-shot CLI runs."""

    def __init__(self, preferences: Preferences | None = None) -> None:
        self._preferences = preferences or Preferences()

    def load(self) -> Preferences:
        return self._preferences

    def save(self, preferences: Preferences) -> None:
        self._preferences = preferences
