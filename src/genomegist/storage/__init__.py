"""Preference stores for GenomeGist."""

from .base import InMemoryPreferenceStore, PreferenceStore, Preferences
from .json_file import JsonFilePreferenceStore, default_preferences_path

__all__ = [
    "Preferences",
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "JsonFilePreferenceStore",
    "default_preferences_path",
]
