"""Persisted preferred and pinned media."""

from .store import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    PreferenceStore,
    PinStore
)

__all__ = ['KeyValueStore', 'MemoryStore', 'JsonFileStore', 'PreferenceStore', 'PinStore']
