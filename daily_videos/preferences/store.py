"""Persisted per-day preferred media and pinned media.

Both stores sit on a small key-value collaborator. Every write is committed
before the call returns; if the backing store cannot be reached the call
raises ``PersistenceUnavailable`` instead of dropping the write.
"""

import json
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Dict, Iterable, List, Optional, Set
import logging

from ..core.exceptions import PersistenceUnavailable
from ..core.models import CleanupTimeframe, PinnedMedia, PreferredMedia
from ..utils.date import day_key, format_date, parse_date
from ..utils.io import read_json, update_json

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class KeyValueStore(ABC):
    """Durable string-keyed store of JSON-compatible values."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> int:
        """Remove the given keys; returns how many existed."""

    @abstractmethod
    def items(self) -> Dict[str, Any]:
        pass

    def delete(self, key: str) -> bool:
        return self.delete_many([key]) > 0


class MemoryStore(KeyValueStore):
    """In-process store, used for tests and previews."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete_many(self, keys: Iterable[str]) -> int:
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    def items(self) -> Dict[str, Any]:
        return dict(self._data)


class JsonFileStore(KeyValueStore):
    """Store backed by one JSON object in a file.

    Each mutation is a locked read-modify-write followed by an fsynced
    atomic replace.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        self.path = path
        self.logger = logger or logging.getLogger(__name__)

    def _load(self) -> Dict[str, Any]:
        try:
            data = read_json(self.path)
        except FileNotFoundError:
            return {}
        except (OSError, TimeoutError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to read {self.path}: {e}")
            raise PersistenceUnavailable(f"Cannot read store {self.path}: {e}")
        if not isinstance(data, dict):
            raise PersistenceUnavailable(f"Store {self.path} does not contain a JSON object")
        return data

    def _update(self, mutate: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Dict[str, Any]:
        def checked(current):
            if current is None:
                current = {}
            if not isinstance(current, dict):
                raise ValueError("store does not contain a JSON object")
            return mutate(current)

        try:
            return update_json(self.path, checked, default={})
        except (OSError, TimeoutError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to write {self.path}: {e}")
            raise PersistenceUnavailable(f"Cannot write store {self.path}: {e}")

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def put(self, key: str, value: Any) -> None:
        def apply(data):
            data[key] = value
            return data

        self._update(apply)

    def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        removed = []

        def apply(data):
            for key in keys:
                if data.pop(key, None) is not None:
                    removed.append(key)
            return data

        if keys:
            self._update(apply)
        return len(removed)

    def items(self) -> Dict[str, Any]:
        return dict(self._load())


class PreferenceStore:
    """User's preferred media, at most one per day (last write wins)."""

    def __init__(self, store: KeyValueStore, tz: Optional[tzinfo] = None,
                 clock: Optional[Clock] = None,
                 logger: Optional[logging.Logger] = None):
        self.store = store
        self.tz = tz
        self.clock = clock or _utc_now
        self.logger = logger or logging.getLogger(__name__)

    def _key(self, day: Any) -> str:
        return format_date(day_key(day, self.tz))

    def get_preferred(self, day: Any) -> Optional[str]:
        """Asset identifier preferred for ``day``, if any."""
        record = self.store.get(self._key(day))
        if not isinstance(record, dict):
            return None
        return record.get("asset_identifier")

    def set_preferred(self, day: Any, asset_identifier: str) -> PreferredMedia:
        """Save the preferred media for ``day``, replacing any earlier choice."""
        if not asset_identifier:
            raise ValueError("asset_identifier must not be empty")
        key = self._key(day)
        selected_at = self.clock()
        self.store.put(key, {
            "asset_identifier": asset_identifier,
            "selected_at": selected_at.isoformat(),
        })
        self.logger.debug(f"Preferred media for {key} set to {asset_identifier}")
        return PreferredMedia(day=parse_date(key), asset_identifier=asset_identifier, selected_at=selected_at)

    def remove_preferred(self, day: Any) -> bool:
        return self.store.delete(self._key(day))

    def all_preferred(self) -> List[PreferredMedia]:
        """All stored preferences, newest day first."""
        result = []
        for key, record in self.store.items().items():
            parsed = parse_date(key)
            if parsed is None or not isinstance(record, dict) or not record.get("asset_identifier"):
                self.logger.warning(f"Ignoring malformed preference entry {key!r}")
                continue
            result.append(PreferredMedia(
                day=parsed,
                asset_identifier=record["asset_identifier"],
                selected_at=_parse_timestamp(record.get("selected_at")),
            ))
        result.sort(key=lambda pref: pref.day, reverse=True)
        return result

    def count(self) -> int:
        return len(self.all_preferred())

    def cleanup(self, older_than: CleanupTimeframe, now: Optional[datetime] = None) -> int:
        """
        Remove preferences by age.

        Args:
            older_than: Which preferences to drop, judged by their day
            now: Reference time (defaults to the store clock)

        Returns:
            Number of preferences removed
        """
        cutoff = older_than.cutoff(now or self.clock())
        cutoff_day: Optional[date] = day_key(cutoff, self.tz) if cutoff else None
        doomed = [
            format_date(pref.day) for pref in self.all_preferred()
            if cutoff_day is None or pref.day < cutoff_day
        ]
        removed = self.store.delete_many(doomed)
        self.logger.info(f"Cleaned up {removed} preferences")
        return removed


class PinStore:
    """Set of pinned asset identifiers with the time each was pinned."""

    def __init__(self, store: KeyValueStore, clock: Optional[Clock] = None,
                 logger: Optional[logging.Logger] = None):
        self.store = store
        self.clock = clock or _utc_now
        self.logger = logger or logging.getLogger(__name__)

    def get_pinned(self) -> Set[str]:
        return {pin.asset_identifier for pin in self.all_pins()}

    def pin(self, asset_identifier: str) -> PinnedMedia:
        """Pin an asset. Pinning an already pinned asset keeps the first pin."""
        if not asset_identifier:
            raise ValueError("asset_identifier must not be empty")
        existing = self.pinned_at(asset_identifier)
        if existing is not None:
            return PinnedMedia(asset_identifier=asset_identifier, pinned_at=existing)

        pinned_at = self.clock()
        self.store.put(asset_identifier, {"pinned_at": pinned_at.isoformat()})
        self.logger.debug(f"Pinned {asset_identifier}")
        return PinnedMedia(asset_identifier=asset_identifier, pinned_at=pinned_at)

    def unpin(self, asset_identifier: str) -> bool:
        removed = self.store.delete(asset_identifier)
        if removed:
            self.logger.debug(f"Unpinned {asset_identifier}")
        return removed

    def is_pinned(self, asset_identifier: str) -> bool:
        return isinstance(self.store.get(asset_identifier), dict)

    def pinned_at(self, asset_identifier: str) -> Optional[datetime]:
        record = self.store.get(asset_identifier)
        if not isinstance(record, dict):
            return None
        return _parse_timestamp(record.get("pinned_at")) or datetime.fromtimestamp(0, timezone.utc)

    def all_pins(self) -> List[PinnedMedia]:
        """All pins, most recent first."""
        pins = []
        for asset_identifier, record in self.store.items().items():
            if not isinstance(record, dict):
                self.logger.warning(f"Ignoring malformed pin entry {asset_identifier!r}")
                continue
            pinned_at = _parse_timestamp(record.get("pinned_at")) or datetime.fromtimestamp(0, timezone.utc)
            pins.append(PinnedMedia(asset_identifier=asset_identifier, pinned_at=pinned_at))
        pins.sort(key=lambda pin: pin.pinned_at.timestamp(), reverse=True)
        return pins

    def count(self) -> int:
        return len(self.all_pins())

    def cleanup(self, older_than: CleanupTimeframe, now: Optional[datetime] = None) -> int:
        """Remove pins made before the timeframe's cutoff; returns how many."""
        cutoff = older_than.cutoff(now or self.clock())
        doomed = [
            pin.asset_identifier for pin in self.all_pins()
            if cutoff is None or pin.pinned_at.timestamp() < cutoff.timestamp()
        ]
        removed = self.store.delete_many(doomed)
        self.logger.info(f"Cleaned up {removed} pins")
        return removed

    def cleanup_orphans(self, existing_identifiers: Iterable[str]) -> int:
        """Remove pins whose asset is no longer in the library."""
        existing = set(existing_identifiers)
        orphans = [pin for pin in self.get_pinned() if pin not in existing]
        removed = self.store.delete_many(orphans)
        if removed:
            self.logger.info(f"Removed {removed} orphaned pins")
        return removed
