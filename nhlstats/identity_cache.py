"""Reference-counted identity map of live entity instances."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from nhlstats.errors import CacheInsertError

logger = logging.getLogger(__name__)

Key = Union[int, str]


@dataclass
class CacheEntry:
    key: Key
    value: Any
    refs: int
    timestamp: datetime


class IdentityCache:
    """Live instances of one entity type, keyed by an int or a str.

    Every successful `find` or `insert` hands out one reference that must be
    returned with `unref`. The entry disappears the moment its count drops
    to zero. Duplicate keys are allowed; the newest entry shadows older ones
    for lookups, while `unref` matches on the object itself.
    """

    def __init__(self, name: str, key_type: type = int) -> None:
        if key_type not in (int, str):
            raise TypeError(f"Unsupported key type: {key_type!r}")
        self.name = name
        self.key_type = key_type
        self._entries: list[CacheEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, value: Any) -> bool:
        return self._entry_for(value) is not None

    def _check_key(self, key: Key) -> None:
        if not isinstance(key, self.key_type) or isinstance(key, bool):
            raise TypeError(
                f"{self.name} cache expects {self.key_type.__name__} keys, got {key!r}"
            )

    def _entry_for(self, value: Any) -> Optional[CacheEntry]:
        for entry in self._entries:
            if entry.value is value:
                return entry
        return None

    def find(self, key: Key) -> Optional[tuple[Any, datetime]]:
        """Return (value, timestamp) of the newest live entry and take a reference."""
        self._check_key(key)
        for entry in reversed(self._entries):
            if entry.key == key:
                entry.refs += 1
                return entry.value, entry.timestamp
        return None

    def peek(self, key: Key) -> Optional[Any]:
        """Like `find` but without taking a reference."""
        self._check_key(key)
        for entry in reversed(self._entries):
            if entry.key == key:
                return entry.value
        return None

    def insert(self, key: Key, value: Any, timestamp: datetime) -> None:
        self._check_key(key)
        try:
            self._entries.append(CacheEntry(key=key, value=value, refs=1, timestamp=timestamp))
        except MemoryError as exc:
            raise CacheInsertError(f"Cannot cache {self.name} {key!r}") from exc

    def unref(self, value: Any) -> Optional[int]:
        """Drop one reference. Returns the new count, or None if `value` is not cached."""
        for idx, entry in enumerate(self._entries):
            if entry.value is value:
                entry.refs -= 1
                if entry.refs == 0:
                    del self._entries[idx]
                return entry.refs
        return None

    def refcount(self, value: Any) -> int:
        entry = self._entry_for(value)
        return entry.refs if entry is not None else 0

    def restamp(self, value: Any, timestamp: datetime) -> None:
        """Record that `value` now reflects data ingested at `timestamp`."""
        entry = self._entry_for(value)
        if entry is not None:
            entry.timestamp = timestamp

    def delete(self) -> None:
        if self._entries:
            logger.debug("Dropping %s live %s entries", len(self._entries), self.name)
        self._entries.clear()
