"""Decide per request whether memory, the store or the origin has usable data."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from nhlstats.errors import StoreError
from nhlstats.identity_cache import IdentityCache, Key
from nhlstats.status import DIAGNOSTIC_FLAGS, Outcome, Status

logger = logging.getLogger(__name__)

# Called with "may fetch from origin"; returns the stored record (or None)
# and the diagnostic flags the attempt produced.
Loader = Callable[[bool], tuple[Optional[Any], Status]]
AgeOf = Callable[[Optional[datetime]], Optional[int]]


class Source(str, Enum):
    MEMORY = "memory"
    STORE = "store"
    NONE = "none"


@dataclass
class Arbitration:
    outcome: Outcome
    source: Source
    instance: Optional[Any] = None
    record: Optional[Any] = None
    flags: Status = field(default=Status.NONE)

    @property
    def status(self) -> Status:
        return self.outcome.flag | self.flags


def _within(age: Optional[int], max_age: int) -> bool:
    return age is not None and (max_age < 0 or age <= max_age)


def arbitrate(
    cache: Optional[IdentityCache],
    key: Key,
    max_age: int,
    load: Loader,
    age_of: AgeOf,
) -> Arbitration:
    """Return the freshest usable representation of `key`.

    A FRESH or EXPIRED result from memory carries a referenced `instance`;
    from the store it carries a `record` and the caller is expected to
    materialize (and cache) it. Whenever a store record wins over an
    in-memory incumbent, the incumbent's reference is released here.
    """
    incumbent = None
    incumbent_age: Optional[int] = None

    if cache is not None:
        found = cache.find(key)
        if found is not None:
            instance, timestamp = found
            age = age_of(timestamp)
            if _within(age, max_age):
                return Arbitration(Outcome.FRESH, Source.MEMORY, instance=instance)
            if age is None:
                logger.warning("Unreadable timestamp for cached %s %r", cache.name, key)
                cache.unref(instance)
            else:
                incumbent, incumbent_age = instance, age

    def _release_incumbent() -> None:
        if incumbent is not None:
            cache.unref(incumbent)

    flags = Status.NONE
    try:
        record, load_flags = load(False)
        flags |= load_flags & DIAGNOSTIC_FLAGS
        if record is not None and _within(age_of(record.fetched_at), max_age):
            _release_incumbent()
            return Arbitration(Outcome.FRESH, Source.STORE, record=record, flags=flags)

        record, load_flags = load(True)
        flags |= load_flags & DIAGNOSTIC_FLAGS
    except StoreError:
        logger.exception("Store read failed for key %r", key)
        if incumbent is not None:
            return Arbitration(Outcome.EXPIRED, Source.MEMORY, instance=incumbent, flags=flags)
        return Arbitration(Outcome.ERROR, Source.NONE, flags=flags)

    if record is not None:
        age = age_of(record.fetched_at)
        if age is None:
            if incumbent is not None:
                return Arbitration(Outcome.EXPIRED, Source.MEMORY, instance=incumbent, flags=flags)
            return Arbitration(Outcome.ERROR, Source.NONE, flags=flags)
        if _within(age, max_age):
            _release_incumbent()
            return Arbitration(Outcome.FRESH, Source.STORE, record=record, flags=flags)
        if incumbent_age is None or age < incumbent_age:
            _release_incumbent()
            return Arbitration(Outcome.EXPIRED, Source.STORE, record=record, flags=flags)

    if incumbent is not None:
        return Arbitration(Outcome.EXPIRED, Source.MEMORY, instance=incumbent, flags=flags)
    return Arbitration(Outcome.NOT_FOUND, Source.NONE, flags=flags)
