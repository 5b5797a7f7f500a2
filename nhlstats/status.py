"""Status values returned by every accessor, and the detail-level vocabulary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Status(Flag):
    """Combinable status bits.

    The READ_* bits are primary outcomes. DOWNLOAD_*, WRITE_* and
    INVALID_REQUEST only describe what happened on the way and are meant
    for diagnostics.
    """

    NONE = 0
    DOWNLOAD_OK = 1 << 0
    DOWNLOAD_SKIPPED = 1 << 1
    DOWNLOAD_ERROR = 1 << 2
    READ_OK = 1 << 3
    READ_EXPIRED = 1 << 4
    READ_NOT_FOUND = 1 << 5
    READ_ERROR = 1 << 6
    WRITE_OK = 1 << 7
    WRITE_ERROR = 1 << 8
    INVALID_REQUEST = 1 << 9


DIAGNOSTIC_FLAGS = (
    Status.DOWNLOAD_OK
    | Status.DOWNLOAD_SKIPPED
    | Status.DOWNLOAD_ERROR
    | Status.WRITE_OK
    | Status.WRITE_ERROR
    | Status.INVALID_REQUEST
)


class Outcome(str, Enum):
    FRESH = "fresh"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    ERROR = "error"

    @property
    def flag(self) -> Status:
        return _OUTCOME_FLAGS[self]


_OUTCOME_FLAGS = {
    Outcome.FRESH: Status.READ_OK,
    Outcome.EXPIRED: Status.READ_EXPIRED,
    Outcome.NOT_FOUND: Status.READ_NOT_FOUND,
    Outcome.ERROR: Status.READ_ERROR,
}


class Detail(str, Enum):
    """Relation groups a caller may ask an accessor to resolve."""

    BASIC = "basic"
    GAME_DETAILS = "game_details"
    GOALS = "goals"
    PLAYERS = "players"


MINIMAL: frozenset[Detail] = frozenset()
BASIC: frozenset[Detail] = frozenset({Detail.BASIC})
FULL: frozenset[Detail] = frozenset(Detail)


@dataclass
class Fetched(Generic[T]):
    """Result of a public accessor.

    `outcome` judges the requested object itself. `status` aggregates the
    object's own flag with everything reported while resolving relations, so
    a partially failed expansion stays visible.
    """

    value: Optional[T]
    outcome: Outcome
    status: Status

    @property
    def ok(self) -> bool:
        return self.value is not None

    @property
    def has_errors(self) -> bool:
        return bool(self.status & (Status.READ_ERROR | Status.DOWNLOAD_ERROR | Status.WRITE_ERROR))
