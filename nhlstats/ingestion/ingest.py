"""Write parsed payloads into the persistent store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from nhlstats.errors import InvalidRequestError, StoreError
from nhlstats.ingestion import parser
from nhlstats.models import (
    CachedConference,
    CachedDivision,
    CachedFranchise,
    CachedGame,
    CachedGameStatus,
    CachedGameType,
    CachedGoal,
    CachedLinescore,
    CachedPeriod,
    CachedPlayer,
    CachedPosition,
    CachedRosterStatus,
    CachedSchedule,
    CachedTeam,
)
from nhlstats.status import Status
from nhlstats.store import PersistentStore

logger = logging.getLogger(__name__)


class ContentType(str, Enum):
    SCHEDULE = "schedule"
    PEOPLE = "people"
    TEAMS = "teams"
    FRANCHISES = "franchises"
    DIVISIONS = "divisions"
    CONFERENCES = "conferences"
    GAME_STATUSES = "game_statuses"
    GAME_TYPES = "game_types"
    POSITIONS = "positions"
    ROSTER_STATUSES = "roster_statuses"
    # Known to the API but not ingested.
    BOXSCORE = "boxscore"
    LINESCORE = "linescore"
    PLAY_TYPES = "play_types"
    VENUES = "venues"


@dataclass
class IngestResult:
    written: int = 0
    errors: int = 0
    cleared: int = 0

    @property
    def status(self) -> Status:
        flags = Status.NONE
        if self.written:
            flags |= Status.WRITE_OK
        if self.errors:
            flags |= Status.WRITE_ERROR
        return flags


def _upsert_all(
    store: PersistentStore,
    model: type,
    records: Iterable[BaseModel],
    source: Optional[str],
    fetched_at: datetime,
    result: IngestResult,
) -> None:
    for record in records:
        try:
            store.upsert(model, record.model_dump(), source, fetched_at)
            result.written += 1
        except StoreError:
            result.errors += 1
            logger.exception("Failed upserting %s from %s", model.__tablename__, source)


def _clear_children(
    store: PersistentStore,
    model: type,
    game_ids: Iterable[int],
    result: IngestResult,
) -> None:
    for game_pk in game_ids:
        try:
            result.cleared += store.delete_by_foreign_key(model, game_pk)
        except StoreError:
            result.errors += 1
            logger.exception("Failed clearing %s for game=%s", model.__tablename__, game_pk)


def _write_schedule(store, payload, source, fetched_at, result) -> None:
    bundle = parser.parse_schedule(payload)
    _upsert_all(store, CachedSchedule, bundle.schedules, source, fetched_at, result)
    _upsert_all(store, CachedGame, bundle.games, source, fetched_at, result)
    _clear_children(store, CachedGoal, bundle.goal_games, result)
    _upsert_all(store, CachedGoal, bundle.goals, source, fetched_at, result)
    _upsert_all(store, CachedLinescore, bundle.linescores, source, fetched_at, result)
    _clear_children(store, CachedPeriod, bundle.period_games, result)
    _upsert_all(store, CachedPeriod, bundle.periods, source, fetched_at, result)


def _simple_writer(
    model: type,
    parse: Callable[[Any], list[BaseModel]],
) -> Callable[..., None]:
    def write(store, payload, source, fetched_at, result) -> None:
        _upsert_all(store, model, parse(payload), source, fetched_at, result)

    return write


_WRITERS: dict[ContentType, Callable[..., None]] = {
    ContentType.SCHEDULE: _write_schedule,
    ContentType.PEOPLE: _simple_writer(CachedPlayer, parser.parse_people),
    ContentType.TEAMS: _simple_writer(CachedTeam, parser.parse_teams),
    ContentType.FRANCHISES: _simple_writer(CachedFranchise, parser.parse_franchises),
    ContentType.DIVISIONS: _simple_writer(CachedDivision, parser.parse_divisions),
    ContentType.CONFERENCES: _simple_writer(CachedConference, parser.parse_conferences),
    ContentType.GAME_STATUSES: _simple_writer(CachedGameStatus, parser.parse_game_statuses),
    ContentType.GAME_TYPES: _simple_writer(CachedGameType, parser.parse_game_types),
    ContentType.POSITIONS: _simple_writer(CachedPosition, parser.parse_positions),
    ContentType.ROSTER_STATUSES: _simple_writer(CachedRosterStatus, parser.parse_roster_statuses),
}


def ingest_payload(
    store: PersistentStore,
    content_type: ContentType,
    payload: Any,
    source: Optional[str],
    fetched_at: Optional[datetime] = None,
) -> IngestResult:
    """Parse `payload` and upsert every derived record, tagged with `source`.

    Re-ingesting the same content overwrites the same keys. Goals and periods
    of a game are replaced wholesale whenever the payload carries them.
    Raises InvalidRequestError for content types that have no writer.
    """

    writer = _WRITERS.get(content_type)
    if writer is None:
        raise InvalidRequestError(f"Unsupported content type: {content_type}")

    if fetched_at is None:
        fetched_at = store.current_timestamp()
    result = IngestResult()
    writer(store, payload, source, fetched_at, result)
    logger.debug(
        "Ingested %s from %s: written=%s cleared=%s errors=%s",
        content_type.value,
        source,
        result.written,
        result.cleared,
        result.errors,
    )
    return result
