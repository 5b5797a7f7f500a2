"""Session handle: identity caches, store and fetcher behind one API."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterable, Iterator, Optional

from nhlstats.entities import (
    Conference,
    Division,
    Entity,
    Franchise,
    Game,
    GameStatus,
    GameType,
    Player,
    PlayerPosition,
    RosterStatus,
    Schedule,
    Team,
)
from nhlstats.errors import StoreError
from nhlstats.ingestion.client import OriginFetcher
from nhlstats.ingestion.ingest import ContentType
from nhlstats.materializer import GraphMaterializer, make_caches
from nhlstats.settings import Params
from nhlstats.status import BASIC, Detail, Fetched, Status
from nhlstats.store import PersistentStore
from nhlstats.utils import format_date

logger = logging.getLogger(__name__)


class Session:
    """One cache per entity type plus the store and origin connections.

    Not thread safe. Every accessor runs inside a store transaction; callers
    can group several accessors into one transaction with `batch()`. Each
    returned entity must be given back with `release()` exactly once.
    """

    def __init__(
        self,
        params: Optional[Params] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        fetcher: Optional[OriginFetcher] = None,
    ) -> None:
        self._clock = clock
        self._fetcher_override = fetcher
        self._open(params or Params())

    def _open(self, params: Params) -> None:
        self.params = params
        if self._clock is not None:
            self.store = PersistentStore(params.cache_file, clock=self._clock)
        else:
            self.store = PersistentStore(params.cache_file)
        self.fetcher = self._fetcher_override or OriginFetcher(
            offline=params.offline, verbose=params.verbose
        )
        self.caches = make_caches()
        self.materializer = GraphMaterializer(self.store, self.fetcher, params, self.caches)
        self._in_batch = False
        logger.debug(
            "Session opened cache_file=%s offline=%s", params.cache_file, params.offline
        )

    def close(self) -> None:
        for cache in self.caches.values():
            cache.delete()
        self.store.close()
        if self._fetcher_override is None:
            self.fetcher.close()

    def reset(self, params: Optional[Params] = None) -> None:
        self.close()
        self._open(params or self.params)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- transactions --------------------------------------------------------

    def begin_batch(self) -> bool:
        """Open a store transaction unless one is open; True if this call opened it."""
        if self._in_batch:
            return False
        self.store.begin()
        self._in_batch = True
        return True

    def end_batch(self, started: bool) -> bool:
        """Commit if `started`; returns False when the commit failed."""
        if not started:
            return True
        self._in_batch = False
        try:
            self.store.commit()
        except StoreError:
            logger.exception("Cache transaction was rolled back")
            return False
        return True

    @contextmanager
    def batch(self) -> Iterator["Session"]:
        started = self.begin_batch()
        try:
            yield self
        finally:
            self.end_batch(started)

    def _run(self, cls: type, key, detail: Iterable[Detail]) -> Fetched:
        started = self.begin_batch()
        try:
            result = self.materializer.get(cls, key, detail)
        finally:
            committed = self.end_batch(started)
        if not committed:
            result.status |= Status.WRITE_ERROR
        return result

    # -- accessors -----------------------------------------------------------

    def get_schedule(self, day: date, detail: Iterable[Detail] = BASIC) -> Fetched[Schedule]:
        return self._run(Schedule, format_date(day), detail)

    def get_game(self, game_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Game]:
        return self._run(Game, game_id, detail)

    def get_team(self, team_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Team]:
        return self._run(Team, team_id, detail)

    def get_franchise(self, franchise_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Franchise]:
        return self._run(Franchise, franchise_id, detail)

    def get_conference(self, conference_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Conference]:
        return self._run(Conference, conference_id, detail)

    def get_division(self, division_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Division]:
        return self._run(Division, division_id, detail)

    def get_player(self, player_id: int, detail: Iterable[Detail] = BASIC) -> Fetched[Player]:
        return self._run(Player, player_id, detail)

    def get_game_status(self, code: str, detail: Iterable[Detail] = BASIC) -> Fetched[GameStatus]:
        return self._run(GameStatus, code, detail)

    def get_game_type(self, code: str, detail: Iterable[Detail] = BASIC) -> Fetched[GameType]:
        return self._run(GameType, code, detail)

    def get_position(self, code: str, detail: Iterable[Detail] = BASIC) -> Fetched[PlayerPosition]:
        return self._run(PlayerPosition, code, detail)

    def get_roster_status(self, code: str, detail: Iterable[Detail] = BASIC) -> Fetched[RosterStatus]:
        return self._run(RosterStatus, code, detail)

    def release(self, entity: Optional[Entity]) -> None:
        self.materializer.release(entity)

    def update_from_url(self, url: Optional[str], content_type: ContentType) -> Status:
        started = self.begin_batch()
        try:
            status = self.fetcher.update_from_url(self.store, url, content_type)
        finally:
            committed = self.end_batch(started)
        if not committed:
            status |= Status.WRITE_ERROR
        return status
