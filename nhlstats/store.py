"""Durable record storage on top of SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from nhlstats.db import Base, make_engine, make_session_factory
from nhlstats.errors import StoreError
from nhlstats.models import CachedGoal, CachedPeriod

logger = logging.getLogger(__name__)

# Child collections are read back in origin order.
_CHILD_ORDER = {
    CachedGoal: CachedGoal.goal_number,
    CachedPeriod: CachedPeriod.period_index,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class PersistentStore:
    """Keyed records with provenance, one table per record type.

    All work goes through a single SQLAlchemy session, so everything written
    between `begin()` and `commit()` lands atomically.
    """

    def __init__(
        self,
        cache_file: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = make_engine(cache_file)
        self._db = make_session_factory(self._engine)()
        self._clock = clock
        self.ensure_schema()

    def ensure_schema(self, models: Optional[Iterable[type]] = None) -> None:
        tables = None
        if models is not None:
            tables = [model.__table__ for model in models]
        try:
            Base.metadata.create_all(bind=self._engine, tables=tables)
        except SQLAlchemyError as exc:
            raise StoreError("Failed creating cache tables") from exc

    def begin(self) -> None:
        if not self._db.in_transaction():
            self._db.begin()

    def commit(self) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError("Failed committing cache transaction") from exc

    def close(self) -> None:
        self._db.close()
        self._engine.dispose()

    def current_timestamp(self) -> datetime:
        return _as_naive_utc(self._clock())

    def age_of(self, timestamp: Optional[datetime]) -> Optional[int]:
        """Age in whole seconds, or None when it cannot be determined."""
        if timestamp is None:
            return None
        age = int((self.current_timestamp() - _as_naive_utc(timestamp)).total_seconds())
        if age < 0:
            return None
        return age

    def upsert(
        self,
        model: type,
        values: dict[str, Any],
        source: Optional[str],
        fetched_at: datetime,
    ) -> Any:
        row = model(**values, source=source, fetched_at=_as_naive_utc(fetched_at), invalid=False)
        try:
            # A failed row only undoes its own savepoint, never the batch.
            with self._db.begin_nested():
                merged = self._db.merge(row)
                self._db.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed writing {model.__tablename__} row") from exc
        return merged

    def get(self, model: type, key: Any) -> Optional[Any]:
        try:
            return self._db.get(model, key)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed reading {model.__tablename__} {key!r}") from exc

    def find(self, model: type, column: str, value: Any) -> list[Any]:
        """Primary keys of rows whose `column` equals `value`."""
        pk = inspect(model).primary_key[0]
        try:
            rows = (
                self._db.query(pk)
                .filter(getattr(model, column) == value)
                .order_by(pk)
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed searching {model.__tablename__}") from exc
        return [row[0] for row in rows]

    def rows_for(self, model: type, parent_key: int) -> list[Any]:
        try:
            return (
                self._db.query(model)
                .filter(model.game == parent_key)
                .order_by(_CHILD_ORDER[model])
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed reading {model.__tablename__} for {parent_key}") from exc

    def delete_by_foreign_key(self, model: type, parent_key: int) -> int:
        try:
            with self._db.begin_nested():
                deleted = (
                    self._db.query(model)
                    .filter(model.game == parent_key)
                    .delete(synchronize_session="fetch")
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed clearing {model.__tablename__} for {parent_key}") from exc
        logger.debug("Cleared %s %s rows for game=%s", deleted, model.__tablename__, parent_key)
        return deleted
