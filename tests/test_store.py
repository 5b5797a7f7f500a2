from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from nhlstats.errors import StoreError
from nhlstats.models import CachedGame, CachedGoal, CachedSchedule, CachedTeam
from nhlstats.store import PersistentStore
from payloads import T0, FakeClock


def _game(game_pk: int, date: str) -> dict:
    return {"game_pk": game_pk, "date": date, "status_code": "1"}


class PersistentStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = PersistentStore(clock=self.clock)

    def tearDown(self) -> None:
        self.store.close()

    def test_upsert_then_get_keeps_provenance(self) -> None:
        self.store.upsert(CachedTeam, {"id": 10, "name": "Toronto"}, "http://x/teams", T0)

        row = self.store.get(CachedTeam, 10)

        self.assertEqual("Toronto", row.name)
        self.assertEqual("http://x/teams", row.source)
        self.assertFalse(row.invalid)
        self.assertEqual(0, self.store.age_of(row.fetched_at))

    def test_upsert_replaces_existing_key(self) -> None:
        self.store.upsert(CachedTeam, {"id": 10, "name": "Old"}, "a", T0)
        self.store.upsert(CachedTeam, {"id": 10, "name": "New"}, "b", T0 + timedelta(seconds=5))

        row = self.store.get(CachedTeam, 10)

        self.assertEqual("New", row.name)
        self.assertEqual("b", row.source)
        self.assertEqual([10], self.store.find(CachedTeam, "name", "New"))

    def test_get_missing_returns_none(self) -> None:
        self.assertIsNone(self.store.get(CachedTeam, 99))

    def test_find_lists_keys_for_indexed_column(self) -> None:
        self.store.upsert(CachedGame, _game(3, "2021-11-23"), None, T0)
        self.store.upsert(CachedGame, _game(1, "2021-11-23"), None, T0)
        self.store.upsert(CachedGame, _game(2, "2021-11-24"), None, T0)

        self.assertEqual([1, 3], self.store.find(CachedGame, "date", "2021-11-23"))
        self.assertEqual([], self.store.find(CachedGame, "date", "2021-01-01"))

    def test_child_rows_come_back_in_index_order_and_can_be_cleared(self) -> None:
        for number in (2, 0, 1):
            self.store.upsert(CachedGoal, {"game": 7, "goal_number": number}, None, T0)
        self.store.upsert(CachedGoal, {"game": 8, "goal_number": 0}, None, T0)

        rows = self.store.rows_for(CachedGoal, 7)
        self.assertEqual([0, 1, 2], [row.goal_number for row in rows])

        self.assertEqual(3, self.store.delete_by_foreign_key(CachedGoal, 7))
        self.assertEqual([], self.store.rows_for(CachedGoal, 7))
        self.assertEqual(1, len(self.store.rows_for(CachedGoal, 8)))

    def test_age_of_follows_clock(self) -> None:
        self.clock.advance(90)

        self.assertEqual(90, self.store.age_of(T0))
        self.assertEqual(90, self.store.age_of(T0.replace(tzinfo=None)))

    def test_age_of_is_none_when_not_computable(self) -> None:
        self.assertIsNone(self.store.age_of(None))
        self.assertIsNone(self.store.age_of(T0 + timedelta(minutes=1)))

    def test_current_timestamp_is_naive_utc(self) -> None:
        self.clock.now = datetime(2021, 11, 23, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        self.assertEqual(datetime(2021, 11, 23, 12, 0), self.store.current_timestamp())

    def test_ensure_schema_is_idempotent(self) -> None:
        self.store.ensure_schema()
        self.store.ensure_schema([CachedTeam])

        self.assertIsNone(self.store.get(CachedTeam, 1))

    def test_commit_makes_writes_visible_after_begin(self) -> None:
        self.store.begin()
        self.store.upsert(CachedTeam, {"id": 1, "name": "A"}, None, T0)
        self.store.commit()

        self.assertEqual("A", self.store.get(CachedTeam, 1).name)

    def test_failed_write_keeps_earlier_writes_in_the_batch(self) -> None:
        self.store.begin()
        self.store.upsert(CachedSchedule, {"date": "2021-11-23", "total_games": 4}, None, T0)
        with self.assertRaises(StoreError):
            self.store.upsert(CachedSchedule, {"date": None, "total_games": 1}, None, T0)
        self.store.upsert(CachedSchedule, {"date": "2021-11-25", "total_games": 2}, None, T0)
        self.store.commit()

        self.assertEqual(4, self.store.get(CachedSchedule, "2021-11-23").total_games)
        self.assertEqual(2, self.store.get(CachedSchedule, "2021-11-25").total_games)

    def test_uncommitted_batch_is_undone_as_a_whole(self) -> None:
        self.store.begin()
        self.store.upsert(CachedTeam, {"id": 1, "name": "A"}, None, T0)
        self.store.upsert(CachedGoal, {"game": 7, "goal_number": 0}, None, T0)
        self.store.delete_by_foreign_key(CachedGoal, 7)

        self.store._db.rollback()

        self.assertIsNone(self.store.get(CachedTeam, 1))

    def test_read_failure_is_wrapped(self) -> None:
        with patch.object(
            self.store._db, "get", side_effect=OperationalError("SELECT", {}, Exception("locked"))
        ):
            with self.assertRaises(StoreError):
                self.store.get(CachedTeam, 1)


if __name__ == "__main__":
    unittest.main()
