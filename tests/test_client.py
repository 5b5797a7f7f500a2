from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

import requests

from nhlstats.errors import InvalidRequestError
from nhlstats.ingestion import urls
from nhlstats.ingestion.client import FetchOutcome, OriginFetcher
from nhlstats.ingestion.ingest import ContentType, ingest_payload
from nhlstats.models import CachedGoal, CachedPeriod, CachedTeam
from nhlstats.status import Status
from nhlstats.store import PersistentStore
from payloads import SCHEDULE, T0, TEAMS, FakeClock, FakeHttp, FakeResponse


class OriginFetcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = PersistentStore(clock=FakeClock())
        self.http = FakeHttp({urls.TEAMS_URL: TEAMS})

    def tearDown(self) -> None:
        self.store.close()

    def test_update_from_url_downloads_and_writes(self) -> None:
        fetcher = OriginFetcher(http=self.http)

        status = fetcher.update_from_url(self.store, urls.TEAMS_URL, ContentType.TEAMS)

        self.assertEqual(Status.DOWNLOAD_OK | Status.WRITE_OK, status)
        row = self.store.get(CachedTeam, 10)
        self.assertEqual("TOR", row.abbreviation)
        self.assertEqual(urls.TEAMS_URL, row.source)

    def test_url_is_attempted_once_per_session(self) -> None:
        fetcher = OriginFetcher(http=self.http)

        fetcher.update_from_url(self.store, urls.TEAMS_URL, ContentType.TEAMS)
        status = fetcher.update_from_url(self.store, urls.TEAMS_URL, ContentType.TEAMS)

        self.assertEqual(Status.DOWNLOAD_SKIPPED, status)
        self.assertEqual([urls.TEAMS_URL], self.http.calls)
        self.assertEqual({urls.TEAMS_URL}, fetcher.visited)

    def test_offline_skips_without_remembering_url(self) -> None:
        fetcher = OriginFetcher(offline=True, http=self.http)

        status = fetcher.update_from_url(self.store, urls.TEAMS_URL, ContentType.TEAMS)

        self.assertEqual(Status.DOWNLOAD_SKIPPED, status)
        self.assertEqual([], self.http.calls)
        self.assertEqual(set(), fetcher.visited)
        self.assertIsNone(self.store.get(CachedTeam, 10))

    def test_missing_url_is_skipped(self) -> None:
        fetcher = OriginFetcher(http=self.http)

        result = fetcher.fetch(None)

        self.assertEqual(FetchOutcome.SKIPPED, result.outcome)
        self.assertEqual(set(), fetcher.visited)

    def test_http_error_is_reported_and_url_still_visited(self) -> None:
        fetcher = OriginFetcher(http=self.http)

        with self.assertLogs("nhlstats.ingestion.client", level="ERROR"):
            status = fetcher.update_from_url(self.store, urls.FRANCHISES_URL, ContentType.FRANCHISES)

        self.assertEqual(Status.DOWNLOAD_ERROR, status)
        self.assertIn(urls.FRANCHISES_URL, fetcher.visited)

    def test_connection_error_is_download_error(self) -> None:
        class _BrokenHttp(FakeHttp):
            def get(self, url, timeout=None):
                raise requests.ConnectionError("connection refused")

        fetcher = OriginFetcher(http=_BrokenHttp())

        with self.assertLogs("nhlstats.ingestion.client", level="ERROR"):
            result = fetcher.fetch(urls.TEAMS_URL)

        self.assertEqual(FetchOutcome.ERROR, result.outcome)
        self.assertIn("connection refused", result.error)

    def test_non_json_body_is_download_error(self) -> None:
        class _TextHttp(FakeHttp):
            def get(self, url, timeout=None):
                return FakeResponse(200, None, text="<html>")

        fetcher = OriginFetcher(http=_TextHttp())

        with self.assertLogs("nhlstats.ingestion.client", level="ERROR"):
            self.assertEqual(FetchOutcome.ERROR, fetcher.fetch(urls.TEAMS_URL).outcome)

    def test_unsupported_content_type_is_invalid_request(self) -> None:
        fetcher = OriginFetcher(http=self.http)

        with self.assertLogs("nhlstats.ingestion.client", level="WARNING"):
            status = fetcher.update_from_url(self.store, urls.TEAMS_URL, ContentType.VENUES)

        self.assertEqual(Status.DOWNLOAD_OK | Status.INVALID_REQUEST, status)

    def test_verbose_logs_fetches_at_info(self) -> None:
        fetcher = OriginFetcher(verbose=True, http=self.http)

        with self.assertLogs("nhlstats.ingestion.client", level="INFO") as logs:
            fetcher.fetch(urls.TEAMS_URL)
            fetcher.fetch(urls.TEAMS_URL)

        self.assertIn(f"Receiving {urls.TEAMS_URL}", logs.output[0])
        self.assertIn(f"Skipping {urls.TEAMS_URL}", logs.output[1])

    def test_file_url_is_read_from_disk(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "teams.json"
            path.write_text(json.dumps(TEAMS), encoding="utf-8")
            fetcher = OriginFetcher(http=self.http)

            status = fetcher.update_from_url(self.store, path.as_uri(), ContentType.TEAMS)

        self.assertTrue(status & Status.DOWNLOAD_OK)
        self.assertEqual([], self.http.calls)
        self.assertEqual(path.as_uri(), self.store.get(CachedTeam, 8).source)


class IngestTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = PersistentStore(clock=FakeClock())

    def tearDown(self) -> None:
        self.store.close()

    def test_unsupported_content_type_raises(self) -> None:
        for content_type in (
            ContentType.BOXSCORE,
            ContentType.LINESCORE,
            ContentType.PLAY_TYPES,
            ContentType.VENUES,
        ):
            with self.assertRaises(InvalidRequestError):
                ingest_payload(self.store, content_type, {}, source=None)

    def test_reingesting_replaces_child_collections(self) -> None:
        ingest_payload(self.store, ContentType.SCHEDULE, SCHEDULE, source="a", fetched_at=T0)
        trimmed = json.loads(json.dumps(SCHEDULE))
        game = trimmed["dates"][0]["games"][0]
        game["scoringPlays"] = game["scoringPlays"][:1]
        game["linescore"]["periods"] = game["linescore"]["periods"][:2]

        result = ingest_payload(self.store, ContentType.SCHEDULE, trimmed, source="b", fetched_at=T0)

        self.assertEqual(1, len(self.store.rows_for(CachedGoal, 2021020301)))
        self.assertEqual(2, len(self.store.rows_for(CachedPeriod, 2021020301)))
        self.assertEqual(5, result.cleared)
        self.assertEqual(Status.WRITE_OK, result.status)

    def test_fetched_at_defaults_to_store_clock(self) -> None:
        ingest_payload(self.store, ContentType.TEAMS, TEAMS, source=None)

        self.assertEqual(0, self.store.age_of(self.store.get(CachedTeam, 10).fetched_at))


if __name__ == "__main__":
    unittest.main()
