"""HTTP client for the stats API, plus the update-from-URL step."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import requests

from nhlstats.errors import InvalidRequestError
from nhlstats.ingestion.ingest import ContentType, ingest_payload
from nhlstats.status import Status
from nhlstats.store import PersistentStore

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_USER_AGENT = "nhlstats/1.0"


class FetchOutcome(str, Enum):
    SKIPPED = "skipped"
    DOWNLOADED = "downloaded"
    ERROR = "error"


@dataclass
class FetchResult:
    outcome: FetchOutcome
    payload: Any = None
    error: str | None = None


class OriginFetcher:
    """Downloads each URL at most once per session.

    `offline` turns every fetch into a skip. A skipped URL is not remembered,
    so it can still be fetched later by a session that is online.
    """

    def __init__(
        self,
        offline: bool = False,
        verbose: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.offline = offline
        self.verbose = verbose
        self.timeout = timeout
        self._http = http or requests.Session()
        self._http.headers.update(
            {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
        )
        self.visited: set[str] = set()

    def _log(self, message: str, *args: Any) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message, *args)

    def close(self) -> None:
        self._http.close()

    def fetch(self, url: str | None) -> FetchResult:
        if self.offline or url is None or url in self.visited:
            self._log("Skipping %s", url)
            return FetchResult(FetchOutcome.SKIPPED)

        self.visited.add(url)
        self._log("Receiving %s", url)
        try:
            payload = self._read(url)
        except (requests.RequestException, OSError, ValueError) as exc:
            logger.error("Fetch failed url=%s error=%s", url, exc)
            return FetchResult(FetchOutcome.ERROR, error=str(exc))
        return FetchResult(FetchOutcome.DOWNLOADED, payload=payload)

    def _read(self, url: str) -> Any:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            text = Path(unquote(parsed.path)).read_text(encoding="utf-8")
            return json.loads(text)

        response = self._http.get(url, timeout=self.timeout)
        if response.status_code != 200:
            raise requests.HTTPError(
                f"status={response.status_code} body={response.text[:300]}",
                response=response,
            )
        return response.json()

    def update_from_url(
        self,
        store: PersistentStore,
        url: str | None,
        content_type: ContentType,
    ) -> Status:
        """Fetch `url` and ingest it as `content_type`; returns the diagnostic flags."""
        result = self.fetch(url)
        if result.outcome is FetchOutcome.SKIPPED:
            return Status.DOWNLOAD_SKIPPED
        if result.outcome is FetchOutcome.ERROR:
            return Status.DOWNLOAD_ERROR

        try:
            ingested = ingest_payload(store, content_type, result.payload, source=url)
        except InvalidRequestError:
            logger.warning("Not ingesting %s as %s", url, content_type.value)
            return Status.DOWNLOAD_OK | Status.INVALID_REQUEST
        return Status.DOWNLOAD_OK | ingested.status
