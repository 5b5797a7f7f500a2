"""Stats API endpoints."""

from __future__ import annotations

import os
from datetime import date

from nhlstats.utils import format_date

NHL_API_BASE_URL = os.getenv("NHL_API_BASE_URL", "https://statsapi.web.nhl.com/api/v1").rstrip("/")

SCHEDULE_PATH = "/schedule?expand=schedule.linescore&expand=schedule.scoringplays&date="

PEOPLE_URL = f"{NHL_API_BASE_URL}/people"
TEAMS_URL = f"{NHL_API_BASE_URL}/teams"
FRANCHISES_URL = f"{NHL_API_BASE_URL}/franchises"
DIVISIONS_URL = f"{NHL_API_BASE_URL}/divisions"
CONFERENCES_URL = f"{NHL_API_BASE_URL}/conferences"
GAME_STATUS_URL = f"{NHL_API_BASE_URL}/gameStatus"
GAME_TYPES_URL = f"{NHL_API_BASE_URL}/gameTypes"
POSITIONS_URL = f"{NHL_API_BASE_URL}/positions"
ROSTER_STATUSES_URL = f"{NHL_API_BASE_URL}/rosterStatuses"


def schedule_url(day: date) -> str:
    return f"{NHL_API_BASE_URL}{SCHEDULE_PATH}{format_date(day)}"


def person_url(player_id: int) -> str:
    return f"{PEOPLE_URL}/{player_id}"


def item_url(list_url: str, item_id: int) -> str:
    """Single-item variant of a list endpoint, e.g. /teams/10."""
    return f"{list_url}/{item_id}"
