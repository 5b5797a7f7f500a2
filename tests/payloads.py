"""Sample stats API payloads and helpers shared by the tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from nhlstats.ingestion.ingest import ContentType, ingest_payload

T0 = datetime(2021, 11, 23, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


TEAMS = {
    "teams": [
        {
            "id": 10,
            "name": "Toronto Maple Leafs",
            "abbreviation": "TOR",
            "teamName": "Maple Leafs",
            "locationName": "Toronto",
            "firstYearOfPlay": "1917",
            "division": {"id": 17},
            "conference": {"id": 6},
            "franchise": {"franchiseId": 5},
            "shortName": "Toronto",
            "officialSiteUrl": "http://www.mapleleafs.com/",
            "active": True,
        },
        {
            "id": 8,
            "name": "Montréal Canadiens",
            "abbreviation": "MTL",
            "teamName": "Canadiens",
            "locationName": "Montréal",
            "firstYearOfPlay": "1909",
            "division": {"id": 17},
            "conference": {"id": 6},
            "franchise": {"franchiseId": 1},
            "shortName": "Montréal",
            "active": True,
        },
    ]
}

FRANCHISES = {
    "franchises": [
        {
            "franchiseId": 1,
            "firstSeasonId": 19171918,
            "mostRecentTeamId": 8,
            "teamName": "Canadiens",
            "locationName": "Montreal",
        },
        {
            "franchiseId": 5,
            "firstSeasonId": 19171918,
            "mostRecentTeamId": 10,
            "teamName": "Maple Leafs",
            "locationName": "Toronto",
        },
    ]
}

DIVISIONS = {
    "divisions": [
        {
            "id": 17,
            "name": "Atlantic",
            "nameShort": "ATL",
            "abbreviation": "A",
            "conference": {"id": 6},
            "active": True,
        }
    ]
}

CONFERENCES = {
    "conferences": [
        {"id": 6, "name": "Eastern", "abbreviation": "E", "shortName": "East", "active": True}
    ]
}

GAME_STATUSES = [
    {"code": "1", "abstractGameState": "Preview", "detailedState": "Scheduled", "startTimeTBD": False},
    {"code": "3", "abstractGameState": "Live", "detailedState": "In Progress", "startTimeTBD": False},
    {"code": "7", "abstractGameState": "Final", "detailedState": "Final", "startTimeTBD": False},
]

GAME_TYPES = [
    {"id": "R", "description": "Regular season", "postseason": False},
    {"id": "P", "description": "Playoffs", "postseason": True},
]

POSITIONS = [
    {"abbrev": "C", "code": "C", "fullName": "Center", "type": "Forward"},
    {"abbrev": "G", "code": "G", "fullName": "Goalie", "type": "Goalie"},
]

ROSTER_STATUSES = [
    {"code": "Y", "description": "Active"},
    {"code": "N", "description": "Not active"},
]

PEOPLE = {
    "people": [
        {
            "id": 8479318,
            "fullName": "Auston Matthews",
            "firstName": "Auston",
            "lastName": "Matthews",
            "primaryNumber": "34",
            "birthDate": "1997-09-17",
            "birthCity": "San Ramon",
            "birthStateProvince": "CA",
            "birthCountry": "USA",
            "nationality": "USA",
            "height": "6' 3\"",
            "weight": 208,
            "active": True,
            "alternateCaptain": True,
            "captain": False,
            "rookie": False,
            "shootsCatches": "L",
            "rosterStatus": "Y",
            "currentTeam": {"id": 10},
            "primaryPosition": {"code": "C"},
        },
        {
            "id": 8478483,
            "fullName": "Mitchell Marner",
            "primaryNumber": "16",
            "active": True,
            "rosterStatus": "Y",
            "currentTeam": {"id": 10},
            "primaryPosition": {"code": "C"},
        },
        {
            "id": 8471679,
            "fullName": "Carey Price",
            "primaryNumber": "31",
            "active": True,
            "rosterStatus": "Y",
            "currentTeam": {"id": 8},
            "primaryPosition": {"code": "G"},
        },
    ]
}


def _game(game_pk, game_date, status_code, away, home, **extra):
    game = {
        "gamePk": game_pk,
        "gameType": "R",
        "season": "20212022",
        "status": {"statusCode": status_code},
        "teams": {
            "away": {
                "team": {"id": away},
                "score": 0,
                "leagueRecord": {"wins": 10, "losses": 5, "ot": 2, "type": "league"},
            },
            "home": {
                "team": {"id": home},
                "score": 0,
                "leagueRecord": {"wins": 8, "losses": 8, "ot": 1, "type": "league"},
            },
        },
    }
    if game_date is not None:
        game["gameDate"] = game_date
    game.update(extra)
    return game


SCORING_PLAYS = [
    {
        "players": [
            {"player": {"id": 8479318}, "playerType": "Scorer", "seasonTotal": 12},
            {"player": {"id": 8478483}, "playerType": "Assist", "seasonTotal": 9},
            {"player": {"id": 8471679}, "playerType": "Goalie"},
        ],
        "result": {
            "secondaryType": "Wrist Shot",
            "strength": {"code": "EVEN", "name": "Even"},
            "gameWinningGoal": False,
            "emptyNet": False,
        },
        "about": {
            "period": 1,
            "periodType": "REGULAR",
            "ordinalNum": "1st",
            "periodTime": "05:12",
            "periodTimeRemaining": "14:48",
            "dateTime": "2021-11-24T00:20:00Z",
            "goals": {"away": 0, "home": 1},
        },
        "team": {"id": 10},
    },
    {
        "players": [
            {"player": {"id": 8479318}, "playerType": "Scorer", "seasonTotal": 13},
        ],
        "result": {
            "secondaryType": "Snap Shot",
            "strength": {"code": "PPG", "name": "Power Play"},
            "gameWinningGoal": True,
            "emptyNet": True,
        },
        "about": {
            "period": 3,
            "periodType": "REGULAR",
            "ordinalNum": "3rd",
            "periodTime": "19:01",
            "periodTimeRemaining": "00:59",
            "goals": {"away": 0, "home": 2},
        },
        "team": {"id": 10},
    },
]

LINESCORE = {
    "currentPeriod": 3,
    "currentPeriodOrdinal": "3rd",
    "currentPeriodTimeRemaining": "Final",
    "periods": [
        {
            "periodType": "REGULAR",
            "startTime": "2021-11-24T00:08:00Z",
            "endTime": "2021-11-24T00:45:00Z",
            "num": 1,
            "ordinalNum": "1st",
            "home": {"goals": 1, "shotsOnGoal": 12, "rinkSide": "left"},
            "away": {"goals": 0, "shotsOnGoal": 8, "rinkSide": "right"},
        },
        {
            "periodType": "REGULAR",
            "num": 2,
            "ordinalNum": "2nd",
            "home": {"goals": 0, "shotsOnGoal": 10},
            "away": {"goals": 0, "shotsOnGoal": 9},
        },
        {
            "periodType": "REGULAR",
            "num": 3,
            "ordinalNum": "3rd",
            "home": {"goals": 1, "shotsOnGoal": 7},
            "away": {"goals": 0, "shotsOnGoal": 11},
        },
    ],
    "shootoutInfo": {"away": {"scores": 0, "attempts": 0}, "home": {"scores": 0, "attempts": 0}},
    "teams": {
        "home": {"shotsOnGoal": 29, "goaliePulled": False, "numSkaters": 5, "powerPlay": False},
        "away": {"shotsOnGoal": 28, "goaliePulled": True, "numSkaters": 6, "powerPlay": False},
    },
    "powerPlayStrength": "Even",
    "hasShootout": False,
    "intermissionInfo": {"intermissionTimeRemaining": 0, "intermissionTimeElapsed": 0, "inIntermission": False},
    "powerPlayInfo": {"situationTimeRemaining": 0, "situationTimeElapsed": 0, "inSituation": False},
}

# Start times: 301 -> T2, 302 -> T1, 303 -> T3, 304 -> none.
SCHEDULE_DATE = "2021-11-23"
SCHEDULE = {
    "totalGames": 4,
    "dates": [
        {
            "date": SCHEDULE_DATE,
            "totalGames": 4,
            "games": [
                _game(
                    2021020301, "2021-11-24T00:00:00Z", "7", 8, 10,
                    scoringPlays=SCORING_PLAYS, linescore=LINESCORE,
                ),
                _game(2021020302, "2021-11-23T23:00:00Z", "1", 10, 8),
                _game(2021020303, "2021-11-24T01:00:00Z", "1", 8, 10),
                _game(2021020304, None, "1", 10, 8),
            ],
        }
    ],
}

ALL_REFERENCE_DATA = (
    (ContentType.TEAMS, TEAMS),
    (ContentType.FRANCHISES, FRANCHISES),
    (ContentType.DIVISIONS, DIVISIONS),
    (ContentType.CONFERENCES, CONFERENCES),
    (ContentType.GAME_STATUSES, GAME_STATUSES),
    (ContentType.GAME_TYPES, GAME_TYPES),
    (ContentType.POSITIONS, POSITIONS),
    (ContentType.ROSTER_STATUSES, ROSTER_STATUSES),
    (ContentType.PEOPLE, PEOPLE),
)


def seed(store, content_type, payload, fetched_at, source="test://seed"):
    return ingest_payload(store, content_type, payload, source=source, fetched_at=fetched_at)


def seed_all(store, fetched_at, schedule=True):
    for content_type, payload in ALL_REFERENCE_DATA:
        seed(store, content_type, payload, fetched_at)
    if schedule:
        seed(store, ContentType.SCHEDULE, SCHEDULE, fetched_at)


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeHttp:
    """Stands in for requests.Session; unknown URLs answer 404."""

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.headers: dict[str, str] = {}
        self.calls: list[str] = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        payload = self.responses.get(url)
        if payload is None:
            return FakeResponse(404, None, text="not found")
        return FakeResponse(200, payload)

    def close(self) -> None:
        pass
