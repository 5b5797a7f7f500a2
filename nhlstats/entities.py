"""Rich, materialized entities handed out by a Session.

Identity-cached entities compare by identity. Relation attributes start as
None and are filled in by the materializer according to the requested
detail; the plain `*_id`/`*_code` attributes always hold the keys of the
related objects so a relation can be resolved later without another store
read.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta
from typing import ClassVar, Optional, Union

from nhlstats.utils import Height, pounds_to_kg


class Entity:
    """Shared bookkeeping for materialized objects."""

    RELATIONS: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        # Relation attributes pointing at objects this one holds no reference to.
        self._borrowed: set[str] = set()

    @property
    def key(self) -> Union[int, str]:
        raise NotImplementedError

    def owns(self, relation: str) -> bool:
        return getattr(self, relation) is not None and relation not in self._borrowed

    def borrow(self, relation: str, value: Optional["Entity"]) -> None:
        setattr(self, relation, value)
        self._borrowed.add(relation)

    def adopt(self, relation: str, value: Optional["Entity"]) -> None:
        setattr(self, relation, value)
        self._borrowed.discard(relation)

    def copy_scalars_from(self, other: "Entity") -> None:
        for f in fields(self):
            if f.name not in self.RELATIONS:
                setattr(self, f.name, getattr(other, f.name))


@dataclass(eq=False)
class Conference(Entity):
    unique_id: int
    name: Optional[str] = None
    name_short: Optional[str] = None
    abbreviation: Optional[str] = None
    active: bool = True

    @property
    def key(self) -> int:
        return self.unique_id


@dataclass(eq=False)
class Division(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("conference",)

    unique_id: int
    name: Optional[str] = None
    name_short: Optional[str] = None
    abbreviation: Optional[str] = None
    active: bool = True
    conference_id: Optional[int] = None
    conference: Optional[Conference] = None

    @property
    def key(self) -> int:
        return self.unique_id


@dataclass(eq=False)
class Franchise(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("most_recent_team",)

    unique_id: int
    first_season: Optional[int] = None
    last_season: Optional[int] = None
    team_name: Optional[str] = None
    location_name: Optional[str] = None
    most_recent_team_id: Optional[int] = None
    most_recent_team: Optional["Team"] = None

    @property
    def key(self) -> int:
        return self.unique_id


@dataclass(eq=False)
class Team(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("franchise", "division", "conference")

    unique_id: int
    name: Optional[str] = None
    location_name: Optional[str] = None
    team_name: Optional[str] = None
    short_name: Optional[str] = None
    abbreviation: Optional[str] = None
    official_site_url: Optional[str] = None
    first_year_of_play: Optional[int] = None
    active: bool = False
    franchise_id: Optional[int] = None
    division_id: Optional[int] = None
    conference_id: Optional[int] = None
    franchise: Optional[Franchise] = None
    division: Optional[Division] = None
    conference: Optional[Conference] = None

    @property
    def key(self) -> int:
        return self.unique_id


@dataclass(eq=False)
class PlayerPosition(Entity):
    code: str
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    type: Optional[str] = None

    @property
    def key(self) -> str:
        return self.code


@dataclass(eq=False)
class RosterStatus(Entity):
    code: str
    description: Optional[str] = None

    @property
    def key(self) -> str:
        return self.code


@dataclass(eq=False)
class Player(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("current_team", "roster_status", "primary_position")

    unique_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    birth_date: Optional[date] = None
    birth_city: Optional[str] = None
    birth_state_province: Optional[str] = None
    birth_country: Optional[str] = None
    nationality: Optional[str] = None
    height: Optional[Height] = None
    weight_pounds: Optional[int] = None
    shoots_catches: Optional[str] = None
    active: bool = False
    primary_number: Optional[int] = None
    captain: bool = False
    alternate_captain: bool = False
    rookie: bool = False
    current_team_id: Optional[int] = None
    roster_status_code: Optional[str] = None
    primary_position_code: Optional[str] = None
    current_team: Optional[Team] = None
    roster_status: Optional[RosterStatus] = None
    primary_position: Optional[PlayerPosition] = None

    @property
    def key(self) -> int:
        return self.unique_id

    @property
    def weight_kg(self) -> Optional[float]:
        if self.weight_pounds is None:
            return None
        return pounds_to_kg(self.weight_pounds)


@dataclass(eq=False)
class GameStatus(Entity):
    code: str
    abstract_state: Optional[str] = None
    detailed_state: Optional[str] = None
    start_time_tbd: bool = False

    @property
    def key(self) -> str:
        return self.code


@dataclass(eq=False)
class GameType(Entity):
    code: str
    description: Optional[str] = None
    postseason: bool = False

    @property
    def key(self) -> str:
        return self.code


@dataclass
class SeasonRecord:
    wins: int = 0
    losses: int = 0
    overtime_losses: int = 0
    record_type: Optional[str] = None

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.overtime_losses


@dataclass
class GoalTime:
    period: Optional[int] = None
    period_type: Optional[str] = None
    period_ordinal: Optional[str] = None
    time: Optional[timedelta] = None
    time_remaining: Optional[timedelta] = None


@dataclass
class GoalStrength:
    code: Optional[str] = None
    name: Optional[str] = None


@dataclass(eq=False)
class Goal(Entity):
    """A scoring play. Owned by its game; the people and team it names are shared."""

    RELATIONS: ClassVar[tuple[str, ...]] = ("scoring_team", "scorer", "assist1", "assist2", "goalie")

    index: int
    time: GoalTime = field(default_factory=GoalTime)
    away_score: Optional[int] = None
    home_score: Optional[int] = None
    scorer_season_total: Optional[int] = None
    assist1_season_total: Optional[int] = None
    assist2_season_total: Optional[int] = None
    type: Optional[str] = None
    strength: GoalStrength = field(default_factory=GoalStrength)
    game_winning_goal: bool = False
    empty_net: bool = False
    team_id: Optional[int] = None
    scorer_id: Optional[int] = None
    assist1_id: Optional[int] = None
    assist2_id: Optional[int] = None
    goalie_id: Optional[int] = None
    scoring_team: Optional[Team] = None
    scorer: Optional[Player] = None
    assist1: Optional[Player] = None
    assist2: Optional[Player] = None
    goalie: Optional[Player] = None


@dataclass
class Period:
    index: int
    num: Optional[int] = None
    away_goals: Optional[int] = None
    away_shots: Optional[int] = None
    home_goals: Optional[int] = None
    home_shots: Optional[int] = None
    ordinal_num: Optional[str] = None
    period_type: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


@dataclass
class Shootout:
    away_score: Optional[int] = None
    away_attempts: Optional[int] = None
    home_score: Optional[int] = None
    home_attempts: Optional[int] = None
    start_time: Optional[datetime] = None


@dataclass
class GameDetails:
    current_period_number: Optional[int] = None
    current_period_name: Optional[str] = None
    current_period_remaining: Optional[timedelta] = None
    away_shots: Optional[int] = None
    away_power_play: bool = False
    away_goalie_pulled: bool = False
    away_num_skaters: Optional[int] = None
    home_shots: Optional[int] = None
    home_power_play: bool = False
    home_goalie_pulled: bool = False
    home_num_skaters: Optional[int] = None
    powerplay: bool = False
    power_play_strength: Optional[str] = None
    powerplay_time_secs: Optional[int] = None
    powerplay_time_remaining_secs: Optional[int] = None
    intermission: bool = False
    intermission_time_secs: Optional[int] = None
    intermission_time_remaining_secs: Optional[int] = None
    periods: Optional[list[Period]] = None
    shootout: Optional[Shootout] = None


@dataclass(eq=False)
class Game(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("away", "home", "status", "type", "goals", "details")

    unique_id: int
    season: Optional[str] = None
    date: Optional[date] = None
    start_time: Optional[datetime] = None
    away_score: Optional[int] = None
    home_score: Optional[int] = None
    away_record: SeasonRecord = field(default_factory=SeasonRecord)
    home_record: SeasonRecord = field(default_factory=SeasonRecord)
    away_team_id: Optional[int] = None
    home_team_id: Optional[int] = None
    status_code: Optional[str] = None
    type_code: Optional[str] = None
    away: Optional[Team] = None
    home: Optional[Team] = None
    status: Optional[GameStatus] = None
    type: Optional[GameType] = None
    goals: Optional[list[Goal]] = None
    details: Optional[GameDetails] = None

    @property
    def key(self) -> int:
        return self.unique_id


@dataclass(eq=False)
class Schedule(Entity):
    RELATIONS: ClassVar[tuple[str, ...]] = ("games",)

    date: date
    total_games: int = 0
    games: Optional[list[Game]] = None

    @property
    def key(self) -> str:
        return self.date.isoformat()
