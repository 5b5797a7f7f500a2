"""Internal data contract between the payload parser and the record writer.

Field names match the columns of the corresponding cache tables so a DTO can
be written with `model_dump()`.
"""

from typing import Optional

from pydantic import BaseModel


class ScheduleDTO(BaseModel):
    date: str
    total_games: int = 0


class GameDTO(BaseModel):
    game_pk: int
    date: Optional[str] = None
    game_type: Optional[str] = None
    season: Optional[str] = None
    game_date: Optional[str] = None
    status_code: Optional[str] = None

    away_team: Optional[int] = None
    away_score: Optional[int] = None
    away_wins: Optional[int] = None
    away_losses: Optional[int] = None
    away_ot: Optional[int] = None
    away_record_type: Optional[str] = None

    home_team: Optional[int] = None
    home_score: Optional[int] = None
    home_wins: Optional[int] = None
    home_losses: Optional[int] = None
    home_ot: Optional[int] = None
    home_record_type: Optional[str] = None


class GoalDTO(BaseModel):
    game: int
    goal_number: int

    scorer: Optional[int] = None
    scorer_season_total: Optional[int] = None
    assist1: Optional[int] = None
    assist1_season_total: Optional[int] = None
    assist2: Optional[int] = None
    assist2_season_total: Optional[int] = None
    goalie: Optional[int] = None

    secondary_type: Optional[str] = None
    strength_code: Optional[str] = None
    strength_name: Optional[str] = None
    game_winning_goal: bool = False
    empty_net: bool = False

    period: Optional[int] = None
    period_type: Optional[str] = None
    ordinal_num: Optional[str] = None
    period_time: Optional[str] = None
    period_time_remaining: Optional[str] = None
    date_time: Optional[str] = None

    goals_away: Optional[int] = None
    goals_home: Optional[int] = None
    team: Optional[int] = None


class PeriodDTO(BaseModel):
    game: int
    period_index: int

    period_type: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    num: Optional[int] = None
    ordinal_num: Optional[str] = None

    away_goals: Optional[int] = None
    away_shots_on_goal: Optional[int] = None
    away_rink_side: Optional[str] = None

    home_goals: Optional[int] = None
    home_shots_on_goal: Optional[int] = None
    home_rink_side: Optional[str] = None


class LinescoreDTO(BaseModel):
    game: int

    current_period: Optional[int] = None
    current_period_ordinal: Optional[str] = None
    current_period_time_remaining: Optional[str] = None

    away_shootout_scores: Optional[int] = None
    away_shootout_attempts: Optional[int] = None
    home_shootout_scores: Optional[int] = None
    home_shootout_attempts: Optional[int] = None
    shootout_start_time: Optional[str] = None

    away_shots_on_goal: Optional[int] = None
    away_goalie_pulled: bool = False
    away_num_skaters: Optional[int] = None
    away_power_play: bool = False

    home_shots_on_goal: Optional[int] = None
    home_goalie_pulled: bool = False
    home_num_skaters: Optional[int] = None
    home_power_play: bool = False

    power_play_strength: Optional[str] = None
    has_shootout: bool = False

    intermission_time_remaining: Optional[int] = None
    intermission_time_elapsed: Optional[int] = None
    intermission: bool = False

    power_play_situation_remaining: Optional[int] = None
    power_play_situation_elapsed: Optional[int] = None
    power_play_in_situation: bool = False


class PlayerDTO(BaseModel):
    id: int
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    primary_number: Optional[str] = None
    birth_date: Optional[str] = None
    birth_city: Optional[str] = None
    birth_state_province: Optional[str] = None
    birth_country: Optional[str] = None
    nationality: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[int] = None
    active: bool = False
    alternate_captain: bool = False
    captain: bool = False
    rookie: bool = False
    shoots_catches: Optional[str] = None
    roster_status: Optional[str] = None
    current_team: Optional[int] = None
    primary_position: Optional[str] = None


class TeamDTO(BaseModel):
    id: int
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    team_name: Optional[str] = None
    location_name: Optional[str] = None
    first_year_of_play: Optional[str] = None
    division: Optional[int] = None
    conference: Optional[int] = None
    franchise: Optional[int] = None
    short_name: Optional[str] = None
    official_site_url: Optional[str] = None
    active: bool = False


class FranchiseDTO(BaseModel):
    franchise_id: int
    first_season_id: Optional[int] = None
    last_season_id: Optional[int] = None
    most_recent_team_id: Optional[int] = None
    team_name: Optional[str] = None
    location_name: Optional[str] = None


class DivisionDTO(BaseModel):
    id: int
    name: Optional[str] = None
    name_short: Optional[str] = None
    abbreviation: Optional[str] = None
    conference: Optional[int] = None
    active: bool = True


class ConferenceDTO(BaseModel):
    id: int
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    short_name: Optional[str] = None
    active: bool = True


class GameStatusDTO(BaseModel):
    code: str
    abstract_game_state: Optional[str] = None
    detailed_state: Optional[str] = None
    start_time_tbd: bool = False


class GameTypeDTO(BaseModel):
    id: str
    description: Optional[str] = None
    postseason: bool = False


class PositionDTO(BaseModel):
    code: str
    abbrev: Optional[str] = None
    full_name: Optional[str] = None
    type: Optional[str] = None


class RosterStatusDTO(BaseModel):
    code: str
    description: Optional[str] = None


class ScheduleBundle(BaseModel):
    """Everything one schedule payload yields, in write order."""

    schedules: list[ScheduleDTO] = []
    games: list[GameDTO] = []
    # Game ids whose scoring plays were present and must replace stored goals.
    goal_games: list[int] = []
    goals: list[GoalDTO] = []
    linescores: list[LinescoreDTO] = []
    # Game ids with a linescore; their periods replace stored ones.
    period_games: list[int] = []
    periods: list[PeriodDTO] = []
