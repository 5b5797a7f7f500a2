from sqlalchemy import Boolean, Column, DateTime, Integer, String
from .db import Base

# Foreign keys are deliberately plain columns: related rows arrive lazily,
# from different origin URLs, whenever they are first needed.


class ProvenanceMixin:
    source = Column(String, nullable=True)          # origin URL
    fetched_at = Column(DateTime, nullable=False)   # ingestion time (UTC)
    invalid = Column(Boolean, nullable=False, default=False)


class CachedSchedule(ProvenanceMixin, Base):
    __tablename__ = "schedules"

    date = Column(String, primary_key=True)         # YYYY-MM-DD, North American date
    total_games = Column(Integer, nullable=False, default=0)


class CachedGame(ProvenanceMixin, Base):
    __tablename__ = "games"

    game_pk = Column(Integer, primary_key=True)
    date = Column(String, nullable=True, index=True)
    game_type = Column(String, nullable=True)
    season = Column(String, nullable=True)
    game_date = Column(String, nullable=True)       # ISO start time
    status_code = Column(String, nullable=True)

    away_team = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    away_wins = Column(Integer, nullable=True)
    away_losses = Column(Integer, nullable=True)
    away_ot = Column(Integer, nullable=True)
    away_record_type = Column(String, nullable=True)

    home_team = Column(Integer, nullable=True)
    home_score = Column(Integer, nullable=True)
    home_wins = Column(Integer, nullable=True)
    home_losses = Column(Integer, nullable=True)
    home_ot = Column(Integer, nullable=True)
    home_record_type = Column(String, nullable=True)


class CachedGameType(ProvenanceMixin, Base):
    __tablename__ = "game_types"

    id = Column(String, primary_key=True)
    description = Column(String, nullable=True)
    postseason = Column(Boolean, nullable=False, default=False)


class CachedGameStatus(ProvenanceMixin, Base):
    __tablename__ = "game_statuses"

    code = Column(String, primary_key=True)
    abstract_game_state = Column(String, nullable=True)
    detailed_state = Column(String, nullable=True)
    start_time_tbd = Column(Boolean, nullable=False, default=False)


class CachedLinescore(ProvenanceMixin, Base):
    __tablename__ = "linescores"

    game = Column(Integer, primary_key=True)

    current_period = Column(Integer, nullable=True)
    current_period_ordinal = Column(String, nullable=True)
    current_period_time_remaining = Column(String, nullable=True)

    away_shootout_scores = Column(Integer, nullable=True)
    away_shootout_attempts = Column(Integer, nullable=True)
    home_shootout_scores = Column(Integer, nullable=True)
    home_shootout_attempts = Column(Integer, nullable=True)
    shootout_start_time = Column(String, nullable=True)

    away_shots_on_goal = Column(Integer, nullable=True)
    away_goalie_pulled = Column(Boolean, nullable=False, default=False)
    away_num_skaters = Column(Integer, nullable=True)
    away_power_play = Column(Boolean, nullable=False, default=False)

    home_shots_on_goal = Column(Integer, nullable=True)
    home_goalie_pulled = Column(Boolean, nullable=False, default=False)
    home_num_skaters = Column(Integer, nullable=True)
    home_power_play = Column(Boolean, nullable=False, default=False)

    power_play_strength = Column(String, nullable=True)
    has_shootout = Column(Boolean, nullable=False, default=False)

    intermission_time_remaining = Column(Integer, nullable=True)
    intermission_time_elapsed = Column(Integer, nullable=True)
    intermission = Column(Boolean, nullable=False, default=False)

    power_play_situation_remaining = Column(Integer, nullable=True)   # seconds
    power_play_situation_elapsed = Column(Integer, nullable=True)     # seconds
    power_play_in_situation = Column(Boolean, nullable=False, default=False)


class CachedPeriod(ProvenanceMixin, Base):
    __tablename__ = "periods"

    game = Column(Integer, primary_key=True)
    period_index = Column(Integer, primary_key=True)   # origin order, from zero

    period_type = Column(String, nullable=True)
    start_time = Column(String, nullable=True)
    end_time = Column(String, nullable=True)
    num = Column(Integer, nullable=True)
    ordinal_num = Column(String, nullable=True)

    away_goals = Column(Integer, nullable=True)
    away_shots_on_goal = Column(Integer, nullable=True)
    away_rink_side = Column(String, nullable=True)

    home_goals = Column(Integer, nullable=True)
    home_shots_on_goal = Column(Integer, nullable=True)
    home_rink_side = Column(String, nullable=True)


class CachedGoal(ProvenanceMixin, Base):
    __tablename__ = "goals"

    game = Column(Integer, primary_key=True)
    goal_number = Column(Integer, primary_key=True)    # origin order, from zero

    scorer = Column(Integer, nullable=True)
    scorer_season_total = Column(Integer, nullable=True)
    assist1 = Column(Integer, nullable=True)
    assist1_season_total = Column(Integer, nullable=True)
    assist2 = Column(Integer, nullable=True)
    assist2_season_total = Column(Integer, nullable=True)
    goalie = Column(Integer, nullable=True)

    secondary_type = Column(String, nullable=True)
    strength_code = Column(String, nullable=True)
    strength_name = Column(String, nullable=True)
    game_winning_goal = Column(Boolean, nullable=False, default=False)
    empty_net = Column(Boolean, nullable=False, default=False)

    period = Column(Integer, nullable=True)
    period_type = Column(String, nullable=True)
    ordinal_num = Column(String, nullable=True)
    period_time = Column(String, nullable=True)
    period_time_remaining = Column(String, nullable=True)
    date_time = Column(String, nullable=True)

    goals_away = Column(Integer, nullable=True)
    goals_home = Column(Integer, nullable=True)
    team = Column(Integer, nullable=True)              # scoring team


class CachedConference(ProvenanceMixin, Base):
    __tablename__ = "conferences"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    abbreviation = Column(String, nullable=True)
    short_name = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class CachedDivision(ProvenanceMixin, Base):
    __tablename__ = "divisions"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    name_short = Column(String, nullable=True)
    abbreviation = Column(String, nullable=True)
    conference = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class CachedPlayer(ProvenanceMixin, Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True)
    full_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    primary_number = Column(String, nullable=True)
    birth_date = Column(String, nullable=True)
    birth_city = Column(String, nullable=True)
    birth_state_province = Column(String, nullable=True)
    birth_country = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    height = Column(String, nullable=True)             # e.g. 6' 2"
    weight = Column(Integer, nullable=True)            # pounds
    active = Column(Boolean, nullable=False, default=False)
    alternate_captain = Column(Boolean, nullable=False, default=False)
    captain = Column(Boolean, nullable=False, default=False)
    rookie = Column(Boolean, nullable=False, default=False)
    shoots_catches = Column(String, nullable=True)
    roster_status = Column(String, nullable=True)
    current_team = Column(Integer, nullable=True)
    primary_position = Column(String, nullable=True)


class CachedPosition(ProvenanceMixin, Base):
    __tablename__ = "positions"

    code = Column(String, primary_key=True)
    abbrev = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    type = Column(String, nullable=True)


class CachedRosterStatus(ProvenanceMixin, Base):
    __tablename__ = "roster_statuses"

    code = Column(String, primary_key=True)
    description = Column(String, nullable=True)


class CachedTeam(ProvenanceMixin, Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    abbreviation = Column(String, nullable=True)
    team_name = Column(String, nullable=True)
    location_name = Column(String, nullable=True)
    first_year_of_play = Column(String, nullable=True)
    division = Column(Integer, nullable=True)
    conference = Column(Integer, nullable=True)
    franchise = Column(Integer, nullable=True)
    short_name = Column(String, nullable=True)
    official_site_url = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=False)


class CachedFranchise(ProvenanceMixin, Base):
    __tablename__ = "franchises"

    franchise_id = Column(Integer, primary_key=True)
    first_season_id = Column(Integer, nullable=True)
    last_season_id = Column(Integer, nullable=True)
    most_recent_team_id = Column(Integer, nullable=True)
    team_name = Column(String, nullable=True)
    location_name = Column(String, nullable=True)
