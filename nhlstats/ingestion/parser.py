"""Parsers for stats API payloads.

Every function takes decoded JSON and returns DTOs; nothing here touches the
store. Elements without a usable primary key are dropped.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from nhlstats.ingestion.schema import (
    ConferenceDTO,
    DivisionDTO,
    FranchiseDTO,
    GameDTO,
    GameStatusDTO,
    GameTypeDTO,
    GoalDTO,
    LinescoreDTO,
    PeriodDTO,
    PlayerDTO,
    PositionDTO,
    RosterStatusDTO,
    ScheduleBundle,
    ScheduleDTO,
    TeamDTO,
)

T = TypeVar("T")


def _node(parent: Any, *path: str) -> dict[str, Any]:
    current = parent
    for name in path:
        if not isinstance(current, dict):
            return {}
        current = current.get(name)
    return current if isinstance(current, dict) else {}


def _items(parent: Any, name: str) -> Iterable[dict[str, Any]]:
    values = parent.get(name) if isinstance(parent, dict) else None
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, dict)]


def _safe_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _safe_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _parse_list(payload: Any, name: str, build: Callable[[dict[str, Any]], T | None]) -> list[T]:
    parsed: list[T] = []
    for item in _items(payload, name):
        dto = build(item)
        if dto is not None:
            parsed.append(dto)
    return parsed


def _parse_goal(play: dict[str, Any], game_pk: int, goal_number: int) -> GoalDTO:
    values: dict[str, Any] = {"game": game_pk, "goal_number": goal_number}

    for entry in _items(play, "players"):
        player_id = _safe_int(_node(entry, "player").get("id"))
        season_total = _safe_int(entry.get("seasonTotal"))
        player_type = entry.get("playerType")
        if player_type == "Scorer":
            values["scorer"] = player_id
            values["scorer_season_total"] = season_total
        elif player_type == "Assist" and "assist1" not in values:
            values["assist1"] = player_id
            values["assist1_season_total"] = season_total
        elif player_type == "Assist":
            values["assist2"] = player_id
            values["assist2_season_total"] = season_total
        elif player_type == "Goalie":
            values["goalie"] = player_id

    result = _node(play, "result")
    strength = _node(result, "strength")
    about = _node(play, "about")
    goals = _node(about, "goals")

    return GoalDTO(
        **values,
        secondary_type=_safe_str(result.get("secondaryType")),
        strength_code=_safe_str(strength.get("code")),
        strength_name=_safe_str(strength.get("name")),
        game_winning_goal=_safe_bool(result.get("gameWinningGoal")),
        empty_net=_safe_bool(result.get("emptyNet")),
        period=_safe_int(about.get("period")),
        period_type=_safe_str(about.get("periodType")),
        ordinal_num=_safe_str(about.get("ordinalNum")),
        period_time=_safe_str(about.get("periodTime")),
        period_time_remaining=_safe_str(about.get("periodTimeRemaining")),
        date_time=_safe_str(about.get("dateTime")),
        goals_away=_safe_int(goals.get("away")),
        goals_home=_safe_int(goals.get("home")),
        team=_safe_int(_node(play, "team").get("id")),
    )


def _parse_period(period: dict[str, Any], game_pk: int, period_index: int) -> PeriodDTO:
    away = _node(period, "away")
    home = _node(period, "home")
    return PeriodDTO(
        game=game_pk,
        period_index=period_index,
        period_type=_safe_str(period.get("periodType")),
        start_time=_safe_str(period.get("startTime")),
        end_time=_safe_str(period.get("endTime")),
        num=_safe_int(period.get("num")),
        ordinal_num=_safe_str(period.get("ordinalNum")),
        away_goals=_safe_int(away.get("goals")),
        away_shots_on_goal=_safe_int(away.get("shotsOnGoal")),
        away_rink_side=_safe_str(away.get("rinkSide")),
        home_goals=_safe_int(home.get("goals")),
        home_shots_on_goal=_safe_int(home.get("shotsOnGoal")),
        home_rink_side=_safe_str(home.get("rinkSide")),
    )


def _parse_linescore(linescore: dict[str, Any], game_pk: int) -> LinescoreDTO:
    shootout = _node(linescore, "shootoutInfo")
    shootout_away = _node(shootout, "away")
    shootout_home = _node(shootout, "home")
    away = _node(linescore, "teams", "away")
    home = _node(linescore, "teams", "home")
    intermission = _node(linescore, "intermissionInfo")
    power_play = _node(linescore, "powerPlayInfo")

    return LinescoreDTO(
        game=game_pk,
        current_period=_safe_int(linescore.get("currentPeriod")),
        current_period_ordinal=_safe_str(linescore.get("currentPeriodOrdinal")),
        current_period_time_remaining=_safe_str(linescore.get("currentPeriodTimeRemaining")),
        away_shootout_scores=_safe_int(shootout_away.get("scores")),
        away_shootout_attempts=_safe_int(shootout_away.get("attempts")),
        home_shootout_scores=_safe_int(shootout_home.get("scores")),
        home_shootout_attempts=_safe_int(shootout_home.get("attempts")),
        shootout_start_time=_safe_str(shootout.get("startTime")),
        away_shots_on_goal=_safe_int(away.get("shotsOnGoal")),
        away_goalie_pulled=_safe_bool(away.get("goaliePulled")),
        away_num_skaters=_safe_int(away.get("numSkaters")),
        away_power_play=_safe_bool(away.get("powerPlay")),
        home_shots_on_goal=_safe_int(home.get("shotsOnGoal")),
        home_goalie_pulled=_safe_bool(home.get("goaliePulled")),
        home_num_skaters=_safe_int(home.get("numSkaters")),
        home_power_play=_safe_bool(home.get("powerPlay")),
        power_play_strength=_safe_str(linescore.get("powerPlayStrength")),
        has_shootout=_safe_bool(linescore.get("hasShootout")),
        intermission_time_remaining=_safe_int(intermission.get("intermissionTimeRemaining")),
        intermission_time_elapsed=_safe_int(intermission.get("intermissionTimeElapsed")),
        intermission=_safe_bool(intermission.get("inIntermission", intermission.get("intermission"))),
        power_play_situation_remaining=_safe_int(power_play.get("situationTimeRemaining")),
        power_play_situation_elapsed=_safe_int(power_play.get("situationTimeElapsed")),
        power_play_in_situation=_safe_bool(power_play.get("inSituation")),
    )


def _parse_game(game: dict[str, Any], date: str | None, bundle: ScheduleBundle) -> None:
    game_pk = _safe_int(game.get("gamePk"))
    if game_pk is None:
        return

    away = _node(game, "teams", "away")
    home = _node(game, "teams", "home")
    away_record = _node(away, "leagueRecord")
    home_record = _node(home, "leagueRecord")

    bundle.games.append(
        GameDTO(
            game_pk=game_pk,
            date=date,
            game_type=_safe_str(game.get("gameType")),
            season=_safe_str(game.get("season")),
            game_date=_safe_str(game.get("gameDate")),
            status_code=_safe_str(_node(game, "status").get("statusCode")),
            away_team=_safe_int(_node(away, "team").get("id")),
            away_score=_safe_int(away.get("score")),
            away_wins=_safe_int(away_record.get("wins")),
            away_losses=_safe_int(away_record.get("losses")),
            away_ot=_safe_int(away_record.get("ot")),
            away_record_type=_safe_str(away_record.get("type")),
            home_team=_safe_int(_node(home, "team").get("id")),
            home_score=_safe_int(home.get("score")),
            home_wins=_safe_int(home_record.get("wins")),
            home_losses=_safe_int(home_record.get("losses")),
            home_ot=_safe_int(home_record.get("ot")),
            home_record_type=_safe_str(home_record.get("type")),
        )
    )

    if isinstance(game.get("scoringPlays"), list):
        bundle.goal_games.append(game_pk)
        for goal_number, play in enumerate(_items(game, "scoringPlays")):
            bundle.goals.append(_parse_goal(play, game_pk, goal_number))

    linescore = game.get("linescore")
    if isinstance(linescore, dict):
        bundle.linescores.append(_parse_linescore(linescore, game_pk))
        bundle.period_games.append(game_pk)
        for period_index, period in enumerate(_items(linescore, "periods")):
            bundle.periods.append(_parse_period(period, game_pk, period_index))


def parse_schedule(payload: dict) -> ScheduleBundle:
    """Parse a /schedule payload (with linescore and scoring plays expanded)."""
    bundle = ScheduleBundle()
    for day in _items(payload, "dates"):
        date = _safe_str(day.get("date"))
        if date is None:
            continue
        bundle.schedules.append(
            ScheduleDTO(date=date, total_games=_safe_int(day.get("totalGames")) or 0)
        )
        for game in _items(day, "games"):
            _parse_game(game, date, bundle)
    return bundle


def _build_player(item: dict[str, Any]) -> PlayerDTO | None:
    player_id = _safe_int(item.get("id"))
    if player_id is None:
        return None
    return PlayerDTO(
        id=player_id,
        full_name=_safe_str(item.get("fullName")),
        first_name=_safe_str(item.get("firstName")),
        last_name=_safe_str(item.get("lastName")),
        primary_number=_safe_str(item.get("primaryNumber")),
        birth_date=_safe_str(item.get("birthDate")),
        birth_city=_safe_str(item.get("birthCity")),
        birth_state_province=_safe_str(item.get("birthStateProvince")),
        birth_country=_safe_str(item.get("birthCountry")),
        nationality=_safe_str(item.get("nationality")),
        height=_safe_str(item.get("height")),
        weight=_safe_int(item.get("weight")),
        active=_safe_bool(item.get("active")),
        alternate_captain=_safe_bool(item.get("alternateCaptain")),
        captain=_safe_bool(item.get("captain")),
        rookie=_safe_bool(item.get("rookie")),
        shoots_catches=_safe_str(item.get("shootsCatches")),
        roster_status=_safe_str(item.get("rosterStatus")),
        current_team=_safe_int(_node(item, "currentTeam").get("id")),
        primary_position=_safe_str(_node(item, "primaryPosition").get("code")),
    )


def parse_people(payload: dict) -> list[PlayerDTO]:
    return _parse_list(payload, "people", _build_player)


def _build_team(item: dict[str, Any]) -> TeamDTO | None:
    team_id = _safe_int(item.get("id"))
    if team_id is None:
        return None
    return TeamDTO(
        id=team_id,
        name=_safe_str(item.get("name")),
        abbreviation=_safe_str(item.get("abbreviation")),
        team_name=_safe_str(item.get("teamName")),
        location_name=_safe_str(item.get("locationName")),
        first_year_of_play=_safe_str(item.get("firstYearOfPlay")),
        division=_safe_int(_node(item, "division").get("id")),
        conference=_safe_int(_node(item, "conference").get("id")),
        franchise=_safe_int(_node(item, "franchise").get("franchiseId")),
        short_name=_safe_str(item.get("shortName")),
        official_site_url=_safe_str(item.get("officialSiteUrl")),
        active=_safe_bool(item.get("active")),
    )


def parse_teams(payload: dict) -> list[TeamDTO]:
    return _parse_list(payload, "teams", _build_team)


def _build_franchise(item: dict[str, Any]) -> FranchiseDTO | None:
    franchise_id = _safe_int(item.get("franchiseId"))
    if franchise_id is None:
        return None
    return FranchiseDTO(
        franchise_id=franchise_id,
        first_season_id=_safe_int(item.get("firstSeasonId")),
        last_season_id=_safe_int(item.get("lastSeasonId")),
        most_recent_team_id=_safe_int(item.get("mostRecentTeamId")),
        team_name=_safe_str(item.get("teamName")),
        location_name=_safe_str(item.get("locationName")),
    )


def parse_franchises(payload: dict) -> list[FranchiseDTO]:
    return _parse_list(payload, "franchises", _build_franchise)


def _build_division(item: dict[str, Any]) -> DivisionDTO | None:
    division_id = _safe_int(item.get("id"))
    if division_id is None:
        return None
    return DivisionDTO(
        id=division_id,
        name=_safe_str(item.get("name")),
        name_short=_safe_str(item.get("nameShort")),
        abbreviation=_safe_str(item.get("abbreviation")),
        conference=_safe_int(_node(item, "conference").get("id")),
        active=_safe_bool(item.get("active", True)),
    )


def parse_divisions(payload: dict) -> list[DivisionDTO]:
    return _parse_list(payload, "divisions", _build_division)


def _build_conference(item: dict[str, Any]) -> ConferenceDTO | None:
    conference_id = _safe_int(item.get("id"))
    if conference_id is None:
        return None
    return ConferenceDTO(
        id=conference_id,
        name=_safe_str(item.get("name")),
        abbreviation=_safe_str(item.get("abbreviation")),
        short_name=_safe_str(item.get("shortName")),
        active=_safe_bool(item.get("active", True)),
    )


def parse_conferences(payload: dict) -> list[ConferenceDTO]:
    return _parse_list(payload, "conferences", _build_conference)


# The reference endpoints below return bare JSON arrays.
def _top_level(payload: Any) -> dict[str, Any]:
    return {"items": payload if isinstance(payload, list) else []}


def _build_game_status(item: dict[str, Any]) -> GameStatusDTO | None:
    code = _safe_str(item.get("code"))
    if code is None:
        return None
    return GameStatusDTO(
        code=code,
        abstract_game_state=_safe_str(item.get("abstractGameState")),
        detailed_state=_safe_str(item.get("detailedState")),
        start_time_tbd=_safe_bool(item.get("startTimeTBD")),
    )


def parse_game_statuses(payload: Any) -> list[GameStatusDTO]:
    return _parse_list(_top_level(payload), "items", _build_game_status)


def _build_game_type(item: dict[str, Any]) -> GameTypeDTO | None:
    type_id = _safe_str(item.get("id"))
    if type_id is None:
        return None
    return GameTypeDTO(
        id=type_id,
        description=_safe_str(item.get("description")),
        postseason=_safe_bool(item.get("postseason")),
    )


def parse_game_types(payload: Any) -> list[GameTypeDTO]:
    return _parse_list(_top_level(payload), "items", _build_game_type)


def _build_position(item: dict[str, Any]) -> PositionDTO | None:
    code = _safe_str(item.get("code"))
    if code is None:
        return None
    return PositionDTO(
        code=code,
        abbrev=_safe_str(item.get("abbrev")),
        full_name=_safe_str(item.get("fullName")),
        type=_safe_str(item.get("type")),
    )


def parse_positions(payload: Any) -> list[PositionDTO]:
    return _parse_list(_top_level(payload), "items", _build_position)


def _build_roster_status(item: dict[str, Any]) -> RosterStatusDTO | None:
    code = _safe_str(item.get("code"))
    if code is None:
        return None
    return RosterStatusDTO(code=code, description=_safe_str(item.get("description")))


def parse_roster_statuses(payload: Any) -> list[RosterStatusDTO]:
    return _parse_list(_top_level(payload), "items", _build_roster_status)
