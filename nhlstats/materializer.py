"""Turn stored records into live entities and resolve their relations.

Every accessor goes through the freshness arbiter first. A record that wins
over the store either becomes a new cached instance or, when an instance for
the same key is still alive, refreshes that instance in place so there is
never more than one live object per key.

Relations are resolved only for the requested detail groups and only when
still unset, unless the owner was just refreshed. Team and Franchise point
at each other; the side that is built second is told which edge is in
progress through `visiting`, skips it, and the first side patches the
reciprocal pointer afterwards. Patched pointers are borrowed: they hold no
reference and are cleared when their target is destroyed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from nhlstats.arbiter import Source, arbitrate
from nhlstats.entities import (
    Conference,
    Division,
    Entity,
    Franchise,
    Game,
    GameDetails,
    GameStatus,
    GameType,
    Goal,
    GoalStrength,
    GoalTime,
    Period,
    Player,
    PlayerPosition,
    RosterStatus,
    Schedule,
    SeasonRecord,
    Shootout,
    Team,
)
from nhlstats.errors import CacheInsertError, ReleaseError, StoreError
from nhlstats.identity_cache import IdentityCache, Key
from nhlstats.ingestion import urls
from nhlstats.ingestion.client import OriginFetcher
from nhlstats.ingestion.ingest import ContentType
from nhlstats.models import (
    CachedConference,
    CachedDivision,
    CachedFranchise,
    CachedGame,
    CachedGameStatus,
    CachedGameType,
    CachedGoal,
    CachedLinescore,
    CachedPeriod,
    CachedPlayer,
    CachedPosition,
    CachedRosterStatus,
    CachedSchedule,
    CachedTeam,
)
from nhlstats.settings import Params
from nhlstats.status import DIAGNOSTIC_FLAGS, Detail, Fetched, Outcome, Status
from nhlstats.store import PersistentStore
from nhlstats.utils import (
    parse_clock,
    parse_date,
    parse_datetime,
    parse_height,
    parse_number,
)

logger = logging.getLogger(__name__)

# (entity class, key) pairs whose cyclic edge is being built further up the stack.
Visiting = frozenset

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def make_caches() -> dict[type, IdentityCache]:
    return {
        Schedule: IdentityCache("schedule", str),
        Game: IdentityCache("game"),
        Team: IdentityCache("team"),
        Franchise: IdentityCache("franchise"),
        Conference: IdentityCache("conference"),
        Division: IdentityCache("division"),
        Player: IdentityCache("player"),
        GameStatus: IdentityCache("game_status", str),
        GameType: IdentityCache("game_type", str),
        PlayerPosition: IdentityCache("position", str),
        RosterStatus: IdentityCache("roster_status", str),
    }


def sort_games(games: Iterable[Game]) -> list[Game]:
    """Ascending start time; games without one go last, ties keep their order."""
    return sorted(
        games,
        key=lambda game: (game.start_time is None, game.start_time or _EARLIEST),
    )


def _record(wins, losses, ot, record_type) -> SeasonRecord:
    return SeasonRecord(
        wins=wins or 0,
        losses=losses or 0,
        overtime_losses=ot or 0,
        record_type=record_type,
    )


def build_schedule(row: CachedSchedule) -> Schedule:
    return Schedule(date=parse_date(row.date), total_games=row.total_games or 0)


def build_game(row: CachedGame) -> Game:
    return Game(
        unique_id=row.game_pk,
        season=row.season,
        date=parse_date(row.date),
        start_time=parse_datetime(row.game_date),
        away_score=row.away_score,
        home_score=row.home_score,
        away_record=_record(row.away_wins, row.away_losses, row.away_ot, row.away_record_type),
        home_record=_record(row.home_wins, row.home_losses, row.home_ot, row.home_record_type),
        away_team_id=row.away_team,
        home_team_id=row.home_team,
        status_code=row.status_code,
        type_code=row.game_type,
    )


def build_team(row: CachedTeam) -> Team:
    return Team(
        unique_id=row.id,
        name=row.name,
        location_name=row.location_name,
        team_name=row.team_name,
        short_name=row.short_name,
        abbreviation=row.abbreviation,
        official_site_url=row.official_site_url,
        first_year_of_play=parse_number(row.first_year_of_play),
        active=bool(row.active),
        franchise_id=row.franchise,
        division_id=row.division,
        conference_id=row.conference,
    )


def build_franchise(row: CachedFranchise) -> Franchise:
    return Franchise(
        unique_id=row.franchise_id,
        first_season=row.first_season_id,
        last_season=row.last_season_id,
        team_name=row.team_name,
        location_name=row.location_name,
        most_recent_team_id=row.most_recent_team_id,
    )


def build_conference(row: CachedConference) -> Conference:
    return Conference(
        unique_id=row.id,
        name=row.name,
        name_short=row.short_name,
        abbreviation=row.abbreviation,
        active=bool(row.active),
    )


def build_division(row: CachedDivision) -> Division:
    return Division(
        unique_id=row.id,
        name=row.name,
        name_short=row.name_short,
        abbreviation=row.abbreviation,
        active=bool(row.active),
        conference_id=row.conference,
    )


def build_player(row: CachedPlayer) -> Player:
    return Player(
        unique_id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        full_name=row.full_name,
        birth_date=parse_date(row.birth_date),
        birth_city=row.birth_city,
        birth_state_province=row.birth_state_province,
        birth_country=row.birth_country,
        nationality=row.nationality,
        height=parse_height(row.height),
        weight_pounds=row.weight,
        shoots_catches=row.shoots_catches,
        active=bool(row.active),
        primary_number=parse_number(row.primary_number),
        captain=bool(row.captain),
        alternate_captain=bool(row.alternate_captain),
        rookie=bool(row.rookie),
        current_team_id=row.current_team,
        roster_status_code=row.roster_status,
        primary_position_code=row.primary_position,
    )


def build_game_status(row: CachedGameStatus) -> GameStatus:
    return GameStatus(
        code=row.code,
        abstract_state=row.abstract_game_state,
        detailed_state=row.detailed_state,
        start_time_tbd=bool(row.start_time_tbd),
    )


def build_game_type(row: CachedGameType) -> GameType:
    return GameType(code=row.id, description=row.description, postseason=bool(row.postseason))


def build_position(row: CachedPosition) -> PlayerPosition:
    return PlayerPosition(code=row.code, name=row.full_name, abbreviation=row.abbrev, type=row.type)


def build_roster_status(row: CachedRosterStatus) -> RosterStatus:
    return RosterStatus(code=row.code, description=row.description)


def build_goal(row: CachedGoal) -> Goal:
    return Goal(
        index=row.goal_number,
        time=GoalTime(
            period=row.period,
            period_type=row.period_type,
            period_ordinal=row.ordinal_num,
            time=parse_clock(row.period_time),
            time_remaining=parse_clock(row.period_time_remaining),
        ),
        away_score=row.goals_away,
        home_score=row.goals_home,
        scorer_season_total=row.scorer_season_total,
        assist1_season_total=row.assist1_season_total,
        assist2_season_total=row.assist2_season_total,
        type=row.secondary_type,
        strength=GoalStrength(code=row.strength_code, name=row.strength_name),
        game_winning_goal=bool(row.game_winning_goal),
        empty_net=bool(row.empty_net),
        team_id=row.team,
        scorer_id=row.scorer,
        assist1_id=row.assist1,
        assist2_id=row.assist2,
        goalie_id=row.goalie,
    )


def build_period(row: CachedPeriod) -> Period:
    return Period(
        index=row.period_index,
        num=row.num,
        away_goals=row.away_goals,
        away_shots=row.away_shots_on_goal,
        home_goals=row.home_goals,
        home_shots=row.home_shots_on_goal,
        ordinal_num=row.ordinal_num,
        period_type=row.period_type,
        start_time=parse_datetime(row.start_time),
        end_time=parse_datetime(row.end_time),
    )


def build_details(row: CachedLinescore, periods: Optional[list[CachedPeriod]]) -> GameDetails:
    shootout = None
    if row.has_shootout:
        shootout = Shootout(
            away_score=row.away_shootout_scores,
            away_attempts=row.away_shootout_attempts,
            home_score=row.home_shootout_scores,
            home_attempts=row.home_shootout_attempts,
            start_time=parse_datetime(row.shootout_start_time),
        )
    return GameDetails(
        current_period_number=row.current_period,
        current_period_name=row.current_period_ordinal,
        current_period_remaining=parse_clock(row.current_period_time_remaining),
        away_shots=row.away_shots_on_goal,
        away_power_play=bool(row.away_power_play),
        away_goalie_pulled=bool(row.away_goalie_pulled),
        away_num_skaters=row.away_num_skaters,
        home_shots=row.home_shots_on_goal,
        home_power_play=bool(row.home_power_play),
        home_goalie_pulled=bool(row.home_goalie_pulled),
        home_num_skaters=row.home_num_skaters,
        powerplay=bool(row.power_play_in_situation),
        power_play_strength=row.power_play_strength,
        powerplay_time_secs=row.power_play_situation_elapsed,
        powerplay_time_remaining_secs=row.power_play_situation_remaining,
        intermission=bool(row.intermission),
        intermission_time_secs=row.intermission_time_elapsed,
        intermission_time_remaining_secs=row.intermission_time_remaining,
        periods=[build_period(period) for period in periods] if periods is not None else None,
        shootout=shootout,
    )


@dataclass
class _Kind:
    model: type
    build: Callable[[Any], Entity]
    content_type: ContentType
    # URLs to try, in order, until the record shows up in the store.
    locate: Callable[[Key], list[Optional[str]]]
    max_age: Callable[[Key], int]
    expand: Callable[[Any, frozenset, Visiting, bool], Status]


def _list_then_item(list_url: str) -> Callable[[Key], list[Optional[str]]]:
    return lambda key: [list_url, urls.item_url(list_url, key)]


class GraphMaterializer:
    def __init__(
        self,
        store: PersistentStore,
        fetcher: OriginFetcher,
        params: Params,
        caches: dict[type, IdentityCache],
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.params = params
        self.caches = caches
        self._kinds = self._make_kinds()

    def _make_kinds(self) -> dict[type, _Kind]:
        params = self.params
        games = self.caches[Game]

        def game_max_age(key: Key) -> int:
            live = games.peek(key)
            return params.game_max_age(live.status_code if live is not None else None)

        def constant(max_age: int) -> Callable[[Key], int]:
            return lambda key: max_age

        def single(url: str) -> Callable[[Key], list[Optional[str]]]:
            return lambda key: [url]

        def no_expansion(instance, detail, visiting, refreshed) -> Status:
            return Status.NONE

        return {
            Schedule: _Kind(
                CachedSchedule, build_schedule, ContentType.SCHEDULE,
                lambda key: [urls.schedule_url(parse_date(key))],
                constant(params.schedule_max_age), self._expand_schedule,
            ),
            # Games only arrive through schedules.
            Game: _Kind(
                CachedGame, build_game, ContentType.SCHEDULE,
                lambda key: [None], game_max_age, self._expand_game,
            ),
            Team: _Kind(
                CachedTeam, build_team, ContentType.TEAMS,
                _list_then_item(urls.TEAMS_URL), constant(params.team_max_age), self._expand_team,
            ),
            Franchise: _Kind(
                CachedFranchise, build_franchise, ContentType.FRANCHISES,
                _list_then_item(urls.FRANCHISES_URL), constant(params.team_max_age),
                self._expand_franchise,
            ),
            Conference: _Kind(
                CachedConference, build_conference, ContentType.CONFERENCES,
                _list_then_item(urls.CONFERENCES_URL), constant(params.league_max_age),
                no_expansion,
            ),
            Division: _Kind(
                CachedDivision, build_division, ContentType.DIVISIONS,
                _list_then_item(urls.DIVISIONS_URL), constant(params.league_max_age),
                self._expand_division,
            ),
            Player: _Kind(
                CachedPlayer, build_player, ContentType.PEOPLE,
                lambda key: [urls.person_url(key)], constant(params.player_max_age),
                self._expand_player,
            ),
            GameStatus: _Kind(
                CachedGameStatus, build_game_status, ContentType.GAME_STATUSES,
                single(urls.GAME_STATUS_URL), constant(params.meta_max_age), no_expansion,
            ),
            GameType: _Kind(
                CachedGameType, build_game_type, ContentType.GAME_TYPES,
                single(urls.GAME_TYPES_URL), constant(params.meta_max_age), no_expansion,
            ),
            PlayerPosition: _Kind(
                CachedPosition, build_position, ContentType.POSITIONS,
                single(urls.POSITIONS_URL), constant(params.meta_max_age), no_expansion,
            ),
            RosterStatus: _Kind(
                CachedRosterStatus, build_roster_status, ContentType.ROSTER_STATUSES,
                single(urls.ROSTER_STATUSES_URL), constant(params.meta_max_age), no_expansion,
            ),
        }

    # -- acquisition ---------------------------------------------------------

    def get(
        self,
        cls: type,
        key: Key,
        detail: Iterable[Detail] = frozenset(),
        visiting: Visiting = frozenset(),
    ) -> Fetched:
        kind = self._kinds[cls]
        cache = self.caches[cls]
        detail = frozenset(detail)

        def load(may_fetch: bool) -> tuple[Optional[Any], Status]:
            flags = Status.NONE
            if may_fetch:
                for url in kind.locate(key):
                    flags |= self.fetcher.update_from_url(self.store, url, kind.content_type)
                    record = self.store.get(kind.model, key)
                    if record is not None:
                        return record, flags
            return self.store.get(kind.model, key), flags

        arbitration = arbitrate(cache, key, kind.max_age(key), load, self.store.age_of)
        status = arbitration.status
        if arbitration.source is Source.NONE:
            logger.debug("No %s %r: %s", cache.name, key, arbitration.outcome.value)
            return Fetched(None, arbitration.outcome, status)

        if arbitration.source is Source.MEMORY:
            instance, refreshed = arbitration.instance, False
        else:
            try:
                instance, refreshed = self._install(cls, key, arbitration.record)
            except CacheInsertError:
                logger.exception("Dropping %s %r", cache.name, key)
                return Fetched(None, Outcome.ERROR, (status & DIAGNOSTIC_FLAGS) | Status.READ_ERROR)

        status |= kind.expand(instance, detail, visiting, refreshed)
        return Fetched(instance, arbitration.outcome, status)

    def _install(self, cls: type, key: Key, record: Any) -> tuple[Entity, bool]:
        """Cache a new instance for `record`, or refresh the live one in place."""
        cache = self.caches[cls]
        built = self._kinds[cls].build(record)
        live = cache.peek(key)
        if live is None:
            cache.insert(key, built, record.fetched_at)
            return built, False
        cache.find(key)
        cache.restamp(live, record.fetched_at)
        live.copy_scalars_from(built)
        logger.debug("Refreshed live %s %r", cache.name, key)
        return live, True

    def _resolve(
        self,
        owner: Entity,
        relation: str,
        cls: type,
        key: Optional[Key],
        detail: frozenset,
        visiting: Visiting,
        refreshed: bool,
        back: Optional[str] = None,
    ) -> Status:
        """Fill `owner.relation`, releasing whatever it held before."""
        old = getattr(owner, relation)
        if old is not None and not refreshed:
            return Status.NONE
        old_owned = owner.owns(relation)

        value, status = None, Status.NONE
        if key is not None:
            fetched = self.get(cls, key, detail, visiting)
            value, status = fetched.value, fetched.status

        if value is not None and back is not None and value.owns(back) and getattr(value, back) is owner:
            # The other side already holds us; keep this direction borrowed.
            owner.borrow(relation, value)
            self.release(value)
        else:
            owner.adopt(relation, value)

        if old is not None and old_owned:
            if old is not value:
                self._unlink(old, owner)
            self.release(old)
        return status

    @staticmethod
    def _unlink(entity: Entity, target: Entity) -> None:
        """Clear every borrowed pointer from `entity` to `target`."""
        for relation in entity.RELATIONS:
            if relation in entity._borrowed and getattr(entity, relation) is target:
                entity.adopt(relation, None)

    # -- relation expansion --------------------------------------------------

    def _expand_team(self, team: Team, detail, visiting, refreshed) -> Status:
        if Detail.BASIC not in detail:
            return Status.NONE
        status = Status.NONE

        if (Franchise, team.franchise_id) not in visiting:
            status |= self._resolve(
                team, "franchise", Franchise, team.franchise_id, detail,
                visiting | {(Team, team.key)}, refreshed, back="most_recent_team",
            )
            franchise = team.franchise
            if (
                franchise is not None
                and franchise.most_recent_team is None
                and franchise.most_recent_team_id == team.key
            ):
                franchise.borrow("most_recent_team", team)

        status |= self._resolve(
            team, "division", Division, team.division_id, detail, visiting, refreshed
        )
        status |= self._resolve(
            team, "conference", Conference, team.conference_id, detail, visiting, refreshed
        )
        return status

    def _expand_franchise(self, franchise: Franchise, detail, visiting, refreshed) -> Status:
        if Detail.BASIC not in detail:
            return Status.NONE
        team_id = franchise.most_recent_team_id
        if (Team, team_id) in visiting:
            return Status.NONE

        status = self._resolve(
            franchise, "most_recent_team", Team, team_id, detail,
            visiting | {(Franchise, franchise.key)}, refreshed, back="franchise",
        )
        team = franchise.most_recent_team
        if team is not None and team.franchise is None and team.franchise_id == franchise.key:
            team.borrow("franchise", franchise)
        return status

    def _expand_division(self, division: Division, detail, visiting, refreshed) -> Status:
        if Detail.BASIC not in detail:
            return Status.NONE
        return self._resolve(
            division, "conference", Conference, division.conference_id, detail, visiting, refreshed
        )

    def _expand_player(self, player: Player, detail, visiting, refreshed) -> Status:
        if Detail.BASIC not in detail:
            return Status.NONE
        status = self._resolve(
            player, "current_team", Team, player.current_team_id, detail, visiting, refreshed
        )
        status |= self._resolve(
            player, "roster_status", RosterStatus, player.roster_status_code,
            detail, visiting, refreshed,
        )
        status |= self._resolve(
            player, "primary_position", PlayerPosition, player.primary_position_code,
            detail, visiting, refreshed,
        )
        return status

    def _expand_game(self, game: Game, detail, visiting, refreshed) -> Status:
        status = Status.NONE
        if Detail.BASIC in detail:
            for relation, cls, key in (
                ("away", Team, game.away_team_id),
                ("home", Team, game.home_team_id),
                ("status", GameStatus, game.status_code),
                ("type", GameType, game.type_code),
            ):
                status |= self._resolve(game, relation, cls, key, detail, visiting, refreshed)

        if refreshed:
            self._drop_goals(game)
            game.details = None

        if Detail.GAME_DETAILS in detail and game.details is None:
            status |= self._load_details(game, detail)
        if Detail.GOALS in detail and game.goals is None:
            status |= self._load_goals(game, detail, visiting)
        return status

    def _load_details(self, game: Game, detail: frozenset) -> Status:
        try:
            linescore = self.store.get(CachedLinescore, game.key)
            periods = None
            if linescore is not None and Detail.BASIC in detail:
                periods = self.store.rows_for(CachedPeriod, game.key)
        except StoreError:
            logger.exception("Failed reading linescore for game=%s", game.key)
            return Status.READ_ERROR
        if linescore is None:
            return Status.READ_NOT_FOUND
        game.details = build_details(linescore, periods)
        return Status.NONE

    def _load_goals(self, game: Game, detail: frozenset, visiting: Visiting) -> Status:
        try:
            rows = self.store.rows_for(CachedGoal, game.key)
        except StoreError:
            logger.exception("Failed reading goals for game=%s", game.key)
            return Status.READ_ERROR

        game.goals = [build_goal(row) for row in rows]
        status = Status.NONE
        for goal in game.goals:
            if Detail.BASIC in detail:
                status |= self._resolve(
                    goal, "scoring_team", Team, goal.team_id, detail, visiting, False
                )
            if Detail.PLAYERS in detail:
                for relation, player_id in (
                    ("scorer", goal.scorer_id),
                    ("assist1", goal.assist1_id),
                    ("assist2", goal.assist2_id),
                    ("goalie", goal.goalie_id),
                ):
                    # Missing assists and goalies are normal.
                    if player_id:
                        status |= self._resolve(
                            goal, relation, Player, player_id, detail, visiting, False
                        )
        return status

    def _drop_goals(self, game: Game) -> None:
        for goal in game.goals or ():
            self._release_relations(goal)
        game.goals = None

    def _expand_schedule(self, schedule: Schedule, detail, visiting, refreshed) -> Status:
        if Detail.BASIC not in detail:
            return Status.NONE
        if schedule.games is not None and not refreshed:
            return Status.NONE
        try:
            game_ids = self.store.find(CachedGame, "date", schedule.key)
        except StoreError:
            logger.exception("Failed listing games for %s", schedule.key)
            return Status.READ_ERROR

        old_games = schedule.games
        games: list[Game] = []
        status = Status.NONE
        for game_id in game_ids:
            fetched = self.get(Game, game_id, detail, visiting)
            status |= fetched.status
            if fetched.value is not None:
                games.append(fetched.value)
        schedule.games = sort_games(games)

        for game in old_games or ():
            self.release(game)
        return status

    # -- release -------------------------------------------------------------

    def release(self, entity: Optional[Entity]) -> None:
        """Return one reference; the entity is destroyed with its last one."""
        if entity is None:
            return
        cache = self.caches.get(type(entity))
        if cache is None:
            raise ReleaseError(f"{type(entity).__name__} objects are owned by their parent")
        refs = cache.unref(entity)
        if refs is None:
            raise ReleaseError(f"{cache.name} {entity.key!r} is not held by this session")
        if refs == 0:
            logger.debug("Destroying %s %r", cache.name, entity.key)
            self._clear_back_pointers(entity)
            self._release_relations(entity)

    def _clear_back_pointers(self, entity: Entity) -> None:
        for relation in entity.RELATIONS:
            other = getattr(entity, relation)
            if isinstance(other, Entity):
                self._unlink(other, entity)

    def _release_relations(self, entity: Entity) -> None:
        for relation in entity.RELATIONS:
            value = getattr(entity, relation)
            borrowed = relation in entity._borrowed
            entity.adopt(relation, None)
            if value is None or borrowed:
                continue
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, Goal):
                        self._release_relations(item)
                    else:
                        self.release(item)
            elif isinstance(value, Entity):
                self.release(value)
