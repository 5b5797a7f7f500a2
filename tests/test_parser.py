from __future__ import annotations

import unittest

from nhlstats.ingestion.parser import (
    parse_franchises,
    parse_game_statuses,
    parse_people,
    parse_positions,
    parse_schedule,
    parse_teams,
)
from payloads import FRANCHISES, GAME_STATUSES, PEOPLE, POSITIONS, SCHEDULE, TEAMS


class ScheduleParserTests(unittest.TestCase):
    def test_parse_schedule_yields_dates_and_games(self) -> None:
        bundle = parse_schedule(SCHEDULE)

        self.assertEqual(1, len(bundle.schedules))
        self.assertEqual("2021-11-23", bundle.schedules[0].date)
        self.assertEqual(4, bundle.schedules[0].total_games)
        self.assertEqual(
            [2021020301, 2021020302, 2021020303, 2021020304],
            [game.game_pk for game in bundle.games],
        )
        first = bundle.games[0]
        self.assertEqual("2021-11-23", first.date)
        self.assertEqual("7", first.status_code)
        self.assertEqual(8, first.away_team)
        self.assertEqual(10, first.home_team)
        self.assertEqual(10, first.away_wins)
        self.assertEqual("league", first.home_record_type)
        self.assertIsNone(bundle.games[3].game_date)

    def test_goal_players_are_assigned_by_player_type(self) -> None:
        bundle = parse_schedule(SCHEDULE)

        self.assertEqual([2021020301], bundle.goal_games)
        first, second = bundle.goals
        self.assertEqual(0, first.goal_number)
        self.assertEqual(8479318, first.scorer)
        self.assertEqual(12, first.scorer_season_total)
        self.assertEqual(8478483, first.assist1)
        self.assertIsNone(first.assist2)
        self.assertEqual(8471679, first.goalie)
        self.assertEqual("EVEN", first.strength_code)
        self.assertEqual("05:12", first.period_time)
        self.assertEqual(10, first.team)
        self.assertEqual(1, second.goal_number)
        self.assertTrue(second.game_winning_goal)
        self.assertTrue(second.empty_net)
        self.assertIsNone(second.assist1)

    def test_second_assist_fills_assist2(self) -> None:
        payload = {
            "dates": [
                {
                    "date": "2021-11-23",
                    "games": [
                        {
                            "gamePk": 1,
                            "scoringPlays": [
                                {
                                    "players": [
                                        {"player": {"id": 11}, "playerType": "Assist", "seasonTotal": 1},
                                        {"player": {"id": 12}, "playerType": "Assist", "seasonTotal": 2},
                                        {"player": {"id": 13}, "playerType": "Scorer"},
                                    ]
                                }
                            ],
                        }
                    ],
                }
            ]
        }

        goal = parse_schedule(payload).goals[0]

        self.assertEqual((13, 11, 12), (goal.scorer, goal.assist1, goal.assist2))
        self.assertEqual(2, goal.assist2_season_total)

    def test_linescore_and_periods(self) -> None:
        bundle = parse_schedule(SCHEDULE)

        self.assertEqual([2021020301], bundle.period_games)
        linescore = bundle.linescores[0]
        self.assertEqual(3, linescore.current_period)
        self.assertTrue(linescore.away_goalie_pulled)
        self.assertEqual(6, linescore.away_num_skaters)
        self.assertFalse(linescore.has_shootout)
        self.assertEqual([0, 1, 2], [period.period_index for period in bundle.periods])
        self.assertEqual(12, bundle.periods[0].home_shots_on_goal)
        self.assertEqual("right", bundle.periods[0].away_rink_side)

    def test_games_without_id_and_malformed_nodes_are_skipped(self) -> None:
        payload = {
            "dates": [
                {"date": "2021-11-23", "games": [{"gameType": "R"}, "junk", {"gamePk": 5}]},
                {"totalGames": 1},
                "junk",
            ]
        }

        bundle = parse_schedule(payload)

        self.assertEqual([5], [game.game_pk for game in bundle.games])
        self.assertEqual([], bundle.goal_games)
        self.assertEqual([], bundle.linescores)

    def test_empty_payload(self) -> None:
        bundle = parse_schedule({})

        self.assertEqual([], bundle.schedules)
        self.assertEqual([], bundle.games)


class ReferenceParserTests(unittest.TestCase):
    def test_parse_people(self) -> None:
        players = parse_people(PEOPLE)

        matthews = players[0]
        self.assertEqual(8479318, matthews.id)
        self.assertEqual("34", matthews.primary_number)
        self.assertEqual(10, matthews.current_team)
        self.assertEqual("C", matthews.primary_position)
        self.assertTrue(matthews.alternate_captain)
        self.assertEqual(3, len(players))

    def test_parse_teams_reads_nested_ids(self) -> None:
        team = parse_teams(TEAMS)[0]

        self.assertEqual((17, 6, 5), (team.division, team.conference, team.franchise))
        self.assertEqual("1917", team.first_year_of_play)

    def test_parse_franchises(self) -> None:
        franchises = parse_franchises(FRANCHISES)

        self.assertEqual({1: 8, 5: 10}, {f.franchise_id: f.most_recent_team_id for f in franchises})

    def test_bare_array_endpoints(self) -> None:
        statuses = parse_game_statuses(GAME_STATUSES)
        positions = parse_positions(POSITIONS)

        self.assertEqual(["1", "3", "7"], [status.code for status in statuses])
        self.assertEqual("Goalie", positions[1].full_name)
        self.assertEqual([], parse_game_statuses({"unexpected": "object"}))


if __name__ == "__main__":
    unittest.main()
