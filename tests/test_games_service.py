from __future__ import annotations

import unittest

from scoreboard.errors import ConflictError, NotFoundError, ServiceError, ValidationError
from scoreboard.services import GamesService


def _game(**overrides):
    game = {
        "game_id": "g-1",
        "date": "2026-03-14",
        "home_team": "Duke",
        "away_team": "UNC",
        "sport": "basketball",
        "status": "scheduled",
        "data_source": "espn",
    }
    game.update(overrides)
    return game


class _StubRepository:
    def __init__(self, games=None, total=0, existing=()) -> None:
        self.games = games or []
        self.total = total
        self.existing = set(existing)
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def find_all(self, filters, options):
        self._record("find_all", filters, options)
        return self.games

    def count(self, filters):
        self._record("count", filters)
        return self.total

    def find_by_id(self, game_id):
        self._record("find_by_id", game_id)
        return next((g for g in self.games if g["game_id"] == game_id), None)

    def exists(self, game_id):
        self._record("exists", game_id)
        return game_id in self.existing

    def find_live_games(self, filters):
        self._record("find_live_games", filters)
        return self.games

    def find_by_date_range(self, start_date, end_date, filters):
        self._record("find_by_date_range", start_date, end_date, filters)
        return self.games

    def find_by_team(self, team_name, filters):
        self._record("find_by_team", team_name, filters)
        return self.games

    def create(self, game_data):
        self._record("create", game_data)
        return {**game_data, "id": 1}

    def update(self, game_id, update_data):
        self._record("update", game_id, update_data)
        if game_id not in self.existing:
            return None
        return {**_game(game_id=game_id), **update_data}

    def delete(self, game_id):
        self._record("delete", game_id)
        return True

    def get_statistics(self, filters):
        self._record("get_statistics", filters)
        return {"total_games": self.total}


class SanitizeOptionsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = GamesService(_StubRepository())

    def test_defaults_when_nothing_given(self) -> None:
        self.assertEqual(
            {"limit": 50, "offset": 0, "sort_by": "date", "sort_order": "DESC"},
            self.service.sanitize_options({}),
        )

    def test_limit_is_clamped_to_range(self) -> None:
        self.assertEqual(100, self.service.sanitize_options({"limit": "500"})["limit"])
        self.assertEqual(1, self.service.sanitize_options({"limit": "0"})["limit"])
        self.assertEqual(1, self.service.sanitize_options({"limit": "-3"})["limit"])

    def test_non_numeric_values_fall_back_to_defaults(self) -> None:
        options = self.service.sanitize_options({"limit": "abc", "offset": "xyz"})

        self.assertEqual(50, options["limit"])
        self.assertEqual(0, options["offset"])

    def test_negative_offset_becomes_zero(self) -> None:
        self.assertEqual(0, self.service.sanitize_options({"offset": "-10"})["offset"])

    def test_huge_offset_is_capped_to_database_range(self) -> None:
        options = self.service.sanitize_options({"offset": "99999999999999999999"})

        self.assertEqual(2**63 - 1, options["offset"])

    def test_unknown_sort_field_uses_date(self) -> None:
        options = self.service.sanitize_options({"sort_by": "id; DROP TABLE games"})

        self.assertEqual("date", options["sort_by"])

    def test_sort_order_is_normalized(self) -> None:
        self.assertEqual("ASC", self.service.sanitize_options({"sort_order": "asc"})["sort_order"])
        self.assertEqual(
            "DESC", self.service.sanitize_options({"sort_order": "sideways"})["sort_order"]
        )

    def test_custom_limits_from_settings(self) -> None:
        service = GamesService(_StubRepository(), default_limit=10, max_limit=20)

        self.assertEqual(10, service.sanitize_options({})["limit"])
        self.assertEqual(20, service.sanitize_options({"limit": "99"})["limit"])


class SanitizeFiltersTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = GamesService(_StubRepository())

    def test_trims_and_lowercases(self) -> None:
        filters = self.service.sanitize_filters(
            {"sport": "  Basketball ", "data_source": "ESPN", "home_team": " Duke ", "season": "2026"}
        )

        self.assertEqual(
            {"sport": "basketball", "data_source": "espn", "home_team": "Duke", "season": "2026"},
            filters,
        )

    def test_drops_unknown_status_and_blank_values(self) -> None:
        filters = self.service.sanitize_filters(
            {"status": "exploded", "date": "   ", "conference": None, "unknown": "x"}
        )

        self.assertEqual({}, filters)

    def test_keeps_known_status(self) -> None:
        self.assertEqual(
            {"status": "in_progress"},
            self.service.sanitize_filters({"status": "in_progress"}),
        )


class ValidateGameDataTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = GamesService(_StubRepository())

    def test_accepts_complete_game(self) -> None:
        self.service.validate_game_data(_game())

    def test_rejects_non_object(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(["not", "a", "dict"])

        self.assertEqual("Game data must be an object", ctx.exception.message)

    def test_reports_first_missing_field(self) -> None:
        game = _game()
        del game["home_team"]

        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(game)

        self.assertEqual("Missing required field: home_team", ctx.exception.message)
        self.assertEqual({"field": "home_team"}, ctx.exception.details)

    def test_rejects_malformed_and_impossible_dates(self) -> None:
        for value in ("14-03-2026", "2026-3-14", "2026-02-30"):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    self.service.validate_game_data(_game(date=value))
                self.assertEqual("Invalid date format. Use YYYY-MM-DD", ctx.exception.message)

    def test_rejects_unknown_status(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(status="halftime"))

        self.assertEqual("Invalid status value", ctx.exception.message)

    def test_rejects_overlong_sport(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(sport="x" * 51))

        self.assertEqual("Sport name must be between 1 and 50 characters", ctx.exception.message)

    def test_rejects_non_integer_scores(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(home_score="seven"))

        self.assertEqual({"field": "home_score"}, ctx.exception.details)

    def test_rejects_non_string_required_fields(self) -> None:
        cases = {"home_team": ["Duke"], "game_id": {"a": 1}, "data_source": 7}
        for field, value in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(ValidationError) as ctx:
                    self.service.validate_game_data(_game(**{field: value}))
                self.assertEqual(f"Field must be a string: {field}", ctx.exception.message)
                self.assertEqual({"field": field}, ctx.exception.details)

    def test_blank_required_field_counts_as_missing(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(away_team="   "))

        self.assertEqual("Missing required field: away_team", ctx.exception.message)

    def test_rejects_non_string_optional_text(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(venue={"name": "Cameron"}))

        self.assertEqual({"field": "venue"}, ctx.exception.details)

    def test_rejects_score_beyond_database_range(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_data(_game(away_score=2**63))

        self.assertEqual({"field": "away_score"}, ctx.exception.details)

    def test_update_rejects_non_string_team(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_update_data({"away_team": {"name": "UNC"}})

        self.assertEqual("Field must be a string: away_team", ctx.exception.message)

    def test_update_allows_partial_data(self) -> None:
        self.service.validate_game_update_data({"home_score": 70, "status": "final"})

    def test_update_rejects_empty_required_field(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate_game_update_data({"home_team": ""})

        self.assertEqual("Field cannot be empty: home_team", ctx.exception.message)

    def test_update_rejects_bad_date(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.validate_game_update_data({"date": "tomorrow"})


class GetGamesTests(unittest.TestCase):
    def test_pagination_metadata(self) -> None:
        repo = _StubRepository(games=[_game()], total=45)
        service = GamesService(repo)

        result = service.get_games({}, {"limit": "20", "offset": "20"})

        self.assertTrue(result["success"])
        self.assertEqual(
            {
                "total": 45,
                "page": 2,
                "limit": 20,
                "offset": 20,
                "totalPages": 3,
                "hasNext": True,
                "hasPrevious": True,
            },
            result["metadata"],
        )

    def test_empty_result_has_zero_pages(self) -> None:
        result = GamesService(_StubRepository()).get_games()

        self.assertEqual(0, result["metadata"]["totalPages"])
        self.assertEqual(1, result["metadata"]["page"])
        self.assertFalse(result["metadata"]["hasNext"])
        self.assertFalse(result["metadata"]["hasPrevious"])

    def test_passes_sanitized_values_to_repository(self) -> None:
        repo = _StubRepository()
        GamesService(repo).get_games({"sport": "NBA "}, {"sort_by": "bogus"})

        _, filters, options = repo.calls[0]
        self.assertEqual({"sport": "nba"}, filters)
        self.assertEqual("date", options["sort_by"])

    def test_repository_failure_is_wrapped(self) -> None:
        repo = _StubRepository()
        repo.fail_with = RuntimeError("disk on fire")

        with self.assertRaises(ServiceError) as ctx:
            GamesService(repo).get_games()

        self.assertEqual("Failed to retrieve games", ctx.exception.message)


class SingleGameTests(unittest.TestCase):
    def test_get_game_requires_id(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            GamesService(_StubRepository()).get_game_by_id("")

        self.assertEqual("Game ID is required", ctx.exception.message)

    def test_get_game_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            GamesService(_StubRepository()).get_game_by_id("missing")

    def test_get_game_found(self) -> None:
        repo = _StubRepository(games=[_game()])

        result = GamesService(repo).get_game_by_id("g-1")

        self.assertEqual("g-1", result["data"]["game_id"])

    def test_create_conflict_when_game_exists(self) -> None:
        repo = _StubRepository(existing={"g-1"})

        with self.assertRaises(ConflictError):
            GamesService(repo).create_game(_game())

        self.assertNotIn("create", [call[0] for call in repo.calls])

    def test_create_returns_message(self) -> None:
        result = GamesService(_StubRepository()).create_game(_game())

        self.assertEqual("Game created successfully", result["message"])
        self.assertEqual(1, result["data"]["id"])

    def test_update_missing_game_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            GamesService(_StubRepository()).update_game("nope", {"home_score": 3})

    def test_update_existing_game(self) -> None:
        repo = _StubRepository(existing={"g-1"})

        result = GamesService(repo).update_game("g-1", {"home_score": 3})

        self.assertEqual("Game updated successfully", result["message"])
        self.assertEqual(3, result["data"]["home_score"])

    def test_delete_missing_game_is_not_found(self) -> None:
        repo = _StubRepository()

        with self.assertRaises(NotFoundError):
            GamesService(repo).delete_game("nope")

        self.assertNotIn("delete", [call[0] for call in repo.calls])

    def test_delete_existing_game(self) -> None:
        result = GamesService(_StubRepository(existing={"g-1"})).delete_game("g-1")

        self.assertEqual({"gameId": "g-1", "deleted": True}, result["metadata"])
        self.assertEqual("Game deleted successfully", result["message"])

    def test_unexpected_create_error_is_wrapped(self) -> None:
        repo = _StubRepository()
        repo.fail_with = RuntimeError("boom")

        with self.assertRaises(ServiceError) as ctx:
            GamesService(repo).create_game(_game())

        self.assertEqual("Failed to create game", ctx.exception.message)


class CollectionQueryTests(unittest.TestCase):
    def test_live_games_metadata(self) -> None:
        result = GamesService(_StubRepository(games=[_game(), _game(game_id="g-2")])).get_live_games()

        self.assertEqual(2, result["metadata"]["total"])
        self.assertIn("timestamp", result["metadata"])

    def test_date_range_requires_both_dates(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            GamesService(_StubRepository()).get_games_by_date_range("2026-03-01", None)

        self.assertEqual("Start date and end date are required", ctx.exception.message)

    def test_date_range_rejects_inverted_range(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            GamesService(_StubRepository()).get_games_by_date_range("2026-03-10", "2026-03-01")

        self.assertEqual("Start date must be before or equal to end date", ctx.exception.message)

    def test_date_range_flags_bad_end_date(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            GamesService(_StubRepository()).get_games_by_date_range("2026-03-01", "03/10/2026")

        self.assertEqual({"field": "end_date"}, ctx.exception.details)

    def test_date_range_metadata(self) -> None:
        result = GamesService(_StubRepository()).get_games_by_date_range(
            "2026-03-01", "2026-03-01"
        )

        self.assertEqual("2026-03-01 to 2026-03-01", result["metadata"]["dateRange"])

    def test_team_name_required(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            GamesService(_StubRepository()).get_games_by_team("   ")

        self.assertEqual("Team name is required", ctx.exception.message)

    def test_team_lookup_passes_season(self) -> None:
        repo = _StubRepository()

        result = GamesService(repo).get_games_by_team(" Duke ", {"season": "2026"})

        self.assertEqual(("find_by_team", "Duke", {"season": "2026"}), repo.calls[0])
        self.assertEqual("Duke", result["metadata"]["team"])

    def test_statistics_failure_is_wrapped(self) -> None:
        repo = _StubRepository()
        repo.fail_with = RuntimeError("boom")

        with self.assertRaises(ServiceError) as ctx:
            GamesService(repo).get_game_statistics()

        self.assertEqual("Failed to retrieve game statistics", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
