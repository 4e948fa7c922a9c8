"""Business rules for games: input sanitization, validation and result shaping."""

from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any

from scoreboard.errors import (
    ConflictError,
    NotFoundError,
    ScoreboardError,
    ServiceError,
    ValidationError,
)
from scoreboard.models import GAME_STATUSES
from scoreboard.repositories import REQUIRED_FIELDS, GamesRepository
from scoreboard.responses import utcnow_iso

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
VALID_SORT_FIELDS = ("date", "home_team", "away_team", "sport", "status", "created_at")
DEFAULT_SORT_FIELD = "date"
DEFAULT_SORT_ORDER = "DESC"
SPORT_MIN_LENGTH = 1
SPORT_MAX_LENGTH = 50
MAX_DB_INTEGER = 2**63 - 1
OPTIONAL_TEXT_FIELDS = (
    "league_name",
    "current_period",
    "venue",
    "city",
    "state",
    "country",
    "timezone",
    "broadcast_info",
    "notes",
)

INVALID_DATE_MESSAGE = "Invalid date format. Use YYYY-MM-DD"


def _to_int(value: Any) -> int | None:
    """Parse a query-string style number; None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _is_valid_date(value: Any) -> bool:
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


class GamesService:
    def __init__(
        self,
        repository: GamesRepository,
        default_limit: int = 50,
        max_limit: int = 100,
    ) -> None:
        self.repository = repository
        self.default_limit = default_limit
        self.max_limit = max_limit

    def sanitize_filters(self, filters: dict[str, Any] | None) -> dict[str, str]:
        filters = filters or {}
        sanitized: dict[str, str] = {}

        for key in ("date", "conference", "home_team", "away_team", "season"):
            cleaned = _clean(filters.get(key))
            if cleaned:
                sanitized[key] = cleaned

        for key in ("sport", "data_source"):
            cleaned = _clean(filters.get(key))
            if cleaned:
                sanitized[key] = cleaned.lower()

        status = filters.get("status")
        if isinstance(status, str) and status in GAME_STATUSES:
            sanitized["status"] = status

        return sanitized

    def sanitize_options(self, options: dict[str, Any] | None) -> dict[str, Any]:
        options = options or {}

        limit = _to_int(options.get("limit"))
        offset = _to_int(options.get("offset"))

        sort_by = options.get("sort_by")
        if not isinstance(sort_by, str) or sort_by not in VALID_SORT_FIELDS:
            sort_by = DEFAULT_SORT_FIELD

        sort_order = options.get("sort_order")
        if isinstance(sort_order, str) and sort_order:
            sort_order = "ASC" if sort_order.strip().upper() == "ASC" else "DESC"
        else:
            sort_order = DEFAULT_SORT_ORDER

        return {
            "limit": self.default_limit if limit is None else min(max(limit, 1), self.max_limit),
            "offset": 0 if offset is None else min(max(offset, 0), MAX_DB_INTEGER),
            "sort_by": sort_by,
            "sort_order": sort_order,
        }

    def validate_game_data(self, game_data: Any) -> None:
        if not isinstance(game_data, dict):
            raise ValidationError("Game data must be an object")

        for field in REQUIRED_FIELDS:
            value = game_data.get(field)
            if not value or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {field}", field=field)
            if not isinstance(value, str):
                raise ValidationError(f"Field must be a string: {field}", field=field)

        if not _is_valid_date(game_data["date"]):
            raise ValidationError(INVALID_DATE_MESSAGE, field="date")

        if game_data["status"] not in GAME_STATUSES:
            raise ValidationError("Invalid status value", field="status")

        self._validate_sport(game_data["sport"])
        self._validate_scores(game_data)
        self._validate_text_fields(game_data)

    def validate_game_update_data(self, update_data: Any) -> None:
        if not isinstance(update_data, dict):
            raise ValidationError("Update data must be an object")

        for field in REQUIRED_FIELDS:
            if field == "game_id" or field not in update_data:
                continue
            value = update_data[field]
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Field cannot be empty: {field}", field=field)
            if not isinstance(value, str):
                raise ValidationError(f"Field must be a string: {field}", field=field)

        if "date" in update_data and not _is_valid_date(update_data["date"]):
            raise ValidationError(INVALID_DATE_MESSAGE, field="date")

        if "status" in update_data and update_data["status"] not in GAME_STATUSES:
            raise ValidationError("Invalid status value", field="status")

        if "sport" in update_data:
            self._validate_sport(update_data["sport"])

        self._validate_scores(update_data)
        self._validate_text_fields(update_data)

    @staticmethod
    def _validate_scores(data: dict[str, Any]) -> None:
        for field in ("home_score", "away_score"):
            value = data.get(field)
            if value is None:
                continue
            valid = isinstance(value, int) and not isinstance(value, bool)
            if not valid or not 0 <= value <= MAX_DB_INTEGER:
                raise ValidationError(f"{field} must be a non-negative integer", field=field)

    @staticmethod
    def _validate_text_fields(data: dict[str, Any]) -> None:
        for field in OPTIONAL_TEXT_FIELDS:
            value = data.get(field)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Field must be a string: {field}", field=field)

    @staticmethod
    def _validate_sport(sport: Any) -> None:
        if not isinstance(sport, str) or not SPORT_MIN_LENGTH <= len(sport) <= SPORT_MAX_LENGTH:
            raise ValidationError(
                f"Sport name must be between {SPORT_MIN_LENGTH} and {SPORT_MAX_LENGTH} characters",
                field="sport",
            )

    def get_games(
        self,
        filters: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            sanitized_filters = self.sanitize_filters(filters)
            sanitized_options = self.sanitize_options(options)
            games = self.repository.find_all(sanitized_filters, sanitized_options)
            total = self.repository.count(sanitized_filters)
        except Exception as exc:
            logger.exception("Error retrieving games")
            raise ServiceError("Failed to retrieve games") from exc

        limit = sanitized_options["limit"]
        offset = sanitized_options["offset"]
        total_pages = math.ceil(total / limit)
        page = offset // limit + 1

        return {
            "success": True,
            "data": games,
            "metadata": {
                "total": total,
                "page": page,
                "limit": limit,
                "offset": offset,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrevious": page > 1,
            },
        }

    def get_game_by_id(self, game_id: str | None) -> dict[str, Any]:
        if not game_id:
            raise ValidationError("Game ID is required", field="game_id")

        try:
            game = self.repository.find_by_id(game_id)
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error retrieving game game_id=%s", game_id)
            raise ServiceError("Failed to retrieve game") from exc

        if not game:
            raise NotFoundError("Game not found", {"game_id": game_id})

        return {"success": True, "data": game}

    def get_live_games(self, filters: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            games = self.repository.find_live_games(self.sanitize_filters(filters))
        except Exception as exc:
            logger.exception("Error retrieving live games")
            raise ServiceError("Failed to retrieve live games") from exc

        return {
            "success": True,
            "data": games,
            "metadata": {"total": len(games), "timestamp": utcnow_iso()},
        }

    def get_games_by_date_range(
        self,
        start_date: str | None,
        end_date: str | None,
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not start_date or not end_date:
            raise ValidationError("Start date and end date are required")
        if not _is_valid_date(start_date):
            raise ValidationError(INVALID_DATE_MESSAGE, field="start_date")
        if not _is_valid_date(end_date):
            raise ValidationError(INVALID_DATE_MESSAGE, field="end_date")
        if date.fromisoformat(start_date) > date.fromisoformat(end_date):
            raise ValidationError("Start date must be before or equal to end date")

        try:
            games = self.repository.find_by_date_range(
                start_date, end_date, self.sanitize_filters(filters)
            )
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error retrieving games start=%s end=%s", start_date, end_date)
            raise ServiceError("Failed to retrieve games by date range") from exc

        return {
            "success": True,
            "data": games,
            "metadata": {
                "total": len(games),
                "startDate": start_date,
                "endDate": end_date,
                "dateRange": f"{start_date} to {end_date}",
            },
        }

    def get_games_by_team(
        self,
        team_name: str | None,
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        team = _clean(team_name)
        if not team:
            raise ValidationError("Team name is required", field="team_name")

        try:
            games = self.repository.find_by_team(team, self.sanitize_filters(filters))
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error retrieving games team=%s", team)
            raise ServiceError("Failed to retrieve games by team") from exc

        return {
            "success": True,
            "data": games,
            "metadata": {"total": len(games), "team": team},
        }

    def create_game(self, game_data: Any) -> dict[str, Any]:
        self.validate_game_data(game_data)

        try:
            if self.repository.exists(game_data["game_id"]):
                raise ConflictError(
                    "Game with this ID already exists", {"game_id": game_data["game_id"]}
                )
            created = self.repository.create(game_data)
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error creating game game_id=%s", game_data.get("game_id"))
            raise ServiceError("Failed to create game") from exc

        return {
            "success": True,
            "data": created,
            "message": "Game created successfully",
        }

    def update_game(self, game_id: str | None, update_data: Any) -> dict[str, Any]:
        if not game_id:
            raise ValidationError("Game ID is required", field="game_id")

        self.validate_game_update_data(update_data)

        try:
            updated = self.repository.update(game_id, update_data)
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error updating game game_id=%s", game_id)
            raise ServiceError("Failed to update game") from exc

        if not updated:
            raise NotFoundError("Game not found", {"game_id": game_id})

        return {
            "success": True,
            "data": updated,
            "message": "Game updated successfully",
        }

    def delete_game(self, game_id: str | None) -> dict[str, Any]:
        if not game_id:
            raise ValidationError("Game ID is required", field="game_id")

        try:
            if not self.repository.exists(game_id):
                raise NotFoundError("Game not found", {"game_id": game_id})
            deleted = self.repository.delete(game_id)
        except ScoreboardError:
            raise
        except Exception as exc:
            logger.exception("Error deleting game game_id=%s", game_id)
            raise ServiceError("Failed to delete game") from exc

        return {
            "success": True,
            "message": "Game deleted successfully",
            "metadata": {"gameId": game_id, "deleted": deleted},
        }

    def get_game_statistics(self, filters: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            sanitized_filters = self.sanitize_filters(filters)
            statistics = self.repository.get_statistics(sanitized_filters)
        except Exception as exc:
            logger.exception("Error retrieving game statistics")
            raise ServiceError("Failed to retrieve game statistics") from exc

        return {
            "success": True,
            "data": statistics,
            "metadata": {"timestamp": utcnow_iso(), "filters": sanitized_filters},
        }
