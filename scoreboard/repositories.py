"""Data access for games, one short-lived session per call."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from scoreboard.adapter import DatabaseAdapter
from scoreboard.errors import ConflictError, ValidationError
from scoreboard.models import Game, Team
from scoreboard.schemas import GameOut

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("game_id", "date", "home_team", "away_team", "sport", "status", "data_source")
IMMUTABLE_FIELDS = {"id", "game_id", "created_at"}

SORTABLE_COLUMNS = {
    "date": Game.date,
    "home_team": Game.home_team,
    "away_team": Game.away_team,
    "sport": Game.sport,
    "status": Game.status,
    "created_at": Game.created_at,
}

_GAME_COLUMNS = frozenset(column.name for column in Game.__table__.columns)


def _conference_clause(conference: str):
    conference_teams = select(Team.name).where(Team.conference == conference)
    return or_(Game.home_team.in_(conference_teams), Game.away_team.in_(conference_teams))


def _status_count(status: str):
    return func.count(case((Game.status == status, 1)))


def _serialize(game: Game) -> dict:
    return GameOut.model_validate(game).model_dump()


class GamesRepository:
    def __init__(self, adapter: DatabaseAdapter) -> None:
        self.adapter = adapter

    def _apply_filters(self, query: Query, filters: dict[str, Any]) -> Query:
        if filters.get("date"):
            query = query.filter(Game.date == filters["date"])
        if filters.get("sport"):
            query = query.filter(Game.sport == filters["sport"])
        if filters.get("status"):
            query = query.filter(Game.status == filters["status"])
        if filters.get("conference"):
            query = query.filter(_conference_clause(filters["conference"]))
        if filters.get("data_source"):
            query = query.filter(Game.data_source == filters["data_source"])
        if filters.get("home_team"):
            query = query.filter(Game.home_team == filters["home_team"])
        if filters.get("away_team"):
            query = query.filter(Game.away_team == filters["away_team"])
        return query

    def _get(self, db: Session, game_id: str) -> Game | None:
        return db.query(Game).filter(Game.game_id == game_id).one_or_none()

    def find_all(
        self,
        filters: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> list[dict]:
        filters = filters or {}
        options = options or {}
        column = SORTABLE_COLUMNS.get(options.get("sort_by", "date"), Game.date)
        ordering = column.asc() if options.get("sort_order", "DESC") == "ASC" else column.desc()

        with self.adapter.session() as db:
            games = (
                self._apply_filters(db.query(Game), filters)
                .order_by(ordering, Game.id.asc())
                .limit(options.get("limit", 50))
                .offset(options.get("offset", 0))
                .all()
            )
            return [_serialize(game) for game in games]

    def find_by_id(self, game_id: str) -> dict | None:
        with self.adapter.session() as db:
            game = self._get(db, game_id)
            return _serialize(game) if game else None

    def exists(self, game_id: str) -> bool:
        with self.adapter.session() as db:
            return db.query(Game.id).filter(Game.game_id == game_id).first() is not None

    def find_live_games(self, filters: dict[str, Any] | None = None) -> list[dict]:
        filters = filters or {}
        with self.adapter.session() as db:
            query = db.query(Game).filter(Game.status == "in_progress")
            if filters.get("sport"):
                query = query.filter(Game.sport == filters["sport"])
            if filters.get("conference"):
                query = query.filter(_conference_clause(filters["conference"]))
            games = query.order_by(Game.date.asc(), Game.home_team.asc()).all()
            return [_serialize(game) for game in games]

    def find_by_date_range(
        self,
        start_date: str,
        end_date: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict]:
        filters = filters or {}
        with self.adapter.session() as db:
            query = db.query(Game).filter(Game.date.between(start_date, end_date))
            if filters.get("sport"):
                query = query.filter(Game.sport == filters["sport"])
            if filters.get("status"):
                query = query.filter(Game.status == filters["status"])
            games = query.order_by(Game.date.asc(), Game.home_team.asc()).all()
            return [_serialize(game) for game in games]

    def find_by_team(self, team_name: str, filters: dict[str, Any] | None = None) -> list[dict]:
        filters = filters or {}
        with self.adapter.session() as db:
            query = db.query(Game).filter(
                or_(Game.home_team == team_name, Game.away_team == team_name)
            )
            if filters.get("season"):
                query = query.filter(Game.date.like(f"{filters['season']}%"))
            if filters.get("sport"):
                query = query.filter(Game.sport == filters["sport"])
            if filters.get("status"):
                query = query.filter(Game.status == filters["status"])
            games = query.order_by(Game.date.desc(), Game.id.asc()).all()
            return [_serialize(game) for game in games]

    def create(self, game_data: dict[str, Any]) -> dict:
        for field in REQUIRED_FIELDS:
            if not game_data.get(field):
                raise ValidationError(f"Missing required field: {field}", field=field)

        values = {
            key: value
            for key, value in game_data.items()
            if key in _GAME_COLUMNS and key not in {"id", "created_at", "updated_at"}
        }
        try:
            with self.adapter.session() as db:
                game = Game(**values)
                db.add(game)
                db.flush()
                db.refresh(game)
                created = _serialize(game)
        except IntegrityError as exc:
            logger.warning("Duplicate game_id=%s rejected", game_data.get("game_id"))
            raise ConflictError("Game with this ID already exists") from exc

        logger.info("Created game game_id=%s", created["game_id"])
        return created

    def update(self, game_id: str, update_data: dict[str, Any]) -> dict | None:
        with self.adapter.session() as db:
            game = self._get(db, game_id)
            if game is None:
                return None

            changes = {
                key: value
                for key, value in update_data.items()
                if key in _GAME_COLUMNS and key not in IMMUTABLE_FIELDS and key != "updated_at"
            }
            if not changes:
                return _serialize(game)

            for key, value in changes.items():
                setattr(game, key, value)
            game.updated_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(game)
            updated = _serialize(game)

        logger.info("Updated game game_id=%s fields=%s", game_id, ",".join(sorted(changes)))
        return updated

    def delete(self, game_id: str) -> bool:
        with self.adapter.session() as db:
            deleted = (
                db.query(Game)
                .filter(Game.game_id == game_id)
                .delete(synchronize_session=False)
            )
        if deleted:
            logger.info("Deleted game game_id=%s", game_id)
        return deleted > 0

    def count(self, filters: dict[str, Any] | None = None) -> int:
        with self.adapter.session() as db:
            query = self._apply_filters(db.query(func.count(Game.id)), filters or {})
            return query.scalar() or 0

    def get_statistics(self, filters: dict[str, Any] | None = None) -> dict[str, int]:
        filters = filters or {}
        with self.adapter.session() as db:
            query = db.query(
                func.count(Game.id).label("total_games"),
                _status_count("completed").label("completed_games"),
                _status_count("final").label("final_games"),
                _status_count("in_progress").label("live_games"),
                _status_count("scheduled").label("scheduled_games"),
                _status_count("postponed").label("postponed_games"),
                _status_count("cancelled").label("cancelled_games"),
                func.count(func.distinct(Game.sport)).label("unique_sports"),
                func.count(func.distinct(Game.data_source)).label("unique_sources"),
            )
            if filters.get("date"):
                query = query.filter(Game.date == filters["date"])
            if filters.get("sport"):
                query = query.filter(Game.sport == filters["sport"])
            if filters.get("data_source"):
                query = query.filter(Game.data_source == filters["data_source"])
            row = query.one()
            return {key: int(value or 0) for key, value in row._mapping.items()}
