"""Games endpoints, mounted under /api/{version}."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from scoreboard.errors import UnavailableError
from scoreboard.responses import utcnow_iso
from scoreboard.schemas import (
    GameCollectionResponse,
    GameDeletedResponse,
    GameListResponse,
    GameResponse,
    GameStatisticsResponse,
)
from scoreboard.services import GamesService

router = APIRouter(prefix="/games", tags=["Games"])


def get_games_service(request: Request) -> GamesService:
    service = getattr(request.app.state, "games_service", None)
    if service is None:
        raise UnavailableError("Database adapter not initialized")
    return service


def _stamp(result: dict[str, Any]) -> dict[str, Any]:
    return {**result, "timestamp": utcnow_iso()}


@router.get("", response_model=GameListResponse)
def list_games(
    date: str | None = None,
    sport: str | None = None,
    status: str | None = None,
    conference: str | None = None,
    home_team: str | None = None,
    away_team: str | None = None,
    data_source: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    service: GamesService = Depends(get_games_service),
):
    filters = {
        "date": date,
        "sport": sport,
        "status": status,
        "conference": conference,
        "home_team": home_team,
        "away_team": away_team,
        "data_source": data_source,
    }
    options = {
        "limit": limit,
        "offset": offset,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    return _stamp(service.get_games(filters, options))


@router.get("/live", response_model=GameCollectionResponse)
def live_games(
    sport: str | None = None,
    conference: str | None = None,
    service: GamesService = Depends(get_games_service),
):
    return _stamp(service.get_live_games({"sport": sport, "conference": conference}))


@router.get("/statistics", response_model=GameStatisticsResponse)
def game_statistics(
    date: str | None = None,
    sport: str | None = None,
    data_source: str | None = None,
    service: GamesService = Depends(get_games_service),
):
    filters = {"date": date, "sport": sport, "data_source": data_source}
    return _stamp(service.get_game_statistics(filters))


@router.get("/date-range", response_model=GameCollectionResponse)
def games_by_date_range(
    start_date: str | None = None,
    end_date: str | None = None,
    sport: str | None = None,
    status: str | None = None,
    service: GamesService = Depends(get_games_service),
):
    filters = {"sport": sport, "status": status}
    return _stamp(service.get_games_by_date_range(start_date, end_date, filters))


@router.get("/team/{team_name}", response_model=GameCollectionResponse)
def games_by_team(
    team_name: str,
    season: str | None = None,
    sport: str | None = None,
    status: str | None = None,
    service: GamesService = Depends(get_games_service),
):
    filters = {"season": season, "sport": sport, "status": status}
    return _stamp(service.get_games_by_team(team_name, filters))


@router.get("/{game_id}", response_model=GameResponse)
def get_game(game_id: str, service: GamesService = Depends(get_games_service)):
    return _stamp(service.get_game_by_id(game_id))


@router.post("", response_model=GameResponse, status_code=201)
def create_game(payload: dict, service: GamesService = Depends(get_games_service)):
    return _stamp(service.create_game(payload))


@router.put("/{game_id}", response_model=GameResponse)
def update_game(
    game_id: str,
    payload: dict,
    service: GamesService = Depends(get_games_service),
):
    return _stamp(service.update_game(game_id, payload))


@router.delete("/{game_id}", response_model=GameDeletedResponse)
def delete_game(game_id: str, service: GamesService = Depends(get_games_service)):
    return _stamp(service.delete_game(game_id))
