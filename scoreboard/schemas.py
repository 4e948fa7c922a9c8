from datetime import datetime
from pydantic import BaseModel
from typing import Any, Optional


class GameOut(BaseModel):
    id: int
    game_id: str
    data_source: str
    league_name: Optional[str] = None
    date: str
    home_team: str
    away_team: str
    sport: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: str
    current_period: Optional[str] = None
    period_scores: Optional[Any] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    broadcast_info: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaginationMetadata(BaseModel):
    total: int
    page: int
    limit: int
    offset: int
    totalPages: int
    hasNext: bool
    hasPrevious: bool


class GameStatistics(BaseModel):
    total_games: int
    completed_games: int
    final_games: int
    live_games: int
    scheduled_games: int
    postponed_games: int
    cancelled_games: int
    unique_sports: int
    unique_sources: int


class GameListResponse(BaseModel):
    success: bool
    data: list[GameOut]
    metadata: PaginationMetadata
    timestamp: str


class GameCollectionResponse(BaseModel):
    success: bool
    data: list[GameOut]
    metadata: dict[str, Any]
    timestamp: str


class GameResponse(BaseModel):
    success: bool
    data: GameOut
    message: Optional[str] = None
    timestamp: str


class GameStatisticsResponse(BaseModel):
    success: bool
    data: GameStatistics
    metadata: dict[str, Any]
    timestamp: str


class GameDeletedResponse(BaseModel):
    success: bool
    message: str
    metadata: dict[str, Any]
    timestamp: str
