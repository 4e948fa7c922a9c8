from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from .db import Base

GAME_STATUSES = (
    "scheduled",
    "in_progress",
    "completed",
    "final",
    "postponed",
    "cancelled",
)


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(String, nullable=False, unique=True)
    data_source = Column(String, nullable=False)
    league_name = Column(String, nullable=True)
    date = Column(String(10), nullable=False, index=True)   # YYYY-MM-DD
    home_team = Column(String, nullable=False, index=True)
    away_team = Column(String, nullable=False, index=True)
    sport = Column(String(50), nullable=False, index=True)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="scheduled", index=True)
    current_period = Column(String, nullable=True)
    period_scores = Column(JSON, nullable=True)

    # Venue / location
    venue = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    country = Column(String, nullable=True)
    timezone = Column(String, nullable=True)

    broadcast_info = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    conference = Column(String, nullable=True, index=True)
    sport = Column(String, nullable=False, default="")
