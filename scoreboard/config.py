"""Environment-driven settings for the scoreboard API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from scoreboard.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./data/scoreboard.db"


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_echo: bool
    service_name: str
    service_version: str
    environment: str
    api_version: str
    log_level: str
    cors_origins: list[str]
    games_default_limit: int
    games_max_limit: int


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _parse_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def load_settings() -> Settings:
    default_limit = _env_int("GAMES_DEFAULT_LIMIT", 50)
    max_limit = _env_int("GAMES_MAX_LIMIT", 100)
    if max_limit < 1:
        raise ConfigurationError("GAMES_MAX_LIMIT must be >= 1")
    if not 1 <= default_limit <= max_limit:
        raise ConfigurationError(
            f"GAMES_DEFAULT_LIMIT must be between 1 and {max_limit}"
        )

    return Settings(
        database_url=(os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL).strip(),
        database_echo=_env_bool("DATABASE_ECHO"),
        service_name=os.getenv("SERVICE_NAME", "scoreboard-api"),
        service_version=os.getenv("SERVICE_VERSION", "1.0.0"),
        environment=os.getenv("APP_ENV", "development"),
        api_version=os.getenv("API_VERSION", "v1"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS", "*")),
        games_default_limit=default_limit,
        games_max_limit=max_limit,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    settings = load_settings()
    logger.debug(
        "Settings loaded: env=%s api_version=%s database_url_set=%s",
        settings.environment,
        settings.api_version,
        bool(os.getenv("DATABASE_URL")),
    )
    return settings
