from __future__ import annotations

import logging
import time
import uuid

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scoreboard.adapter import DatabaseAdapter, create_adapter
from scoreboard.config import Settings, get_settings
from scoreboard.errors import ConfigurationError, ScoreboardError
from scoreboard.log_buffer import install_buffer_handler, request_id_var
from scoreboard.repositories import GamesRepository
from scoreboard.responses import error_body, navigation_links, success_body
from scoreboard.routes import games, health
from scoreboard.services import GamesService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_games_service(adapter: DatabaseAdapter, settings: Settings) -> GamesService:
    return GamesService(
        GamesRepository(adapter),
        default_limit=settings.games_default_limit,
        max_limit=settings.games_max_limit,
    )


def create_app(
    settings: Settings | None = None,
    adapter: DatabaseAdapter | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    if adapter is None:
        try:
            adapter = create_adapter(settings)
        except ConfigurationError as exc:
            logger.error("Database adapter not created: %s", exc.message)

    app = FastAPI(
        title="Scoreboard API",
        description="Sports scoreboard: games and health endpoints",
        version=settings.service_version,
    )
    app.state.settings = settings
    app.state.adapter = adapter
    app.state.games_service = (
        build_games_service(adapter, settings) if adapter is not None else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Request-ID"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            request_id_var.reset(token)

    @app.exception_handler(ScoreboardError)
    async def handle_scoreboard_error(request: Request, exc: ScoreboardError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info(
                "%s %s rejected (%s): %s",
                request.method,
                request.url.path,
                exc.status_code,
                exc.message,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.error_type, exc.details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error"),
        )

    @app.on_event("startup")
    def connect_database() -> None:
        configure_logging(settings.log_level)
        install_buffer_handler(settings.log_level)
        logger.info(
            "App starting up: service=%s env=%s api=%s",
            settings.service_name,
            settings.environment,
            settings.api_version,
        )
        current = app.state.adapter
        if current is None:
            logger.warning("No database adapter configured; readiness will fail.")
            return
        try:
            current.connect()
        except Exception:
            logger.exception("Database connection failed; readiness will report not connected.")

    @app.on_event("shutdown")
    def disconnect_database() -> None:
        current = app.state.adapter
        if current is not None:
            current.disconnect()

    @app.get("/")
    def root(request: Request):
        return success_body(
            {
                "name": "Scoreboard API",
                "version": settings.api_version,
                "environment": settings.environment,
                "documentation": {"swagger": "/docs", "openapi": "/openapi.json"},
            },
            "Scoreboard API",
            links=navigation_links(str(request.base_url), settings.api_version),
        )

    api = APIRouter(prefix=f"/api/{settings.api_version}")
    api.include_router(games.router)

    app.include_router(health.router)
    app.include_router(api)
    return app


app = create_app()
