"""Liveness, readiness and health endpoints.

Each probe pings the database at most once. Adapter failures are reported
in the payload, never raised.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from scoreboard.adapter import DatabaseAdapter
from scoreboard.config import Settings, get_settings
from scoreboard.log_buffer import get_buffer_handler
from scoreboard.responses import error_body, navigation_links, success_body, utcnow_iso

router = APIRouter(prefix="/health", tags=["Health"])
logger = logging.getLogger(__name__)
_PROCESS_STARTED = time.monotonic()


def get_adapter(request: Request) -> DatabaseAdapter | None:
    return getattr(request.app.state, "adapter", None)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _memory_usage() -> dict | None:
    try:
        import resource
    except ImportError:
        return None
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return {"maxRssKb": usage.ru_maxrss}


def _database_status(adapter: DatabaseAdapter | None) -> dict:
    if adapter is None:
        return {"status": "not_configured"}
    try:
        return adapter.get_health_status()
    except Exception as exc:
        logger.warning("Database health lookup failed: %s", exc)
        return {"status": "unhealthy", "error": str(exc)}


def _base_health(settings: Settings) -> dict:
    return {
        "status": "OK",
        "timestamp": utcnow_iso(),
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
        "uptime": round(time.monotonic() - _PROCESS_STARTED, 3),
        "memory": _memory_usage(),
    }


def _health_failed(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=error_body(
            str(exc),
            "Health Check Failed",
            {"suggestion": "Check service logs and database connectivity"},
        ),
    )


def _not_ready(reason: str, error: str | None = None) -> JSONResponse:
    details = {"reason": reason}
    if error:
        details["error"] = error
    return JSONResponse(
        status_code=503,
        content=error_body("Service not ready", "Service Unavailable", details),
    )


@router.get("")
def health(
    request: Request,
    adapter: DatabaseAdapter | None = Depends(get_adapter),
    settings: Settings = Depends(get_app_settings),
):
    try:
        payload = _base_health(settings)
        payload["database"] = _database_status(adapter)
        links = navigation_links(str(request.base_url), settings.api_version)
    except Exception as exc:
        logger.exception("Health check error")
        return _health_failed(exc)
    return success_body(payload, "Service health check completed", links=links)


@router.get("/liveness")
def liveness(settings: Settings = Depends(get_app_settings)):
    return success_body(
        {"status": "alive", "service": settings.service_name},
        "Service is alive and responding",
    )


@router.get("/readiness")
def readiness(
    adapter: DatabaseAdapter | None = Depends(get_adapter),
    settings: Settings = Depends(get_app_settings),
):
    if adapter is None:
        return _not_ready("Database adapter not initialized")

    try:
        connected = adapter.is_connected()
    except Exception as exc:
        logger.exception("Readiness check error")
        return _not_ready("Health check failed", str(exc))

    if not connected:
        return _not_ready("Database not connected")

    return success_body(
        {"status": "ready", "service": settings.service_name, "database": "connected"},
        "Service is ready to serve traffic",
    )


@router.get("/detailed")
def detailed_health(
    request: Request,
    adapter: DatabaseAdapter | None = Depends(get_adapter),
    settings: Settings = Depends(get_app_settings),
):
    try:
        payload = _base_health(settings)
        cpu = os.times()
        payload.update(
            {
                "cpu": {"user": cpu.user, "system": cpu.system},
                "platform": sys.platform,
                "pythonVersion": platform.python_version(),
                "database": _database_status(adapter),
                "system": {
                    "pid": os.getpid(),
                    "arch": platform.machine(),
                    "implementation": platform.python_implementation(),
                    "hostname": platform.node(),
                },
            }
        )
        links = navigation_links(str(request.base_url), settings.api_version)
    except Exception as exc:
        logger.exception("Detailed health check error")
        return _health_failed(exc)
    return success_body(payload, "Detailed health information retrieved", links=links)


@router.get("/logs")
def recent_logs(limit: int = 100, level: str | None = None):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=max(0, min(limit, 200)), level=level)}
