"""Response envelopes shared by the health and games routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success_body(
    data: Any = None,
    message: str = "Success",
    metadata: dict[str, Any] | None = None,
    links: dict[str, dict] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": True,
        "message": message,
        "timestamp": utcnow_iso(),
    }
    if data is not None:
        body["data"] = data
    if metadata:
        body["metadata"] = metadata
    if links:
        body["links"] = links
    return body


def error_body(
    message: str,
    error: str = "Internal Server Error",
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "timestamp": utcnow_iso(),
    }
    if details:
        body["details"] = details
    return body


def _link(href: str, rel: str, title: str, method: str = "GET") -> dict[str, str]:
    return {"href": href, "rel": rel, "method": method, "title": title}


def navigation_links(base_url: str, api_version: str) -> dict[str, dict]:
    """Links to the main entry points, rooted at *base_url*."""
    base = base_url.rstrip("/")
    api_base = f"{base}/api/{api_version}"
    return {
        "self": _link(f"{base}/", "self", "API root"),
        "health": _link(f"{base}/health", "health", "General health check"),
        "liveness": _link(f"{base}/health/liveness", "liveness", "Liveness probe"),
        "readiness": _link(f"{base}/health/readiness", "readiness", "Readiness probe"),
        "detailed": _link(f"{base}/health/detailed", "detailed", "Detailed health"),
        "games": _link(f"{api_base}/games", "games", "Games collection"),
    }
