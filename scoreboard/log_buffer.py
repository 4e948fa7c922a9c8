"""Recent log records kept in memory for GET /health/logs."""

from __future__ import annotations

import logging
from collections import deque
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

TARGET_LOGGERS = ("scoreboard",)
DEFAULT_CAPACITY = 200

# Set by the request middleware for the lifetime of one HTTP request.
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    logger: str
    message: str
    request_id: str | None = None


class BufferHandler(logging.Handler):
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        super().__init__()
        self._records: deque[LogEntry] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            self._records.append(
                LogEntry(
                    timestamp=created.isoformat().replace("+00:00", "Z"),
                    level=record.levelname,
                    logger=record.name,
                    message=self.format(record),
                    request_id=request_id_var.get(),
                )
            )
        except Exception:
            self.handleError(record)

    def entries(self, limit: int = 100, level: str | None = None) -> list[dict]:
        """Newest first, at most *limit*, optionally only *level* and above."""
        if limit <= 0:
            return []
        selected = list(self._records)
        if level:
            threshold = logging.getLevelName(level.upper())
            if isinstance(threshold, int):
                selected = [
                    entry for entry in selected
                    if logging.getLevelName(entry.level) >= threshold
                ]
        return [asdict(entry) for entry in reversed(selected[-limit:])]

    def clear(self) -> None:
        self._records.clear()


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler()
        _handler.setFormatter(logging.Formatter("%(message)s"))
    return _handler


def install_buffer_handler(level: str = "INFO") -> BufferHandler:
    handler = get_buffer_handler()
    for name in TARGET_LOGGERS:
        target = logging.getLogger(name)
        if handler not in target.handlers:
            target.addHandler(handler)
        target.setLevel(level)
    return handler
