"""CLI entrypoint for database setup and running the API server."""

from __future__ import annotations

import argparse
import logging

from scoreboard.adapter import create_adapter
from scoreboard.config import get_settings

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Manage the scoreboard API database and server.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables if they do not exist.")

    drop = subparsers.add_parser("drop-db", help="Drop all scoreboard tables.")
    drop.add_argument(
        "--yes",
        action="store_true",
        help="Confirm dropping every table.",
    )

    serve = subparsers.add_parser("serve", help="Run the API with uvicorn.")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    return parser.parse_args(argv)


def init_db() -> None:
    adapter = create_adapter(get_settings())
    adapter.connect()
    try:
        logger.info("Tables ready on %s", adapter.dialect)
    finally:
        adapter.disconnect()


def drop_db(confirmed: bool) -> None:
    if not confirmed:
        raise SystemExit("Refusing to drop tables without --yes")
    adapter = create_adapter(get_settings())
    adapter.connect()
    try:
        adapter.drop_tables()
    finally:
        adapter.disconnect()


def serve(host: str, port: int, reload: bool) -> None:
    import uvicorn

    uvicorn.run("scoreboard.main:app", host=host, port=port, reload=reload)


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    if args.command == "init-db":
        init_db()
    elif args.command == "drop-db":
        drop_db(args.yes)
    elif args.command == "serve":
        logger.info("Starting server host=%s port=%s", args.host, args.port)
        serve(args.host, args.port, args.reload)


if __name__ == "__main__":
    main()
