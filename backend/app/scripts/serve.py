"""CLI entry point that serves the API with uvicorn, exiting 1 when startup fails."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

import uvicorn

LOGGER = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _default_port() -> int:
    raw = os.getenv("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError("PORT must be an integer") from exc


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the personal expense tracker API.")
    parser.add_argument("--host", default=os.getenv("HOST", DEFAULT_HOST))
    parser.add_argument("--port", type=int, default=None, help="Defaults to $PORT or 3001")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    parser.add_argument(
        "--reload", action="store_true", help="Restart the server when code changes"
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.log_level)
    port = args.port if args.port is not None else _default_port()

    LOGGER.info("Starting server on http://%s:%s", args.host, port)
    try:
        # The app lifespan waits for the database and applies migrations.
        uvicorn.run(
            "backend.app.main:app",
            host=args.host,
            port=port,
            reload=args.reload,
            log_level=args.log_level.lower(),
        )
    except SystemExit as exc:
        if exc.code not in (None, 0):
            LOGGER.error("Server failed to start (exit status %s). Exiting.", exc.code)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
