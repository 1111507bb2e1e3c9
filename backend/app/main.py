"""Expose the expense tracker FastAPI app and enforce local development CORS defaults."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import schemas
from .database import _read_bool_env, get_db, wait_for_database
from .errors import register_error_handlers
from .migrations import run_database_migrations
from .routers import categories_router, expenses_router

LOGGER = logging.getLogger(__name__)

API_PREFIX = "/api"
RUN_MIGRATIONS_ENV = "RUN_MIGRATIONS_ON_STARTUP"

LOCAL_DEVELOPMENT_ORIGIN = "http://localhost:3000"
LOCAL_DEVELOPMENT_ORIGINS = {
    LOCAL_DEVELOPMENT_ORIGIN,
    "http://127.0.0.1:3000",
}
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

DEFAULT_ALLOWED_ORIGINS = {
    *LOCAL_DEVELOPMENT_ORIGINS,
    "http://0.0.0.0:3000",
    "http://frontend:3000",
}


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def _read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""
    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _load_allowed_origins_from_env() -> list[str]:
    raw_value = os.getenv("BACKEND_ALLOWED_ORIGINS")
    if not raw_value:
        return []
    return _read_allowed_origins(_split_raw_origins(raw_value))


def _resolve_allowed_origins() -> list[str]:
    env_origins = _load_allowed_origins_from_env()
    if env_origins:
        origins = list(env_origins)
    else:
        origins = _read_allowed_origins(DEFAULT_ALLOWED_ORIGINS)

    missing_dev_origins = [
        origin for origin in LOCAL_DEVELOPMENT_ORIGINS if origin not in origins
    ]
    if missing_dev_origins:
        # The local dev server must always be able to reach the API.
        origins = _read_allowed_origins([*origins, *missing_dev_origins])

    return origins


def ensure_database_is_ready() -> None:
    """Wait for the database and apply pending migrations before serving requests."""

    LOGGER.info("Waiting for the database before serving requests")
    wait_for_database()
    if not _read_bool_env(RUN_MIGRATIONS_ENV, True):
        LOGGER.info("Skipping migrations via %s", RUN_MIGRATIONS_ENV)
        return
    run_database_migrations()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_database_is_ready()
    yield


app = FastAPI(title="Personal Expense Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(expenses_router, prefix=f"{API_PREFIX}/expenses", tags=["expenses"])
app.include_router(categories_router, prefix=f"{API_PREFIX}/categories", tags=["categories"])


@app.get(
    f"{API_PREFIX}/health",
    tags=["health"],
    response_model=schemas.HealthStatus,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": schemas.HealthStatus}},
)
def read_health(db: Session = Depends(get_db)):
    """Report liveness together with database connectivity."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        LOGGER.warning("Health check could not reach the database: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "Error", "database": "Disconnected"},
        )
    return {"status": "OK", "database": "Connected"}
