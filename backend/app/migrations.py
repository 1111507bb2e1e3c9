"""Bring the database schema to the latest Alembic revision."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine.reflection import Inspector

from .database import SQLALCHEMY_DATABASE_URL, _read_int_env

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30

EXPENSES_TABLE = "expenses"
REQUIRED_CHECK_CONSTRAINTS = frozenset(
    {"ck_expenses_amount_positive", "ck_expenses_description_not_blank"}
)
REQUIRED_INDEXES = frozenset({"expenses_date_created_idx", "expenses_category_idx"})

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl

    def _try_lock(handle) -> bool:
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            return False
        return True

    def _unlock(handle) -> None:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

else:  # pragma: no cover - platform specific
    import msvcrt

    def _try_lock(handle) -> bool:
        handle.seek(0)
        try:
            msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
        except OSError:
            return False
        return True

    def _unlock(handle) -> None:
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)


class UnmanagedSchemaError(RuntimeError):
    """Raised when an unversioned ``expenses`` table lacks the store constraints."""


@contextmanager
def _migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Serialise migrations across processes sharing ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        while not _try_lock(handle):
            if time.monotonic() >= deadline:
                raise TimeoutError(f"Timed out waiting for migration lock at {path}")
            time.sleep(LOCK_RETRY_DELAY)
        LOGGER.debug("Acquired migration lock at %s", path)
        try:
            yield
        finally:
            _unlock(handle)


def _missing_store_guarantees(inspector: Inspector) -> list[str]:
    checks = {item.get("name") for item in inspector.get_check_constraints(EXPENSES_TABLE)}
    indexes = {item.get("name") for item in inspector.get_indexes(EXPENSES_TABLE)}
    missing = sorted(REQUIRED_CHECK_CONSTRAINTS - checks) + sorted(REQUIRED_INDEXES - indexes)
    return missing


def build_alembic_config(database_url: str | None = None) -> Config:
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.attributes["configure_logger"] = False
    config.set_main_option("script_location", str(BASE_DIR / "alembic"))
    url = database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    # ConfigParser treats "%" as interpolation syntax.
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def run_database_migrations(database_url: str | None = None) -> None:
    """Upgrade the schema to head.

    An ``expenses`` table created outside Alembic is adopted (stamped at head)
    only when it already carries the amount and description checks and the
    listing indexes; otherwise :class:`UnmanagedSchemaError` is raised and the
    database is left untouched.
    """

    config = build_alembic_config(database_url)
    final_url = config.get_main_option("sqlalchemy.url")
    timeout = _read_int_env(LOCK_TIMEOUT_ENV, DEFAULT_LOCK_TIMEOUT)

    with _migration_lock(BASE_DIR / LOCK_FILENAME, timeout=timeout):
        connect_args = {"check_same_thread": False} if final_url.startswith("sqlite") else {}
        engine = create_engine(final_url, connect_args=connect_args)
        try:
            inspector = inspect(engine)
            versioned = inspector.has_table("alembic_version")
            if not versioned and inspector.has_table(EXPENSES_TABLE):
                missing = _missing_store_guarantees(inspector)
                if missing:
                    raise UnmanagedSchemaError(
                        "Existing expenses table is not managed by Alembic and lacks: "
                        + ", ".join(missing)
                    )
                head = ScriptDirectory.from_config(config).get_current_head()
                LOGGER.info("Adopting existing expenses table at revision %s", head)
                command.stamp(config, "head")
                return

            LOGGER.info("Running database migrations")
            command.upgrade(config, "head")
        finally:
            engine.dispose()
