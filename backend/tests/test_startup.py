from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError, OperationalError

from backend.app import main as app_main
from backend.app.database import DatabaseUnavailableError, wait_for_database
from backend.app.migrations import (
    UnmanagedSchemaError,
    build_alembic_config,
    run_database_migrations,
)
from backend.app.scripts import serve


class _FlakyEngine:
    """Engine stand-in whose first ``failures`` connections are refused."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0
        self._engine = create_engine("sqlite://")

    def connect(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        return self._engine.connect()


def test_wait_for_database_retries_until_connected():
    engine = _FlakyEngine(failures=2)
    sleeps: list[float] = []

    attempt = wait_for_database(engine, max_attempts=5, delay=3, sleep=sleeps.append)

    assert attempt == 3
    assert sleeps == [3, 3]


def test_wait_for_database_gives_up_after_max_attempts(caplog):
    engine = _FlakyEngine(failures=100)
    sleeps: list[float] = []

    with caplog.at_level(logging.WARNING, logger="backend.app.database"):
        with pytest.raises(DatabaseUnavailableError):
            wait_for_database(engine, max_attempts=4, delay=1, sleep=sleeps.append)

    assert engine.calls == 4
    assert sleeps == [1, 1, 1]
    assert "Exceeded 4 database connection attempts" in caplog.text


def test_wait_for_database_reads_retry_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_CONNECT_RETRIES", "2")
    monkeypatch.setenv("DATABASE_CONNECT_RETRY_DELAY", "0")
    engine = _FlakyEngine(failures=5)

    with pytest.raises(DatabaseUnavailableError):
        wait_for_database(engine, sleep=lambda _: None)

    assert engine.calls == 2


def test_wait_for_database_rejects_non_integer_settings(monkeypatch):
    monkeypatch.setenv("DATABASE_CONNECT_RETRIES", "many")
    with pytest.raises(ValueError, match="DATABASE_CONNECT_RETRIES"):
        wait_for_database(_FlakyEngine(failures=0), sleep=lambda _: None)


def test_serve_exits_with_error_when_database_never_answers(monkeypatch):
    attempts = []

    def unavailable(*_args, **_kwargs):
        attempts.append(1)
        raise DatabaseUnavailableError("down")

    def run_startup(*_args, **_kwargs):
        # uvicorn exits with status 3 when the lifespan startup fails.
        try:
            app_main.ensure_database_is_ready()
        except DatabaseUnavailableError as exc:
            raise SystemExit(3) from exc

    monkeypatch.setattr(app_main, "wait_for_database", unavailable)
    monkeypatch.setattr(serve.uvicorn, "run", run_startup)

    assert serve.main(["--port", "0"]) == 1
    assert len(attempts) == 1


def test_serve_uses_port_from_environment(monkeypatch):
    captured = {}
    monkeypatch.setenv("PORT", "4321")
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.setattr(serve.uvicorn, "run", lambda *a, **kw: captured.update(kw))

    assert serve.main([]) == 0
    assert captured["port"] == 4321
    assert captured["host"] == "0.0.0.0"


def test_app_startup_waits_for_database_once(monkeypatch):
    calls = {"wait": 0, "migrate": 0}

    def fake_wait(*_args, **_kwargs):
        calls["wait"] += 1
        return 1

    def fake_migrate(*_args, **_kwargs):
        calls["migrate"] += 1

    monkeypatch.setattr(app_main, "wait_for_database", fake_wait)
    monkeypatch.setattr(app_main, "run_database_migrations", fake_migrate)

    with TestClient(app_main.app):
        pass

    assert calls == {"wait": 1, "migrate": 1}


def test_app_startup_can_skip_migrations(monkeypatch):
    migrated = []
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "0")
    monkeypatch.setattr(app_main, "wait_for_database", lambda *a, **k: 1)
    monkeypatch.setattr(app_main, "run_database_migrations", lambda *a, **k: migrated.append(1))

    app_main.ensure_database_is_ready()

    assert migrated == []


def test_run_database_migrations_creates_expenses_table(tmp_path):
    url = f"sqlite:///{(tmp_path / 'fresh.db').as_posix()}"

    run_database_migrations(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert "expenses" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("expenses")}
        assert {"expense_id", "amount", "description", "category", "date"} <= columns
        with engine.connect() as connection:
            version = connection.scalar(text("SELECT version_num FROM alembic_version"))
        assert version == "20261017_0001"
    finally:
        engine.dispose()


_LEGACY_COLUMNS = (
    "expense_id INTEGER PRIMARY KEY, amount NUMERIC(10, 2) NOT NULL,"
    " description VARCHAR(255) NOT NULL, category VARCHAR(100) NOT NULL,"
    " date DATE NOT NULL, created_at DATETIME, updated_at DATETIME"
)


def _create_legacy_table(url: str, *statements: str) -> None:
    engine = create_engine(url)
    try:
        with engine.begin() as connection:
            for statement in statements:
                connection.execute(text(statement))
    finally:
        engine.dispose()


def test_run_database_migrations_refuses_unconstrained_legacy_table(tmp_path):
    url = f"sqlite:///{(tmp_path / 'legacy.db').as_posix()}"
    _create_legacy_table(url, f"CREATE TABLE expenses ({_LEGACY_COLUMNS})")

    with pytest.raises(UnmanagedSchemaError, match="ck_expenses_amount_positive"):
        run_database_migrations(url)

    engine = create_engine(url)
    try:
        assert not inspect(engine).has_table("alembic_version")
    finally:
        engine.dispose()


def test_run_database_migrations_adopts_fully_constrained_legacy_table(tmp_path):
    url = f"sqlite:///{(tmp_path / 'adopted.db').as_posix()}"
    _create_legacy_table(
        url,
        f"CREATE TABLE expenses (\n{_LEGACY_COLUMNS},\n"
        "CONSTRAINT ck_expenses_amount_positive CHECK (amount > 0),\n"
        "CONSTRAINT ck_expenses_description_not_blank CHECK (length(trim(description)) > 0)\n)",
        "CREATE INDEX expenses_date_created_idx ON expenses (date, created_at)",
        "CREATE INDEX expenses_category_idx ON expenses (category)",
    )

    run_database_migrations(url)

    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            version = connection.scalar(text("SELECT version_num FROM alembic_version"))
        assert version == "20261017_0001"
        with pytest.raises(IntegrityError):
            with engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO expenses (amount, description, category, date)"
                        " VALUES (-5, '   ', 'Other', '2025-01-01')"
                    )
                )
    finally:
        engine.dispose()


def test_migrated_schema_rejects_invalid_rows(tmp_path):
    url = f"sqlite:///{(tmp_path / 'checked.db').as_posix()}"
    run_database_migrations(url)

    engine = create_engine(url)
    try:
        for amount, description in ((-5, "Refund"), (10, "   ")):
            with pytest.raises(IntegrityError):
                with engine.begin() as connection:
                    connection.execute(
                        text(
                            "INSERT INTO expenses (amount, description, category, date)"
                            " VALUES (:amount, :description, 'Other', '2025-01-01')"
                        ),
                        {"amount": amount, "description": description},
                    )
    finally:
        engine.dispose()


def test_alembic_config_escapes_percent_signs():
    config = build_alembic_config("postgresql://user:p%40ss@db/expenses")
    assert config.get_main_option("sqlalchemy.url") == "postgresql://user:p%40ss@db/expenses"
