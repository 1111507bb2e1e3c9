from __future__ import annotations

import os
import sys
import tempfile
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The application engine is created at import time, so point it at a scratch
# SQLite file before anything from ``backend.app`` is imported.
_STARTUP_DB_DIR = tempfile.mkdtemp(prefix="expense-tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_STARTUP_DB_DIR, 'startup.db').as_posix()}"
os.environ["DATABASE_CONNECT_RETRY_DELAY"] = "0"

from backend.app import models  # noqa: E402
from backend.app.database import Base, get_db  # noqa: E402
from backend.app.main import app  # noqa: E402

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_expense(db_session: Session) -> Callable[..., models.Expense]:
    """Insert an expense directly, bypassing the API."""

    base_time = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    counter = {"value": 0}

    def _make(
        amount: str = "10.00",
        description: str = "Lunch",
        category: str = "Food & Dining",
        expense_date: date = date(2025, 1, 15),
        created_at: datetime | None = None,
    ) -> models.Expense:
        counter["value"] += 1
        stamp = created_at or base_time + timedelta(seconds=counter["value"])
        expense = models.Expense(
            amount=Decimal(amount),
            description=description,
            category=category,
            expense_date=expense_date,
            created_at=stamp,
            updated_at=stamp,
        )
        db_session.add(expense)
        db_session.commit()
        db_session.refresh(expense)
        return expense

    return _make
