"""SQLAlchemy model definitions for personal expenses."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import synonym

from ..database import Base

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Personal Care",
    "Other",
)

DESCRIPTION_MAX_LENGTH = 255
CATEGORY_MAX_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Expense(Base):
    """A single spending entry recorded by the user."""

    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        CheckConstraint(
            "length(trim(description)) > 0", name="ck_expenses_description_not_blank"
        ),
    )

    id = Column("expense_id", Integer, primary_key=True, autoincrement=True)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    category = Column(String(CATEGORY_MAX_LENGTH), nullable=False)
    expense_date = Column("date", Date, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )

    date = synonym("expense_date")

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Expense id={self.id} amount={self.amount} category={self.category!r}>"


Index("expenses_date_created_idx", Expense.expense_date, Expense.created_at)
Index("expenses_category_idx", Expense.category)
