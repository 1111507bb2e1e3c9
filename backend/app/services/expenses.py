"""Business logic for expenses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from .. import models, schemas

LOGGER = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
TWO_PLACES = Decimal("0.01")
ONE_PLACE = Decimal("0.1")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CategoryTotal:
    """Raw aggregate for a category before rounding for presentation."""

    category: str
    total: Decimal
    count: int


def _apply_date_range(
    query: Query, start_date: Optional[date], end_date: Optional[date]
) -> Query:
    if start_date is not None:
        query = query.filter(models.Expense.expense_date >= start_date)
    if end_date is not None:
        query = query.filter(models.Expense.expense_date <= end_date)
    return query


def total_pages(total_items: int, limit: int) -> int:
    """Number of pages needed to show ``total_items`` at ``limit`` per page."""

    if total_items <= 0:
        return 0
    return -(-total_items // max(limit, 1))


def build_category_summary(rows: Sequence[CategoryTotal]) -> list[schemas.CategorySummary]:
    """Round totals and compute each category's share of the grand total."""

    grand_total = sum((row.total for row in rows), Decimal("0"))
    summary = []
    for row in rows:
        if grand_total > 0:
            share = (row.total / grand_total * HUNDRED).quantize(
                ONE_PLACE, rounding=ROUND_HALF_UP
            )
        else:
            share = Decimal("0.0")
        summary.append(
            schemas.CategorySummary(
                category=row.category,
                total=str(row.total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)),
                count=row.count,
                percentage=str(share),
            )
        )
    return summary


class ExpenseService:
    """Encapsulates CRUD and reporting operations for expenses."""

    @staticmethod
    def list_categories() -> list[str]:
        return list(models.EXPENSE_CATEGORIES)

    @staticmethod
    def list_expenses(
        db: Session,
        *,
        page: int = 1,
        limit: int = 100,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[Iterable[models.Expense], int]:
        query = db.query(models.Expense)

        if category and category != ALL_CATEGORIES:
            query = query.filter(models.Expense.category == category)
        query = _apply_date_range(query, start_date, end_date)

        total = query.count()
        limit = max(limit, 1)
        items = (
            query.order_by(
                models.Expense.expense_date.desc(),
                models.Expense.created_at.desc(),
                models.Expense.id.desc(),
            )
            .offset((max(page, 1) - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def get_expense(db: Session, expense_id: int) -> Optional[models.Expense]:
        return db.query(models.Expense).filter(models.Expense.id == expense_id).first()

    @staticmethod
    def create_expense(db: Session, data: schemas.ExpenseCreate) -> models.Expense:
        expense = models.Expense(
            amount=data.amount,
            description=data.description,
            category=data.category,
            expense_date=data.date,
        )
        db.add(expense)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(expense)
        LOGGER.info("Created expense %s in %s", expense.id, expense.category)
        return expense

    @staticmethod
    def update_expense(
        db: Session, expense: models.Expense, data: schemas.ExpenseUpdate
    ) -> models.Expense:
        expense.amount = data.amount
        expense.description = data.description
        expense.category = data.category
        expense.expense_date = data.date
        db.add(expense)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(expense)
        LOGGER.info("Updated expense %s", expense.id)
        return expense

    @staticmethod
    def delete_expense(db: Session, expense: models.Expense) -> int:
        expense_id = expense.id
        db.delete(expense)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        LOGGER.info("Deleted expense %s", expense_id)
        return expense_id

    @staticmethod
    def category_totals(
        db: Session,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryTotal]:
        total_column = func.sum(models.Expense.amount)
        query = db.query(
            models.Expense.category,
            total_column.label("total"),
            func.count(models.Expense.id).label("count"),
        )
        query = _apply_date_range(query, start_date, end_date)
        rows = (
            query.group_by(models.Expense.category)
            .order_by(total_column.desc(), models.Expense.category.asc())
            .all()
        )
        return [
            CategoryTotal(
                category=row.category,
                total=Decimal(str(row.total or 0)),
                count=int(row.count),
            )
            for row in rows
        ]

    @staticmethod
    def summarize_by_category(
        db: Session,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[schemas.CategorySummary]:
        LOGGER.debug(
            "Summarising expenses by category",
            extra={
                "start_date": str(start_date) if start_date else None,
                "end_date": str(end_date) if end_date else None,
            },
        )
        rows = ExpenseService.category_totals(db, start_date=start_date, end_date=end_date)
        return build_category_summary(rows)
