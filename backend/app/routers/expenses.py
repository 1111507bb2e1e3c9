"""Router exposing expense operations."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ExpenseService, total_pages

router = APIRouter()

NOT_FOUND_DETAIL = "Expense not found"


def _get_or_404(db: Session, expense_id: int):
    expense = ExpenseService.get_expense(db, expense_id)
    if expense is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return expense


@router.get("", response_model=schemas.ExpenseListResponse)
def list_expenses(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of expenses per page"),
    category: Optional[str] = Query(None, description="Filter by category; 'all' disables the filter"),
    start_date: Optional[date] = Query(
        None, alias="startDate", description="Return expenses on or after this date"
    ),
    end_date: Optional[date] = Query(
        None, alias="endDate", description="Return expenses on or before this date"
    ),
) -> schemas.ExpenseListResponse:
    """Return a page of expenses, newest first, with pagination metadata."""

    items, total = ExpenseService.list_expenses(
        db,
        page=page,
        limit=limit,
        category=category.strip() if category else None,
        start_date=start_date,
        end_date=end_date,
    )
    return schemas.ExpenseListResponse(
        expenses=[schemas.ExpenseRead.model_validate(item) for item in items],
        pagination=schemas.PaginationMeta(
            current_page=page,
            total_pages=total_pages(total, limit),
            total_items=total,
        ),
    )


@router.get("/summary", response_model=list[schemas.CategorySummary])
def summarize_expenses(
    db: Session = Depends(get_db),
    start_date: Optional[date] = Query(
        None, alias="startDate", description="Include expenses on or after this date"
    ),
    end_date: Optional[date] = Query(
        None, alias="endDate", description="Include expenses on or before this date"
    ),
) -> list[schemas.CategorySummary]:
    """Aggregate totals, counts and percentage share per category."""

    return ExpenseService.summarize_by_category(db, start_date=start_date, end_date=end_date)


@router.get("/{expense_id}", response_model=schemas.ExpenseRead)
def get_expense(
    expense_id: int, db: Session = Depends(get_db)
) -> schemas.ExpenseRead:
    return _get_or_404(db, expense_id)


@router.post("", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_in: schemas.ExpenseCreate, db: Session = Depends(get_db)
) -> schemas.ExpenseRead:
    """Record a new expense."""
    return ExpenseService.create_expense(db, expense_in)


@router.put("/{expense_id}", response_model=schemas.ExpenseRead)
def update_expense(
    expense_id: int,
    expense_in: schemas.ExpenseUpdate,
    db: Session = Depends(get_db),
) -> schemas.ExpenseRead:
    """Replace the editable fields of an existing expense."""
    expense = _get_or_404(db, expense_id)
    return ExpenseService.update_expense(db, expense, expense_in)


@router.delete("/{expense_id}", response_model=schemas.ExpenseDeleted)
def delete_expense(
    expense_id: int, db: Session = Depends(get_db)
) -> schemas.ExpenseDeleted:
    expense = _get_or_404(db, expense_id)
    deleted_id = ExpenseService.delete_expense(db, expense)
    return schemas.ExpenseDeleted(message="Expense deleted", id=deleted_id)
