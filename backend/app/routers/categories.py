"""Router listing the expense category labels."""

from __future__ import annotations

from fastapi import APIRouter

from ..services import ExpenseService

router = APIRouter()


@router.get("", response_model=list[str])
def list_categories() -> list[str]:
    """Return the fixed set of category labels offered by the client."""
    return ExpenseService.list_categories()
