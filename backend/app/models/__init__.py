"""Expose SQLAlchemy models for convenient imports."""

from .expense import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    EXPENSE_CATEGORIES,
    Expense,
)

__all__ = [
    "CATEGORY_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "EXPENSE_CATEGORIES",
    "Expense",
]
