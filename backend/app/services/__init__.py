"""Service layer encapsulating business logic for API routers."""

from .expenses import (
    ALL_CATEGORIES,
    CategoryTotal,
    ExpenseService,
    build_category_summary,
    total_pages,
)

__all__ = [
    "ALL_CATEGORIES",
    "CategoryTotal",
    "ExpenseService",
    "build_category_summary",
    "total_pages",
]
