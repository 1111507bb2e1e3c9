"""Routers package."""

from .categories import router as categories_router
from .expenses import router as expenses_router

__all__ = [
    "categories_router",
    "expenses_router",
]
