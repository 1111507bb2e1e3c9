"""Expose Pydantic schemas for convenient imports."""

from .common import CamelModel, MessageResponse, PaginationMeta
from .expense import (
    CategorySummary,
    ExpenseCreate,
    ExpenseDeleted,
    ExpenseListResponse,
    ExpenseRead,
    ExpenseUpdate,
    ExpenseWrite,
)
from .health import HealthStatus

__all__ = [
    "CamelModel",
    "MessageResponse",
    "PaginationMeta",
    "CategorySummary",
    "ExpenseCreate",
    "ExpenseDeleted",
    "ExpenseListResponse",
    "ExpenseRead",
    "ExpenseUpdate",
    "ExpenseWrite",
    "HealthStatus",
]
