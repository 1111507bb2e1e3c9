from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Sequence

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from ..models.expense import CATEGORY_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from .common import CamelModel, MessageResponse, PaginationMeta

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("99999999.99")
REQUIRED_FIELDS = ("amount", "description", "category", "date")

MISSING_FIELDS_MESSAGE = "All fields are required"
INVALID_AMOUNT_MESSAGE = "Invalid amount"
EMPTY_DESCRIPTION_MESSAGE = "Description cannot be empty"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _invalid_amount() -> PydanticCustomError:
    return PydanticCustomError("invalid_amount", INVALID_AMOUNT_MESSAGE)


class ExpenseWrite(CamelModel):
    """Payload accepted when creating or replacing an expense."""

    amount: Decimal = Field(..., description="Positive amount with two decimals")
    description: str = Field(..., description="What the money was spent on")
    category: str = Field(..., description="One of the configured category labels")
    date: dt.date = Field(..., description="Day the expense happened")

    @model_validator(mode="before")
    @classmethod
    def _require_all_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        missing = [name for name in REQUIRED_FIELDS if _is_missing(data.get(name))]
        if missing:
            raise PydanticCustomError(
                "missing_fields", MISSING_FIELDS_MESSAGE, {"fields": missing}
            )
        return data

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> Decimal:
        if isinstance(value, bool):
            raise _invalid_amount()
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise _invalid_amount() from exc
        if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
            raise _invalid_amount()
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise _invalid_amount()
        return amount

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        stripped = value.strip()
        if not stripped:
            raise PydanticCustomError("blank_description", EMPTY_DESCRIPTION_MESSAGE)
        if len(stripped) > DESCRIPTION_MAX_LENGTH:
            raise PydanticCustomError(
                "description_too_long",
                "Description must be at most {max_length} characters",
                {"max_length": DESCRIPTION_MAX_LENGTH},
            )
        return stripped

    @field_validator("category", mode="before")
    @classmethod
    def _strip_category(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        stripped = value.strip()
        if not stripped:
            raise PydanticCustomError("blank_category", "Category cannot be empty")
        if len(stripped) > CATEGORY_MAX_LENGTH:
            raise PydanticCustomError(
                "category_too_long",
                "Category must be at most {max_length} characters",
                {"max_length": CATEGORY_MAX_LENGTH},
            )
        return stripped


class ExpenseCreate(ExpenseWrite):
    """Schema used to create new expenses."""

    pass


class ExpenseUpdate(ExpenseWrite):
    """Schema used to overwrite every editable field of an expense."""

    pass


class ExpenseRead(CamelModel):
    """Schema representing stored expenses."""

    id: int
    amount: Decimal
    description: str
    category: str
    date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime


class ExpenseListResponse(BaseModel):
    expenses: Sequence[ExpenseRead]
    pagination: PaginationMeta


class ExpenseDeleted(MessageResponse):
    id: int


class CategorySummary(CamelModel):
    """Aggregated spending for a single category."""

    category: str
    total: str = Field(..., description="Sum of amounts, two decimals")
    count: int = Field(..., ge=0)
    percentage: str = Field(..., description="Share of the grand total, one decimal")
