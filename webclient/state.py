"""Serializable UI state for the expense tracker and its pure transitions.

Every function here takes an :class:`AppState` and returns a new one; nothing
mutates in place and nothing talks to the network. The controller in
:mod:`webclient.controller` is the only owner of the current state.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

ALL_CATEGORIES = "all"


class Tab(str, enum.Enum):
    """Views reachable from the navigation bar."""

    ADD = "add"
    LIST = "list"
    SUMMARY = "summary"


@dataclass(frozen=True)
class ExpenseRecord:
    """An expense as returned by the API."""

    id: int
    amount: Decimal
    description: str
    category: str
    date: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ExpenseRecord":
        return cls(
            id=int(payload["id"]),
            amount=Decimal(str(payload["amount"])),
            description=payload["description"],
            category=payload["category"],
            date=payload["date"],
            created_at=payload.get("createdAt"),
            updated_at=payload.get("updatedAt"),
        )


@dataclass(frozen=True)
class SummaryRow:
    category: str
    total: Decimal
    count: int
    percentage: Decimal

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "SummaryRow":
        return cls(
            category=payload["category"],
            total=Decimal(str(payload["total"])),
            count=int(payload["count"]),
            percentage=Decimal(str(payload["percentage"])),
        )


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    total_pages: int = 0
    total_items: int = 0

    @classmethod
    def from_json(cls, payload: Optional[Mapping[str, Any]]) -> "Pagination":
        if not payload:
            return cls()
        return cls(
            current_page=int(payload.get("currentPage", 1)),
            total_pages=int(payload.get("totalPages", 0)),
            total_items=int(payload.get("totalItems", 0)),
        )


def _today() -> str:
    return date.today().isoformat()


@dataclass(frozen=True)
class ExpenseForm:
    """Contents of the add/edit form, kept as the raw strings the user typed."""

    amount: str = ""
    description: str = ""
    category: str = ""
    date: str = field(default_factory=_today)

    def to_payload(self) -> dict[str, str]:
        return {
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "date": self.date,
        }


@dataclass(frozen=True)
class ExpenseFilters:
    category: str = ""
    start_date: str = ""
    end_date: str = ""

    def is_empty(self) -> bool:
        category = "" if self.category == ALL_CATEGORIES else self.category
        return not (category or self.start_date or self.end_date)


@dataclass(frozen=True)
class DateRange:
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True)
class AppState:
    expenses: tuple[ExpenseRecord, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)
    categories: tuple[str, ...] = ()
    summary: tuple[SummaryRow, ...] = ()
    all_expenses_total: Decimal = Decimal("0")
    loading: bool = False
    active_tab: Tab = Tab.ADD
    editing: Optional[ExpenseRecord] = None
    form: ExpenseForm = field(default_factory=ExpenseForm)
    filters: ExpenseFilters = field(default_factory=ExpenseFilters)
    summary_range: DateRange = field(default_factory=DateRange)
    delete_target: Optional[ExpenseRecord] = None

    @property
    def delete_modal_open(self) -> bool:
        return self.delete_target is not None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-friendly snapshot of the state."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def select_tab(state: AppState, tab: Tab) -> AppState:
    return replace(state, active_tab=Tab(tab))


def set_loading(state: AppState, loading: bool) -> AppState:
    return replace(state, loading=loading)


def update_form(state: AppState, **changes: str) -> AppState:
    return replace(state, form=replace(state.form, **changes))


def reset_form(state: AppState) -> AppState:
    return replace(state, form=ExpenseForm(), editing=None)


def start_edit(state: AppState, expense: ExpenseRecord) -> AppState:
    """Load ``expense`` into the form and switch to the add/edit tab."""
    form = ExpenseForm(
        amount=str(expense.amount),
        description=expense.description,
        category=expense.category,
        date=expense.date,
    )
    return replace(state, editing=expense, form=form, active_tab=Tab.ADD)


def cancel_edit(state: AppState) -> AppState:
    return reset_form(state)


def set_filters(state: AppState, filters: ExpenseFilters) -> AppState:
    return replace(state, filters=filters)


def clear_filters(state: AppState) -> AppState:
    return replace(state, filters=ExpenseFilters())


def set_summary_range(state: AppState, summary_range: DateRange) -> AppState:
    return replace(state, summary_range=summary_range)


def request_delete(state: AppState, expense_id: int) -> AppState:
    """Open the confirmation modal for an expense on the current page."""
    target = next((item for item in state.expenses if item.id == expense_id), None)
    return replace(state, delete_target=target)


def cancel_delete(state: AppState) -> AppState:
    return replace(state, delete_target=None)


def apply_expense_page(
    state: AppState, expenses: Sequence[ExpenseRecord], pagination: Pagination
) -> AppState:
    return replace(state, expenses=tuple(expenses), pagination=pagination)


def reset_expense_page(state: AppState) -> AppState:
    return replace(state, expenses=(), pagination=Pagination())


def apply_summary(state: AppState, rows: Sequence[SummaryRow]) -> AppState:
    return replace(state, summary=tuple(rows))


def apply_categories(state: AppState, categories: Sequence[str]) -> AppState:
    return replace(state, categories=tuple(categories))


def apply_total(state: AppState, total: Decimal) -> AppState:
    return replace(state, all_expenses_total=total)


def clamp_page(state: AppState, page: int) -> Optional[int]:
    """Return ``page`` when it lies within ``[1, total_pages]``, else ``None``."""
    if 1 <= page <= state.pagination.total_pages:
        return page
    return None


def page_after_delete(state: AppState) -> int:
    """Page to show once the delete target is gone.

    Removing the only row of a page past the first steps back one page.
    """
    current = state.pagination.current_page
    if len(state.expenses) == 1 and current > 1:
        return current - 1
    return current
