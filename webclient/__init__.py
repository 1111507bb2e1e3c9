"""Client-side state controller for the expense tracker UI."""

from .api import ExpenseApiClient, ExpenseApiError
from .controller import ExpenseController
from .state import AppState, DateRange, ExpenseFilters, ExpenseForm, Tab

__all__ = [
    "AppState",
    "DateRange",
    "ExpenseApiClient",
    "ExpenseApiError",
    "ExpenseController",
    "ExpenseFilters",
    "ExpenseForm",
    "Tab",
]
