"""HTTP client for the expense tracker API."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional

import httpx

from .state import (
    ALL_CATEGORIES,
    ExpenseFilters,
    ExpenseRecord,
    Pagination,
    SummaryRow,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
API_PREFIX = "/api"
TOTAL_PAGE_SIZE = 100


class ExpenseApiError(RuntimeError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, detail: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or []


def _filter_params(filters: Optional[ExpenseFilters]) -> dict[str, str]:
    if filters is None:
        return {}
    params: dict[str, str] = {}
    if filters.category and filters.category != ALL_CATEGORIES:
        params["category"] = filters.category
    if filters.start_date:
        params["startDate"] = filters.start_date
    if filters.end_date:
        params["endDate"] = filters.end_date
    return params


class ExpenseApiClient:
    """Thin wrapper translating API calls into state records.

    ``http`` may be any :class:`httpx.Client`; the FastAPI ``TestClient`` works
    too, which keeps tests free of real sockets.
    """

    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        prefix: str = API_PREFIX,
    ) -> None:
        self._http = http if http is not None else httpx.Client(base_url=base_url)
        self._prefix = prefix.rstrip("/")

    def close(self) -> None:
        self._http.close()

    def _url(self, path: str) -> str:
        return f"{self._prefix}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._http.request(method, self._url(path), **kwargs)
        if response.is_error:
            detail = response.reason_phrase
            errors: list[str] = []
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, Mapping):
                detail = str(body.get("detail", detail))
                errors = [str(item) for item in body.get("errors", [])]
            raise ExpenseApiError(response.status_code, detail, errors)
        return response.json()

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health")

    def list_expenses(
        self,
        page: int = 1,
        limit: int = 5,
        filters: Optional[ExpenseFilters] = None,
    ) -> tuple[list[ExpenseRecord], Pagination]:
        params = {"page": str(page), "limit": str(limit), **_filter_params(filters)}
        data = self._request("GET", "/expenses", params=params)
        expenses = [ExpenseRecord.from_json(item) for item in data.get("expenses") or []]
        return expenses, Pagination.from_json(data.get("pagination"))

    def list_all_expenses(self, page_size: int = TOTAL_PAGE_SIZE) -> list[ExpenseRecord]:
        """Walk every page of the unfiltered listing."""
        page = 1
        collected: list[ExpenseRecord] = []
        while True:
            expenses, pagination = self.list_expenses(page=page, limit=page_size)
            collected.extend(expenses)
            if page >= pagination.total_pages or not expenses:
                return collected
            page += 1

    def total_spent(self) -> Decimal:
        return sum((expense.amount for expense in self.list_all_expenses()), Decimal("0"))

    def get_expense(self, expense_id: int) -> ExpenseRecord:
        return ExpenseRecord.from_json(self._request("GET", f"/expenses/{expense_id}"))

    def create_expense(self, payload: Mapping[str, Any]) -> ExpenseRecord:
        return ExpenseRecord.from_json(self._request("POST", "/expenses", json=dict(payload)))

    def update_expense(self, expense_id: int, payload: Mapping[str, Any]) -> ExpenseRecord:
        data = self._request("PUT", f"/expenses/{expense_id}", json=dict(payload))
        return ExpenseRecord.from_json(data)

    def delete_expense(self, expense_id: int) -> int:
        data = self._request("DELETE", f"/expenses/{expense_id}")
        return int(data["id"])

    def categories(self) -> list[str]:
        return list(self._request("GET", "/categories"))

    def summary(self, start_date: str = "", end_date: str = "") -> list[SummaryRow]:
        params = {}
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date
        data = self._request("GET", "/expenses/summary", params=params)
        if not isinstance(data, list):
            LOGGER.error("Summary data is not a list: %r", data)
            return []
        return [SummaryRow.from_json(item) for item in data]
