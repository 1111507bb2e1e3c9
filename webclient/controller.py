"""Owner of the UI state: turns user intents into API calls and state updates."""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import httpx

from . import state as st
from .api import ExpenseApiClient, ExpenseApiError

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5

# Failures the controller logs and absorbs instead of surfacing to the user.
RECOVERABLE_ERRORS = (httpx.HTTPError, ExpenseApiError, ValueError, KeyError)


class ExpenseController:
    """Single owner of :class:`~webclient.state.AppState`.

    Every mutation is followed by a sequential re-fetch of the current expense
    page, the category summary and the running total. Nothing is patched into
    the cached state optimistically.
    """

    def __init__(
        self,
        api: ExpenseApiClient,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        initial_state: Optional[st.AppState] = None,
    ) -> None:
        self.api = api
        self.page_size = page_size
        self.state = initial_state if initial_state is not None else st.AppState()

    # Fetchers

    def load(self) -> st.AppState:
        self.fetch_expenses(1)
        self.fetch_categories()
        self.fetch_summary()
        self.fetch_total()
        return self.state

    def fetch_expenses(self, page: int = 1) -> None:
        self.state = st.set_loading(self.state, True)
        try:
            expenses, pagination = self.api.list_expenses(
                page=page, limit=self.page_size, filters=self.state.filters
            )
        except RECOVERABLE_ERRORS:
            LOGGER.exception("Error fetching expenses")
            self.state = st.reset_expense_page(self.state)
        else:
            self.state = st.apply_expense_page(self.state, expenses, pagination)
        finally:
            self.state = st.set_loading(self.state, False)

    def fetch_total(self) -> None:
        try:
            total = self.api.total_spent()
        except RECOVERABLE_ERRORS:
            LOGGER.exception("Error fetching total expenses")
            total = Decimal("0")
        self.state = st.apply_total(self.state, total)

    def fetch_categories(self) -> None:
        try:
            categories = self.api.categories()
        except RECOVERABLE_ERRORS:
            LOGGER.exception("Error fetching categories")
            return
        self.state = st.apply_categories(self.state, categories)

    def fetch_summary(self) -> None:
        summary_range = self.state.summary_range
        try:
            rows = self.api.summary(summary_range.start_date, summary_range.end_date)
        except RECOVERABLE_ERRORS:
            LOGGER.exception("Error fetching summary")
            rows = []
        self.state = st.apply_summary(self.state, rows)

    def _resync(self, page: int) -> None:
        self.fetch_expenses(page)
        self.fetch_summary()
        self.fetch_total()

    # Navigation and form intents

    def select_tab(self, tab: st.Tab) -> None:
        self.state = st.select_tab(self.state, tab)

    def update_form(self, **changes: str) -> None:
        self.state = st.update_form(self.state, **changes)

    def edit(self, expense: st.ExpenseRecord) -> None:
        self.state = st.start_edit(self.state, expense)
        self.fetch_total()

    def cancel_edit(self) -> None:
        self.state = st.cancel_edit(self.state)

    def submit(self, form: Optional[st.ExpenseForm] = None) -> bool:
        """Create the expense in the form, or update the one being edited."""
        if form is not None:
            self.state = replace(self.state, form=form)
        editing = self.state.editing
        payload = self.state.form.to_payload()

        self.state = st.set_loading(self.state, True)
        try:
            if editing is not None:
                self.api.update_expense(editing.id, payload)
            else:
                self.api.create_expense(payload)
        except RECOVERABLE_ERRORS:
            LOGGER.exception("Error saving expense")
            return False
        finally:
            self.state = st.set_loading(self.state, False)

        self.state = st.reset_form(self.state)
        self._resync(page=1)
        self.state = st.select_tab(self.state, st.Tab.LIST)
        return True

    # Deletion

    def request_delete(self, expense_id: int) -> None:
        self.state = st.request_delete(self.state, expense_id)

    def cancel_delete(self) -> None:
        self.state = st.cancel_delete(self.state)

    def confirm_delete(self) -> bool:
        target = self.state.delete_target
        deleted = False
        if target is not None:
            try:
                self.api.delete_expense(target.id)
            except RECOVERABLE_ERRORS:
                LOGGER.exception("Error deleting expense")
            else:
                deleted = True
                self._resync(page=st.page_after_delete(self.state))
        self.state = st.cancel_delete(self.state)
        return deleted

    # Pagination

    def go_to_page(self, page: int) -> bool:
        target = st.clamp_page(self.state, page)
        if target is None:
            return False
        self.fetch_expenses(target)
        return True

    def previous_page(self) -> bool:
        return self.go_to_page(self.state.pagination.current_page - 1)

    def next_page(self) -> bool:
        return self.go_to_page(self.state.pagination.current_page + 1)

    # Filters

    def apply_filters(self, filters: Optional[st.ExpenseFilters] = None) -> None:
        if filters is not None:
            self.state = st.set_filters(self.state, filters)
        self.fetch_expenses(1)

    def clear_filters(self) -> None:
        self.state = st.clear_filters(self.state)
        self.fetch_expenses(1)

    def apply_summary_filter(self, start_date: str, end_date: str) -> None:
        if not start_date or not end_date:
            raise ValueError("Please select both start and end dates to filter the summary.")
        self.state = st.set_summary_range(self.state, st.DateRange(start_date, end_date))
        self.fetch_summary()

    def clear_summary_filter(self) -> None:
        self.state = st.set_summary_range(self.state, st.DateRange())
        self.fetch_summary()
