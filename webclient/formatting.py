"""Display helpers that derive text from the UI state."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .state import AppState, Pagination, SummaryRow


def format_rupiah(amount: Decimal | int | float | str) -> str:
    """Format like ``Number.toLocaleString('id-ID')`` with an ``Rp`` prefix.

    >>> format_rupiah(Decimal("1234567.5"))
    'Rp1.234.567,5'
    """
    value = Decimal(str(amount)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")
    grouped = f"{int(whole):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    return f"Rp{sign}{grouped}{',' + fraction if fraction else ''}"


def pagination_caption(shown: int, pagination: Pagination) -> str:
    caption = f"Showing {shown} of {pagination.total_items} expenses"
    if pagination.total_items > 0:
        caption += f" (Page {pagination.current_page} of {pagination.total_pages})"
    return caption


def page_numbers(pagination: Pagination) -> list[int]:
    """Page buttons to render; none when everything fits on one page."""
    if pagination.total_pages <= 1:
        return []
    return list(range(1, pagination.total_pages + 1))


def summary_total(rows: Iterable[SummaryRow]) -> Decimal:
    return sum((row.total for row in rows), Decimal("0"))


def tab_label(state: AppState) -> str:
    return "Edit Expense" if state.editing is not None else "Add Expense"
