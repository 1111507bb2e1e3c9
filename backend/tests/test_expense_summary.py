from __future__ import annotations

from datetime import date
from decimal import Decimal

from backend.app.services import CategoryTotal, build_category_summary


def test_summary_groups_totals_and_percentages(client, make_expense):
    make_expense(amount="120.00", category="Food & Dining")
    make_expense(amount="180.00", category="Food & Dining")
    make_expense(amount="100.00", category="Transportation")

    response = client.get("/api/expenses/summary")

    assert response.status_code == 200
    assert response.json() == [
        {"category": "Food & Dining", "total": "300.00", "count": 2, "percentage": "75.0"},
        {"category": "Transportation", "total": "100.00", "count": 1, "percentage": "25.0"},
    ]


def test_summary_without_matches_returns_empty_list(client, make_expense):
    make_expense(expense_date=date(2025, 1, 5))

    response = client.get(
        "/api/expenses/summary",
        params={"startDate": "2030-01-01", "endDate": "2030-12-31"},
    )

    assert response.status_code == 200
    assert response.json() == []


def test_summary_on_empty_store_returns_empty_list(client):
    assert client.get("/api/expenses/summary").json() == []


def test_summary_respects_inclusive_date_bounds(client, make_expense):
    make_expense(amount="10.00", category="Shopping", expense_date=date(2025, 4, 1))
    make_expense(amount="20.00", category="Shopping", expense_date=date(2025, 4, 30))
    make_expense(amount="99.00", category="Travel", expense_date=date(2025, 5, 1))

    bounded = client.get(
        "/api/expenses/summary",
        params={"startDate": "2025-04-01", "endDate": "2025-04-30"},
    ).json()
    open_start = client.get("/api/expenses/summary", params={"startDate": "2025-04-30"}).json()
    open_end = client.get("/api/expenses/summary", params={"endDate": "2025-04-01"}).json()

    assert bounded == [
        {"category": "Shopping", "total": "30.00", "count": 2, "percentage": "100.0"}
    ]
    assert [row["category"] for row in open_start] == ["Travel", "Shopping"]
    assert open_end == [
        {"category": "Shopping", "total": "10.00", "count": 1, "percentage": "100.0"}
    ]


def test_summary_rounds_percentages_to_one_decimal(client, make_expense):
    make_expense(amount="1.00", category="Other")
    make_expense(amount="1.00", category="Healthcare")
    make_expense(amount="1.00", category="Education")

    rows = client.get("/api/expenses/summary").json()

    assert {row["percentage"] for row in rows} == {"33.3"}
    assert [row["category"] for row in rows] == ["Education", "Healthcare", "Other"]


def test_build_category_summary_handles_zero_grand_total():
    rows = build_category_summary(
        [CategoryTotal(category="Other", total=Decimal("0"), count=0)]
    )

    assert rows[0].percentage == "0.0"
    assert rows[0].total == "0.00"


def test_build_category_summary_rounds_half_up():
    rows = build_category_summary(
        [
            CategoryTotal(category="Travel", total=Decimal("2.005"), count=1),
            CategoryTotal(category="Other", total=Decimal("0"), count=1),
        ]
    )

    assert rows[0].total == "2.01"
    assert rows[0].percentage == "100.0"
