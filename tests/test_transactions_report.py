"""Tests for the transactions PDF report."""

import re
from decimal import Decimal

from backend.reporting import build_report_data, generate_transactions_report_pdf
from backend.services.transaction_view import compute_view
from shared.models import FilterType, SortKey, SortOrder, ViewParams
from tests.fakes import USER_ID, monthly_rows


def _own_rows() -> list[dict]:
    return [row for row in monthly_rows() if row["user_id"] == USER_ID]


def test_build_report_data_groups_expenses_by_category() -> None:
    params = ViewParams()
    view = compute_view(_own_rows(), params)

    data = build_report_data(view, params, currency="USD")

    assert {row.name: row.amount for row in data.categories} == {
        "Groceries": Decimal("54.20"),
        "Entertainment": Decimal("12.30"),
        "Transportation": Decimal("2.75"),
    }
    assert data.net == Decimal("2330.75")
    assert [row.date for row in data.transactions][0] == "2025-01-12"
    assert data.view_label == "All transactions, sorted by date (desc)"


def test_build_report_data_describes_search_and_filter() -> None:
    params = ViewParams(
        filter_type=FilterType.INCOME,
        search="salary",
        sort_by=SortKey.AMOUNT,
        sort_order=SortOrder.ASCENDING,
    )

    data = build_report_data(compute_view(_own_rows(), params), params, currency="EUR")

    assert data.view_label == 'Income only, matching "salary", sorted by amount (asc)'
    assert data.categories == []
    assert data.count == 1


def test_generate_pdf_has_two_pages() -> None:
    params = ViewParams()
    data = build_report_data(compute_view(_own_rows(), params), params, currency="USD")

    pdf_bytes = generate_transactions_report_pdf(data)

    assert pdf_bytes.startswith(b"%PDF")
    assert len(re.findall(rb"/Type /Page\b", pdf_bytes)) == 2


def test_generate_pdf_without_transactions_still_renders() -> None:
    params = ViewParams()
    data = build_report_data(compute_view([], params), params, currency="USD")

    pdf_bytes = generate_transactions_report_pdf(data)

    assert pdf_bytes.startswith(b"%PDF")
