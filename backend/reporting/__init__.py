"""Reporting utilities for backend-generated documents."""

from backend.reporting.transactions_report import (
    CategoryRow,
    TransactionRow,
    TransactionsReportData,
    build_report_data,
    generate_transactions_report_pdf,
)

__all__ = [
    "CategoryRow",
    "TransactionRow",
    "TransactionsReportData",
    "build_report_data",
    "generate_transactions_report_pdf",
]
