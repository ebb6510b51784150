"""Deterministic fixtures and fakes shared by tests."""

from __future__ import annotations

from typing import Any

from backend.repositories.accounts_repository import InMemoryAccountsRepository
from backend.repositories.transactions_repository import InMemoryTransactionsRepository
from backend.services.finance_service import FinanceService


USER_ID = "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb"
OTHER_USER_ID = "cccccccc-cccc-cccc-cccc-cccccccccccc"


def coffee_and_refund() -> list[dict[str, Any]]:
    return [
        {
            "id": "1",
            "user_id": USER_ID,
            "amount": 100,
            "type": "expense",
            "date": "2024-01-01",
            "description": "Coffee",
        },
        {
            "id": "2",
            "user_id": USER_ID,
            "amount": 50,
            "type": "income",
            "date": "2024-01-02",
            "description": "Refund",
        },
    ]


def monthly_rows() -> list[dict[str, Any]]:
    return [
        {
            "id": "t-salary",
            "user_id": USER_ID,
            "amount": "2400.00",
            "type": "income",
            "category": None,
            "date": "2025-01-01",
            "description": "Salary January",
        },
        {
            "id": "t-groceries",
            "user_id": USER_ID,
            "amount": "54.20",
            "type": "expense",
            "category": "Groceries",
            "date": "2025-01-10",
            "description": "Supermarket",
        },
        {
            "id": "t-cafe",
            "user_id": USER_ID,
            "amount": "12.30",
            "type": "expense",
            "category": "Entertainment",
            "date": "2025-01-11",
            "description": "Café du coin",
        },
        {
            "id": "t-bus",
            "user_id": USER_ID,
            "amount": "2.75",
            "type": "expense",
            "category": "Transportation",
            "date": "2025-01-12T08:15:00+00:00",
            "description": "bus ticket",
        },
        {
            "id": "t-other-user",
            "user_id": OTHER_USER_ID,
            "amount": "999.00",
            "type": "expense",
            "category": "Other",
            "date": "2025-01-05",
            "description": "Not mine",
        },
    ]


def account_rows() -> list[dict[str, Any]]:
    return [
        {
            "id": "a-checking",
            "user_id": USER_ID,
            "name": "Everyday Checking",
            "type": "checking",
            "balance": "1520.40",
            "account_number_last_four": "4821",
            "institution": "Chase",
            "created_at": "2025-01-01T10:00:00+00:00",
        },
        {
            "id": "a-savings",
            "user_id": USER_ID,
            "name": "Rainy Day",
            "type": "savings",
            "balance": "5000",
            "created_at": "2025-02-01T10:00:00+00:00",
        },
        {
            "id": "a-card",
            "user_id": USER_ID,
            "name": "Travel Card",
            "type": "credit_card",
            "balance": "-320.15",
            "institution_name": "Amex",
            "created_at": "2025-03-01T10:00:00+00:00",
        },
    ]


def build_in_memory_service(
    transactions: list[dict[str, Any]] | None = None,
    accounts: list[dict[str, Any]] | None = None,
) -> FinanceService:
    return FinanceService(
        transactions_repository=InMemoryTransactionsRepository(transactions),
        accounts_repository=InMemoryAccountsRepository(accounts),
    )


class FailingTransactionsRepository:
    """Repository fake whose reads and writes always hit a provider failure."""

    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        raise RuntimeError("Supabase request failed with status 503: upstream unavailable")

    def create_transaction(self, request: Any) -> dict[str, Any]:
        raise RuntimeError("Supabase request failed with status 503: upstream unavailable")

    def delete_transaction(self, request: Any) -> None:
        raise RuntimeError("Supabase request failed with status 503: upstream unavailable")
