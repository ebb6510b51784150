"""Tests for transactions repository adapters."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
)
from shared.models import TransactionCreateRequest, TransactionDeleteRequest, TransactionType
from tests.fakes import USER_ID, monthly_rows


def test_in_memory_list_is_user_scoped_and_newest_first() -> None:
    repository = InMemoryTransactionsRepository(monthly_rows())

    rows = repository.list_transactions(USER_ID)

    assert [row["id"] for row in rows] == ["t-bus", "t-cafe", "t-groceries", "t-salary"]


def test_in_memory_list_returns_copies() -> None:
    repository = InMemoryTransactionsRepository(monthly_rows())

    rows = repository.list_transactions(USER_ID)
    rows[0]["amount"] = "0"

    assert repository.list_transactions(USER_ID)[0]["amount"] == "2.75"


def test_supabase_list_scopes_by_user_and_orders_by_date() -> None:
    captured: dict[str, object] = {}

    def _get_rows(**kwargs):
        captured.update(kwargs)
        return [{"id": "1"}], None

    repository = SupabaseTransactionsRepository(client=SimpleNamespace(get_rows=_get_rows))  # type: ignore[arg-type]

    rows = repository.list_transactions(USER_ID)

    assert rows == [{"id": "1"}]
    assert captured["table"] == "transactions"
    assert ("user_id", f"eq.{USER_ID}") in captured["query"]
    assert ("order", "date.desc") in captured["query"]


def test_supabase_create_sends_json_payload_and_returns_row() -> None:
    captured: dict[str, object] = {}

    def _post_rows(**kwargs):
        captured.update(kwargs)
        return [{**kwargs["payload"], "id": "new-id"}]

    repository = SupabaseTransactionsRepository(client=SimpleNamespace(post_rows=_post_rows))  # type: ignore[arg-type]

    row = repository.create_transaction(
        TransactionCreateRequest(
            user_id=USER_ID,
            amount=Decimal("19.99"),
            description="Book",
            type=TransactionType.EXPENSE,
            category=None,
            date=date(2025, 4, 2),
        )
    )

    assert captured["table"] == "transactions"
    assert captured["payload"] == {
        "user_id": USER_ID,
        "amount": "19.99",
        "description": "Book",
        "type": "expense",
        "date": "2025-04-02",
    }
    assert row["id"] == "new-id"


def test_supabase_create_without_returned_row_raises() -> None:
    repository = SupabaseTransactionsRepository(
        client=SimpleNamespace(post_rows=lambda **kwargs: [])  # type: ignore[arg-type]
    )

    with pytest.raises(RuntimeError, match="did not return"):
        repository.create_transaction(
            TransactionCreateRequest(user_id=USER_ID, amount=Decimal("1"), description="x")
        )


def test_supabase_delete_scopes_by_user_and_raises_when_nothing_deleted() -> None:
    captured: dict[str, object] = {}

    def _delete_rows(**kwargs):
        captured.update(kwargs)
        return []

    repository = SupabaseTransactionsRepository(client=SimpleNamespace(delete_rows=_delete_rows))  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="Transaction not found"):
        repository.delete_transaction(TransactionDeleteRequest(user_id=USER_ID, transaction_id="t-1"))

    assert captured["query"] == {"id": "eq.t-1", "user_id": f"eq.{USER_ID}", "select": "id"}
