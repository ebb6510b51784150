"""Transactions repository adapters.

Rows are returned as raw snapshots; parsing happens in the services layer so
that a single malformed row never hides the rest of the list.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import uuid4

from backend.db.supabase_client import SupabaseClient
from shared.models import TransactionCreateRequest, TransactionDeleteRequest


TRANSACTIONS_TABLE = "transactions"
TRANSACTION_COLUMNS = "id,user_id,amount,description,type,category,date,created_at"


class TransactionsRepository(Protocol):
    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        """Return transaction rows for one user, newest date first."""

    def create_transaction(self, request: TransactionCreateRequest) -> dict[str, Any]:
        """Create one transaction and return the stored row."""

    def delete_transaction(self, request: TransactionDeleteRequest) -> None:
        """Delete one transaction owned by the user."""


class InMemoryTransactionsRepository:
    """In-memory transactions repository used by tests/dev."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self._rows: list[dict[str, Any]] = [dict(row) for row in rows or []]

    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        rows = [dict(row) for row in self._rows if str(row.get("user_id")) == user_id]
        return sorted(rows, key=lambda row: str(row.get("date") or ""), reverse=True)

    def create_transaction(self, request: TransactionCreateRequest) -> dict[str, Any]:
        row = request.model_dump(mode="json")
        row["id"] = str(uuid4())
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        self._rows.append(row)
        return dict(row)

    def delete_transaction(self, request: TransactionDeleteRequest) -> None:
        kept = [
            row
            for row in self._rows
            if not (
                str(row.get("user_id")) == request.user_id
                and str(row.get("id")) == request.transaction_id
            )
        ]
        if len(kept) == len(self._rows):
            raise ValueError("Transaction not found")
        self._rows = kept


class SupabaseTransactionsRepository:
    """Supabase-backed transactions repository."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def list_transactions(self, user_id: str) -> list[dict[str, Any]]:
        rows, _ = self._client.get_rows(
            table=TRANSACTIONS_TABLE,
            query=[
                ("user_id", f"eq.{user_id}"),
                ("select", TRANSACTION_COLUMNS),
                ("order", "date.desc"),
            ],
            with_count=False,
            use_anon_key=False,
        )
        return rows

    def create_transaction(self, request: TransactionCreateRequest) -> dict[str, Any]:
        payload: dict[str, Any] = request.model_dump(mode="json")
        if request.category is None:
            payload.pop("category")

        rows = self._client.post_rows(
            table=TRANSACTIONS_TABLE,
            payload=payload,
            query={"select": TRANSACTION_COLUMNS},
        )
        if not rows:
            raise RuntimeError("Supabase did not return created transaction")
        return rows[0]

    def delete_transaction(self, request: TransactionDeleteRequest) -> None:
        rows = self._client.delete_rows(
            table=TRANSACTIONS_TABLE,
            query={
                "id": f"eq.{request.transaction_id}",
                "user_id": f"eq.{request.user_id}",
                "select": "id",
            },
        )
        if not rows:
            raise ValueError("Transaction not found")
