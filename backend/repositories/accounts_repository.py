"""Repository interfaces and adapters for bank accounts CRUD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import uuid4

from backend.db.supabase_client import SupabaseClient
from shared.models import AccountCreateRequest, AccountDeleteRequest


ACCOUNTS_TABLE = "accounts"
ACCOUNT_COLUMNS = "id,user_id,name,type,balance,account_number_last_four,institution_name,created_at"


def _ilike_literal(value: str) -> str:
    """Return an `ilike` filter matching `value` exactly, ignoring case."""

    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"ilike.{escaped}"


class AccountsRepository(Protocol):
    def list_accounts(self, user_id: str) -> list[dict[str, Any]]:
        """Return account rows for one user, newest first."""

    def create_account(self, request: AccountCreateRequest) -> dict[str, Any]:
        """Create one account for one user."""

    def delete_account(self, request: AccountDeleteRequest) -> None:
        """Delete one account for one user."""


class InMemoryAccountsRepository:
    """In-memory accounts repository used by tests/dev."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self._rows: list[dict[str, Any]] = [dict(row) for row in rows or []]

    def list_accounts(self, user_id: str) -> list[dict[str, Any]]:
        rows = [dict(row) for row in self._rows if str(row.get("user_id")) == user_id]
        return sorted(rows, key=lambda row: str(row.get("created_at") or ""), reverse=True)

    def create_account(self, request: AccountCreateRequest) -> dict[str, Any]:
        normalized_name = request.name.strip().lower()
        for row in self._rows:
            if str(row.get("user_id")) != request.user_id:
                continue
            if str(row.get("name") or "").strip().lower() == normalized_name:
                raise ValueError("account name already exists")

        row = request.model_dump(mode="json")
        row["id"] = str(uuid4())
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        self._rows.append(row)
        return dict(row)

    def delete_account(self, request: AccountDeleteRequest) -> None:
        kept = [
            row
            for row in self._rows
            if not (
                str(row.get("user_id")) == request.user_id
                and str(row.get("id")) == request.account_id
            )
        ]
        if len(kept) == len(self._rows):
            raise ValueError("Account not found")
        self._rows = kept


class SupabaseAccountsRepository:
    """Supabase-backed accounts repository."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def list_accounts(self, user_id: str) -> list[dict[str, Any]]:
        rows, _ = self._client.get_rows(
            table=ACCOUNTS_TABLE,
            query=[
                ("user_id", f"eq.{user_id}"),
                ("select", ACCOUNT_COLUMNS),
                ("order", "created_at.desc"),
            ],
            with_count=False,
            use_anon_key=False,
        )
        return rows

    def create_account(self, request: AccountCreateRequest) -> dict[str, Any]:
        existing_rows, _ = self._client.get_rows(
            table=ACCOUNTS_TABLE,
            query={
                "select": "id",
                "user_id": f"eq.{request.user_id}",
                "name": _ilike_literal(request.name),
                "limit": 1,
            },
            with_count=False,
            use_anon_key=False,
        )
        if existing_rows:
            raise ValueError("account name already exists")

        payload = {
            field_name: value
            for field_name, value in request.model_dump(mode="json").items()
            if value is not None
        }
        rows = self._client.post_rows(
            table=ACCOUNTS_TABLE,
            payload=payload,
            query={"select": ACCOUNT_COLUMNS},
        )
        if not rows:
            raise RuntimeError("Supabase did not return created account")
        return rows[0]

    def delete_account(self, request: AccountDeleteRequest) -> None:
        rows = self._client.delete_rows(
            table=ACCOUNTS_TABLE,
            query={
                "id": f"eq.{request.account_id}",
                "user_id": f"eq.{request.user_id}",
                "select": "id",
            },
        )
        if not rows:
            raise ValueError("Account not found")
