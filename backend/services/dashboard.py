"""Dashboard summary built from transaction and account snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from backend.services.records import parse_account_record, parse_records
from backend.services.transaction_view import compute_view
from shared.models import (
    CREDIT_CARD_ACCOUNT_TYPE,
    Account,
    DashboardSummary,
    SortKey,
    SortOrder,
    ViewParams,
)


def sort_accounts_newest_first(accounts: Iterable[Account]) -> list[Account]:
    """Order accounts by `created_at` descending, undated accounts last."""

    accounts = list(accounts)
    dated = [account for account in accounts if account.created_at is not None]
    undated = [account for account in accounts if account.created_at is None]
    return sorted(dated, key=lambda account: account.created_at, reverse=True) + undated


def compute_balance(accounts: Iterable[Account]) -> Decimal:
    return sum(
        (account.balance for account in accounts if account.type != CREDIT_CARD_ACCOUNT_TYPE),
        Decimal("0"),
    )


def compute_debts(accounts: Iterable[Account]) -> Decimal:
    return sum((abs(account.balance) for account in accounts if account.is_debt), Decimal("0"))


def build_dashboard(
    transaction_records: Iterable[Mapping[str, Any]],
    account_records: Iterable[Mapping[str, Any]],
    *,
    recent_limit: int = 3,
) -> DashboardSummary:
    view = compute_view(
        transaction_records,
        ViewParams(sort_by=SortKey.DATE, sort_order=SortOrder.DESCENDING),
    )
    parsed_accounts, skipped_accounts = parse_records(account_records, parse_account_record)
    accounts = sort_accounts_newest_first(parsed_accounts)

    return DashboardSummary(
        balance=compute_balance(accounts),
        debts=compute_debts(accounts),
        income=view.totals.income,
        expenses=view.totals.expenses,
        net=view.totals.net,
        recent_transactions=view.items[: max(recent_limit, 0)],
        accounts=accounts,
        skipped_transactions=view.skipped,
        skipped_accounts=skipped_accounts,
    )
