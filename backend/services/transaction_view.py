"""Filter, sort and aggregate a snapshot of transactions for display.

Polarity comes from the explicit `type` field of each transaction. Amounts are
read as magnitudes: totals and amount ordering both use `abs(amount)`, so rows
stored with a legacy sign still land in the right bucket.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from backend.services.records import parse_records, parse_transaction_record
from shared.models import (
    FilterType,
    SortKey,
    SortOrder,
    Transaction,
    TransactionType,
    TransactionView,
    ViewParams,
    ViewTotals,
)


logger = logging.getLogger(__name__)


def description_sort_key(value: str) -> tuple[str, str]:
    """Return a collation key close to a locale compare (accents and case ignored first)."""

    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), value


def _matches(transaction: Transaction, params: ViewParams, needle: str) -> bool:
    if params.filter_type != FilterType.ALL and transaction.type.value != params.filter_type.value:
        return False
    if needle and needle not in transaction.description.casefold():
        return False
    return True


def _sort_key(sort_by: SortKey):
    if sort_by == SortKey.AMOUNT:
        return lambda transaction: transaction.magnitude
    if sort_by == SortKey.DESCRIPTION:
        return lambda transaction: description_sort_key(transaction.description)
    return lambda transaction: transaction.date


def filter_transactions(transactions: Iterable[Transaction], params: ViewParams) -> list[Transaction]:
    needle = params.search.casefold()
    return [transaction for transaction in transactions if _matches(transaction, params, needle)]


def sort_transactions(transactions: Iterable[Transaction], sort_by: SortKey, sort_order: SortOrder) -> list[Transaction]:
    # sorted() keeps ties in input order with reverse=True as well.
    return sorted(
        transactions,
        key=_sort_key(sort_by),
        reverse=sort_order == SortOrder.DESCENDING,
    )


def compute_totals(transactions: Iterable[Transaction]) -> ViewTotals:
    income = Decimal("0")
    expenses = Decimal("0")
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.magnitude
        else:
            expenses += transaction.magnitude
    return ViewTotals(income=income, expenses=expenses, net=income - expenses)


def compute_view(
    records: Iterable[Mapping[str, Any] | Transaction],
    params: ViewParams | None = None,
) -> TransactionView:
    """Build the ordered, filtered view and its totals from raw records.

    Malformed records are skipped and counted in `skipped`; the input is never
    mutated.
    """

    params = params or ViewParams()
    transactions, skipped = parse_records(records, parse_transaction_record)
    if skipped:
        logger.warning("transactions_view_skipped_malformed count=%s", skipped)

    items = sort_transactions(
        filter_transactions(transactions, params),
        params.sort_by,
        params.sort_order,
    )
    return TransactionView(
        items=items,
        totals=compute_totals(items),
        count=len(items),
        skipped=skipped,
    )
