"""Tests for FinanceService result/error normalization over in-memory repositories."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from backend.repositories.accounts_repository import InMemoryAccountsRepository
from backend.services.finance_service import FinanceService
from shared.models import (
    Account,
    AccountCreateRequest,
    AccountDeleteRequest,
    AccountsListResult,
    DashboardSummary,
    ErrorCode,
    FilterType,
    ServiceError,
    Transaction,
    TransactionCreateRequest,
    TransactionDeleteRequest,
    TransactionType,
    TransactionView,
    ViewParams,
)
from tests.fakes import (
    OTHER_USER_ID,
    USER_ID,
    FailingTransactionsRepository,
    account_rows,
    build_in_memory_service,
    monthly_rows,
)


def test_transactions_view_is_scoped_to_user() -> None:
    service = build_in_memory_service(monthly_rows())

    result = service.transactions_view(USER_ID, ViewParams())

    assert isinstance(result, TransactionView)
    assert "t-other-user" not in [item.id for item in result.items]
    assert result.count == 4


def test_add_transaction_then_view_includes_it() -> None:
    service = build_in_memory_service()

    created = service.add_transaction(
        TransactionCreateRequest(
            user_id=USER_ID,
            amount=Decimal("42.00"),
            description="Dinner",
            type=TransactionType.EXPENSE,
            category="Entertainment",
            date=date(2025, 3, 1),
        )
    )
    view = service.transactions_view(USER_ID, ViewParams(filter_type=FilterType.EXPENSE))

    assert isinstance(created, Transaction)
    assert created.amount == Decimal("42.00")
    assert isinstance(view, TransactionView)
    assert [item.id for item in view.items] == [created.id]
    assert view.totals.expenses == Decimal("42.00")


def test_created_ids_are_not_reused_after_delete() -> None:
    service = build_in_memory_service()
    request = TransactionCreateRequest(user_id=USER_ID, amount=Decimal("1"), description="One")

    first = service.add_transaction(request)
    assert isinstance(first, Transaction)
    assert service.delete_transaction(
        TransactionDeleteRequest(user_id=USER_ID, transaction_id=first.id)
    ) is None
    second = service.add_transaction(request)

    assert isinstance(second, Transaction)
    assert second.id != first.id


def test_delete_unknown_transaction_returns_not_found() -> None:
    service = build_in_memory_service(monthly_rows())

    result = service.delete_transaction(
        TransactionDeleteRequest(user_id=USER_ID, transaction_id="missing")
    )

    assert isinstance(result, ServiceError)
    assert result.code == ErrorCode.NOT_FOUND


def test_delete_other_users_transaction_returns_not_found() -> None:
    service = build_in_memory_service(monthly_rows())

    result = service.delete_transaction(
        TransactionDeleteRequest(user_id=USER_ID, transaction_id="t-other-user")
    )

    assert isinstance(result, ServiceError)
    assert result.code == ErrorCode.NOT_FOUND
    remaining = service.transactions_repository.list_transactions(OTHER_USER_ID)
    assert [row["id"] for row in remaining] == ["t-other-user"]


def test_provider_failure_becomes_backend_error(caplog) -> None:
    service = FinanceService(
        transactions_repository=FailingTransactionsRepository(),
        accounts_repository=InMemoryAccountsRepository(),
    )

    result = service.transactions_view(USER_ID, ViewParams())

    assert isinstance(result, ServiceError)
    assert result.code == ErrorCode.BACKEND_ERROR
    assert "status 503" in result.message
    assert "finance_service_failed operation=transactions_view" in caplog.text


def test_duplicate_account_name_returns_conflict() -> None:
    service = build_in_memory_service(accounts=account_rows())

    result = service.create_account(AccountCreateRequest(user_id=USER_ID, name="everyday checking"))

    assert isinstance(result, ServiceError)
    assert result.code == ErrorCode.CONFLICT


def test_create_list_delete_account() -> None:
    service = build_in_memory_service()

    created = service.create_account(
        AccountCreateRequest(
            user_id=USER_ID,
            name="Visa",
            type="Credit Card",
            balance=Decimal("-12.50"),
            account_number_last_four="1234",
        )
    )
    assert isinstance(created, Account)
    assert created.type == "credit_card"
    assert created.is_debt is True

    listed = service.list_accounts(USER_ID)
    assert isinstance(listed, AccountsListResult)
    assert [account.id for account in listed.items] == [created.id]

    assert service.delete_account(AccountDeleteRequest(user_id=USER_ID, account_id=created.id)) is None
    missing = service.delete_account(AccountDeleteRequest(user_id=USER_ID, account_id=created.id))
    assert isinstance(missing, ServiceError)
    assert missing.code == ErrorCode.NOT_FOUND


def test_dashboard_uses_both_repositories() -> None:
    service = build_in_memory_service(monthly_rows(), account_rows())

    result = service.dashboard(USER_ID, recent_limit=2)

    assert isinstance(result, DashboardSummary)
    assert len(result.recent_transactions) == 2
    assert result.debts == Decimal("320.15")
    assert result.expenses == Decimal("69.25")


def test_list_accounts_accepts_mixed_created_at_offsets() -> None:
    service = FinanceService(
        transactions_repository=build_in_memory_service().transactions_repository,
        accounts_repository=InMemoryAccountsRepository(
            [
                {"id": "naive", "user_id": USER_ID, "name": "A", "type": "checking", "balance": "1", "created_at": "2024-01-01T00:00:00"},
                {"id": "aware", "user_id": USER_ID, "name": "B", "type": "checking", "balance": "1", "created_at": "2024-01-02T00:00:00+00:00"},
            ]
        ),
    )

    result = service.list_accounts(USER_ID)

    assert isinstance(result, AccountsListResult)
    assert [account.id for account in result.items] == ["aware", "naive"]
