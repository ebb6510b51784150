"""Finance service boundary used by the HTTP layer.

Every method returns its result model or a `ServiceError`; repository
exceptions never cross this boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from backend.repositories.accounts_repository import AccountsRepository
from backend.repositories.transactions_repository import TransactionsRepository
from backend.services.dashboard import build_dashboard, sort_accounts_newest_first
from backend.services.records import (
    MalformedRecordError,
    parse_account_record,
    parse_records,
    parse_transaction_record,
)
from backend.services.transaction_view import compute_view
from shared.models import (
    Account,
    AccountCreateRequest,
    AccountDeleteRequest,
    AccountsListResult,
    DashboardSummary,
    ErrorCode,
    ServiceError,
    Transaction,
    TransactionCreateRequest,
    TransactionDeleteRequest,
    TransactionView,
    ViewParams,
)


logger = logging.getLogger(__name__)


def _to_service_error(exc: Exception, *, operation: str) -> ServiceError:
    message = str(exc) or type(exc).__name__
    if isinstance(exc, ValueError) and not isinstance(exc, MalformedRecordError):
        lowered = message.lower()
        if "not found" in lowered:
            return ServiceError(code=ErrorCode.NOT_FOUND, message=message)
        if "already exists" in lowered:
            return ServiceError(code=ErrorCode.CONFLICT, message=message)
        return ServiceError(code=ErrorCode.VALIDATION_ERROR, message=message)

    logger.exception("finance_service_failed operation=%s", operation)
    return ServiceError(
        code=ErrorCode.BACKEND_ERROR,
        message=message,
        details={"operation": operation},
    )


@dataclass(slots=True)
class FinanceService:
    transactions_repository: TransactionsRepository
    accounts_repository: AccountsRepository

    def transactions_view(self, user_id: str, params: ViewParams) -> TransactionView | ServiceError:
        try:
            rows = self.transactions_repository.list_transactions(user_id)
        except Exception as exc:
            return _to_service_error(exc, operation="transactions_view")
        view = compute_view(rows, params)
        logger.info(
            "transactions_view_computed user_id=%s count=%s skipped=%s",
            user_id,
            view.count,
            view.skipped,
        )
        return view

    def add_transaction(self, request: TransactionCreateRequest) -> Transaction | ServiceError:
        try:
            row = self.transactions_repository.create_transaction(request)
            transaction = parse_transaction_record(row)
        except Exception as exc:
            return _to_service_error(exc, operation="add_transaction")
        logger.info("transaction_created user_id=%s transaction_id=%s", request.user_id, transaction.id)
        return transaction

    def delete_transaction(self, request: TransactionDeleteRequest) -> None | ServiceError:
        try:
            self.transactions_repository.delete_transaction(request)
        except Exception as exc:
            return _to_service_error(exc, operation="delete_transaction")
        logger.info(
            "transaction_deleted user_id=%s transaction_id=%s",
            request.user_id,
            request.transaction_id,
        )
        return None

    def list_accounts(self, user_id: str) -> AccountsListResult | ServiceError:
        try:
            rows = self.accounts_repository.list_accounts(user_id)
        except Exception as exc:
            return _to_service_error(exc, operation="list_accounts")
        accounts, skipped = parse_records(rows, parse_account_record)
        return AccountsListResult(items=sort_accounts_newest_first(accounts), skipped=skipped)

    def create_account(self, request: AccountCreateRequest) -> Account | ServiceError:
        try:
            row = self.accounts_repository.create_account(request)
            account = parse_account_record(row)
        except Exception as exc:
            return _to_service_error(exc, operation="create_account")
        logger.info("account_created user_id=%s account_id=%s", request.user_id, account.id)
        return account

    def delete_account(self, request: AccountDeleteRequest) -> None | ServiceError:
        try:
            self.accounts_repository.delete_account(request)
        except Exception as exc:
            return _to_service_error(exc, operation="delete_account")
        logger.info("account_deleted user_id=%s account_id=%s", request.user_id, request.account_id)
        return None

    def dashboard(self, user_id: str, *, recent_limit: int = 3) -> DashboardSummary | ServiceError:
        try:
            transaction_rows = self.transactions_repository.list_transactions(user_id)
            account_rows = self.accounts_repository.list_accounts(user_id)
        except Exception as exc:
            return _to_service_error(exc, operation="dashboard")
        return build_dashboard(transaction_rows, account_rows, recent_limit=recent_limit)
