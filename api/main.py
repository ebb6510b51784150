"""FastAPI entrypoint for spending tracker HTTP endpoints."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from functools import lru_cache

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, ValidationError

from backend.auth.supabase_auth import (
    AuthenticatedUser,
    UnauthorizedError,
    build_authenticated_user,
    get_user_from_bearer_token,
)
from backend.factory import build_finance_service
from backend.reporting import build_report_data, generate_transactions_report_pdf
from backend.services.finance_service import FinanceService
from shared import config as _config
from shared.models import (
    DEFAULT_TRANSACTION_CATEGORY,
    Account,
    AccountCreateRequest,
    AccountDeleteRequest,
    AccountsListResult,
    DashboardSummary,
    ErrorCode,
    FilterType,
    ServiceError,
    SortKey,
    SortOrder,
    Transaction,
    TransactionCreateRequest,
    TransactionDeleteRequest,
    TransactionType,
    TransactionView,
    ViewParams,
    ViewTotals,
)


logger = logging.getLogger(__name__)

_Date = date


_STATUS_BY_ERROR_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.BACKEND_ERROR: 502,
}
_LOAD_TRANSACTIONS_FAILED = "Failed to load transactions. Please try again."
_LOAD_ACCOUNTS_FAILED = "Failed to load accounts. Please try again."
_LOAD_DASHBOARD_FAILED = "Failed to load dashboard. Please try again."


class TransactionCreatePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal
    description: str
    type: TransactionType = TransactionType.EXPENSE
    category: str | None = DEFAULT_TRANSACTION_CATEGORY
    date: _Date | None = None


class AccountCreatePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    type: str = "checking"
    balance: Decimal = Decimal("0")
    account_number_last_four: str | None = None
    institution_name: str | None = None


@lru_cache(maxsize=1)
def get_finance_service() -> FinanceService:
    """Create and cache the finance service."""

    service = build_finance_service()
    logger.info(
        "using_repositories transactions=%s accounts=%s",
        type(service.transactions_repository).__name__,
        type(service.accounts_repository).__name__,
    )
    return service


def _extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    prefix = "Bearer "
    if not authorization.startswith(prefix):
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    token = authorization[len(prefix) :].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token


def require_user(authorization: str | None = Header(default=None)) -> AuthenticatedUser:
    """Session gate shared by every authenticated route."""

    token = _extract_bearer_token(authorization)
    try:
        return build_authenticated_user(get_user_from_bearer_token(token))
    except UnauthorizedError as exc:
        raise HTTPException(status_code=401, detail="Unauthorized") from exc


def _raise_for_service_error(error: ServiceError) -> None:
    raise HTTPException(status_code=_STATUS_BY_ERROR_CODE.get(error.code, 400), detail=error.message)


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=jsonable_encoder(exc.errors(include_url=False, include_context=False)),
    )


def view_params(
    filter_type: FilterType = Query(default=FilterType.ALL, alias="type"),
    search: str = Query(default="", max_length=200),
    sort_by: SortKey = Query(default=SortKey.DATE),
    sort_order: SortOrder = Query(default=SortOrder.DESCENDING),
) -> ViewParams:
    return ViewParams(
        filter_type=filter_type,
        search=search.strip(),
        sort_by=sort_by,
        sort_order=sort_order,
    )


app = FastAPI(title="Spending Tracker API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/me", response_model=AuthenticatedUser)
def get_me(user: AuthenticatedUser = Depends(require_user)) -> AuthenticatedUser:
    return user


@app.get("/transactions", response_model=TransactionView)
def list_transactions(
    params: ViewParams = Depends(view_params),
    user: AuthenticatedUser = Depends(require_user),
) -> TransactionView:
    """Return the filtered, sorted transaction view with its totals.

    Provider failures degrade to an empty view carrying an error message so the
    page still renders.
    """

    result = get_finance_service().transactions_view(user.id, params)
    if isinstance(result, ServiceError):
        logger.warning("transactions_view_degraded user_id=%s code=%s", user.id, result.code.value)
        return TransactionView(items=[], totals=ViewTotals(), count=0, error=_LOAD_TRANSACTIONS_FAILED)
    return result


@app.post("/transactions", response_model=Transaction, status_code=201)
def add_transaction(
    payload: TransactionCreatePayload,
    user: AuthenticatedUser = Depends(require_user),
) -> Transaction:
    fields = payload.model_dump(exclude_none=True)
    if payload.category is None:
        fields["category"] = None
    try:
        request = TransactionCreateRequest(user_id=user.id, **fields)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    result = get_finance_service().add_transaction(request)
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return result


@app.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    user: AuthenticatedUser = Depends(require_user),
) -> Response:
    result = get_finance_service().delete_transaction(
        TransactionDeleteRequest(user_id=user.id, transaction_id=transaction_id)
    )
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return Response(status_code=204)


@app.get("/transactions/report.pdf")
def get_transactions_report_pdf(
    params: ViewParams = Depends(view_params),
    user: AuthenticatedUser = Depends(require_user),
) -> Response:
    """Export the current transaction view as a PDF."""

    logger.info(
        "transactions_report_requested user_id=%s filter_type=%s sort_by=%s",
        user.id,
        params.filter_type.value,
        params.sort_by.value,
    )
    result = get_finance_service().transactions_view(user.id, params)
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)

    pdf_bytes = generate_transactions_report_pdf(
        build_report_data(result, params, currency=_config.report_currency())
    )
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="transactions-{date.today().isoformat()}.pdf"'},
    )


@app.get("/accounts", response_model=AccountsListResult)
def list_accounts(user: AuthenticatedUser = Depends(require_user)) -> AccountsListResult:
    result = get_finance_service().list_accounts(user.id)
    if isinstance(result, ServiceError):
        logger.warning("accounts_list_degraded user_id=%s code=%s", user.id, result.code.value)
        return AccountsListResult(items=[], error=_LOAD_ACCOUNTS_FAILED)
    return result


@app.post("/accounts", response_model=Account, status_code=201)
def create_account(
    payload: AccountCreatePayload,
    user: AuthenticatedUser = Depends(require_user),
) -> Account:
    try:
        request = AccountCreateRequest(user_id=user.id, **payload.model_dump())
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    result = get_finance_service().create_account(request)
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return result


@app.delete("/accounts/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    user: AuthenticatedUser = Depends(require_user),
) -> Response:
    result = get_finance_service().delete_account(
        AccountDeleteRequest(user_id=user.id, account_id=account_id)
    )
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return Response(status_code=204)


@app.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(user: AuthenticatedUser = Depends(require_user)) -> DashboardSummary:
    result = get_finance_service().dashboard(
        user.id,
        recent_limit=_config.recent_transactions_limit(),
    )
    if isinstance(result, ServiceError):
        logger.warning("dashboard_degraded user_id=%s code=%s", user.id, result.code.value)
        return DashboardSummary(error=_LOAD_DASHBOARD_FAILED)
    return result
