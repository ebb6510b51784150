"""Pydantic contracts shared across backend and api."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


_Date = date

TRANSACTION_CATEGORIES: tuple[str, ...] = (
    "Online Purchases",
    "Groceries",
    "Transportation",
    "Entertainment",
    "Utilities",
    "Healthcare",
    "Other",
)
DEFAULT_TRANSACTION_CATEGORY = TRANSACTION_CATEGORIES[0]
CREDIT_CARD_ACCOUNT_TYPE = "credit_card"


class ErrorCode(str, Enum):
    """Stable error codes for service contracts across layers."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class ServiceError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ErrorCode
    message: str
    details: dict[str, object] | None = None


class TransactionType(str, Enum):
    """Polarity of a transaction, carried by its explicit `type` field."""

    INCOME = "income"
    EXPENSE = "expense"


class FilterType(str, Enum):
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


class SortKey(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    DESCRIPTION = "description"


class SortOrder(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


def _coerce_identifier(value: object) -> object:
    if isinstance(value, (UUID, int)) and not isinstance(value, bool):
        return str(value)
    return value


def _assume_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _coerce_calendar_date(value: object) -> object:
    """Drop any time-of-day part: transactions carry calendar dates only."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        for separator in ("T", " "):
            if separator in text:
                text = text.split(separator, maxsplit=1)[0]
        return text
    return value


class Transaction(BaseModel):
    """Immutable snapshot of one transaction row."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    user_id: str | None = None
    amount: Decimal = Field(allow_inf_nan=False)
    description: str = Field(validation_alias=AliasChoices("description", "name"))
    type: TransactionType
    category: str | None = None
    date: _Date
    created_at: datetime | None = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifiers(cls, value: object) -> object:
        return _coerce_identifier(value)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: object) -> object:
        return _coerce_calendar_date(value)

    @field_validator("created_at")
    @classmethod
    def created_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)


class Account(BaseModel):
    """Bank account or credit card snapshot."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    user_id: str | None = None
    name: str
    type: str
    balance: Decimal = Field(allow_inf_nan=False)
    account_number_last_four: str | None = Field(default=None, pattern=r"^\d{4}$")
    institution_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("institution_name", "institution"),
    )
    created_at: datetime | None = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifiers(cls, value: object) -> object:
        return _coerce_identifier(value)

    @field_validator("created_at")
    @classmethod
    def created_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    @property
    def is_debt(self) -> bool:
        return self.type == CREDIT_CARD_ACCOUNT_TYPE and self.balance < 0


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    amount: Decimal = Field(gt=0, allow_inf_nan=False, decimal_places=2)
    description: str = Field(min_length=1, max_length=200)
    type: TransactionType = TransactionType.EXPENSE
    category: str | None = DEFAULT_TRANSACTION_CATEGORY
    date: _Date = Field(default_factory=_Date.today)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("description must not be blank")
        return stripped

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str | None) -> str | None:
        if value is not None and value not in TRANSACTION_CATEGORIES:
            raise ValueError(f"Unsupported category: {value}")
        return value


class TransactionDeleteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    transaction_id: str


class AccountCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    name: str = Field(min_length=1, max_length=120)
    type: str = "checking"
    balance: Decimal = Field(default=Decimal("0"), allow_inf_nan=False)
    account_number_last_four: str | None = Field(default=None, pattern=r"^\d{4}$")
    institution_name: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        normalized = value.strip().lower().replace(" ", "_")
        if not normalized:
            raise ValueError("type must not be blank")
        return normalized


class AccountDeleteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    account_id: str


class ViewParams(BaseModel):
    """User-selected view options for the transactions list."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    filter_type: FilterType = FilterType.ALL
    search: str = ""
    sort_by: SortKey = SortKey.DATE
    sort_order: SortOrder = SortOrder.DESCENDING


class ViewTotals(BaseModel):
    model_config = ConfigDict(extra="forbid")

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net: Decimal = Decimal("0")


class TransactionView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[Transaction]
    totals: ViewTotals
    count: int
    skipped: int = 0
    error: str | None = None


class AccountsListResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[Account]
    skipped: int = 0
    error: str | None = None


class DashboardSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    balance: Decimal = Decimal("0")
    debts: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net: Decimal = Decimal("0")
    recent_transactions: list[Transaction] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    skipped_transactions: int = 0
    skipped_accounts: int = 0
    error: str | None = None
