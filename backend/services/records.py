"""Parsing of raw provider rows into shared snapshot models."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from shared.models import Account, Transaction


logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class MalformedRecordError(ValueError):
    """Raised when a provider row cannot be read as a snapshot model."""

    def __init__(self, message: str, *, record_id: object = None, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.fields = fields


def _parse(model: type[_ModelT], record: Mapping[str, Any] | _ModelT) -> _ModelT:
    if isinstance(record, model):
        return record
    if not isinstance(record, Mapping):
        raise MalformedRecordError(f"{model.__name__} record must be a mapping")
    try:
        return model.model_validate(dict(record))
    except ValidationError as exc:
        fields = tuple(
            str(error["loc"][0]) for error in exc.errors() if error.get("loc")
        )
        raise MalformedRecordError(
            f"Malformed {model.__name__.lower()} record: {', '.join(fields) or 'unknown field'}",
            record_id=record.get("id"),
            fields=fields,
        ) from exc


def parse_transaction_record(record: Mapping[str, Any] | Transaction) -> Transaction:
    return _parse(Transaction, record)


def parse_account_record(record: Mapping[str, Any] | Account) -> Account:
    return _parse(Account, record)


def parse_records(
    records: Iterable[Any],
    parser: Callable[[Any], _ModelT],
) -> tuple[list[_ModelT], int]:
    """Parse every record, skipping malformed ones.

    Returns the parsed models in input order plus the number of skipped rows.
    """

    parsed: list[_ModelT] = []
    skipped = 0
    for record in records:
        try:
            parsed.append(parser(record))
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning(
                "malformed_record_skipped record_id=%s fields=%s",
                exc.record_id,
                ",".join(exc.fields),
            )
    return parsed, skipped
