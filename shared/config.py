"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_DEFAULT_RECENT_TRANSACTIONS_LIMIT = 3


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def recent_transactions_limit() -> int:
    """Return how many transactions the dashboard lists as recent."""
    raw_value = (get_env("RECENT_TRANSACTIONS_LIMIT", "") or "").strip()
    if not raw_value:
        return _DEFAULT_RECENT_TRANSACTIONS_LIMIT
    try:
        value = int(raw_value)
    except ValueError:
        logger.warning("recent_transactions_limit_invalid value=%s", raw_value)
        return _DEFAULT_RECENT_TRANSACTIONS_LIMIT
    return value if value > 0 else _DEFAULT_RECENT_TRANSACTIONS_LIMIT


def report_currency() -> str:
    """Return the currency label printed on exported reports."""
    return (get_env("REPORT_CURRENCY", "USD") or "USD").strip().upper() or "USD"


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def supabase_anon_key() -> str | None:
    """Return Supabase anon key when configured."""
    return get_env("SUPABASE_ANON_KEY")
