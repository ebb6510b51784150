"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.accounts_repository import (
    InMemoryAccountsRepository,
    SupabaseAccountsRepository,
)
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
)
from backend.services.finance_service import FinanceService
from shared import config


logger = logging.getLogger(__name__)


def build_finance_service() -> FinanceService:
    """Build the finance service with Supabase adapters when configured.

    Without Supabase credentials the in-memory adapters are used, which keeps
    local development and tests free of network access.
    """

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        supabase_client = SupabaseClient(
            settings=SupabaseSettings(
                url=supabase_url,
                service_role_key=supabase_key,
                anon_key=config.supabase_anon_key(),
            )
        )
        return FinanceService(
            transactions_repository=SupabaseTransactionsRepository(client=supabase_client),
            accounts_repository=SupabaseAccountsRepository(client=supabase_client),
        )

    logger.warning("supabase_not_configured using_in_memory_repositories=true")
    return FinanceService(
        transactions_repository=InMemoryTransactionsRepository(),
        accounts_repository=InMemoryAccountsRepository(),
    )
