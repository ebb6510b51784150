"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    anon_key: str | None = None


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def _build_url(self, table: str, query: dict[str, str | int] | list[tuple[str, str | int]] | None) -> str:
        base_url = f"{self.settings.url.rstrip('/')}/rest/v1/{table}"
        if not query:
            return base_url
        return f"{base_url}?{urlencode(query, doseq=True)}"

    def _api_key(self, use_anon_key: bool) -> str:
        api_key = self.settings.anon_key if use_anon_key else self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase API key for requested mode")
        return api_key

    def _send(self, request: Request) -> tuple[Any, Any]:
        """Return the decoded JSON body and the response headers."""

        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
                return (json.loads(raw_body) if raw_body else []), response.headers
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc

    def get_rows(
        self,
        *,
        table: str,
        query: dict[str, str | int] | list[tuple[str, str | int]],
        with_count: bool,
        use_anon_key: bool = False,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch rows from PostgREST and optionally parse exact row count."""

        api_key = self._api_key(use_anon_key)
        request = Request(
            url=self._build_url(table, query),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Prefer": "count=exact" if with_count else "return=representation",
            },
            method="GET",
        )
        rows, headers = self._send(request)
        total: int | None = None
        if with_count:
            content_range = headers.get("content-range")
            if content_range and "/" in content_range:
                _, total_str = content_range.split("/", maxsplit=1)
                if total_str != "*":
                    total = int(total_str)
        return rows, total

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        query: dict[str, str | int] | list[tuple[str, str | int]] | None = None,
        prefer: str = "return=representation",
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        """Insert rows and return the representation sent back by PostgREST."""

        api_key = self._api_key(use_anon_key)
        request = Request(
            url=self._build_url(table, query),
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Prefer": prefer,
            },
            method="POST",
        )
        rows, _ = self._send(request)
        return rows if isinstance(rows, list) else [rows]

    def delete_rows(
        self,
        *,
        table: str,
        query: dict[str, str | int] | list[tuple[str, str | int]],
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        """Delete rows matching query filters and return deleted rows."""

        if not query:
            raise ValueError("Refusing to delete without filters")
        api_key = self._api_key(use_anon_key)
        request = Request(
            url=self._build_url(table, query),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Prefer": "return=representation",
            },
            method="DELETE",
        )
        rows, _ = self._send(request)
        return rows if isinstance(rows, list) else [rows]
