"""
Minimal async PostgREST client for one Supabase table.

Only the four calls the tracker needs: select-with-ordering, insert-one,
delete-with-filter. Filters are passed in PostgREST syntax, e.g.
{"id": "eq.42"} or {"id": "not.is.null"}.
"""
from typing import Any, Dict, List, Optional

import httpx

from jobtracker.config import Settings, get_settings
from jobtracker.utils.logger import get_logger

logger = get_logger("jobtracker.supabase")


class SupabaseTable:
    """REST handle on a single table. Owns its httpx.AsyncClient unless one is passed in."""

    def __init__(
        self,
        table: Optional[str] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        self.table = table or settings.applications_table
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.rest_url,
            timeout=settings.supabase_timeout_seconds,
        )
        self._headers = {
            "apikey": settings.supabase_anon_key,
            "Authorization": f"Bearer {settings.supabase_anon_key}",
            "Content-Type": "application/json",
        }

    @property
    def path(self) -> str:
        return f"/{self.table}"

    async def select(self, columns: str = "*", order: Optional[str] = None) -> List[Dict[str, Any]]:
        """GET rows; `order` is a PostgREST order clause like 'created_at.desc'"""
        params = {"select": columns}
        if order:
            params["order"] = order
        resp = await self._client.get(self.path, params=params, headers=self._headers)
        resp.raise_for_status()
        data = resp.json()
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array from {self.table}, got {type(data).__name__}")
        return data

    async def insert(self, row: Dict[str, Any]) -> None:
        """POST one row without asking the store to echo it back"""
        resp = await self._client.post(
            self.path,
            json=[row],
            headers={**self._headers, "Prefer": "return=minimal"},
        )
        resp.raise_for_status()

    async def delete(self, filters: Dict[str, str]) -> None:
        """DELETE rows matching the filters. PostgREST rejects an unfiltered delete."""
        if not filters:
            raise ValueError("delete requires at least one filter")
        resp = await self._client.delete(self.path, params=filters, headers=self._headers)
        resp.raise_for_status()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
