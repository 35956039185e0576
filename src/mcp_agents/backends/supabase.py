"""Supabase (PostgREST) client and its session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp_agents.backends._http import ApiClient
from mcp_agents.backends.errors import BackendError, SessionError
from mcp_agents.protocol.session import Session

if TYPE_CHECKING:
    import httpx

    from mcp_agents.config import TasksSettings

logger = logging.getLogger(__name__)

# Ask PostgREST for a single object instead of an array.
_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def quote_filter_value(value: str) -> str:
    """Quote *value* for use inside a PostgREST ``or=(...)`` filter."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseClient(ApiClient):
    """Table access over Supabase's ``/rest/v1`` endpoint."""

    service = "supabase"

    def __init__(
        self,
        settings: TasksSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        url = (settings.supabase_url or "").rstrip("/")
        key = settings.supabase_key or ""
        self.table = settings.table
        super().__init__(
            f"{url}/rest/v1",
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=settings.timeout,
            transport=transport,
        )

    async def select(self, table: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        rows = await self.request("GET", f"/{table}", params=params)
        return list(rows or [])

    async def insert_one(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        return await self.request(
            "POST",
            f"/{table}",
            json=row,
            headers={"Prefer": "return=representation", "Accept": _SINGLE_OBJECT},
        )

    async def update_one(self, table: str, row_id: Any, values: dict[str, Any]) -> dict[str, Any]:
        return await self.request(
            "PATCH",
            f"/{table}",
            params={"id": f"eq.{row_id}"},
            json=values,
            headers={"Prefer": "return=representation", "Accept": _SINGLE_OBJECT},
        )

    async def count(self, table: str) -> int:
        """Exact row count, read from the ``Content-Range`` header."""
        response = await self.send(
            "HEAD", f"/{table}", params={"select": "*"}, headers={"Prefer": "count=exact"}
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total or total == "*":
            return 0
        try:
            return int(total)
        except ValueError as exc:
            raise BackendError(f"Unexpected Content-Range header: {content_range}") from exc


class SupabaseSession(Session[SupabaseClient]):
    """Builds the Supabase client from the project URL and anon key."""

    def __init__(
        self,
        settings: TasksSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._transport = transport

    async def _open(self) -> SupabaseClient:
        if not self._settings.supabase_url or not self._settings.supabase_key:
            msg = "Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            raise SessionError(msg)
        logger.info("Supabase client configured for %s", self._settings.supabase_url)
        return SupabaseClient(self._settings, transport=self._transport)

    async def _close(self, client: SupabaseClient) -> None:
        await client.aclose()
