"""Notion REST client and its API-key session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp_agents.backends._http import ApiClient
from mcp_agents.backends.errors import SessionError
from mcp_agents.protocol.session import Session

if TYPE_CHECKING:
    import httpx

    from mcp_agents.config import NotionSettings

logger = logging.getLogger(__name__)


class NotionClient(ApiClient):
    """The subset of the Notion API the notion agent uses."""

    service = "notion"

    def __init__(
        self,
        settings: NotionSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            settings.api_base,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Notion-Version": settings.notion_version,
            },
            timeout=settings.timeout,
            transport=transport,
        )

    async def search(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/search", json=body)

    async def create_page(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/pages", json=body)

    async def retrieve_page(self, page_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/pages/{page_id}")

    async def update_page(self, page_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("PATCH", f"/pages/{page_id}", json=body)

    async def list_children(self, block_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/blocks/{block_id}/children")

    async def append_children(self, block_id: str, children: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.request(
            "PATCH", f"/blocks/{block_id}/children", json={"children": children}
        )

    async def delete_block(self, block_id: str) -> dict[str, Any]:
        return await self.request("DELETE", f"/blocks/{block_id}")

    async def create_database(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/databases", json=body)

    async def query_database(self, database_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", f"/databases/{database_id}/query", json=body)

    async def me(self) -> dict[str, Any]:
        return await self.request("GET", "/users/me")


class NotionSession(Session[NotionClient]):
    """Builds the Notion client from the configured integration token."""

    def __init__(
        self,
        settings: NotionSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._transport = transport

    async def _open(self) -> NotionClient:
        if not self._settings.api_key:
            msg = "Notion API key is not configured. Set NOTION_API_KEY."
            raise SessionError(msg)
        logger.info("Notion client configured for %s", self._settings.api_base)
        return NotionClient(self._settings, transport=self._transport)

    async def _close(self, client: NotionClient) -> None:
        await client.aclose()
