"""Tests for the Notion client and session."""

from __future__ import annotations

import json

import httpx
import pytest

from mcp_agents.backends.errors import BackendError, SessionError
from mcp_agents.backends.notion import NotionSession
from mcp_agents.config import NotionSettings


class TestNotionSession:
    async def test_missing_api_key(self) -> None:
        with pytest.raises(SessionError, match="Notion API key is not configured"):
            await NotionSession(NotionSettings()).ensure_ready()

    async def test_headers_and_routes(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"object": "list", "results": []})

        session = NotionSession(NotionSettings(api_key="secret_abc"), transport=httpx.MockTransport(handler))
        client = await session.ensure_ready()
        await client.search({"query": "roadmap", "page_size": 5})
        await client.update_page("p1", {"properties": {}})
        await client.append_children("p1", [{"type": "paragraph"}])
        await client.delete_block("b1")
        await client.query_database("d1", {"page_size": 10})
        await client.me()
        await session.close()

        assert [(r.method, r.url.path) for r in seen] == [
            ("POST", "/v1/search"),
            ("PATCH", "/v1/pages/p1"),
            ("PATCH", "/v1/blocks/p1/children"),
            ("DELETE", "/v1/blocks/b1"),
            ("POST", "/v1/databases/d1/query"),
            ("GET", "/v1/users/me"),
        ]
        assert seen[0].headers["Authorization"] == "Bearer secret_abc"
        assert seen[0].headers["Notion-Version"] == "2022-06-28"
        assert json.loads(seen[2].content) == {"children": [{"type": "paragraph"}]}

    async def test_api_error_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                json={"object": "error", "status": 404, "code": "object_not_found", "message": "Could not find page."},
            )

        session = NotionSession(NotionSettings(api_key="k"), transport=httpx.MockTransport(handler))
        client = await session.ensure_ready()
        with pytest.raises(BackendError, match="Could not find page.") as exc_info:
            await client.retrieve_page("missing")
        assert exc_info.value.status == 404
        await session.close()
