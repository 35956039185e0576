"""Tests for the Notion agent's tools and workspace resource."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from mcp_agents.agents import notion
from mcp_agents.config import AgentConfig, NotionSettings


class NotionStub:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_me = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")
        if path == "/users/me":
            if self.fail_me:
                return httpx.Response(401, json={"object": "error", "message": "API token is invalid."})
            return httpx.Response(200, json={"object": "user", "name": "Integration"})
        if path.endswith("/children") and request.method == "GET":
            return httpx.Response(200, json={"results": [{"id": "b1"}, {"id": "b2"}]})
        return httpx.Response(200, json={"object": "page", "id": "p1", "path": path})


@pytest.fixture()
def stub() -> NotionStub:
    return NotionStub()


@pytest.fixture()
def agent(stub: NotionStub):
    config = AgentConfig(notion=NotionSettings(api_key="secret"))
    return notion.build_agent(config, transport=httpx.MockTransport(stub))


async def send(agent, method: str, params: dict[str, Any]) -> dict[str, Any]:
    response = await agent.dispatcher().dispatch({"jsonrpc": "2.0", "id": 1, "method": method, "params": params})
    assert response is not None
    return response.to_wire()


async def call(agent, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return await send(agent, "tools/call", {"name": name, "arguments": arguments})


def calls(stub: NotionStub) -> list[tuple[str, str, Any]]:
    return [
        (r.method, r.url.path.removeprefix("/v1"), json.loads(r.content) if r.content else None)
        for r in stub.requests
    ]


class TestCatalog:
    def test_tools_and_resources(self) -> None:
        agent = notion.build_agent(AgentConfig())
        assert [d.name for d in agent.registry.list_tools()] == [
            "search_pages",
            "create_page",
            "read_page",
            "update_page",
            "create_database",
            "query_database",
        ]
        assert agent.registry.has_resources
        assert agent.server_info.name == "notion-mcp-server"

    async def test_initialize_advertises_resources(self, agent) -> None:
        wire = await send(agent, "initialize", {})
        assert wire["result"]["capabilities"] == {"tools": {}, "resources": {}}


class TestTools:
    async def test_search_pages(self, agent, stub: NotionStub) -> None:
        await call(agent, "search_pages", {"query": "roadmap"})
        assert calls(stub) == [("POST", "/search", {"page_size": 10, "query": "roadmap"})]

    async def test_search_pages_without_query(self, agent, stub: NotionStub) -> None:
        await call(agent, "search_pages", {"page_size": 3})
        assert calls(stub) == [("POST", "/search", {"page_size": 3})]

    async def test_create_page_with_content(self, agent, stub: NotionStub) -> None:
        wire = await call(agent, "create_page", {"parent_id": "root", "title": "Notes", "content": "Hello"})
        assert json.loads(wire["result"]["content"][0]["text"])["id"] == "p1"
        _, path, body = calls(stub)[0]
        assert path == "/pages"
        assert body["parent"] == {"page_id": "root"}
        assert body["properties"]["title"]["title"][0]["text"]["content"] == "Notes"
        assert body["children"][0]["paragraph"]["rich_text"][0]["text"]["content"] == "Hello"

    async def test_create_page_requires_parent(self, agent, stub: NotionStub) -> None:
        wire = await call(agent, "create_page", {"title": "Notes"})
        assert wire["error"]["message"] == "parent_id is required"
        assert stub.requests == []

    async def test_unknown_arguments_ignored(self, agent) -> None:
        wire = await call(agent, "read_page", {"page_id": "p1", "verbose": True})
        assert "result" in wire

    async def test_read_page(self, agent, stub: NotionStub) -> None:
        wire = await call(agent, "read_page", {"page_id": "p1"})
        result = json.loads(wire["result"]["content"][0]["text"])
        assert result["page"]["id"] == "p1"
        assert [b["id"] for b in result["blocks"]["results"]] == ["b1", "b2"]
        assert sorted(path for _, path, _ in calls(stub)) == ["/blocks/p1/children", "/pages/p1"]

    async def test_update_page_replaces_content(self, agent, stub: NotionStub) -> None:
        await call(agent, "update_page", {"page_id": "p1", "title": "New", "content": "Body"})
        assert [(method, path) for method, path, _ in calls(stub)] == [
            ("PATCH", "/pages/p1"),
            ("GET", "/blocks/p1/children"),
            ("DELETE", "/blocks/b1"),
            ("DELETE", "/blocks/b2"),
            ("PATCH", "/blocks/p1/children"),
        ]

    async def test_update_page_title_only(self, agent, stub: NotionStub) -> None:
        await call(agent, "update_page", {"page_id": "p1", "title": "New"})
        assert [(method, path) for method, path, _ in calls(stub)] == [("PATCH", "/pages/p1")]

    async def test_create_database(self, agent, stub: NotionStub) -> None:
        properties = {"Name": {"title": {}}}
        await call(agent, "create_database", {"parent_id": "root", "title": "Tasks", "properties": properties})
        _, path, body = calls(stub)[0]
        assert path == "/databases"
        assert body["properties"] == properties
        assert body["title"] == [{"text": {"content": "Tasks"}}]

    async def test_create_database_requires_properties(self, agent) -> None:
        wire = await call(agent, "create_database", {"parent_id": "root", "title": "Tasks"})
        assert wire["error"]["message"] == "properties is required"

    async def test_query_database(self, agent, stub: NotionStub) -> None:
        await call(agent, "query_database", {"database_id": "d1", "filter": {"property": "Done"}})
        assert calls(stub) == [("POST", "/databases/d1/query", {"page_size": 10, "filter": {"property": "Done"}})]


class TestWorkspaceResource:
    async def test_list(self, agent) -> None:
        wire = await send(agent, "resources/list", {})
        assert wire["result"]["resources"] == [
            {
                "uri": "notion://workspaces",
                "name": "Notion Workspaces",
                "description": "List all accessible Notion workspaces",
                "mimeType": "application/json",
            }
        ]

    async def test_read(self, agent) -> None:
        wire = await send(agent, "resources/read", {"uri": "notion://workspaces"})
        content = wire["result"]["contents"][0]
        assert content["uri"] == "notion://workspaces"
        assert json.loads(content["text"])["name"] == "Integration"

    async def test_read_failure(self, agent, stub: NotionStub) -> None:
        stub.fail_me = True
        wire = await send(agent, "resources/read", {"uri": "notion://workspaces"})
        assert wire["error"]["message"] == "Failed to fetch workspaces: API token is invalid."
