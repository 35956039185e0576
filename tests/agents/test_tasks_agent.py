"""Tests for the Supabase-backed task manager agent."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from mcp_agents.agents import tasks
from mcp_agents.config import AgentConfig, TasksSettings


class PostgrestStub:
    """Minimal PostgREST stand-in over a list of rows."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"Content-Range": f"0-{len(self.rows) - 1}/{len(self.rows)}"})
        if request.method == "POST":
            row = {"id": len(self.rows) + 1, **json.loads(request.content)}
            self.rows.append(row)
            return httpx.Response(201, json=row)
        if request.method == "PATCH":
            row_id = int(request.url.params["id"].removeprefix("eq."))
            row = next(r for r in self.rows if r["id"] == row_id)
            row.update(json.loads(request.content))
            return httpx.Response(200, json=row)
        return httpx.Response(200, json=self.rows)


def make_agent(stub: PostgrestStub, **settings: Any):
    config = AgentConfig(
        tasks=TasksSettings(supabase_url="https://proj.supabase.co", supabase_key="anon", **settings)
    )
    return tasks.build_agent(config, transport=httpx.MockTransport(stub))


async def call(agent, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    response = await agent.dispatcher().dispatch(
        {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": name, "arguments": arguments or {}}}
    )
    assert response is not None
    return response.to_wire()


def text_of(wire: dict[str, Any]) -> str:
    return wire["result"]["content"][0]["text"]


class TestCatalog:
    def test_tools_in_order(self) -> None:
        agent = tasks.build_agent(AgentConfig())
        assert [d.name for d in agent.registry.list_tools()] == [
            "get_tasks",
            "create_task",
            "update_task",
            "get_task_stats",
            "search_tasks",
        ]
        assert agent.server_info.name == "task-manager"
        assert not agent.registry.has_resources

    def test_create_task_schema(self) -> None:
        schema = tasks.CreateTaskArgs.input_schema()
        assert schema["required"] == ["title"]
        assert schema["properties"]["status"]["enum"] == ["todo", "in_progress", "completed", "blocked"]
        assert schema["properties"]["priority"]["default"] == 1
        assert "default" not in schema["properties"]["description"]


class TestCreateTask:
    async def test_creates_with_defaults(self) -> None:
        stub = PostgrestStub()
        wire = await call(make_agent(stub), "create_task", {"title": "Write tests"})
        assert text_of(wire) == 'Created task: "Write tests" (ID: 1)'
        assert json.loads(stub.requests[0].content) == {"title": "Write tests", "status": "todo", "priority": 1}

    @pytest.mark.parametrize("arguments", [{}, {"title": ""}, {"title": None}])
    async def test_title_required(self, arguments: dict[str, Any]) -> None:
        stub = PostgrestStub()
        wire = await call(make_agent(stub), "create_task", arguments)
        assert wire["error"] == {"code": -1, "message": "Title is required"}
        assert stub.requests == []

    async def test_invalid_status(self) -> None:
        wire = await call(make_agent(PostgrestStub()), "create_task", {"title": "x", "status": "someday"})
        assert wire["error"]["message"].startswith("Invalid arguments for create_task: status")


class TestGetTasks:
    async def test_filters(self) -> None:
        stub = PostgrestStub([{"id": 1, "title": "A", "status": "todo"}])
        wire = await call(make_agent(stub), "get_tasks", {"status": "todo", "priority": 2, "limit": 5})
        assert text_of(wire).startswith("Found 1 tasks:\n")
        assert json.loads(text_of(wire).split("\n", 1)[1]) == stub.rows

        params = stub.requests[0].url.params
        assert params["status"] == "eq.todo"
        assert params["priority"] == "eq.2"
        assert params["limit"] == "5"
        assert params["order"] == "created_at.desc"

    async def test_custom_table(self) -> None:
        stub = PostgrestStub()
        await call(make_agent(stub, table="todo_items"), "get_tasks")
        assert stub.requests[0].url.path == "/rest/v1/todo_items"


class TestUpdateTask:
    async def test_only_sends_given_fields(self) -> None:
        stub = PostgrestStub([{"id": 4, "title": "Old", "status": "todo"}])
        wire = await call(make_agent(stub), "update_task", {"id": 4, "status": "completed"})
        assert text_of(wire) == 'Updated task: "Old" (ID: 4)'
        assert json.loads(stub.requests[0].content) == {"status": "completed"}

    async def test_id_required(self) -> None:
        wire = await call(make_agent(PostgrestStub()), "update_task", {"status": "completed"})
        assert wire["error"]["message"] == "Task ID is required"


class TestStatsAndSearch:
    async def test_stats(self) -> None:
        stub = PostgrestStub(
            [
                {"id": 1, "status": "todo"},
                {"id": 2, "status": "todo"},
                {"id": 3, "status": "completed"},
            ]
        )
        wire = await call(make_agent(stub), "get_task_stats")
        text = text_of(wire)
        assert text.startswith("Task Statistics:\n")
        assert json.loads(text.split("\n", 1)[1]) == {"total": 3, "by_status": {"todo": 2, "completed": 1}}

    async def test_search(self) -> None:
        stub = PostgrestStub([{"id": 1, "title": "Buy milk"}])
        wire = await call(make_agent(stub), "search_tasks", {"query": "milk"})
        assert text_of(wire).startswith('Found 1 tasks matching "milk":\n')
        params = stub.requests[0].url.params
        assert params["or"] == '(title.ilike."*milk*",description.ilike."*milk*")'
        assert params["limit"] == "20"

    async def test_search_query_required(self) -> None:
        wire = await call(make_agent(PostgrestStub()), "search_tasks", {})
        assert wire["error"]["message"] == "Search query is required"


async def test_missing_credentials_reported_on_call() -> None:
    agent = tasks.build_agent(AgentConfig())
    wire = await call(agent, "get_tasks")
    assert wire["error"]["message"] == "Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_ANON_KEY."
