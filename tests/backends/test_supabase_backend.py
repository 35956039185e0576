"""Tests for the Supabase PostgREST client and session."""

from __future__ import annotations

import json

import httpx
import pytest

from mcp_agents.backends.errors import BackendError, SessionError
from mcp_agents.backends.supabase import SupabaseSession, quote_filter_value
from mcp_agents.config import TasksSettings

SETTINGS = TasksSettings(supabase_url="https://proj.supabase.co/", supabase_key="anon-key")


def test_quote_filter_value() -> None:
    assert quote_filter_value("*milk*") == '"*milk*"'
    assert quote_filter_value('say "hi", ok') == '"say \\"hi\\", ok"'
    assert quote_filter_value("back\\slash") == '"back\\\\slash"'


class TestSupabaseSession:
    @pytest.mark.parametrize(
        "settings",
        [TasksSettings(), TasksSettings(supabase_url="https://proj.supabase.co"), TasksSettings(supabase_key="k")],
    )
    async def test_missing_credentials(self, settings: TasksSettings) -> None:
        with pytest.raises(SessionError, match="Missing Supabase credentials"):
            await SupabaseSession(settings).ensure_ready()


class TestSupabaseClient:
    async def test_select(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": 1}])

        session = SupabaseSession(SETTINGS, transport=httpx.MockTransport(handler))
        client = await session.ensure_ready()
        rows = await client.select("tasks", {"select": "*", "status": "eq.todo"})
        await session.close()

        assert rows == [{"id": 1}]
        request = seen[0]
        assert request.url.path == "/rest/v1/tasks"
        assert request.url.params["status"] == "eq.todo"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    async def test_insert_and_update_return_single_row(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 3, "title": "Buy milk"})

        session = SupabaseSession(SETTINGS, transport=httpx.MockTransport(handler))
        client = await session.ensure_ready()
        assert await client.insert_one("tasks", {"title": "Buy milk"}) == {"id": 3, "title": "Buy milk"}
        await client.update_one("tasks", 3, {"status": "completed"})
        await session.close()

        insert, update = seen
        assert insert.method == "POST"
        assert insert.headers["Prefer"] == "return=representation"
        assert insert.headers["Accept"] == "application/vnd.pgrst.object+json"
        assert update.method == "PATCH"
        assert update.url.params["id"] == "eq.3"
        assert json.loads(update.content) == {"status": "completed"}

    @pytest.mark.parametrize(("content_range", "expected"), [("0-9/42", 42), ("*/0", 0), ("*/*", 0), ("", 0)])
    async def test_count(self, content_range: str, expected: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "HEAD"
            assert request.headers["Prefer"] == "count=exact"
            headers = {"Content-Range": content_range} if content_range else {}
            return httpx.Response(200, headers=headers)

        session = SupabaseSession(SETTINGS, transport=httpx.MockTransport(handler))
        client = await session.ensure_ready()
        assert await client.count("tasks") == expected
        await session.close()

    async def test_bad_content_range(self) -> None:
        session = SupabaseSession(
            SETTINGS,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, headers={"Content-Range": "0-1/many"})),
        )
        client = await session.ensure_ready()
        with pytest.raises(BackendError, match="Unexpected Content-Range"):
            await client.count("tasks")
        await session.close()

    async def test_postgrest_error(self) -> None:
        session = SupabaseSession(
            SETTINGS,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(
                    404,
                    json={"code": "42P01", "message": 'relation "public.tasks" does not exist'},
                )
            ),
        )
        client = await session.ensure_ready()
        with pytest.raises(BackendError, match='relation "public.tasks" does not exist'):
            await client.select("tasks", {})
        await session.close()
