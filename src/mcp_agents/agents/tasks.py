"""Task manager agent — tasks stored in a Supabase table."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import Field

from mcp_agents.agents.base import Agent
from mcp_agents.backends.supabase import SupabaseClient, SupabaseSession, quote_filter_value
from mcp_agents.protocol.models import ServerInfo
from mcp_agents.protocol.registry import NoArguments, ToolArguments, ToolRegistry, ToolSpec

if TYPE_CHECKING:
    import httpx

    from mcp_agents.config import AgentConfig

TaskStatus = Literal["todo", "in_progress", "completed", "blocked"]

SEARCH_LIMIT = 20


def _dump(rows: Any) -> str:
    return json.dumps(rows, indent=2, default=str)


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class GetTasksArgs(ToolArguments):
    status: TaskStatus | None = Field(
        default=None, description="Filter by status (todo, in_progress, completed, blocked)"
    )
    priority: int | None = Field(default=None, ge=1, le=5, description="Filter by priority (1-5)")
    limit: int = Field(default=50, gt=0, description="Maximum number of tasks to return")


class CreateTaskArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"title": "Title is required"}

    title: str = Field(description="Task title")
    description: str | None = Field(default=None, description="Task description")
    status: TaskStatus = Field(default="todo", description="Task status")
    priority: int = Field(default=1, ge=1, le=5, description="Priority (1-5)")
    due_date: str | None = Field(default=None, description="Due date (YYYY-MM-DD)")


class UpdateTaskArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"id": "Task ID is required"}

    id: int = Field(description="Task ID")
    title: str | None = Field(default=None, description="New title")
    description: str | None = Field(default=None, description="New description")
    status: TaskStatus | None = Field(default=None, description="New status")
    priority: int | None = Field(default=None, ge=1, le=5, description="New priority")
    due_date: str | None = Field(default=None, description="New due date")


class SearchTasksArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"query": "Search query is required"}

    query: str = Field(description="Search query")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def get_tasks(client: SupabaseClient, args: GetTasksArgs) -> str:
    params: dict[str, Any] = {
        "select": "*",
        "order": "created_at.desc",
        "limit": args.limit,
    }
    if args.status:
        params["status"] = f"eq.{args.status}"
    if args.priority:
        params["priority"] = f"eq.{args.priority}"
    rows = await client.select(client.table, params)
    return f"Found {len(rows)} tasks:\n{_dump(rows)}"


async def create_task(client: SupabaseClient, args: CreateTaskArgs) -> str:
    row = await client.insert_one(client.table, args.model_dump(exclude_none=True))
    return f'Created task: "{row["title"]}" (ID: {row["id"]})'


async def update_task(client: SupabaseClient, args: UpdateTaskArgs) -> str:
    updates = args.model_dump(exclude={"id"}, exclude_unset=True)
    row = await client.update_one(client.table, args.id, updates)
    return f'Updated task: "{row["title"]}" (ID: {row["id"]})'


async def get_task_stats(client: SupabaseClient, args: NoArguments) -> str:
    total = await client.count(client.table)
    rows = await client.select(client.table, {"select": "status"})

    by_status: dict[str, int] = {}
    for row in rows:
        status = row.get("status")
        by_status[status] = by_status.get(status, 0) + 1

    stats = {"total": total, "by_status": by_status}
    return f"Task Statistics:\n{_dump(stats)}"


async def search_tasks(client: SupabaseClient, args: SearchTasksArgs) -> str:
    pattern = quote_filter_value(f"*{args.query}*")
    params = {
        "select": "*",
        "or": f"(title.ilike.{pattern},description.ilike.{pattern})",
        "limit": SEARCH_LIMIT,
    }
    rows = await client.select(client.table, params)
    return f'Found {len(rows)} tasks matching "{args.query}":\n{_dump(rows)}'


TOOLS: tuple[ToolSpec[Any], ...] = (
    ToolSpec("get_tasks", "Get tasks with optional filtering", GetTasksArgs, get_tasks),
    ToolSpec("create_task", "Create a new task", CreateTaskArgs, create_task),
    ToolSpec("update_task", "Update an existing task", UpdateTaskArgs, update_task),
    ToolSpec("get_task_stats", "Get statistics about tasks", NoArguments, get_task_stats),
    ToolSpec("search_tasks", "Search tasks by title or description", SearchTasksArgs, search_tasks),
)


def build_agent(config: AgentConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> Agent:
    return Agent(
        name="tasks",
        server_info=ServerInfo(name="task-manager", version="1.0.0"),
        registry=ToolRegistry(TOOLS),
        session=SupabaseSession(config.tasks, transport=transport),
    )
