"""Notion agent — pages and databases in a Notion workspace."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ConfigDict, Field

from mcp_agents.agents.base import Agent
from mcp_agents.backends.errors import BackendError
from mcp_agents.backends.notion import NotionClient, NotionSession
from mcp_agents.protocol.models import ServerInfo
from mcp_agents.protocol.registry import ResourceSpec, ToolArguments, ToolRegistry, ToolSpec

if TYPE_CHECKING:
    import httpx

    from mcp_agents.config import AgentConfig

WORKSPACES_URI = "notion://workspaces"


def rich_text(content: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": content}}]


def paragraph(content: str) -> dict[str, Any]:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": rich_text(content)},
    }


def title_property(title: str) -> dict[str, Any]:
    return {"title": {"title": [{"text": {"content": title}}]}}


class NotionArguments(ToolArguments):
    """Notion tools accept and ignore arguments they do not know."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SearchPagesArgs(NotionArguments):
    query: str | None = Field(default=None, description="Search query (optional)")
    page_size: int = Field(default=10, gt=0, le=100, description="Number of results to return (max 100)")


class CreatePageArgs(NotionArguments):
    required_messages: ClassVar[dict[str, str]] = {
        "parent_id": "parent_id is required",
        "title": "title is required",
    }

    parent_id: str = Field(description="Parent page or database ID")
    title: str = Field(description="Page title")
    content: str | None = Field(default=None, description="Page content (optional)")


class ReadPageArgs(NotionArguments):
    required_messages: ClassVar[dict[str, str]] = {"page_id": "page_id is required"}

    page_id: str = Field(description="Page ID to read")


class UpdatePageArgs(NotionArguments):
    required_messages: ClassVar[dict[str, str]] = {"page_id": "page_id is required"}

    page_id: str = Field(description="Page ID to update")
    title: str | None = Field(default=None, description="New page title (optional)")
    content: str | None = Field(default=None, description="New page content (optional)")


class CreateDatabaseArgs(NotionArguments):
    required_messages: ClassVar[dict[str, str]] = {
        "parent_id": "parent_id is required",
        "title": "title is required",
        "properties": "properties is required",
    }

    parent_id: str = Field(description="Parent page ID")
    title: str = Field(description="Database title")
    properties: dict[str, Any] = Field(description="Database properties schema")


class QueryDatabaseArgs(NotionArguments):
    required_messages: ClassVar[dict[str, str]] = {"database_id": "database_id is required"}

    database_id: str = Field(description="Database ID to query")
    filter: dict[str, Any] | None = Field(default=None, description="Filter criteria (optional)")
    sorts: list[Any] | None = Field(default=None, description="Sort criteria (optional)")
    page_size: int = Field(default=10, gt=0, le=100, description="Number of results to return (max 100)")


async def search_pages(client: NotionClient, args: SearchPagesArgs) -> dict[str, Any]:
    body: dict[str, Any] = {"page_size": args.page_size}
    if args.query:
        body["query"] = args.query
    return await client.search(body)


async def create_page(client: NotionClient, args: CreatePageArgs) -> dict[str, Any]:
    children = [paragraph(args.content)] if args.content else []
    return await client.create_page(
        {
            "parent": {"page_id": args.parent_id},
            "properties": title_property(args.title),
            "children": children,
        }
    )


async def read_page(client: NotionClient, args: ReadPageArgs) -> dict[str, Any]:
    page, blocks = await asyncio.gather(
        client.retrieve_page(args.page_id),
        client.list_children(args.page_id),
    )
    return {"page": page, "blocks": blocks}


async def update_page(client: NotionClient, args: UpdatePageArgs) -> dict[str, Any]:
    properties = title_property(args.title) if args.title else {}
    updated = await client.update_page(args.page_id, {"properties": properties})

    if args.content:
        existing = await client.list_children(args.page_id)
        for block in existing.get("results") or []:
            await client.delete_block(block["id"])
        await client.append_children(args.page_id, [paragraph(args.content)])

    return updated


async def create_database(client: NotionClient, args: CreateDatabaseArgs) -> dict[str, Any]:
    return await client.create_database(
        {
            "parent": {"page_id": args.parent_id},
            "title": [{"text": {"content": args.title}}],
            "properties": args.properties,
        }
    )


async def query_database(client: NotionClient, args: QueryDatabaseArgs) -> dict[str, Any]:
    body: dict[str, Any] = {"page_size": args.page_size}
    if args.filter:
        body["filter"] = args.filter
    if args.sorts:
        body["sorts"] = args.sorts
    return await client.query_database(args.database_id, body)


async def read_workspaces(client: NotionClient) -> str:
    try:
        me = await client.me()
    except BackendError as exc:
        raise BackendError(f"Failed to fetch workspaces: {exc}", status=exc.status) from exc
    return json.dumps(me, indent=2)


TOOLS: tuple[ToolSpec[Any], ...] = (
    ToolSpec("search_pages", "Search for pages in Notion workspace", SearchPagesArgs, search_pages),
    ToolSpec("create_page", "Create a new page in Notion", CreatePageArgs, create_page),
    ToolSpec("read_page", "Read a specific page from Notion", ReadPageArgs, read_page),
    ToolSpec("update_page", "Update an existing page in Notion", UpdatePageArgs, update_page),
    ToolSpec("create_database", "Create a new database in Notion", CreateDatabaseArgs, create_database),
    ToolSpec("query_database", "Query a Notion database", QueryDatabaseArgs, query_database),
)

RESOURCES: tuple[ResourceSpec, ...] = (
    ResourceSpec(
        uri=WORKSPACES_URI,
        name="Notion Workspaces",
        description="List all accessible Notion workspaces",
        reader=read_workspaces,
    ),
)


def build_agent(config: AgentConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> Agent:
    return Agent(
        name="notion",
        server_info=ServerInfo(name="notion-mcp-server", version="1.0.0"),
        registry=ToolRegistry(TOOLS, RESOURCES),
        session=NotionSession(config.notion, transport=transport),
    )
