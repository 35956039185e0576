"""Agent — one deployable tool server: identity, catalog and session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp_agents.protocol.dispatcher import RequestDispatcher
from mcp_agents.protocol.models import PROTOCOL_VERSION
from mcp_agents.protocol.server import StdioServer

if TYPE_CHECKING:
    from mcp_agents.config import ServerSettings
    from mcp_agents.protocol.models import ServerInfo
    from mcp_agents.protocol.registry import ToolRegistry
    from mcp_agents.protocol.session import Session


@dataclass(frozen=True)
class Agent:
    """Everything needed to serve one agent over stdio."""

    name: str
    server_info: ServerInfo
    registry: ToolRegistry
    session: Session[Any]

    def dispatcher(self, *, protocol_version: str = PROTOCOL_VERSION) -> RequestDispatcher:
        return RequestDispatcher(
            self.registry,
            self.session,
            self.server_info,
            protocol_version=protocol_version,
        )

    def server(self, settings: ServerSettings) -> StdioServer:
        return StdioServer(
            self.dispatcher(protocol_version=settings.protocol_version),
            max_frame_bytes=settings.max_frame_bytes,
            max_concurrency=settings.max_concurrency,
        )
