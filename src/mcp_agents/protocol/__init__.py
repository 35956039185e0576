"""Protocol core — framing, decoding, tool registry, dispatch and emission."""

from mcp_agents.protocol.dispatcher import RequestDispatcher
from mcp_agents.protocol.emitter import ResponseEmitter
from mcp_agents.protocol.errors import (
    FrameTooLargeError,
    ProtocolError,
    ResourceNotFoundError,
    StdioUnavailableError,
    ToolArgumentError,
    ToolNotFoundError,
)
from mcp_agents.protocol.framing import FrameReader
from mcp_agents.protocol.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    Method,
    ServerInfo,
    ToolDescriptor,
)
from mcp_agents.protocol.registry import ResourceSpec, ToolArguments, ToolRegistry, ToolSpec
from mcp_agents.protocol.server import StdioServer
from mcp_agents.protocol.session import Session
