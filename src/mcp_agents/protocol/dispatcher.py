"""RequestDispatcher — routes decoded JSON-RPC messages to their handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from mcp_agents.protocol.errors import ProtocolError
from mcp_agents.protocol.models import (
    PROTOCOL_VERSION,
    CallToolResult,
    JsonRpcRequest,
    JsonRpcResponse,
    Method,
    ServerInfo,
    usable_id,
)
from mcp_agents.utils.telemetry import (
    ATTR_ERROR,
    ATTR_METHOD,
    ATTR_REQUEST_ID,
    ATTR_RESOURCE_URI,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from mcp_agents.protocol.registry import ToolRegistry
    from mcp_agents.protocol.session import Session

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class RequestDispatcher:
    """Produces at most one response per decoded message.

    The dispatcher keeps no per-request state; the only shared state is the
    :class:`Session` it was constructed with.

    Usage::

        dispatcher = RequestDispatcher(registry, session, ServerInfo(name="task-manager"))
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    """

    def __init__(
        self,
        registry: ToolRegistry,
        session: Session[Any],
        server_info: ServerInfo,
        *,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        self._registry = registry
        self._session = session
        self._server_info = server_info
        self._protocol_version = protocol_version

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def session(self) -> Session[Any]:
        return self._session

    def classify(self, message: Any) -> Method:
        """Map a decoded message onto the closed :class:`Method` set."""
        if not isinstance(message, dict):
            return Method.UNKNOWN
        method = Method.parse(message.get("method"))
        if method in (Method.LIST_RESOURCES, Method.READ_RESOURCE) and not self._registry.has_resources:
            return Method.UNKNOWN
        return method

    async def dispatch(self, message: Any) -> JsonRpcResponse | None:
        """Handle one decoded message.

        Returns ``None`` for unrecognised methods and for notifications
        (messages without an ``id``); otherwise exactly one response.
        """
        method = self.classify(message)
        if method is Method.UNKNOWN:
            raw = message.get("method") if isinstance(message, dict) else type(message).__name__
            logger.debug("Ignoring message with unrecognised method: %r", raw)
            return None

        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            logger.warning("Invalid %s request: %s", method.value, exc.errors()[0]["msg"])
            request_id = message.get("id")
            if usable_id(request_id):
                return JsonRpcResponse.failure(request_id, f"Invalid request: {exc.errors()[0]['msg']}")
            return None

        with _tracer.start_as_current_span("mcp.request") as span:
            span.set_attribute(ATTR_METHOD, method.value)
            if request.id is not None:
                span.set_attribute(ATTR_REQUEST_ID, str(request.id))

            match method:
                case Method.INITIALIZE:
                    response = await self._initialize(request)
                case Method.LIST_TOOLS:
                    response = self._list_tools(request)
                case Method.CALL_TOOL:
                    response = await self._call_tool(request, span)
                case Method.LIST_RESOURCES:
                    response = self._list_resources(request)
                case Method.READ_RESOURCE:
                    response = await self._read_resource(request, span)

            if response.error is not None:
                span.set_attribute(ATTR_ERROR, response.error.message)

        if not request.has_id:
            logger.debug("Suppressing response to %s notification", method.value)
            return None
        return response

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        logger.info("Handling initialize request")
        try:
            await self._session.ensure_ready()
        except Exception as exc:
            logger.error("Authentication failed: %s", exc)
            return JsonRpcResponse.failure(request.id, str(exc))
        logger.info("Authentication successful")

        capabilities: dict[str, Any] = {"tools": {}}
        if self._registry.has_resources:
            capabilities["resources"] = {}
        return JsonRpcResponse.success(
            request.id,
            {
                "protocolVersion": self._protocol_version,
                "capabilities": capabilities,
                "serverInfo": self._server_info.model_dump(),
            },
        )

    def _list_tools(self, request: JsonRpcRequest) -> JsonRpcResponse:
        tools = [descriptor.to_wire() for descriptor in self._registry.list_tools()]
        return JsonRpcResponse.success(request.id, {"tools": tools})

    async def _call_tool(self, request: JsonRpcRequest, span: Any) -> JsonRpcResponse:
        name = request.params.get("name")
        span.set_attribute(ATTR_TOOL_NAME, str(name))
        try:
            tool = self._registry.lookup(str(name))
            arguments = tool.parse_arguments(request.params.get("arguments"))
            client = await self._session.ensure_ready()
            value = await tool.invoke(client, arguments)
        except ProtocolError as exc:
            logger.info("Rejected call to %s: %s", name, exc)
            return JsonRpcResponse.failure(request.id, str(exc))
        except Exception as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return JsonRpcResponse.failure(request.id, str(exc))
        return JsonRpcResponse.success(request.id, CallToolResult.from_value(value).to_wire())

    def _list_resources(self, request: JsonRpcRequest) -> JsonRpcResponse:
        resources = [descriptor.to_wire() for descriptor in self._registry.list_resources()]
        return JsonRpcResponse.success(request.id, {"resources": resources})

    async def _read_resource(self, request: JsonRpcRequest, span: Any) -> JsonRpcResponse:
        uri = str(request.params.get("uri"))
        span.set_attribute(ATTR_RESOURCE_URI, uri)
        try:
            resource = self._registry.lookup_resource(uri)
            client = await self._session.ensure_ready()
            text = await resource.reader(client)
        except ProtocolError as exc:
            logger.info("Rejected read of %s: %s", uri, exc)
            return JsonRpcResponse.failure(request.id, str(exc))
        except Exception as exc:
            logger.warning("Reading resource %s failed: %s", uri, exc)
            return JsonRpcResponse.failure(request.id, str(exc))
        content = {"uri": uri, "mimeType": resource.mime_type, "text": text}
        return JsonRpcResponse.success(request.id, {"contents": [content]})
