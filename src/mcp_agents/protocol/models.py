"""MCP models — JSON-RPC 2.0 messages, tool descriptors and result payloads.

Implements the message format used by the Model Context Protocol for
the handshake (``initialize``), tool discovery (``tools/list``), execution
(``tools/call``) and the optional resource surface.
"""

from __future__ import annotations

import enum
import json
from typing import Any

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, model_validator

PROTOCOL_VERSION = "2024-11-05"

# Every failure surfaced to the host uses this code.
TOOL_ERROR_CODE = -1

# Ids are echoed back exactly as received, so none of these may coerce.
RequestId = StrictInt | StrictFloat | StrictStr


def usable_id(value: object) -> bool:
    """True when *value* can be echoed back as a response ``id``."""
    return isinstance(value, (int, float, str)) and not isinstance(value, bool)

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class Method(enum.Enum):
    """Closed set of request methods the dispatcher understands."""

    INITIALIZE = "initialize"
    LIST_TOOLS = "tools/list"
    CALL_TOOL = "tools/call"
    LIST_RESOURCES = "resources/list"
    READ_RESOURCE = "resources/read"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> Method:
        """Map a raw ``method`` value onto the enum; anything else is UNKNOWN."""
        if not isinstance(value, str) or value == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    ``id`` is ``None`` when the message is a notification; ``has_id`` keeps
    that distinct from an explicit ``"id": null``.
    """

    jsonrpc: str = "2.0"
    method: str
    id: RequestId | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    has_id: bool = Field(default=False, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _track_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and "has_id" not in data:
            data = {**data, "has_id": "id" in data}
            if data.get("params") is None:
                data.pop("params", None)
        return data


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int = TOOL_ERROR_CODE
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: str = "2.0"
    id: RequestId | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "a response carries exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: RequestId | None, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: RequestId | None,
        message: str,
        code: int = TOOL_ERROR_CODE,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Return the envelope as sent on the wire (no ``data: null`` noise)."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.model_dump(exclude_none=True)
        else:
            wire["result"] = self.result
        return wire


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ResourceDescriptor(BaseModel):
    """A resource definition as returned by ``resources/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    uri: str
    name: str
    description: str = ""
    mime_type: str = Field(default="application/json", alias="mimeType")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ServerInfo(BaseModel):
    """Identity reported in the ``initialize`` result."""

    name: str
    version: str = "1.0.0"


class TextContent(BaseModel):
    type: str = "text"
    text: str


class CallToolResult(BaseModel):
    """The ``result`` payload of a successful ``tools/call``."""

    model_config = {"populate_by_name": True}

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def from_value(cls, value: Any) -> CallToolResult:
        """Wrap a handler's return value as a single text content item.

        Strings are passed through verbatim; anything else is rendered as
        indented JSON so the caller can parse ``content[0].text`` back.
        """
        text = value if isinstance(value, str) else json.dumps(value, indent=2, default=str)
        return cls(content=[TextContent(text=text)])

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"content": [item.model_dump() for item in self.content]}
        if self.is_error:
            wire["isError"] = True
        return wire
