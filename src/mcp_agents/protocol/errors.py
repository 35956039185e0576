"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class FrameTooLargeError(ProtocolError):
    """An input frame exceeded the configured maximum size and was dropped."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Frame of {size} bytes exceeds the {limit} byte limit")


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(ProtocolError):
    """The arguments supplied for a tool call failed validation."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(detail)


class ResourceNotFoundError(ProtocolError):
    """Requested resource URI is not published by the registry."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class StdioUnavailableError(ProtocolError):
    """stdin or stdout cannot be attached as an asyncio pipe."""

    def __init__(self, stream: str, reason: str) -> None:
        self.stream = stream
        super().__init__(
            f"Cannot serve on {stream}: {reason}. "
            "Connect the agent through pipes, as an MCP host does."
        )
