"""ResponseEmitter — writes JSON-RPC envelopes to the output channel."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from mcp_agents.protocol.codec import encode_message

if TYPE_CHECKING:
    from mcp_agents.protocol.models import JsonRpcResponse


@runtime_checkable
class LineSink(Protocol):
    """Byte sink for the response channel (``asyncio.StreamWriter`` fits)."""

    def write(self, data: bytes) -> None: ...
    async def drain(self) -> None: ...


class ResponseEmitter:
    """Serialises each response as one JSON line on the sink.

    Each envelope is written with a single ``write`` call, so concurrent
    tasks on the same event loop never interleave partial lines. Nothing but
    responses may be written to the sink.
    """

    def __init__(self, sink: LineSink) -> None:
        self._sink = sink

    async def emit(self, response: JsonRpcResponse) -> None:
        self._sink.write(encode_message(response.to_wire()))
        await self._sink.drain()
