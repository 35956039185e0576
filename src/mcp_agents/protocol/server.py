"""StdioServer — the read / dispatch / respond loop over stdin and stdout."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Any

from mcp_agents.protocol.codec import decode_message
from mcp_agents.protocol.emitter import LineSink, ResponseEmitter
from mcp_agents.protocol.errors import FrameTooLargeError, StdioUnavailableError
from mcp_agents.protocol.framing import DEFAULT_MAX_FRAME_BYTES, FrameReader
from mcp_agents.protocol.models import JsonRpcResponse, usable_id

if TYPE_CHECKING:
    from mcp_agents.protocol.dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class StdioServer:
    """Serves one agent over a byte reader and a line sink.

    Every decoded message becomes its own ``asyncio`` task, created in the
    order frames complete, so a slow backend call never blocks later
    requests. Responses are written as they finish; callers correlate them
    by ``id``. An optional *max_concurrency* caps in-flight dispatches.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
        max_concurrency: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._dispatcher = dispatcher
        self._max_frame_bytes = max_frame_bytes
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        self._chunk_size = chunk_size
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def serve(self, reader: asyncio.StreamReader, sink: LineSink) -> None:
        """Read until EOF, dispatching each frame; wait for in-flight work."""
        frames = FrameReader(self._max_frame_bytes)
        emitter = ResponseEmitter(sink)
        try:
            while True:
                chunk = await reader.read(self._chunk_size)
                if not chunk:
                    break
                logger.debug("Received data chunk: %d bytes", len(chunk))
                try:
                    for frame in frames.feed(chunk):
                        try:
                            self._spawn(frame, emitter)
                        except Exception:
                            logger.exception("Failed to process frame, skipping it")
                except FrameTooLargeError as exc:
                    logger.warning("Dropped oversized frame: %s", exc)
            if frames.pending:
                logger.warning("Discarding %d bytes of incomplete input at EOF", frames.pending)
        finally:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)

    def _spawn(self, frame: bytes, emitter: ResponseEmitter) -> None:
        message = decode_message(frame)
        if message is None:
            return
        task = asyncio.create_task(self._handle(message, emitter))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, message: Any, emitter: ResponseEmitter) -> None:
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    response = await self._dispatcher.dispatch(message)
            else:
                response = await self._dispatcher.dispatch(message)
            if response is not None:
                await emitter.emit(response)
        except Exception as exc:
            logger.exception("Unexpected error while handling request")
            request_id = message.get("id") if isinstance(message, dict) else None
            if usable_id(request_id):
                try:
                    await emitter.emit(JsonRpcResponse.failure(request_id, f"Internal error: {exc}"))
                except Exception:
                    logger.exception("Failed to report internal error for request %r", request_id)


async def open_stdio() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process's stdin/stdout pipes in asyncio streams.

    Raises:
        StdioUnavailableError: If either stream is not a pipe, socket or
            character device (for example a redirected regular file).
    """
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    try:
        read_transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
    except ValueError as exc:
        raise StdioUnavailableError("stdin", str(exc)) from exc
    try:
        transport, protocol = await loop.connect_write_pipe(
            asyncio.streams.FlowControlMixin, sys.stdout
        )
    except ValueError as exc:
        read_transport.close()
        raise StdioUnavailableError("stdout", str(exc)) from exc
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer


async def serve_stdio(server: StdioServer) -> None:
    """Serve on stdin/stdout until EOF, then close the backend session."""
    reader, writer = await open_stdio()
    logger.info("Ready for connections on stdio")
    try:
        await server.serve(reader, writer)
    finally:
        await server.dispatcher.session.close()
        writer.close()
        logger.info("Input closed, shutting down")
