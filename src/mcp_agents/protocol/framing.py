"""Newline framing for the stdio input stream."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp_agents.protocol.errors import FrameTooLargeError

if TYPE_CHECKING:
    from collections.abc import Iterator

DEFAULT_MAX_FRAME_BYTES = 4 * 1024 * 1024


class FrameReader:
    """Accumulates raw chunks and splits them into ``\\n``-terminated frames.

    The reader keeps a single growing buffer. Every call to :meth:`feed`
    yields each complete frame that is available, in order, and leaves the
    trailing partial frame buffered until more data arrives. Blank frames are
    skipped. The sequence of frames does not depend on how the stream was
    chunked.

    A frame longer than *max_frame_bytes* is dropped. When the oversized
    frame is still incomplete the reader discards everything up to and
    including the next newline. In both cases :class:`FrameTooLargeError` is
    raised once all valid frames of the current chunk have been yielded; the
    reader stays usable for the next chunk.
    """

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES) -> None:
        if max_frame_bytes <= 0:
            msg = "max_frame_bytes must be positive"
            raise ValueError(msg)
        self._max = max_frame_bytes
        self._buffer = bytearray()
        self._discarding = False

    @property
    def max_frame_bytes(self) -> int:
        return self._max

    @property
    def pending(self) -> int:
        """Number of buffered bytes that do not yet form a complete frame."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        """Append *chunk* and yield every complete frame."""
        if self._discarding:
            index = chunk.find(b"\n")
            if index == -1:
                return
            chunk = chunk[index + 1 :]
            self._discarding = False
        self._buffer.extend(chunk)
        overflow: int | None = None

        while True:
            index = self._buffer.find(b"\n")
            if index == -1:
                break
            frame = bytes(self._buffer[:index])
            del self._buffer[: index + 1]
            if frame.endswith(b"\r"):
                frame = frame[:-1]
            if len(frame) > self._max:
                overflow = len(frame)
                continue
            if frame.strip():
                yield frame

        if len(self._buffer) > self._max:
            overflow = len(self._buffer)
            self._buffer.clear()
            self._discarding = True

        if overflow is not None:
            raise FrameTooLargeError(overflow, self._max)
