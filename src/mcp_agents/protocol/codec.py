"""JSON codec for frames on the wire."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 100


def decode_message(frame: bytes) -> Any | None:
    """Parse one frame as strict JSON.

    Malformed frames (invalid UTF-8, invalid JSON, or nesting deeper than
    the parser can recurse) are logged and ``None`` is returned; this
    function never raises for bad input.
    """
    try:
        text = frame.decode("utf-8")
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        preview = frame[:_PREVIEW_CHARS].decode("utf-8", errors="replace")
        logger.warning("Parse error: %s (frame: %r)", exc, preview)
        return None


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialise *message* as a single compact JSON line."""
    line = json.dumps(message, ensure_ascii=False, separators=(",", ":"), default=str)
    return (line + "\n").encode("utf-8")
