"""Relaying of server-sent event streams with token usage capture."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = b"data: "
DONE_LINE = b"data: [DONE]\n"


def _usage_of(payload: bytes) -> dict[str, Any] | None:
    try:
        message = json.loads(payload)
    except ValueError:
        return None
    if not isinstance(message, dict):
        return None
    usage = message.get("usage")
    return usage if isinstance(usage, dict) else None


def _deliver(write: Callable[[bytes], Any], line: bytes, what: str) -> bool:
    try:
        write(line)
    except OSError as exc:
        logger.error("Failed to write %s: %s", what, exc)
        return False
    return True


def relay_event_stream(
    lines: Iterable[bytes],
    write: Callable[[bytes], Any],
    metadata: dict[str, Any],
) -> dict[str, Any] | None:
    """Pass each newline-terminated line to ``write`` and record token usage.

    The ``usage`` object of the last data message that carried one is stored
    under ``metadata["token_usage"]`` when ``data: [DONE]`` arrives, or at the
    end of the stream if nothing was stored by then. A trailing line without a
    newline marks the end of the stream and is not relayed. Returns the last
    usage seen, or None.
    """
    last_usage: dict[str, Any] | None = None

    for line in lines:
        if not line.endswith(b"\n"):
            break
        if line.startswith(DATA_PREFIX):
            if line == DONE_LINE:
                if last_usage is not None:
                    metadata["token_usage"] = last_usage
                    logger.debug("Stored token usage from streaming response: %s", last_usage)
                if not _deliver(write, line, "[DONE] message"):
                    break
                continue
            usage = _usage_of(line[len(DATA_PREFIX):])
            if usage is not None:
                last_usage = usage
        if not _deliver(write, line, "SSE message"):
            break

    if last_usage is not None and metadata.get("token_usage") is None:
        metadata["token_usage"] = last_usage
        logger.debug("Stored token usage from last chunk: %s", last_usage)
    return last_usage