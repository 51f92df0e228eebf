"""Incremental Server-Sent Events decoder.

Turns an arbitrarily chunked byte stream into ``data:`` payloads. Chunk
boundaries never need to line up with line boundaries, or even with UTF-8
character boundaries.
"""

import codecs
import json
import logging
import re
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

_LINE_END = re.compile(r"\r\n|\r|\n")


class SSEDecoder:
    """Reassemble SSE lines across chunk boundaries.

    Feed raw bytes as they arrive; each call returns the payloads of every
    ``data:`` line completed so far. Call :meth:`flush` once the stream is
    closed to pick up a final line that had no terminator.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Decode a chunk and return the payloads of completed lines."""
        self._buffer += self._decoder.decode(chunk)
        return self._drain(final=False)

    def flush(self) -> list[str]:
        """Return payloads still buffered at end of stream."""
        self._buffer += self._decoder.decode(b"", final=True)
        return self._drain(final=True)

    def _drain(self, final: bool) -> list[str]:
        # A "\r\n" split across chunks yields an extra blank line, which
        # carries no data and is ignored.
        *lines, self._buffer = _LINE_END.split(self._buffer)
        if final and self._buffer:
            lines.append(self._buffer)
            self._buffer = ""

        payloads: list[str] = []
        for line in lines:
            payload = _data_payload(line)
            if payload is not None:
                payloads.append(payload)
        return payloads


def _data_payload(line: str) -> str | None:
    """Extract the payload of a ``data:`` line, or None for anything else."""
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    if payload.strip() == DONE_SENTINEL:
        return None
    return payload


def parse_payload(text: str) -> dict[str, Any] | None:
    """Parse a payload as a JSON object.

    Args:
        text: Raw payload text from a ``data:`` line.

    Returns:
        The decoded object, or None if the payload is malformed.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Dropping malformed SSE payload {text!r}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Dropping non-object SSE payload: {text!r}")
        return None
    return data


async def iter_payloads(chunks: AsyncIterable[bytes]) -> AsyncIterator[dict[str, Any]]:
    """Decode a byte stream into JSON event payloads.

    The terminator sentinel is filtered out but does not end iteration;
    the stream ends when the underlying chunks do.

    Args:
        chunks: Raw response body chunks.

    Yields:
        Parsed payload objects in arrival order.
    """
    decoder = SSEDecoder()
    async for chunk in chunks:
        for text in decoder.feed(chunk):
            if (payload := parse_payload(text)) is not None:
                yield payload
    for text in decoder.flush():
        if (payload := parse_payload(text)) is not None:
            yield payload
