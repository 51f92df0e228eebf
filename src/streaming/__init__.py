"""Streaming pipeline from raw response bytes to assembled messages.

Stages:
    - decoder: SSE framing across arbitrary chunk boundaries
    - events: classification of upstream payloads into StreamEvent
    - assembler: folding events into a thread's message list
"""

from src.streaming.assembler import MessageAssembler
from src.streaming.decoder import SSEDecoder, iter_payloads, parse_payload
from src.streaming.events import (
    StreamEvent,
    TextDelta,
    ThreadCreated,
    Unrecognized,
    interpret,
    interpret_stream,
)

__all__ = [
    "MessageAssembler",
    "SSEDecoder",
    "StreamEvent",
    "TextDelta",
    "ThreadCreated",
    "Unrecognized",
    "interpret",
    "interpret_stream",
    "iter_payloads",
    "parse_payload",
]
