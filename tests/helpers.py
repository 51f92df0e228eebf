"""Builders for SSE payloads and a recording fake of the upstream API."""

import json
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any

import httpx

TEXT_DELTA_UPDATE = "assistant_message.content_part.text_delta"


def thread_created(remote_id: str) -> dict[str, Any]:
    return {"type": "thread.created", "thread": {"id": remote_id, "title": None}}


def text_delta(text: str) -> dict[str, Any]:
    """Event in the ``thread.item.updated`` shape."""
    return {
        "type": "thread.item.updated",
        "item_id": "msg_1",
        "update": {"type": TEXT_DELTA_UPDATE, "content_index": 0, "delta": text},
    }


def item_delta(*texts: str) -> dict[str, Any]:
    """Event in the ``thread.item.delta`` shape."""
    return {
        "type": "thread.item.delta",
        "delta": {"content": [{"type": "text", "text": text} for text in texts]},
    }


def encode_sse(*events: dict[str, Any] | str) -> bytes:
    """Frame events as SSE ``data:`` lines; strings are sent verbatim."""
    frames = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        frames.append(f"data: {data}\n\n")
    return "".join(frames).encode("utf-8")


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


async def aiter_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


async def collect(items: AsyncIterator[Any]) -> list[Any]:
    return [item async for item in items]


class FakeUpstream:
    """Callable for ``httpx.MockTransport`` that records every request.

    Responses are produced by ``routes``, keyed by URL path, falling back
    to ``default``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.default: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(404, text="not found")
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes.get(request.url.path, self.default)(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)

    def serve_sse(self, path: str, body: bytes, status_code: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(
            status_code,
            headers={"content-type": "text/event-stream"},
            content=body,
        )
