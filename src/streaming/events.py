"""Classification of upstream ChatKit events.

The upstream has shipped two overlapping shapes for assistant text:

- ``thread.item.updated`` carrying an ``update`` of type
  ``assistant_message.content_part.text_delta`` with a ``delta`` string
- ``thread.item.delta`` carrying ``delta.content``, an array of typed parts

Both are supported. Everything the pipeline cares about is mapped onto the
small ``StreamEvent`` union; new event kinds extend the union.
"""

from collections.abc import AsyncIterable, AsyncIterator
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

THREAD_CREATED = "thread.created"
ITEM_UPDATED = "thread.item.updated"
ITEM_DELTA = "thread.item.delta"
TEXT_DELTA_UPDATE = "assistant_message.content_part.text_delta"


class ThreadCreated(BaseModel):
    kind: Literal["thread_created"] = "thread_created"
    remote_thread_id: str


class TextDelta(BaseModel):
    kind: Literal["text_delta"] = "text_delta"
    text: str


class Unrecognized(BaseModel):
    kind: Literal["unrecognized"] = "unrecognized"
    type: str | None = None


StreamEvent = Annotated[
    ThreadCreated | TextDelta | Unrecognized,
    Field(discriminator="kind"),
]


def interpret(payload: dict[str, Any]) -> list[StreamEvent]:
    """Classify one decoded payload.

    Args:
        payload: A JSON object from the event stream.

    Returns:
        The events it carries, in order. Payloads the pipeline does not
        act on produce a single ``Unrecognized``.
    """
    event_type = payload.get("type")

    if event_type == THREAD_CREATED:
        thread = payload.get("thread")
        if isinstance(thread, dict) and isinstance(thread.get("id"), str) and thread["id"]:
            return [ThreadCreated(remote_thread_id=thread["id"])]

    elif event_type == ITEM_UPDATED:
        update = payload.get("update")
        if isinstance(update, dict) and update.get("type") == TEXT_DELTA_UPDATE:
            delta = update.get("delta")
            return [TextDelta(text=delta if isinstance(delta, str) else "")]

    elif event_type == ITEM_DELTA:
        delta = payload.get("delta")
        content = delta.get("content") if isinstance(delta, dict) else None
        if isinstance(content, list):
            deltas = [
                TextDelta(text=part["text"])
                for part in content
                if isinstance(part, dict)
                and part.get("type") == "text"
                and isinstance(part.get("text"), str)
                and part["text"]
            ]
            if deltas:
                return deltas

    return [Unrecognized(type=event_type if isinstance(event_type, str) else None)]


async def interpret_stream(
    payloads: AsyncIterable[dict[str, Any]],
) -> AsyncIterator[StreamEvent]:
    """Map a payload stream onto internal events, preserving order."""
    async for payload in payloads:
        for event in interpret(payload):
            yield event
