"""Persisted conversation models.

Messages and thread records are stored as JSON text in per-browser storage,
using camelCase keys so the layout stays stable across clients.
"""

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_THREAD_TITLE = "New Chat"


def new_id() -> str:
    """Generate an opaque identifier for messages and threads."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


class Message(BaseModel):
    """A single chat message.

    Attributes:
        id: Stable identifier assigned at creation.
        role: Who wrote the message.
        content: Message text (markdown for assistant replies).
    """

    id: str = Field(default_factory=new_id)
    role: Literal["user", "assistant"]
    content: str = ""


class ThreadRecord(BaseModel):
    """A persisted conversation thread.

    Attributes:
        id: Local storage identifier.
        title: Display title, derived from the first user message.
        remote_thread_id: Identifier assigned by the upstream service.
            Absent until the upstream creates the conversation; never
            changes once set.
        messages: Ordered message list, unique by id.
        created_at: Creation timestamp.
        updated_at: Last mutation timestamp.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_THREAD_TITLE
    remote_thread_id: str | None = Field(default=None, alias="remoteThreadId")
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    @property
    def is_untitled(self) -> bool:
        """True until the thread has received its first user message."""
        return not any(message.role == "user" for message in self.messages)

    def find_message(self, message_id: str) -> int | None:
        """Return the index of the message with the given id, if present."""
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        return None
