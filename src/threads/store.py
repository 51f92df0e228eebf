"""Persistent multi-thread conversation store.

The store owns every thread of one browser session plus the active index.
It is loaded once from a key-value storage mapping (NiceGUI's per-browser
``app.storage.user`` in the app, a plain dict in tests) and written back as
JSON text after every mutation.

Invariant: there is always at least one thread, and the active index is
always in range.
"""

import json
import logging
from collections.abc import MutableMapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.models.threads import Message, ThreadRecord, utc_now

logger = logging.getLogger(__name__)

STORAGE_KEY = "chatkit_threads"
TITLE_MAX_LENGTH = 30

_records_adapter = TypeAdapter(list[ThreadRecord])


class ThreadIndexError(IndexError):
    """Raised when a thread index is outside the current thread list."""


def derive_title(text: str) -> str:
    """Build a thread title from the leading text of a message.

    Args:
        text: The first user message.

    Returns:
        The collapsed text, truncated with an ellipsis when too long.
    """
    collapsed = " ".join(text.split())
    if len(collapsed) <= TITLE_MAX_LENGTH:
        return collapsed
    return collapsed[:TITLE_MAX_LENGTH].rstrip() + "..."


class ThreadStore:
    """Ordered set of conversation threads, most recently created first."""

    def __init__(
        self,
        storage: MutableMapping[str, Any],
        threads: list[ThreadRecord] | None = None,
        key: str = STORAGE_KEY,
    ) -> None:
        """Initialize the store.

        Args:
            storage: Mapping the store persists into.
            threads: Initial records. A single empty thread when omitted.
            key: Storage key holding the serialized records.
        """
        self._storage = storage
        self._key = key
        self._threads = list(threads) if threads else [ThreadRecord()]
        self._active_index = 0

    @classmethod
    def load(cls, storage: MutableMapping[str, Any], key: str = STORAGE_KEY) -> "ThreadStore":
        """Restore a store from storage.

        Missing, empty, or corrupt data yields a fresh single-thread store.
        """
        raw = storage.get(key)
        threads: list[ThreadRecord] = []
        if raw:
            try:
                threads = _records_adapter.validate_json(raw)
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Discarding corrupt thread storage under {key!r}: {e}")
                threads = []

        store = cls(storage, threads, key=key)
        if not threads:
            store.persist()
        return store

    @property
    def threads(self) -> tuple[ThreadRecord, ...]:
        return tuple(self._threads)

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active(self) -> ThreadRecord:
        return self._threads[self._active_index]

    def __len__(self) -> int:
        return len(self._threads)

    def get(self, thread_id: str) -> ThreadRecord | None:
        """Look up a thread by its local id."""
        for thread in self._threads:
            if thread.id == thread_id:
                return thread
        return None

    def create(self) -> ThreadRecord:
        """Prepend a new empty thread and make it active."""
        thread = ThreadRecord()
        self._threads.insert(0, thread)
        self._active_index = 0
        self.persist()
        return thread

    def switch_to(self, index: int) -> ThreadRecord:
        """Make the thread at ``index`` active.

        Raises:
            ThreadIndexError: If the index is out of range.
        """
        self._check_index(index)
        self._active_index = index
        self.persist()
        return self.active

    def delete(self, index: int) -> None:
        """Delete the thread at ``index``.

        The sole remaining thread is replaced by a fresh empty one instead of
        being removed. Deleting at or before the active thread moves the
        selection to the previous record.

        Raises:
            ThreadIndexError: If the index is out of range.
        """
        self._check_index(index)

        if len(self._threads) == 1:
            self._threads[0] = ThreadRecord()
            self._active_index = 0
        else:
            del self._threads[index]
            if index <= self._active_index:
                self._active_index = max(self._active_index - 1, 0)
            self._active_index = min(self._active_index, len(self._threads) - 1)

        self.persist()

    def add_user_message(self, thread_id: str, content: str) -> Message | None:
        """Append a user message, titling the thread if it is still untitled.

        Returns:
            The new message, or None if the thread no longer exists.
        """
        thread = self.get(thread_id)
        if thread is None:
            return None

        message = Message(role="user", content=content)
        if thread.is_untitled:
            thread.title = derive_title(content)
        thread.messages.append(message)
        self._touch(thread)
        return message

    def upsert_message(self, thread_id: str, message: Message) -> bool:
        """Replace the message with the same id, or append it.

        Returns:
            False if the thread no longer exists.
        """
        thread = self.get(thread_id)
        if thread is None:
            return False

        index = thread.find_message(message.id)
        if index is None:
            thread.messages.append(message)
        else:
            thread.messages[index] = message
        self._touch(thread)
        return True

    def bind_remote_thread(self, thread_id: str, remote_thread_id: str) -> bool:
        """Set the upstream thread id unless one is already bound.

        Returns:
            True if the id was bound by this call.
        """
        thread = self.get(thread_id)
        if thread is None or thread.remote_thread_id is not None:
            return False

        thread.remote_thread_id = remote_thread_id
        self._touch(thread)
        return True

    def persist(self) -> None:
        """Write every record to storage as JSON text."""
        records = [thread.model_dump(mode="json", by_alias=True) for thread in self._threads]
        self._storage[self._key] = json.dumps(records)

    def _touch(self, thread: ThreadRecord) -> None:
        thread.updated_at = utc_now()
        self.persist()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._threads):
            raise ThreadIndexError(
                f"Thread index {index} out of range (0..{len(self._threads) - 1})"
            )
