"""Fold stream events into the message list of one thread.

The assembler is bound to the local thread id captured when the user sent
the message, not to whichever thread is active when a delta arrives. If
that thread is deleted mid-stream, further output is discarded.

Deltas are assumed strictly ordered and non-repeating; a redelivered delta
would be appended twice.
"""

import logging
from collections.abc import AsyncIterable

from src.models.threads import Message, new_id
from src.streaming.events import StreamEvent, TextDelta, ThreadCreated
from src.threads.store import ThreadStore

logger = logging.getLogger(__name__)


class MessageAssembler:
    """Accumulates assistant text for a single turn and upserts it by id."""

    def __init__(self, store: ThreadStore, thread_id: str) -> None:
        self._store = store
        self._thread_id = thread_id
        self._message_id = new_id()
        self._text = ""

    @property
    def thread_id(self) -> str:
        return self._thread_id

    @property
    def message_id(self) -> str:
        return self._message_id

    @property
    def content(self) -> str:
        return self._text

    def apply(self, event: StreamEvent) -> None:
        """Apply one event to the bound thread."""
        if isinstance(event, TextDelta):
            self._apply_delta(event.text)
        elif isinstance(event, ThreadCreated):
            self._apply_thread_created(event.remote_thread_id)

    def finish(self) -> None:
        """End the turn; the next delta starts a new assistant message."""
        self._message_id = new_id()
        self._text = ""

    async def assemble(self, events: AsyncIterable[StreamEvent]) -> str:
        """Apply every event of a stream, then finish the turn.

        Returns:
            The assistant text assembled during this turn.
        """
        try:
            async for event in events:
                self.apply(event)
            return self._text
        finally:
            self.finish()

    def _apply_delta(self, text: str) -> None:
        self._text += text
        message = Message(id=self._message_id, role="assistant", content=self._text)
        if not self._store.upsert_message(self._thread_id, message):
            logger.warning(f"Thread {self._thread_id} no longer exists; dropping delta")

    def _apply_thread_created(self, remote_thread_id: str) -> None:
        thread = self._store.get(self._thread_id)
        if thread is None:
            logger.warning(f"Thread {self._thread_id} no longer exists; dropping thread id")
            return
        if not self._store.bind_remote_thread(self._thread_id, remote_thread_id):
            logger.info(
                f"Thread {self._thread_id} already bound to {thread.remote_thread_id}; "
                f"ignoring {remote_thread_id}"
            )
