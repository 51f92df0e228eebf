"""Per-browser chat state and the send workflow.

One ``ChatSession`` exists per browser tab. It owns the thread store, the
lazily issued client secret, the loading flag that gates sending, and the
text of the error banner.
"""

import logging

from src.chat.client import ChatClient, ChatError
from src.models.threads import ThreadRecord
from src.streaming.assembler import MessageAssembler
from src.threads.store import ThreadStore

logger = logging.getLogger(__name__)


class ChatSession:
    """Coordinates sends, thread operations and error state for one user."""

    def __init__(self, store: ThreadStore, client: ChatClient) -> None:
        self.store = store
        self.client = client
        self.client_secret: str | None = None
        self.is_loading: bool = False
        self.error: str | None = None

    @property
    def can_send(self) -> bool:
        return not self.is_loading

    async def ensure_session(self) -> str | None:
        """Obtain a client secret if none is held yet.

        Returns:
            The client secret, or None if issuance failed (``error`` is set).
        """
        if self.client_secret is None:
            try:
                self.client_secret = await self.client.create_session()
            except ChatError as e:
                logger.error(f"Init error: {e}")
                self.error = str(e)
        return self.client_secret

    async def send(self, text: str) -> bool:
        """Send a user message and stream the reply into its thread.

        The reply is bound to the thread that was active when sending
        started, even if the user switches threads while it streams. Errors
        are recorded in ``error``; any partial reply is kept.

        Args:
            text: Raw input text.

        Returns:
            True if the turn completed without error.
        """
        content = text.strip()
        if not content or self.is_loading:
            return False

        self.is_loading = True
        self.error = None
        try:
            client_secret = await self.ensure_session()
            if client_secret is None:
                return False

            thread = self.store.active
            self.store.add_user_message(thread.id, content)

            assembler = MessageAssembler(self.store, thread.id)
            events = self.client.stream_events(client_secret, thread.remote_thread_id, content)
            await assembler.assemble(events)
            return True
        except ChatError as e:
            logger.error(f"Send error: {e}")
            self.error = str(e)
            return False
        finally:
            self.is_loading = False

    def dismiss_error(self) -> None:
        self.error = None

    def new_thread(self) -> ThreadRecord:
        return self.store.create()

    def switch_thread(self, index: int) -> ThreadRecord:
        return self.store.switch_to(index)

    def delete_thread(self, index: int) -> None:
        self.store.delete(index)
