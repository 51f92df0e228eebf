"""HTTP client for the relay API.

Creates ChatKit sessions and turns a conversation response into a stream
of internal events: response bytes are decoded as SSE, then classified.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from src.chat.config import ChatConfig, get_chat_config
from src.streaming.decoder import iter_payloads
from src.streaming.events import StreamEvent, interpret_stream

logger = logging.getLogger(__name__)


class ChatError(Exception):
    """Raised when a conversation request fails."""


class SessionError(ChatError):
    """Raised when a client secret cannot be obtained."""


class ChatClient:
    """Async client for the session and conversation endpoints."""

    def __init__(
        self,
        config: ChatConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration. Loads from environment if not provided.
            http_client: Optional preconfigured client, e.g. with a test transport.
        """
        self._config = config or get_chat_config()
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.timeout,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def create_session(self) -> str:
        """Request a client secret for the configured workflow.

        Returns:
            The issued client secret.

        Raises:
            SessionError: If the request fails or returns no secret.
        """
        body = {
            "workflow": {"id": self._config.workflow_id},
            "chatkit_configuration": {
                "file_upload": {"enabled": self._config.file_upload_enabled},
            },
        }
        try:
            response = await self._http.post("/api/create-session", json=body)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise SessionError(f"Failed to create session: HTTP {e.response.status_code}") from e
        except (httpx.RequestError, ValueError) as e:
            raise SessionError(f"Failed to create session: {e}") from e

        secret = data.get("client_secret") if isinstance(data, dict) else None
        if not secret:
            raise SessionError("Failed to create session: response has no client_secret")

        logger.info("Session initialized")
        return secret

    async def stream_events(
        self,
        client_secret: str,
        remote_thread_id: str | None,
        content: str,
    ) -> AsyncIterator[StreamEvent]:
        """Send a message and yield the events of the streamed reply.

        Args:
            client_secret: Session credential.
            remote_thread_id: Upstream thread to continue, if any.
            content: The user's message.

        Yields:
            Internal stream events in arrival order.

        Raises:
            ChatError: On a non-success status or a transport failure.
        """
        body = {
            "client_secret": client_secret,
            "thread_id": remote_thread_id,
            "message": {"role": "user", "content": content},
        }
        try:
            async with self._http.stream(
                "POST",
                "/api/chat",
                json=body,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if not response.is_success:
                    detail = (await response.aread()).decode("utf-8", errors="replace")
                    raise ChatError(f"HTTP {response.status_code}: {detail}")

                async for event in interpret_stream(iter_payloads(response.aiter_bytes())):
                    yield event
        except httpx.RequestError as e:
            raise ChatError(f"Connection failed: {e}") from e
