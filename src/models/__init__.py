"""Pydantic models for API requests and persisted conversation state.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatProxyRequest: Payload for the conversation proxy
    - SessionRequest: Payload for client-secret issuance
    - Message: Individual message in a thread
    - ThreadRecord: Persisted conversation with upstream identity
"""

from src.models.schemas import (
    ChatMessage,
    ChatProxyRequest,
    ErrorResponse,
    SessionRequest,
    WorkflowRef,
)
from src.models.threads import DEFAULT_THREAD_TITLE, Message, ThreadRecord, new_id

__all__ = [
    "DEFAULT_THREAD_TITLE",
    "ChatMessage",
    "ChatProxyRequest",
    "ErrorResponse",
    "Message",
    "SessionRequest",
    "ThreadRecord",
    "WorkflowRef",
    "new_id",
]
