from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ChatMessage(BaseModel):
    """Outbound message forwarded to the conversation endpoint.

    Attributes:
        role: The speaker identifier.
        content: The message text.
    """

    role: Literal["user", "assistant"] = "user"
    content: str = Field(..., min_length=1)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Strip whitespace from content before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatProxyRequest(BaseModel):
    """Request payload for the conversation proxy.

    Attributes:
        client_secret: Short-lived credential issued by the session endpoint.
        thread_id: Upstream thread to continue, if any.
        message: The user's message.
    """

    client_secret: str = Field(..., min_length=1)
    thread_id: str | None = None
    message: ChatMessage


class WorkflowRef(BaseModel):
    id: str = Field(..., min_length=1)


class SessionRequest(BaseModel):
    """Request payload for client-secret issuance.

    Attributes:
        workflow: The workflow the session is scoped to.
        chatkit_configuration: Feature flags forwarded to the upstream as-is.
        user: Optional end-user identifier; generated when omitted.
    """

    workflow: WorkflowRef
    chatkit_configuration: dict[str, Any] = Field(default_factory=dict)
    user: str | None = None


class ErrorResponse(BaseModel):
    error: str
