"""Chat client configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ChatConfig(BaseModel):
    """Configuration for the browser-side chat client.

    Attributes:
        api_base_url: Base URL of the relay API.
        workflow_id: ChatKit workflow the session is issued for.
        timeout: HTTP timeout in seconds.
        file_upload_enabled: Feature flag sent with session creation.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
    )
    workflow_id: str = Field(default_factory=lambda: os.getenv("CHATKIT_WORKFLOW_ID", ""))
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_TIMEOUT", "120")),
        gt=0.0,
    )
    file_upload_enabled: bool = Field(
        default_factory=lambda: _env_flag("CHATKIT_FILE_UPLOAD", True),
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API_BASE_URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")


def get_chat_config() -> ChatConfig:
    return ChatConfig()
