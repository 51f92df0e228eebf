"""Proxy configuration with environment variable loading.

Pydantic-based configuration for the upstream relay. The server-side API key
may be absent at startup; requests that need it fail individually with a
configuration error instead.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class ProxyConfig(BaseModel):
    """Configuration for the upstream proxy.

    Attributes:
        openai_api_key: Server-side credential injected into upstream calls.
        openai_api_base: Base URL of the conversation API.
        chatkit_cdn_base: Base URL of the client-side asset CDN.
        chatkit_beta_header: Value of the OpenAI-Beta header for ChatKit calls.
        request_timeout: Upstream timeout in seconds.
        passthrough_headers: Client headers forwarded to the upstream API.
    """

    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="Server-side API key (may be empty)",
    )
    openai_api_base: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_BASE", "https://api.openai.com"),
        description="Upstream API base URL",
    )
    chatkit_cdn_base: str = Field(
        default_factory=lambda: os.getenv("CHATKIT_CDN_BASE", "https://cdn.platform.openai.com"),
        description="Upstream static asset base URL",
    )
    chatkit_beta_header: str = Field(default="chatkit_beta=v1")
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("PROXY_TIMEOUT", "120")),
        gt=0.0,
        description="Upstream timeout in seconds",
    )
    passthrough_headers: tuple[str, ...] = (
        "OpenAI-Beta",
        "OpenAI-Organization",
        "OpenAI-Project",
    )

    @field_validator("openai_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    @field_validator("openai_api_base", "chatkit_cdn_base")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)


def get_proxy_config() -> ProxyConfig:
    """Create proxy configuration from environment.

    Returns:
        Configured ProxyConfig instance.
    """
    return ProxyConfig()
