"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - storage: In-memory stand-in for per-browser storage
    - store: ThreadStore loaded from that storage
    - proxy_config: Relay configuration with a test API key
    - upstream: Recording fake of the upstream API
    - relay_app: FastAPI relay wired to the fake upstream
    - async_client: HTTPX client for API testing
    - chat_client: ChatClient talking to the relay in-process

The upstream is always faked with httpx.MockTransport; no test needs network access.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.chat.client import ChatClient
from src.chat.config import ChatConfig
from src.proxy.config import ProxyConfig
from src.threads.store import ThreadStore
from tests.helpers import FakeUpstream


@pytest.fixture
def storage() -> dict[str, Any]:
    """Return an empty storage mapping."""
    return {}


@pytest.fixture
def store(storage: dict[str, Any]) -> ThreadStore:
    return ThreadStore.load(storage)


@pytest.fixture
def proxy_config() -> ProxyConfig:
    """Return relay configuration pointing at the real upstream hosts.

    Requests never leave the process; the transport is faked.
    """
    return ProxyConfig(
        openai_api_key="sk-test-key",
        openai_api_base="https://api.openai.com",
        chatkit_cdn_base="https://cdn.platform.openai.com",
        request_timeout=5.0,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def relay_app(
    proxy_config: ProxyConfig, upstream: FakeUpstream
) -> AsyncGenerator[FastAPI]:
    """Create the relay app with upstream calls routed to the fake."""
    application = create_app(config=proxy_config, transport=upstream.transport)
    yield application
    await application.state.http_client.aclose()


@pytest.fixture
async def async_client(relay_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=relay_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig(api_base_url="http://test", workflow_id="wf_test", timeout=5.0)


@pytest.fixture
async def chat_client(
    chat_config: ChatConfig, async_client: AsyncClient
) -> ChatClient:
    """ChatClient whose requests are served by the relay app in-process."""
    return ChatClient(config=chat_config, http_client=async_client)


@pytest.fixture
async def keyless_client(upstream: FakeUpstream) -> AsyncGenerator[AsyncClient]:
    """Client for a relay started without OPENAI_API_KEY."""
    application = create_app(config=ProxyConfig(openai_api_key=""), transport=upstream.transport)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await application.state.http_client.aclose()
