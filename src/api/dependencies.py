"""Request-scoped access to application-wide resources."""

import httpx
from fastapi import Request

from src.proxy.config import ProxyConfig


def get_config(request: Request) -> ProxyConfig:
    return request.app.state.config


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Return the shared upstream client created in the app lifespan."""
    return request.app.state.http_client
