"""Helpers shared by the upstream relay endpoints.

Upstream calls are opened in streaming mode so response bodies are relayed
chunk by chunk instead of buffered. The upstream response is closed once
the client has consumed the relayed body.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from urllib.parse import quote

import httpx
from fastapi import Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from src.proxy.config import ProxyConfig

logger = logging.getLogger(__name__)

API_PROXY_PATH = "/api/proxy/openai"
ASSET_PROXY_PATH = "/api/proxy/chatkit"

# Only the client library bundle and its companion markup reference the
# upstream hosts directly.
_REWRITABLE_ASSETS = ("chatkit.js", "chatkit/index-")
_URL_REWRITES = (
    (re.compile(r"https://api\.openai\.com"), API_PROXY_PATH),
    (re.compile(r"https://eu\.api\.openai\.com"), API_PROXY_PATH),
    (re.compile(r"https://cdn\.platform\.openai\.com"), ASSET_PROXY_PATH),
)


class MissingAPIKeyError(Exception):
    """Raised when the server-side API key is not configured."""

    def __init__(self) -> None:
        super().__init__("Missing OPENAI_API_KEY")


def cors_headers(methods: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": "*",
    }


def preflight_response(methods: str) -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=cors_headers(methods))


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def require_api_key(config: ProxyConfig) -> str:
    """Return the server-side key.

    Raises:
        MissingAPIKeyError: If no key is configured.
    """
    if not config.has_api_key:
        raise MissingAPIKeyError()
    return config.openai_api_key


def build_target_url(base: str, path: str, query: str = "") -> str:
    url = f"{base}/{path.lstrip('/')}"
    return f"{url}?{query}" if query else url


def raw_subpath(request: Request, prefix: str) -> str:
    """Return the still-encoded request path that follows ``prefix``.

    Path parameters arrive percent-decoded; joining them into a URL would
    turn an encoded ``?`` or ``/`` into a real delimiter.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else quote(request.scope["path"])
    _, _, tail = path.partition(f"{prefix}/")
    return tail


def select_headers(
    source: Mapping[str, str],
    names: Iterable[str],
) -> dict[str, str]:
    """Copy the allow-listed headers present in ``source``."""
    return {name: source[name] for name in names if source.get(name)}


def is_rewritable_asset(path: str) -> bool:
    return any(marker in path for marker in _REWRITABLE_ASSETS)


def rewrite_asset_urls(content: str) -> str:
    """Point absolute upstream URLs at the same-origin proxy routes."""
    for pattern, replacement in _URL_REWRITES:
        content = pattern.sub(replacement, content)
    return content


async def open_upstream(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: Mapping[str, str],
    content: bytes | None = None,
    json: object | None = None,
) -> httpx.Response:
    """Send a request and return once response headers have arrived.

    The body is left unread; the caller must relay or close it.
    """
    logger.info(f"Proxying {method} to {url}")
    request = client.build_request(method, url, headers=headers, content=content, json=json)
    return await client.send(request, stream=True)


async def relay_error(upstream: httpx.Response, content_type: str = "application/json") -> Response:
    """Relay a non-success upstream response with its status and body unchanged."""
    body = await upstream.aread()
    await upstream.aclose()
    logger.error(f"Upstream {upstream.request.url} returned {upstream.status_code}: {body[:500]!r}")
    return Response(
        content=body,
        status_code=upstream.status_code,
        headers={"Content-Type": content_type},
    )


def relay_stream(
    upstream: httpx.Response,
    headers: Mapping[str, str],
    default_content_type: str,
) -> StreamingResponse:
    """Stream an upstream body to the client unchanged.

    The content type is copied as a raw header so it reaches the client
    exactly as the upstream sent it.

    Args:
        upstream: Open streaming response.
        headers: Extra response headers.
        default_content_type: Content type when the upstream sends none.

    Returns:
        A streaming response that closes the upstream when done.
    """
    response_headers = {
        "Content-Type": upstream.headers.get("content-type", default_content_type),
        **headers,
    }
    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=upstream.status_code,
        headers=response_headers,
        background=BackgroundTask(upstream.aclose),
    )
