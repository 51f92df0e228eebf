"""Same-origin passthrough for the upstream API and ChatKit static assets."""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from src.api.dependencies import get_config, get_http_client
from src.proxy.config import ProxyConfig
from src.proxy.upstream import (
    API_PROXY_PATH,
    ASSET_PROXY_PATH,
    build_target_url,
    cors_headers,
    error_response,
    is_rewritable_asset,
    open_upstream,
    preflight_response,
    raw_subpath,
    relay_stream,
    require_api_key,
    rewrite_asset_urls,
    select_headers,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proxy", tags=["proxy"])

API_METHODS = "GET, POST, OPTIONS"
ASSET_METHODS = "GET, OPTIONS"


@router.options("/openai/{path:path}")
async def openai_preflight(path: str) -> Response:
    return preflight_response(API_METHODS)


@router.api_route("/openai/{path:path}", methods=["GET", "POST"])
async def proxy_openai(
    path: str,
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ProxyConfig = Depends(get_config),
) -> Response:
    """Forward an API call upstream with the server-side credential.

    Any client-held Authorization header is replaced. The upstream status
    and body are relayed unchanged.
    """
    api_key = require_api_key(config)

    headers = {"Authorization": f"Bearer {api_key}"}
    headers.update(select_headers(request.headers, config.passthrough_headers))
    content = None
    if request.method == "POST":
        headers["Content-Type"] = request.headers.get("content-type", "application/json")
        content = await request.body()

    url = build_target_url(
        config.openai_api_base, raw_subpath(request, API_PROXY_PATH), request.url.query
    )
    try:
        upstream = await open_upstream(client, request.method, url, headers=headers, content=content)
    except httpx.RequestError as e:
        logger.error(f"API proxy request to {url} failed: {e}")
        return error_response("Proxy request failed")

    return relay_stream(upstream, cors_headers(API_METHODS), "application/json")


@router.options("/chatkit/{path:path}")
async def asset_preflight(path: str) -> Response:
    return preflight_response(ASSET_METHODS)


@router.get("/chatkit/{path:path}")
async def proxy_asset(
    path: str,
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ProxyConfig = Depends(get_config),
) -> Response:
    """Serve a ChatKit asset from the CDN.

    The client bundle is rewritten so its upstream URLs resolve to the
    proxy routes; every other asset passes through byte for byte.
    """
    headers = {
        "User-Agent": request.headers.get("user-agent", "ChatKit-Proxy"),
        "Accept": request.headers.get("accept", "*/*"),
    }
    url = build_target_url(
        config.chatkit_cdn_base, raw_subpath(request, ASSET_PROXY_PATH), request.url.query
    )
    try:
        upstream = await open_upstream(client, "GET", url, headers=headers)
    except httpx.RequestError as e:
        logger.error(f"Asset proxy request to {url} failed: {e}")
        return error_response("Proxy request failed")

    if not upstream.is_success:
        await upstream.aclose()
        logger.error(f"Asset upstream error: {upstream.status_code} {upstream.reason_phrase}")
        return PlainTextResponse(
            f"Proxy error: {upstream.reason_phrase}",
            status_code=upstream.status_code,
        )

    content_type = upstream.headers.get("content-type", "application/octet-stream")
    response_headers = {
        "Cache-Control": upstream.headers.get("cache-control", "public, max-age=3600"),
        **cors_headers(ASSET_METHODS),
    }

    if not is_rewritable_asset(path):
        return relay_stream(upstream, response_headers, "application/octet-stream")

    body = await upstream.aread()
    await upstream.aclose()
    patched = rewrite_asset_urls(body.decode("utf-8", errors="replace"))
    logger.info(f"Patched URLs in {path}")
    return Response(
        content=patched.encode("utf-8"),
        headers={"Content-Type": content_type, **response_headers},
    )
