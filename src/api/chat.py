"""Conversation and session endpoints.

Relays a user message to the ChatKit conversation API and streams the SSE
response back unchanged, and issues client secrets for a workflow.
"""

import logging
import uuid
from typing import Any

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.api.dependencies import get_config, get_http_client
from src.models.schemas import ChatProxyRequest, SessionRequest
from src.proxy.config import ProxyConfig
from src.proxy.upstream import (
    error_response,
    open_upstream,
    relay_error,
    relay_stream,
    require_api_key,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

CONVERSATION_PATH = "/v1/chatkit/conversation"
SESSIONS_PATH = "/v1/chatkit/sessions"


def build_conversation_request(payload: ChatProxyRequest) -> dict[str, Any]:
    """Translate a chat request into the ChatKit conversation format.

    Args:
        payload: Validated chat request.

    Returns:
        A ``threads.create`` request, continuing ``thread_id`` when given.
    """
    params: dict[str, Any] = {
        "input": {
            "content": [{"type": "input_text", "text": payload.message.content}],
            "quoted_text": "",
            "attachments": [],
            "inference_options": {},
        },
    }
    if payload.thread_id:
        params["thread_id"] = payload.thread_id
    return {"type": "threads.create", "params": params}


@router.post("/chat")
async def chat(
    payload: ChatProxyRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ProxyConfig = Depends(get_config),
) -> Response:
    """Send a message and stream the upstream event stream back.

    Returns:
        The upstream SSE body, relayed as it arrives.

    Raises:
        500: Server-side API key not configured, or upstream unreachable.
        4xx/5xx: Upstream error, relayed verbatim.
    """
    require_api_key(config)

    try:
        upstream = await open_upstream(
            client,
            "POST",
            f"{config.openai_api_base}{CONVERSATION_PATH}",
            headers={
                "Authorization": f"Bearer {payload.client_secret}",
                "OpenAI-Beta": config.chatkit_beta_header,
            },
            json=build_conversation_request(payload),
        )
    except httpx.RequestError as e:
        logger.error(f"Conversation request failed: {e}")
        return error_response(str(e) or "Proxy request failed")

    logger.info(f"Conversation upstream status: {upstream.status_code}")
    if not upstream.is_success:
        return await relay_error(upstream)

    return relay_stream(
        upstream,
        {"Cache-Control": "no-cache", "Connection": "keep-alive"},
        "text/event-stream",
    )


@router.post("/create-session")
async def create_session(
    payload: SessionRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ProxyConfig = Depends(get_config),
) -> Response:
    """Issue a short-lived client secret for a workflow.

    Returns:
        The upstream session object, including ``client_secret``.
    """
    api_key = require_api_key(config)
    body = {
        "workflow": payload.workflow.model_dump(),
        "chatkit_configuration": payload.chatkit_configuration,
        "user": payload.user or f"user_{uuid.uuid4().hex}",
    }

    try:
        upstream = await open_upstream(
            client,
            "POST",
            f"{config.openai_api_base}{SESSIONS_PATH}",
            headers={
                "Authorization": f"Bearer {api_key}",
                "OpenAI-Beta": config.chatkit_beta_header,
            },
            json=body,
        )
    except httpx.RequestError as e:
        logger.error(f"Session request failed: {e}")
        return error_response(str(e) or "Proxy request failed")

    if not upstream.is_success:
        return await relay_error(upstream)

    content = await upstream.aread()
    await upstream.aclose()
    logger.info(f"Issued ChatKit session for workflow {payload.workflow.id}")
    return Response(content=content, media_type="application/json")
