"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.chat import router as chat_router
from src.api.proxy import router as proxy_router
from src.proxy.config import ProxyConfig, get_proxy_config
from src.proxy.upstream import MissingAPIKeyError, error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Closes the shared upstream client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting ChatKit relay...")
    if not app.state.config.has_api_key:
        logger.warning("OPENAI_API_KEY is not set; proxied requests will fail")
    yield
    # Shutdown
    logger.info("Shutting down ChatKit relay...")
    await app.state.http_client.aclose()


async def missing_api_key_handler(request: Request, exc: MissingAPIKeyError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return error_response(str(exc))


def create_app(
    config: ProxyConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Proxy configuration. Loads from environment if not provided.
        transport: Optional httpx transport for upstream calls.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_proxy_config()

    application = FastAPI(
        title="ChatKit Relay API",
        description=(
            "Same-origin relay for the ChatKit conversation API. Issues client "
            "secrets, streams conversation events, and proxies the client "
            "library and its API calls with server-side credentials."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Created eagerly so the app also works under transports that skip lifespan
    application.state.config = config
    application.state.http_client = httpx.AsyncClient(
        transport=transport,
        timeout=config.request_timeout,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(MissingAPIKeyError, missing_api_key_handler)
    application.include_router(chat_router)
    application.include_router(proxy_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "chatkit-relay"}

    return application


app = create_app()
