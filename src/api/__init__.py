"""FastAPI endpoints for the ChatKit relay.

HTTP and streaming routes with async request handling. Conversation
responses are relayed as Server-Sent Events without buffering.

Endpoints:
    - GET /health: Service health status
    - POST /api/create-session: Client secret issuance
    - POST /api/chat: Streamed conversation turn
    - GET|POST|OPTIONS /api/proxy/openai/{path}: API passthrough
    - GET|OPTIONS /api/proxy/chatkit/{path}: Static asset passthrough
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
