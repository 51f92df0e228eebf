"""Integration tests for components working together as a system.

The FastAPI app runs in-process through ASGITransport; only the upstream
API is faked.

Coverage:
    - Conversation and session endpoints with real HTTP requests
    - API and static asset passthrough, including bundle URL rewriting
    - Full chat workflow from send to a persisted assistant reply
"""
