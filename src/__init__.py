"""ChatKit Relay - streamed multi-thread chat client for a hosted conversation API.

Combines FastAPI for the same-origin relay, httpx for upstream streaming,
NiceGUI for the browser interface, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streamed relays
    - proxy: upstream credential injection, forwarding and asset rewriting
    - streaming: SSE decoding, event classification and message assembly
    - threads: persisted multi-thread conversation store
    - chat: session issuance and the send workflow
    - ui: Web interface for chat interactions
    - models: Request schemas and persisted records
"""

__version__ = "0.1.0"
