"""Test package for the ChatKit relay.

Unit tests cover isolated logic and integration tests cover workflows.

Structure:
    - unit/: Individual function and class tests
    - integration/: Relay endpoints and the send workflow end to end

The upstream API is always a recording httpx.MockTransport, so no test
needs network access or a real API key.
Uses pytest with pytest-check for soft assertions.
"""
