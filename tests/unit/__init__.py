"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - streaming/: SSE decoding, event classification, message assembly
    - threads/: Thread store mutations and persistence
    - proxy/: Configuration, header selection and asset URL rewriting

Uses pytest-check for multiple assertions per test.
"""
