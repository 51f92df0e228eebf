"""Upstream relay for the ChatKit conversation API and its client assets.

Responsibilities:
    - Server-side credential injection
    - Path, query and allow-listed header forwarding
    - Unbuffered streaming of upstream bodies
    - URL rewriting of the client library bundle

Stateless per request.
"""

from src.proxy.config import ProxyConfig, get_proxy_config

__all__ = ["ProxyConfig", "get_proxy_config"]
