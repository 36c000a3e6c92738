"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (caching policy) and the forwarder, not
directly on stores.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Policy) -> (Data Access)
"""

from .proxy_handler import ProxyHandler, to_proxy_request

__all__ = [
    "ProxyHandler",
    "to_proxy_request",
]
