"""Caching Proxy - transparent reverse proxy with a persistent response cache.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (EntryStore, Forwarder)
    - repositories: Store and upstream implementations
    - services: Caching policy (keys, cacheability, capture, replay)
    - handlers: HTTP request routing
    - dto: Serialized forms (stored cache entries)
    - entities: Domain models (internal)

Usage:
    ```python
    from caching_proxy.repositories import FileEntryStore
    from caching_proxy.services import CacheService

    cache = CacheService.create(store=FileEntryStore("./cache"))
    ```

For the HTTP server:
    ```python
    from caching_proxy.api.app import create_app
    ```
"""

from caching_proxy.config import Settings, get_settings
from caching_proxy.entities import CacheEntryEntity, Disposition, ProxyRequest, UpstreamResponse
from caching_proxy.exceptions import (
    CaptureError,
    CachingProxyError,
    ConfigurationError,
    MalformedEntryError,
    StoreError,
    UpstreamError,
)
from caching_proxy.handlers import ProxyHandler
from caching_proxy.protocols import EntryStore, Forwarder
from caching_proxy.repositories import FileEntryStore, HttpxForwarder, RedisEntryStore
from caching_proxy.services import CacheService, derive_key, is_cacheable

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "EntryStore",
    "Forwarder",
    # Services (caching policy)
    "CacheService",
    "derive_key",
    "is_cacheable",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories (data access)
    "FileEntryStore",
    "HttpxForwarder",
    "RedisEntryStore",
    # Entities (domain models)
    "CacheEntryEntity",
    "Disposition",
    "ProxyRequest",
    "UpstreamResponse",
    # Errors
    "CachingProxyError",
    "ConfigurationError",
    "StoreError",
    "MalformedEntryError",
    "CaptureError",
    "UpstreamError",
]
