"""Service layer for caching policy.

This layer contains the core caching logic. Services depend on protocols
(interfaces), not concrete implementations, making them testable and
flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Policy) -> (Data Access)

Usage:
    ```python
    from caching_proxy.services import CacheService, derive_key

    cache = CacheService.create(store=FileEntryStore("./cache"))
    key = derive_key("GET", "/items", "page=2")
    ```
"""

from .cache_service import CacheService, decode_entry, encode_entry
from .policy import derive_key, is_cacheable, is_capturable

__all__ = [
    "CacheService",
    "decode_entry",
    "derive_key",
    "encode_entry",
    "is_cacheable",
    "is_capturable",
]
