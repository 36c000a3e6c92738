"""Domain entities for internal representation.

These are pure dataclasses (frozen) shared by the handler, service and
repository layers. They carry no HTTP framework types, so services can be
tested without a running server.
"""

from .cache_entry import CacheEntryEntity
from .disposition import Disposition
from .messages import ProxyRequest, UpstreamResponse

__all__ = ["CacheEntryEntity", "Disposition", "ProxyRequest", "UpstreamResponse"]
