"""Repository layer for data access.

This layer abstracts external dependencies (the file system, Redis, the
origin server) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (files → Redis)
- Unit testing with in-memory implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from caching_proxy.protocols import EntryStore, Forwarder

from .file_repository import FileEntryStore
from .httpx_forwarder import HttpxForwarder
from .redis_repository import RedisEntryStore

__all__ = [
    "EntryStore",
    "Forwarder",
    "FileEntryStore",
    "HttpxForwarder",
    "RedisEntryStore",
]
