"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (files → Redis, httpx → a test double)
- Unit testing with in-memory implementations
- Clear separation of concerns

Usage:
    ```python
    from caching_proxy.protocols import EntryStore, Forwarder

    store: EntryStore = FileEntryStore("./cache")   # works
    store: EntryStore = RedisEntryStore(client)      # also works
    ```
"""

from .entry_store import EntryStore
from .forwarder import Forwarder

__all__ = [
    "EntryStore",
    "Forwarder",
]
