"""Cache entry storage protocol.

Defines the interface for the persistent key-value byte store that holds
encoded cache entries. The caching policy never depends on how bytes are
persisted.

Implementations can include:
- A directory of files (default)
- Redis
- Any other key-value backend
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EntryStore(Protocol):
    """Protocol for cache entry stores.

    Keys are opaque lowercase hex strings. No enumeration, range query or
    deletion is required.

    Example:
        ```python
        from caching_proxy.protocols import EntryStore

        store: EntryStore = FileEntryStore("./cache")
        store.put("5d41402abc4b2a76b9719d911017c592", b"...")
        data = store.get("5d41402abc4b2a76b9719d911017c592")
        ```
    """

    def get(self, key: str) -> bytes | None:
        """Read the bytes stored at key.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if nothing is stored at key

        Raises:
            StoreError: If the backend could not be read
        """
        ...

    def put(self, key: str, data: bytes) -> None:
        """Atomically replace the bytes stored at key.

        Args:
            key: The cache key
            data: The encoded entry

        Raises:
            StoreError: If the backend could not be written
        """
        ...
