"""Redis implementation of EntryStore.

Entries are plain string values under ``<prefix><key>``. SET replaces the
value atomically and no expiry is set: entries live until overwritten.
"""

import redis

from caching_proxy.config import Settings, get_redis_client, get_settings
from caching_proxy.exceptions import StoreError


class RedisEntryStore:
    """Redis-backed entry store.

    This class satisfies the EntryStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "proxy_cache:") -> None:
        """Initialize the Redis entry store.

        Args:
            redis_client: Redis client instance (decode_responses=False).
            key_prefix: Prefix prepended to every cache key.
        """
        self._client = redis_client
        self._key_prefix = key_prefix

    @classmethod
    def create(cls, settings: Settings | None = None) -> "RedisEntryStore":
        """Factory method to create RedisEntryStore from settings.

        Args:
            settings: Settings with the Redis URL and key prefix. If None,
                uses the environment settings.

        Returns:
            Configured RedisEntryStore
        """
        settings = settings or get_settings()
        return cls(
            redis_client=get_redis_client(settings),
            key_prefix=settings.cache_key_prefix,
        )

    def _redis_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> bytes | None:
        """Read the entry stored at key.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if the key does not exist
        """
        try:
            value = self._client.get(self._redis_key(key))
        except redis.RedisError as e:
            raise StoreError(f"Cannot read cache entry {key}: {e}") from e

        if value is None:
            return None
        if isinstance(value, str):
            return value.encode()
        return bytes(value)  # type: ignore[arg-type]

    def put(self, key: str, data: bytes) -> None:
        """Replace the entry stored at key.

        Args:
            key: The cache key
            data: The encoded entry
        """
        try:
            self._client.set(self._redis_key(key), data)
        except redis.RedisError as e:
            raise StoreError(f"Cannot write cache entry {key}: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def __repr__(self) -> str:
        return f"RedisEntryStore(prefix={self._key_prefix!r})"
