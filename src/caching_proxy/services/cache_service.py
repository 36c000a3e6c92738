"""Cache service for core caching policy.

This service owns the hit and capture sides of the proxy: it reads the
store for a request, renders stored entries back into responses with gzip
renegotiated for the current client, and captures cacheable upstream
responses into normalized entries.
"""

import sys

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from caching_proxy.dto import StoredEntry
from caching_proxy.entities import CacheEntryEntity, ProxyRequest, UpstreamResponse
from caching_proxy.exceptions import CaptureError, MalformedEntryError, StoreError
from caching_proxy.protocols import EntryStore

from .compression import accepts_gzip, gunzip, gzip_payload, has_unsupported_encoding, is_gzip_encoded
from .policy import derive_key, is_cacheable, is_capturable


def encode_entry(entry: CacheEntryEntity) -> bytes:
    """Serialize an entry to its stored JSON form."""
    return StoredEntry.from_entity(entry).model_dump_json().encode("utf-8")


def decode_entry(data: bytes) -> CacheEntryEntity:
    """Deserialize a stored entry.

    Raises:
        MalformedEntryError: If data is not a valid stored entry
    """
    try:
        return StoredEntry.model_validate_json(data).to_entity()
    except ValidationError as e:
        raise MalformedEntryError(f"Invalid cache entry: {e.error_count()} validation error(s)") from e


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


class CacheService:
    """Core cache orchestration service.

    This service depends on the EntryStore PROTOCOL, not a concrete
    implementation: the store can be a directory of files, Redis, or an
    in-memory dict in tests.

    Cache-layer faults never reach the client. A failed or malformed read
    is a miss; a failed decompression or write skips the capture and the
    client still gets the upstream bytes.

    Example:
        ```python
        from caching_proxy.repositories import FileEntryStore
        from caching_proxy.services import CacheService

        cache = CacheService.create(store=FileEntryStore("./cache"))
        entry = await cache.lookup(request)
        ```
    """

    def __init__(self, store: EntryStore) -> None:
        """Initialize the cache service.

        Args:
            store: Cache entry store (required).
        """
        self._store = store

    @classmethod
    def create(cls, store: EntryStore) -> "CacheService":
        """Factory method to create CacheService.

        Args:
            store: Cache entry store (required).

        Returns:
            Configured CacheService instance
        """
        return cls(store=store)

    @staticmethod
    def key_for(request: ProxyRequest) -> str:
        """Cache key for request."""
        return derive_key(request.method, request.path, request.raw_query)

    async def lookup(self, request: ProxyRequest) -> CacheEntryEntity | None:
        """Find the stored entry for request.

        Business logic:
        1. Non-cacheable methods never touch the store
        2. Read the entry bytes at the request's key
        3. Decode them; read failures and malformed entries count as absent

        Args:
            request: The inbound request

        Returns:
            CacheEntryEntity if a usable entry exists, None otherwise
        """
        if not is_cacheable(request.method):
            return None

        key = self.key_for(request)
        try:
            data = await run_in_threadpool(self._store.get, key)
        except StoreError as e:
            _warn(f"Cache read failed for {key}: {e}")
            return None

        if data is None:
            return None

        try:
            return decode_entry(data)
        except MalformedEntryError as e:
            _warn(f"Ignoring malformed cache entry {key}: {e}")
            return None

    def replay(self, entry: CacheEntryEntity, request: ProxyRequest) -> UpstreamResponse:
        """Render a stored entry as a response for request.

        The payload is gzipped only if the origin originally sent it gzipped
        AND the current client accepts gzip; otherwise it is sent as stored.
        Entries that were gzipped carry Vary: Accept-Encoding on every hit.

        A HEAD entry holds no payload, so a HEAD hit carries no
        Content-Length.

        Args:
            entry: The stored entry
            request: The request being answered

        Returns:
            A 200 response; Content-Length matches the body for non-HEAD
        """
        headers = [("content-type", entry.replay_content_type)]
        gzipped = entry.was_compressed and accepts_gzip(request.header("accept-encoding"))

        if entry.was_compressed:
            headers.append(("vary", "Accept-Encoding"))
        if gzipped:
            headers.append(("content-encoding", "gzip"))

        response = UpstreamResponse(status_code=200, headers=headers)
        if request.method == "HEAD":
            return response
        return response.with_body(gzip_payload(entry.payload) if gzipped else entry.payload)

    def normalize(self, response: UpstreamResponse) -> CacheEntryEntity:
        """Build a normalized entry from an upstream response.

        Raises:
            CaptureError: If the body uses an unsupported coding or is
                not valid gzip
        """
        content_encoding = response.header("content-encoding")
        if has_unsupported_encoding(content_encoding):
            raise CaptureError(f"Unsupported Content-Encoding {content_encoding!r}")

        was_compressed = is_gzip_encoded(content_encoding)
        payload = gunzip(response.body) if was_compressed else response.body

        return CacheEntryEntity(
            payload=payload,
            was_compressed=was_compressed,
            content_type=response.header("content-type") or None,
        )

    async def capture(self, request: ProxyRequest, response: UpstreamResponse) -> UpstreamResponse:
        """Capture a forwarded response into the cache.

        Business logic:
        1. Skip anything but a 200 to GET/HEAD
        2. Normalize the body (gunzip if the origin gzipped it)
        3. Write the entry at the request's key, replacing any prior entry
        4. Return the original upstream bytes with Content-Length recomputed,
           except for HEAD, whose upstream headers pass through untouched

        Args:
            request: The original inbound request
            response: The response returned by the forwarder

        Returns:
            The response to send to the client
        """
        if not is_capturable(request.method, response.status_code):
            return response

        key = self.key_for(request)
        try:
            entry = self.normalize(response)
            await run_in_threadpool(self._store.put, key, encode_entry(entry))
        except (CaptureError, StoreError) as e:
            _warn(f"Cache capture skipped for {request.method} {request.target}: {e}")

        if request.method == "HEAD":
            return response
        return response.with_body(response.body)

    @property
    def store(self) -> EntryStore:
        """Get the underlying store (for testing)."""
        return self._store
