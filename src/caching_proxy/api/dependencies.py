"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from caching_proxy.config import Settings
from caching_proxy.handlers import ProxyHandler
from caching_proxy.protocols import EntryStore, Forwarder
from caching_proxy.repositories import FileEntryStore, HttpxForwarder, RedisEntryStore
from caching_proxy.services import CacheService


def get_handler(request: Request) -> ProxyHandler:
    """Look up the ProxyHandler stored in app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ProxyHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


def build_store(settings: Settings) -> EntryStore:
    """Create the entry store selected by settings.cache_backend."""
    if settings.cache_backend == "redis":
        return RedisEntryStore.create(settings)
    return FileEntryStore.create(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Store and forwarder (data access) - injected or built from settings
    2. Service (caching policy) - stored in app.state.cache_service
    3. Handler (HTTP routing) - stored in app.state.proxy_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the forwarder and removes all services from app.state
    """
    settings: Settings = app.state.settings

    store: EntryStore | None = getattr(app.state, "store", None)
    if store is None:
        store = build_store(settings)
    forwarder: Forwarder | None = getattr(app.state, "forwarder", None)
    if forwarder is None:
        forwarder = HttpxForwarder.create(settings)

    cache_service = CacheService.create(store=store)
    proxy_handler = ProxyHandler(
        cache_service=cache_service,
        forwarder=forwarder,
        status_header=settings.cache_status_header,
    )

    app.state.store = store
    app.state.forwarder = forwarder
    app.state.cache_service = cache_service
    app.state.proxy_handler = proxy_handler

    print(f"Caching proxy listening on {settings.host}:{settings.port}, forwarding to {settings.target_url}")
    if isinstance(store, FileEntryStore):
        print(f"Cache directory: {store.cache_dir}")
    elif isinstance(store, RedisEntryStore):
        print(f"Redis cache: {settings.redis_url} (prefix {settings.cache_key_prefix!r})")
        if not store.health_check():
            print("Redis connection failed; requests will be forwarded uncached until it recovers")
    else:
        print(f"Cache store: {store!r}")

    yield

    await forwarder.close()
    del app.state.proxy_handler
    del app.state.cache_service
    del app.state.forwarder
    del app.state.store
    print("Caching proxy shut down")
