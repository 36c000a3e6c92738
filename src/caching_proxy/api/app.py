"""FastAPI application exposing the caching proxy.

Every path and every method token is routed to the ProxyHandler. The
interactive docs and OpenAPI routes are disabled so no origin path is
shadowed.
"""

from fastapi import FastAPI, Request
from starlette.types import Receive, Scope, Send

from caching_proxy.config import Settings, get_settings, parse_target_url
from caching_proxy.protocols import EntryStore, Forwarder

from .dependencies import get_handler, lifespan


class ProxyEndpoint:
    """ASGI endpoint handing each request to the app's ProxyHandler.

    Registered without a method list, so any method token reaches it.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await get_handler(request).handle(request)
        await response(scope, receive, send)


def create_app(
    settings: Settings | None = None,
    store: EntryStore | None = None,
    forwarder: Forwarder | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        settings: Proxy settings. If None, uses the environment settings.
        store: Entry store to use instead of the configured backend.
        forwarder: Forwarder to use instead of HttpxForwarder.

    Returns:
        The FastAPI application

    Raises:
        ConfigurationError: If settings.target_url is malformed
    """
    settings = settings or get_settings()
    if forwarder is None:
        parse_target_url(settings.target_url)

    app = FastAPI(
        title="Caching Proxy",
        description="Reverse proxy with a persistent response cache",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    if store is not None:
        app.state.store = store
    if forwarder is not None:
        app.state.forwarder = forwarder

    app.add_route("/{full_path:path}", ProxyEndpoint(), include_in_schema=False)

    return app
