"""HTTP handler for proxied requests.

The handler is the request router: it converts Starlette requests into
framework-neutral ProxyRequest objects, decides HIT / MISS / SKIP, and
converts the result back into a Starlette response carrying the cache
status header.
"""

from fastapi import HTTPException, Request, Response, status

from caching_proxy.entities import Disposition, ProxyRequest, UpstreamResponse
from caching_proxy.exceptions import UpstreamError
from caching_proxy.protocols import Forwarder
from caching_proxy.services import CacheService, is_cacheable

LOG_LABELS = {
    Disposition.HIT: "Cache HIT",
    Disposition.MISS: "Cache MISS",
    Disposition.SKIP: "No cache (non-idempotent)",
}

# Responses whose upstream Content-Length is passed through untouched.
BODYLESS_STATUSES = frozenset({204, 304})


async def to_proxy_request(request: Request) -> ProxyRequest:
    """Convert a Starlette request into a ProxyRequest.

    Raw path and query bytes are kept as latin-1 text so they reach the
    forwarder unchanged.
    """
    raw_path = request.scope.get("raw_path") or b""
    return ProxyRequest(
        method=request.method.upper(),
        path=request.scope["path"],
        raw_query=request.scope.get("query_string", b"").decode("latin-1"),
        raw_path=raw_path.split(b"?", 1)[0].decode("latin-1"),
        headers=[(key.decode("latin-1"), value.decode("latin-1")) for key, value in request.headers.raw],
        body=await request.body(),
        client_host=request.client.host if request.client else None,
        scheme=request.scope.get("scheme", "http"),
    )


class ProxyHandler:
    """HTTP handler for every proxied request.

    This handler delegates caching policy to CacheService and upstream
    transport to a Forwarder, and handles HTTP-specific concerns like:
    - Building the client response and its headers
    - Reporting the disposition
    - Mapping upstream transport failures to 502

    Example:
        ```python
        handler = ProxyHandler(cache_service=cache_service, forwarder=forwarder)

        response = await handler.handle(request)
        ```
    """

    def __init__(
        self,
        cache_service: CacheService,
        forwarder: Forwarder,
        status_header: str = "X-Cache",
    ) -> None:
        """Initialize the proxy handler.

        Args:
            cache_service: The cache service for caching policy (required).
            forwarder: The upstream forwarder (required).
            status_header: Name of the header reporting HIT/MISS/SKIP.
        """
        self._cache = cache_service
        self._forwarder = forwarder
        self._status_header = status_header

    async def dispatch(self, request: ProxyRequest) -> tuple[UpstreamResponse, Disposition]:
        """Resolve a request from cache or from the origin.

        Args:
            request: The inbound request

        Returns:
            The response to send and how it was resolved

        Raises:
            UpstreamError: If forwarding failed
        """
        if not is_cacheable(request.method):
            return await self._forwarder.forward(request), Disposition.SKIP

        entry = await self._cache.lookup(request)
        if entry is not None:
            return self._cache.replay(entry, request), Disposition.HIT

        upstream = await self._forwarder.forward(request)
        return await self._cache.capture(request, upstream), Disposition.MISS

    async def handle(self, request: Request) -> Response:
        """Handle any proxied request.

        Args:
            request: The Starlette request

        Returns:
            Response with the cache status header set

        Raises:
            HTTPException: 502 if the origin could not be reached
        """
        proxy_request = await to_proxy_request(request)

        try:
            upstream, disposition = await self.dispatch(proxy_request)
        except UpstreamError as e:
            # A hit never forwards, so a failed forward is a MISS or a SKIP.
            disposition = Disposition.MISS if is_cacheable(proxy_request.method) else Disposition.SKIP
            print(f"{LOG_LABELS[disposition]}: {proxy_request.method} {proxy_request.target} (upstream failed)")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Bad gateway: {e}",
                headers={self._status_header: disposition.value},
            ) from e

        print(f"{LOG_LABELS[disposition]}: {proxy_request.method} {proxy_request.target}")
        return self.build_response(proxy_request, upstream, disposition)

    def build_response(
        self,
        request: ProxyRequest,
        upstream: UpstreamResponse,
        disposition: Disposition,
    ) -> Response:
        """Convert an UpstreamResponse into a Starlette response."""
        if request.method != "HEAD" and upstream.status_code not in BODYLESS_STATUSES:
            upstream = upstream.with_body(upstream.body)

        status_header = self._status_header.lower()
        headers = [(key, value) for key, value in upstream.headers if key.lower() != status_header]
        headers.append((status_header, disposition.value))

        response = Response(content=upstream.body, status_code=upstream.status_code)
        response.raw_headers = [(key.lower().encode("latin-1"), value.encode("latin-1")) for key, value in headers]
        return response
