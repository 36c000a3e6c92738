"""httpx-based forwarder.

Relays requests to a single origin, the way a single-host reverse proxy
does:
- The origin base path is joined with the request path, and base and
  request query strings are merged
- Host is rewritten to the origin's host
- Hop-by-hop headers are dropped in both directions
- X-Forwarded-For / X-Forwarded-Host / X-Forwarded-Proto are added

Response bodies are read raw, so gzip-encoded bytes reach the capturer
exactly as the origin sent them.
"""

from urllib.parse import quote

import httpx

from caching_proxy.config import Settings, get_settings, parse_target_url
from caching_proxy.entities import ProxyRequest, UpstreamResponse
from caching_proxy.exceptions import UpstreamError

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "proxy-connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def strip_hop_by_hop(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Remove hop-by-hop headers, including any named in Connection."""
    named: set[str] = set()
    for key, value in headers:
        if key.lower() == "connection":
            named.update(token.strip().lower() for token in value.split(",") if token.strip())
    dropped = HOP_BY_HOP_HEADERS | named
    return [(key, value) for key, value in headers if key.lower() not in dropped]


def join_paths(base: str, path: str) -> str:
    """Join two URL paths with exactly one slash between them."""
    base_slash = base.endswith("/")
    path_slash = path.startswith("/")
    if base_slash and path_slash:
        return base + path[1:]
    if not base_slash and not path_slash:
        return f"{base}/{path}"
    return base + path


# Printable ASCII, including "%" so existing escapes pass through.
RAW_URL_SAFE = "".join(chr(code) for code in range(0x21, 0x7F))


def escape_raw(value: str) -> str:
    """Percent-encode the bytes of value that a URL cannot carry literally.

    value holds the bytes as received, decoded as latin-1.
    """
    return quote(value.encode("latin-1"), safe=RAW_URL_SAFE)


def join_queries(base: str, query: str) -> str:
    """Merge the origin's query string with the request's."""
    if not base or not query:
        return base + query
    return f"{base}&{query}"


class HttpxForwarder:
    """httpx implementation of the Forwarder protocol.

    This class satisfies the Forwarder protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        forwarder = HttpxForwarder.create(settings)
        upstream = await forwarder.forward(request)
        print(upstream.status_code)
        await forwarder.close()
        ```
    """

    def __init__(
        self,
        target_url: str | httpx.URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the forwarder.

        Args:
            target_url: Origin base URL. Must be an absolute http(s) URL.
            timeout: Upstream timeout in seconds.
            transport: Optional httpx transport (used by tests).

        Raises:
            ConfigurationError: If target_url is malformed
        """
        self._target = target_url if isinstance(target_url, httpx.URL) else parse_target_url(target_url)
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, settings: Settings | None = None) -> "HttpxForwarder":
        """Factory method to create HttpxForwarder from settings.

        Args:
            settings: Settings with target_url and upstream_timeout. If None,
                uses the environment settings.

        Returns:
            Configured HttpxForwarder
        """
        settings = settings or get_settings()
        return cls(target_url=settings.target_url, timeout=settings.upstream_timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=False,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    def build_url(self, request: ProxyRequest) -> httpx.URL:
        """Map an inbound request onto the origin URL."""
        base_path = self._target.raw_path.split(b"?", 1)[0].decode("ascii") or "/"
        if request.raw_path:
            request_path = escape_raw(request.raw_path)
        else:
            request_path = quote(request.path, safe="/%:@!$&'()*+,;=~")
        path = join_paths(base_path, request_path)
        query = join_queries(self._target.query.decode("ascii"), escape_raw(request.raw_query))
        raw_path = f"{path}?{query}" if query else path
        return self._target.copy_with(raw_path=raw_path.encode("ascii"))

    def build_headers(self, request: ProxyRequest) -> list[tuple[str, str]]:
        """Build the outbound header list for request."""
        headers = [
            (key, value)
            for key, value in strip_hop_by_hop(request.headers)
            if key.lower() not in ("host", "content-length", "x-forwarded-for")
        ]

        if request.client_host:
            prior = ", ".join(value for key, value in request.headers if key.lower() == "x-forwarded-for")
            forwarded_for = f"{prior}, {request.client_host}" if prior else request.client_host
            headers.append(("x-forwarded-for", forwarded_for))
        elif request.header("x-forwarded-for"):
            headers.append(("x-forwarded-for", request.header("x-forwarded-for")))

        inbound_host = request.header("host")
        if inbound_host and not request.header("x-forwarded-host"):
            headers.append(("x-forwarded-host", inbound_host))
        if not request.header("x-forwarded-proto"):
            headers.append(("x-forwarded-proto", request.scheme))

        # Without this httpx would ask for its own default codings.
        if not request.header("accept-encoding"):
            headers.append(("accept-encoding", "identity"))
        return headers

    async def forward(self, request: ProxyRequest) -> UpstreamResponse:
        """Relay request to the origin and buffer the raw reply.

        Args:
            request: The inbound request

        Returns:
            UpstreamResponse with the body bytes exactly as received

        Raises:
            UpstreamError: If the origin could not be reached or the
                transfer was interrupted
        """
        upstream_request = self.client.build_request(
            request.method,
            self.build_url(request),
            headers=self.build_headers(request),
            content=request.body or None,
        )

        try:
            response = await self.client.send(upstream_request, stream=True)
            try:
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request to {upstream_request.url} failed: {e}") from e

        return UpstreamResponse(
            status_code=response.status_code,
            headers=strip_hop_by_hop(response.headers.multi_items()),
            body=body,
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
