"""Framework-neutral request and response messages."""

from dataclasses import dataclass, field, replace


def first_header(headers: list[tuple[str, str]], name: str, default: str = "") -> str:
    lowered = name.lower()
    for key, value in headers:
        if key.lower() == lowered:
            return value
    return default


@dataclass(frozen=True)
class ProxyRequest:
    """An inbound request as seen by the forwarder and the capturer.

    Attributes:
        method: HTTP method token, upper case
        path: Decoded URL path, as used for the cache key
        raw_query: Query string as received (without the leading '?')
        raw_path: Percent-encoded path as received, used when forwarding
        headers: Header pairs in arrival order (names may repeat)
        body: The complete request body
        client_host: Address of the connecting client, if known
        scheme: Scheme the client used to reach the proxy
    """

    method: str
    path: str
    raw_query: str = ""
    raw_path: str = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    client_host: str | None = None
    scheme: str = "http"

    def header(self, name: str, default: str = "") -> str:
        """Return the first header value matching name (case-insensitive)."""
        return first_header(self.headers, name, default)

    @property
    def target(self) -> str:
        """Path plus query, as used in log lines."""
        return f"{self.path}?{self.raw_query}" if self.raw_query else self.path


@dataclass(frozen=True)
class UpstreamResponse:
    """A fully buffered response from the origin.

    Attributes:
        status_code: Upstream status code
        headers: Header pairs with hop-by-hop headers already removed
        body: The body bytes exactly as received (still transport-encoded)
    """

    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str, default: str = "") -> str:
        """Return the first header value matching name (case-insensitive)."""
        return first_header(self.headers, name, default)

    def with_body(self, body: bytes) -> "UpstreamResponse":
        """Return a copy carrying body, with Content-Length recomputed."""
        headers = [(k, v) for k, v in self.headers if k.lower() != "content-length"]
        headers.append(("content-length", str(len(body))))
        return replace(self, headers=headers, body=body)
