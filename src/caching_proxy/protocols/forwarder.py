"""Upstream forwarding protocol."""

from typing import Protocol, runtime_checkable

from caching_proxy.entities import ProxyRequest, UpstreamResponse


@runtime_checkable
class Forwarder(Protocol):
    """Protocol for relaying a request to the origin.

    Implementations must preserve the origin's status code, headers and
    body bytes (including any transport compression) so the capturer can
    inspect and replace the response before it reaches the client.
    """

    async def forward(self, request: ProxyRequest) -> UpstreamResponse:
        """Relay request to the origin and return its buffered reply.

        Raises:
            UpstreamError: If the origin could not be reached
        """
        ...

    async def close(self) -> None:
        """Release any pooled connections."""
        ...
