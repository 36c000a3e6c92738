"""Exception hierarchy for the caching proxy.

Cache-layer faults (StoreError, MalformedEntryError, CaptureError) are
absorbed by the service layer: the proxy is a best-effort cache, so they
degrade to a miss or a skipped write. UpstreamError is passed through to
the client as a 502.
"""


class CachingProxyError(Exception):
    """Base class for all caching proxy errors."""


class ConfigurationError(CachingProxyError):
    """Invalid startup configuration (e.g. a malformed target URL)."""


class StoreError(CachingProxyError):
    """A cache store could not be read or written."""


class MalformedEntryError(CachingProxyError):
    """A stored cache entry could not be decoded."""


class CaptureError(CachingProxyError):
    """An upstream response body could not be normalized for storage."""


class UpstreamError(CachingProxyError):
    """The origin could not be reached or the transfer failed."""
