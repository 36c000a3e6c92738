"""gzip handling for captured and replayed bodies."""

import gzip
import zlib

from caching_proxy.exceptions import CaptureError

GZIP_CODINGS = frozenset({"gzip", "x-gzip"})
IDENTITY_CODINGS = frozenset({"", "identity"})


def _codings(header_value: str) -> list[str]:
    return [token.strip().lower() for token in header_value.split(",")]


def is_gzip_encoded(content_encoding: str) -> bool:
    """Return True if a Content-Encoding value names gzip."""
    return any(coding in GZIP_CODINGS for coding in _codings(content_encoding))


def has_unsupported_encoding(content_encoding: str) -> bool:
    """Return True if a Content-Encoding value names a coding other than gzip."""
    return any(
        coding not in GZIP_CODINGS and coding not in IDENTITY_CODINGS
        for coding in _codings(content_encoding)
    )


def accepts_gzip(accept_encoding: str) -> bool:
    """Return True if an Accept-Encoding value allows gzip.

    An explicit ``q=0`` on gzip counts as a refusal.
    """
    for token in accept_encoding.split(","):
        name, _, params = token.partition(";")
        if name.strip().lower() not in GZIP_CODINGS:
            continue
        quality = params.strip().lower()
        if quality.startswith("q="):
            try:
                return float(quality[2:]) > 0
            except ValueError:
                return False
        return True
    return False


def gunzip(body: bytes) -> bytes:
    """Decompress a gzip body.

    Raises:
        CaptureError: If body is not valid gzip data
    """
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as e:
        raise CaptureError(f"Cannot decompress gzip body: {e}") from e


def gzip_payload(payload: bytes) -> bytes:
    """Compress payload for a client that accepts gzip."""
    return gzip.compress(payload)
