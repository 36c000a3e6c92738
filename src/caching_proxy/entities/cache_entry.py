"""Cache entry domain entity."""

from dataclasses import dataclass

DEFAULT_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a captured response body.

    Entries are normalized: the payload is always stored decompressed, and
    was_compressed records whether the origin sent it gzip-encoded so the
    encoding can be renegotiated on replay.

    Attributes:
        payload: The decompressed response body
        was_compressed: True if the upstream body was gzip-encoded
        content_type: The upstream Content-Type, if one was recorded
    """

    payload: bytes
    was_compressed: bool = False
    content_type: str | None = None

    @property
    def replay_content_type(self) -> str:
        """Content-Type to send on a cache hit."""
        return self.content_type or DEFAULT_CONTENT_TYPE
