"""Serialized cache entry DTO."""

import base64
import binascii

from pydantic import BaseModel, Field, StrictBool, field_validator

from caching_proxy.entities import CacheEntryEntity


class StoredEntry(BaseModel):
    """On-disk JSON form of a cache entry.

    ``{"data": "<base64>", "was_gzipped": true, "content_type": "..."}``.
    The payload is standard base64 without line breaks. content_type may be
    absent in entries written by older versions.
    """

    data: str = Field(..., description="Base64-encoded decompressed payload")
    was_gzipped: StrictBool = Field(False, description="Whether the origin sent the body gzip-encoded")
    content_type: str | None = Field(None, description="Upstream Content-Type, replayed on hits")

    model_config = {"extra": "ignore"}

    @field_validator("data")
    @classmethod
    def data_must_be_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"data is not valid base64: {e}") from e
        return value

    @classmethod
    def from_entity(cls, entry: CacheEntryEntity) -> "StoredEntry":
        return cls(
            data=base64.b64encode(entry.payload).decode("ascii"),
            was_gzipped=entry.was_compressed,
            content_type=entry.content_type,
        )

    def to_entity(self) -> CacheEntryEntity:
        return CacheEntryEntity(
            payload=base64.b64decode(self.data),
            was_compressed=self.was_gzipped,
            content_type=self.content_type,
        )
