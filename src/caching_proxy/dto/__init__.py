"""Data Transfer Objects for persisted contracts.

These Pydantic models define the serialized form of cache entries. They
are used for validation and serialization at the store boundary only.

Internal domain logic should use entities from the entities package.
"""

from .stored_entry import StoredEntry

__all__ = [
    "StoredEntry",
]
