"""Cache key derivation and cacheability policy.

The router and the capturer both go through these functions, so a request
looked up on the way in is stored under the same key on the way out.
"""

import hashlib

CACHEABLE_METHODS = frozenset({"GET", "HEAD"})
CAPTURABLE_STATUS = 200
KEY_SEPARATOR = "_"


def derive_key(method: str, path: str, raw_query: str) -> str:
    """Derive the cache key for a request.

    The fields are joined with an underscore and hashed with MD5. Inputs that
    themselves contain underscores can collide, e.g. ("GET", "/a_b", "c") and
    ("GET", "/a", "b_c").

    Args:
        method: HTTP method token
        path: URL path
        raw_query: Query string as received

    Returns:
        32 lowercase hex characters
    """
    material = KEY_SEPARATOR.join((method, path, raw_query))
    return hashlib.md5(material.encode("utf-8")).hexdigest()


def is_cacheable(method: str) -> bool:
    """Return True if responses to method may be served from cache."""
    return method in CACHEABLE_METHODS


def is_capturable(method: str, status_code: int) -> bool:
    """Return True if a response may be written to the cache."""
    return is_cacheable(method) and status_code == CAPTURABLE_STATUS
