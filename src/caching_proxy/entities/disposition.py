"""Request disposition labels."""

from enum import Enum


class Disposition(str, Enum):
    """How the router resolved a request.

    Purely diagnostic: reported in the cache status header and the log.
    """

    HIT = "HIT"
    MISS = "MISS"
    SKIP = "SKIP"
