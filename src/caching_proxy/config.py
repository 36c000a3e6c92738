import os
from dataclasses import dataclass
from functools import lru_cache

import httpx
import redis
from dotenv import load_dotenv

from caching_proxy.exceptions import ConfigurationError

load_dotenv()

CACHE_BACKENDS = ("file", "redis")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream
    target_url: str = os.getenv("PROXY_TARGET_URL", "")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

    # Listener
    host: str = os.getenv("PROXY_HOST", "0.0.0.0")
    port: int = int(os.getenv("PROXY_PORT", "8080"))

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "file")
    cache_dir: str = os.getenv("CACHE_DIR", "./cache")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "proxy_cache:")
    cache_status_header: str = os.getenv("CACHE_STATUS_HEADER", "X-Cache")

    # Redis (only used when cache_backend == "redis")
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in CACHE_BACKENDS:
            raise ValueError(f"CACHE_BACKEND must be one of {list(CACHE_BACKENDS)}, got {self.cache_backend!r}")

        if not 0 < self.port < 65536:
            raise ValueError(f"PROXY_PORT must be between 1 and 65535, got {self.port}")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        if not self.cache_status_header:
            raise ValueError("CACHE_STATUS_HEADER must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def parse_target_url(raw_url: str) -> httpx.URL:
    """Parse and validate the origin base URL.

    Args:
        raw_url: The URL given on the command line or in PROXY_TARGET_URL

    Returns:
        The parsed URL

    Raises:
        ConfigurationError: If the URL is not an absolute http(s) URL
    """
    try:
        url = httpx.URL(raw_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Invalid target URL {raw_url!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"Invalid target URL {raw_url!r}: expected an absolute http(s) URL")
    return url


def get_redis_client(settings: Settings) -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
