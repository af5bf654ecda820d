"""Shared Redis client."""

import redis

from resolve.core.config import get_settings

_redis: redis.Redis | None = None


def init_redis(url: str | None = None) -> None:
    """Initialize the shared Redis client."""
    global _redis

    if _redis is not None:
        return

    settings = get_settings()
    redis_url = url or settings.redis_url

    _redis = redis.Redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
    )

    # Verify connectivity
    _redis.ping()


def close_redis() -> None:
    """Close the shared Redis client."""
    global _redis

    if _redis is not None:
        _redis.close()
        _redis = None


def get_redis() -> redis.Redis:
    """Return the shared Redis client.

    Raises RuntimeError if init_redis() has not been called.
    """
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
