"""Redis connection for the term mining queue."""

import logging

from redis import Redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Redis connection instance (lazy initialized)
_redis_client: Redis | None = None


def get_redis() -> Redis:
    """Get or create the Redis connection used by RQ.

    Connection is lazily created on first call. Responses stay as bytes
    because RQ stores pickled job payloads.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=False,
        )
    return _redis_client


def close_redis() -> None:
    """Close Redis connection on application shutdown."""
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


def ping_redis() -> bool:
    """Check if Redis responds; used by the readiness probe."""
    try:
        return bool(get_redis().ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
