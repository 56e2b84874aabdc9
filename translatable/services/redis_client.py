"""Redis client for the shared translation cache."""

import os
import redis
import logging

logger = logging.getLogger(__name__)

# Redis connection (lazy initialization)
_redis_client = None


def get_redis(url=None):
    """Get or create the Redis connection. Returns None when unavailable."""
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = url or os.environ.get('REDIS_URL')

    if not redis_url:
        logger.warning("REDIS_URL not set - translation cache falls back to process memory")
        return None

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        # Test connection
        client.ping()
        _redis_client = client
        logger.info("Redis connected successfully")
        return _redis_client
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        return None


def reset_redis():
    """Drop the cached connection (tests, config reloads)."""
    global _redis_client
    _redis_client = None
