"""
Redis caching service for campus reference data.

CACHING STRATEGY
================

What we cache:
  - The university list ("universities:list")
  - Per-university category lists ("events:categories:{university_id}")

What we do NOT cache:
  - Event listings. They depend on "now" (time windows), on the caller's
    interests and on the caller's registration status, so a shared cache
    entry would be wrong more often than it is useful.

Invalidation:
  - Creating an event deletes its university's category key
  - TTL-based expiry as a safety net

Failure policy:
  - Redis is advisory. Any connection or command error is logged and the
    caller falls through to the database.
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from campus_compass.core.config import get_settings
from campus_compass.core.logging import get_logger
from campus_compass.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

UNIVERSITIES_KEY = "universities:list"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def categories_key(university_id: str) -> str:
    return f"events:categories:{university_id}"


async def get_cached(key: str) -> Optional[Any]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data is None:
        logger.debug("cache_miss", key=key)
        return None
    logger.debug("cache_hit", key=key)
    return json.loads(data)


async def set_cached(key: str, value: Any, ttl: Optional[int] = None) -> None:
    client = await get_redis()
    if not client:
        return

    ttl = ttl or settings.REDIS_CACHE_TTL
    try:
        await client.setex(key, ttl, json.dumps(value, default=str))
        logger.debug("cache_set", key=key, ttl=ttl)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate(key: str) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = await client.delete(key)
        logger.info("cache_invalidated", key=key, keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", key=key, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
