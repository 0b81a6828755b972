"""
Redis response cache for the upstream proxy.

Successful upstream JSON responses are cached for a few seconds so that
several dashboard tabs refreshing at once hit the upstream API only once.
Caching is optional (enabled by REDIS_URL) and best-effort: connection or
command failures are logged and never propagate to the request.

Cache keys include a fingerprint of the forwarded credential, so a cached
response is only ever served to a caller holding the same token.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-014)

TODO:
- None
"""

import hashlib
import json
import logging
import os
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)


def cache_enabled() -> bool:
    """Return True when REDIS_URL is configured."""
    return bool(os.environ.get("REDIS_URL"))


async def get_redis() -> redis.Redis:
    """Create and return an async Redis client from REDIS_URL.

    Raises:
        RuntimeError: If REDIS_URL is not set.
    """
    url = os.environ.get("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL environment variable is required")
    return redis.from_url(url)


def proxy_cache_key(path: str, credential: str) -> str:
    """Build the cache key for an upstream path and forwarded credential."""
    fingerprint = hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]
    return f"proxy:{path}:{fingerprint}"


async def read_cached(key: str) -> Any | None:
    """Return the cached JSON value for *key*, or None on miss or failure."""
    if not cache_enabled():
        return None
    try:
        client = await get_redis()
        try:
            cached = await client.get(key)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis read failed for key %s", key, exc_info=True)
        return None
    if cached is None:
        return None
    try:
        return json.loads(cached)
    except ValueError:
        logger.warning("Discarding undecodable cache entry %s", key)
        return None


async def write_cached(key: str, value: Any, ttl_s: int) -> None:
    """Store *value* as JSON under *key* for *ttl_s* seconds, best-effort."""
    if not cache_enabled() or ttl_s <= 0:
        return
    try:
        client = await get_redis()
        try:
            await client.set(key, json.dumps(value), ex=ttl_s)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis write failed for key %s", key, exc_info=True)
