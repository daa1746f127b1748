"""
Cache Service
Redis-based key/value cache, plus the typed cache entry for the API prefix
"""
import redis
import json
import time
from typing import Any, Dict, Optional, Tuple
import os
from dotenv import load_dotenv

from config.api import CACHE_GROUP, LOCAL_CACHE_TTL, PREFIX_CACHE_KEY, PREFIX_CACHE_TTL
from services.observability import logger, metrics

load_dotenv()

# Configuration
REDIS_URL = os.getenv("REDIS_URL")  # Cloud Redis URL
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))


class CacheService:
    """
    Redis cache with JSON values.

    Never raises: Redis errors are logged, counted and reported as a miss
    (get) or a failed write (set/delete). When Redis is unreachable at
    start-up a process-local dict takes its place, with entries capped
    at LOCAL_CACHE_TTL seconds.
    """

    def __init__(self, redis_client=None):
        self._local: Dict[str, Tuple[str, float]] = {}

        if redis_client is not None:
            self.redis = redis_client
            return

        try:
            if REDIS_URL:
                self.redis = redis.from_url(
                    REDIS_URL,
                    decode_responses=False,
                    socket_connect_timeout=5,
                    socket_timeout=5
                )
                logger.info("Redis connected via URL")
            else:
                self.redis = redis.Redis(
                    host=REDIS_HOST,
                    port=REDIS_PORT,
                    db=0,
                    decode_responses=False,
                    socket_connect_timeout=5,
                    socket_timeout=5
                )
                logger.info("Redis connected", host=REDIS_HOST, port=REDIS_PORT)

            # Test connection
            self.redis.ping()
        except redis.ConnectionError as e:
            logger.warning("Redis not available - using process-local cache", error=str(e))
            self.redis = None

    @staticmethod
    def make_key(group: str, name: str) -> str:
        """Namespaced cache key, e.g. options:api_url_prefix_cached"""
        return f"{group}:{name}"

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, None on miss or error"""
        if not self.redis:
            return self._local_get(key)

        try:
            cached = self.redis.get(key)
            if cached is not None:
                return json.loads(cached)
        except Exception as e:
            logger.error("Cache read error", key=key, error=str(e))
            metrics.increment("cache_errors")

        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = 300) -> bool:
        """Cache a value; in Redis ttl=None keeps it until deleted"""
        payload = json.dumps(value)

        if not self.redis:
            # Never unbounded: other processes can't invalidate this copy
            ttl = min(ttl, LOCAL_CACHE_TTL) if ttl else LOCAL_CACHE_TTL
            expires_at = time.monotonic() + ttl
            self._local[key] = (payload, expires_at)
            return True

        try:
            if ttl:
                self.redis.setex(key, ttl, payload)
            else:
                self.redis.set(key, payload)
            return True
        except Exception as e:
            logger.error("Cache write error", key=key, error=str(e))
            metrics.increment("cache_errors")
            return False

    def delete(self, key: str) -> bool:
        """Remove a key from the cache"""
        if not self.redis:
            self._local.pop(key, None)
            return True

        try:
            self.redis.delete(key)
            return True
        except Exception as e:
            logger.error("Cache invalidation error", key=key, error=str(e))
            metrics.increment("cache_errors")
            return False

    def _local_get(self, key: str) -> Optional[Any]:
        row = self._local.get(key)
        if row is None:
            return None
        payload, expires_at = row
        if expires_at < time.monotonic():
            self._local.pop(key, None)
            return None
        return json.loads(payload)


class PrefixCache:
    """Typed cache entry holding the last resolved API prefix"""

    def __init__(self, cache: CacheService, ttl: Optional[int] = PREFIX_CACHE_TTL):
        self.cache = cache
        self.ttl = ttl
        self.key = CacheService.make_key(CACHE_GROUP, PREFIX_CACHE_KEY)

    def get(self) -> Optional[str]:
        value = self.cache.get(self.key)
        # Anything but a non-empty string is treated as a miss
        if isinstance(value, str) and value:
            return value
        return None

    def set(self, prefix: str) -> bool:
        return self.cache.set(self.key, prefix, ttl=self.ttl)

    def invalidate(self) -> bool:
        return self.cache.delete(self.key)
