from typing import Optional, Any
import logging
import time
from redis import asyncio as aioredis
from family_auth.core.config import settings
from family_auth.services.interfaces import CacheBackend
from family_auth.utils.errors import SessionStoreUnavailableError
import json

logger = logging.getLogger(__name__)

class RedisCache(CacheBackend):
    """JSON-valued Redis cache.

    By default errors are logged and swallowed (get returns None) so a cache
    outage degrades to a miss. With ``raise_errors=True`` every failure is
    logged and re-raised as ``SessionStoreUnavailableError``; the session
    index uses that mode because a swallowed delete would make logout a no-op.
    """

    def __init__(self, redis_url: Optional[str] = None, raise_errors: bool = False):
        self.redis_url = redis_url or settings.REDIS_URL
        self.raise_errors = raise_errors
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self):
        if not self.redis:
            try:
                self.redis = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
                logger.info("Connected to Redis cache.")
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self._fail(e)

    def _fail(self, exc: Exception):
        if self.raise_errors:
            raise SessionStoreUnavailableError() from exc

    async def get(self, key: str) -> Optional[Any]:
        if not self.redis:
            await self.connect()
        try:
            raw = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Redis get error for key {key}: {e}")
            self._fail(e)
            return None
        if raw is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None):
        if not self.redis:
            await self.connect()
        try:
            await self.redis.set(key, json.dumps(value, default=str), ex=ttl)
            logger.debug(f"Cache set for key: {key}, TTL: {ttl or 'none'}")
        except Exception as e:
            logger.error(f"Redis set error for key {key}: {e}")
            self._fail(e)

    async def delete(self, key: str):
        if not self.redis:
            await self.connect()
        try:
            await self.redis.delete(key)
            logger.debug(f"Cache delete for key: {key}")
        except Exception as e:
            logger.error(f"Redis delete error for key {key}: {e}")
            self._fail(e)

    async def is_healthy(self) -> bool:
        """Round-trip a short-lived probe key."""
        if not self.redis:
            await self.connect()
        probe_key = "health_check_test"
        probe_value = str(time.time())
        try:
            await self.redis.set(probe_key, probe_value, ex=1)
            healthy = await self.redis.get(probe_key) == probe_value
            await self.redis.delete(probe_key)
            return healthy
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return False

    async def close(self):
        if self.redis:
            await self.redis.aclose()
            self.redis = None

# Strict instance backing the session index
session_cache = RedisCache(raise_errors=True)
