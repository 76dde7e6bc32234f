# Redis connection and response caching logic
# popcorn_api/data_access/redis_client.py

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class CacheRepository:
    """
    Provides structured access to Redis for caching serialized responses.

    Every failure (Redis unavailable, transport error, missing client) is
    logged and degraded: a failed read is a miss, a failed write is skipped.
    Expiration is enforced by Redis through the TTL given to `set`.
    """
    def __init__(self, client: Optional[redis.Redis], log: Optional[logging.Logger] = None):
        self.client = client
        self.logger = log or logger
        self.logger.debug("Initialized CacheRepository.")

    def _client_available(self) -> bool:
        if self.client is None:
            self.logger.warning("Redis client not available, cache bypassed.")
            return False
        return True

    async def get(self, key: str) -> Optional[str]:
        """Gets a cached payload, or None on miss or cache failure."""
        if not self._client_available():
            return None
        try:
            value = await self.client.get(key)
            if value is None:
                self.logger.debug(f"Cache miss for key: {key}")
                return None

            self.logger.debug(f"Cache hit for key: {key}")
            if isinstance(value, bytes):
                return value.decode("utf-8")
            return value
        except RedisError as e:
            self.logger.error(f"Redis GET error for key {key}: {e}", exc_info=True)
            return None
        except Exception as e:
            self.logger.error(f"Unexpected error during cache GET for key {key}: {e}", exc_info=True)
            return None

    async def set(self, key: str, payload: str, ttl_seconds: int) -> bool:
        """Stores a serialized payload with an expiration. Returns False if it was not stored."""
        if not self._client_available():
            return False
        try:
            self.logger.debug(f"Setting cache for key: {key} with TTL: {ttl_seconds}s")
            await self.client.set(key, payload, ex=ttl_seconds)
            return True
        except RedisError as e:
            self.logger.error(f"Redis SET error for key {key}: {e}", exc_info=True)
            return False
        except Exception as e:
            self.logger.error(f"Unexpected error during cache SET for key {key}: {e}", exc_info=True)
            return False
