"""Redis-based caching service for resolved permission sets"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis

from backoffice.infrastructure.config.settings import get_settings
from backoffice.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class CacheService:
    """
    Async Redis cache service with TTL support.

    Every method degrades to a miss / no-op when Redis is disabled or
    unreachable; callers then read from the database.
    """

    def __init__(self, redis_client: redis.Redis | None = None):
        """
        Initialize cache service

        Args:
            redis_client: Optional Redis client (for testing/DI)
        """
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self):
        """Establish Redis connection (call on app startup)"""
        if self.redis is not None or not self.settings.redis_enabled:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password or None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s", self.settings.redis_host, self.settings.redis_port
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning(
                "Redis connection failed: %s. Cache disabled - falling back to database queries.",
                e,
            )
            self._connected = False
            self.redis = None

    async def disconnect(self):
        """Close Redis connection (call on app shutdown)"""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis cache disconnected")

    def is_available(self) -> bool:
        """Check if Redis is connected and available"""
        return self._connected and self.redis is not None

    async def get(self, key: str) -> Any | None:
        """
        Get value from cache

        Returns:
            Cached value (deserialized from JSON) or None if not found/unavailable
        """
        if not self.is_available() or self.redis is None:
            return None

        try:
            value = await self.redis.get(key)
            if value:
                logger.debug("Cache HIT: %s", key)
                return json.loads(value)
            logger.debug("Cache MISS: %s", key)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error("Cache get error for key %s: %s", key, e)
            return None

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL (seconds)"""
        if not self.is_available() or self.redis is None:
            return False

        try:
            await self.redis.setex(key, ttl, json.dumps(value))
            logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error("Cache set error for key %s: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache"""
        if not self.is_available() or self.redis is None:
            return False

        try:
            await self.redis.delete(key)
            logger.debug("Cache DELETE: %s", key)
            return True
        except redis.RedisError as e:
            logger.error("Cache delete error for key %s: %s", key, e)
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching pattern

        Args:
            pattern: Redis pattern (e.g., "permissions:*")

        Returns:
            Number of keys deleted
        """
        if not self.is_available() or self.redis is None:
            return 0

        try:
            deleted = 0
            async for key in self.redis.scan_iter(match=pattern):
                await self.redis.delete(key)
                deleted += 1

            if deleted > 0:
                logger.info("Cache INVALIDATE: %s (%d keys deleted)", pattern, deleted)
            return deleted
        except redis.RedisError as e:
            logger.error("Cache delete pattern error for %s: %s", pattern, e)
            return 0
