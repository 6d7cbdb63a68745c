"""Async Redis client wrapper."""
from __future__ import annotations
import json
from typing import Any, Optional
from redis.asyncio import Redis, from_url

from racko.config import config
from racko.utils.logger import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Async Redis client wrapper with JSON serialization."""
    
    _instance: Optional["RedisClient"] = None
    _redis: Optional[Redis] = None
    
    def __new__(cls) -> "RedisClient":
        """Singleton pattern for Redis client."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    async def connect(self, url: Optional[str] = None) -> None:
        """Connect to Redis.
        
        Args:
            url: Redis URL, ``config.redis_url`` if not given.
        """
        if self._redis is None:
            url = url or config.redis_url
            self._redis = from_url(url, encoding="utf-8", decode_responses=True)
            await self._redis.ping()
            logger.info(f"Connected to Redis at {url}")
    
    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")
    
    @property
    def redis(self) -> Redis:
        """Get Redis connection, raise if not connected."""
        if self._redis is None:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._redis
    
    # Basic operations
    async def get(self, key: str) -> Optional[str]:
        """Get a string value."""
        return await self.redis.get(key)
    
    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        """Set a string value with optional expiry in seconds."""
        await self.redis.set(key, value, ex=ex)
    
    async def delete(self, key: str) -> None:
        """Delete a key."""
        await self.redis.delete(key)
    
    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        return await self.redis.exists(key) > 0
    
    async def scan_keys(self, pattern: str) -> list[str]:
        """Collect keys matching a glob pattern without blocking the server."""
        return [key async for key in self.redis.scan_iter(match=pattern)]
    
    # JSON operations
    async def get_json(self, key: str) -> Optional[Any]:
        """Get and deserialize JSON value."""
        value = await self.get(key)
        if value is None:
            return None
        return json.loads(value)
    
    async def set_json(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        """Serialize and set JSON value."""
        await self.set(key, json.dumps(value), ex=ex)


# Global instance
redis_client = RedisClient()
