"""Redis client for caching."""
import json
import logging
import redis.asyncio as aioredis
from redis.exceptions import RedisError
from typing import Optional, Any
from app.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper with caching utilities."""

    def __init__(self):
        self.client = aioredis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        try:
            value = await self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except (RedisError, ValueError) as e:
            logger.warning(f"Redis GET error: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with optional TTL."""
        try:
            serialized = json.dumps(value)
            if ttl:
                await self.client.setex(key, ttl, serialized)
            else:
                await self.client.set(key, serialized)
            return True
        except (RedisError, TypeError) as e:
            logger.warning(f"Redis SET error: {e}")
            return False

    async def ping(self) -> bool:
        """Check if Redis is connected."""
        try:
            return await self.client.ping()
        except RedisError:
            return False

    async def close(self) -> None:
        await self.client.aclose()


# Global Redis client instance
redis_client = RedisClient()
