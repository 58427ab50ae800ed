# ============================================================================
# Redis Connection
# ============================================================================
import json
import redis.asyncio as redis
from app.config import get_settings

settings = get_settings()

redis_client = redis.from_url(
    settings.REDIS_URL,
    encoding="utf-8",
    decode_responses=True
)

class RedisCache:
    """Redis caching utility"""

    def __init__(self, client: redis.Redis):
        self.client = client

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: int = 3600) -> None:
        await self.client.setex(key, ttl, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def get_json(self, key: str) -> dict | None:
        data = await self.get(key)
        return json.loads(data) if data else None

    async def set_json(self, key: str, value: dict, ttl: int = 3600) -> None:
        await self.set(key, json.dumps(value), ttl)

    # Short-lived mutual exclusion
    async def acquire_lock(self, key: str, ttl: int = 30) -> bool:
        """SET NX with expiry. Returns False when someone else holds the key"""
        return bool(await self.client.set(key, "1", nx=True, ex=ttl))

    async def release_lock(self, key: str) -> None:
        await self.client.delete(key)

cache = RedisCache(redis_client)
