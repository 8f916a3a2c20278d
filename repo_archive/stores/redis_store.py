# redis_store.py - Redis-backed archive store
# ============================================================================
# FILE: repo_archive/stores/redis_store.py
# Shared archive cache on Redis (async client)
# ============================================================================

import logging
from typing import List, Optional

from .base import BaseArchiveStore

logger = logging.getLogger(__name__)

try:
    import redis.asyncio as aioredis
    HAS_REDIS = True
except ImportError:
    HAS_REDIS = False


class RedisArchiveStore(BaseArchiveStore):
    """
    Archive records as plain Redis strings under `<namespace>:archives:`.
    Expiry is left to ArchiveCacheManager so the metadata stays authoritative.
    """

    def __init__(self, redis_url: str, namespace: str = "repo-archive", client=None):
        if client is None and not HAS_REDIS:
            raise ImportError("redis-py is required for RedisArchiveStore. Run `pip install redis`.")

        self.redis_url = redis_url
        self.prefix = f"{namespace}:archives:"
        self.redis = client if client is not None else aioredis.from_url(redis_url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def initialize(self):
        await self.redis.ping()
        logger.info(f"Initialized RedisArchiveStore at {self.redis_url} (prefix={self.prefix})")

    async def close(self):
        await self.redis.aclose()

    async def get(self, key: str) -> Optional[str]:
        value = await self.redis.get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str):
        await self.redis.set(self._key(key), value)

    async def delete(self, key: str):
        await self.redis.delete(self._key(key))

    async def keys(self) -> List[str]:
        found = []
        async for raw in self.redis.scan_iter(match=f"{self.prefix}*"):
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            found.append(raw[len(self.prefix):])
        return found

    async def clear(self):
        keys = [self._key(k) for k in await self.keys()]
        if keys:
            await self.redis.delete(*keys)
