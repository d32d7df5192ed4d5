# otcfinder/infra/cache/redis_cache.py
import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

from otcfinder.domain.ports import CachePort

logger = logging.getLogger("otcfinder.cache")

DEFAULT_TTL = 43200  # 12h; registry labels change rarely


class RedisCache(CachePort):
    """
    JSON cache for raw remote-catalog responses.

    Keys are namespaced under `prefix`, so one Redis can serve several
    deployments. A value that no longer decodes counts as a miss.
    """
    def __init__(self, client: aioredis.Redis, *, prefix: str = "otcfinder:"):
        self.r = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "otcfinder:"):
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True), prefix=prefix)

    def _k(self, key: str) -> str:
        return self.prefix + key

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.r.get(self._k(key))
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("[cache] dropping undecodable entry key=%s", key)
            await self.r.delete(self._k(key))
            return None

    async def set_json(self, key: str, value: Any, ttl: int = DEFAULT_TTL) -> None:
        await self.r.set(self._k(key), json.dumps(value, ensure_ascii=False, default=str), ex=ttl)

    async def ping(self) -> bool:
        return bool(await self.r.ping())
