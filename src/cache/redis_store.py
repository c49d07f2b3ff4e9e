# src/cache/redis_store.py - v2
"""Redis-based state store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Each bucket is one Redis hash, ``smelltrack:<namespace>:<bucket>``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from smelltrack.cache.base_state_store import BaseStateStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "smelltrack"


class RedisStateStore(BaseStateStore):
    """Redis-backed state store shared between machines."""

    def __init__(self, redis_url: str, namespace: str = "default") -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._namespace = namespace

    def _key(self, bucket: str) -> str:
        return f"{_KEY_PREFIX}:{self._namespace}:{bucket}"

    async def get(self, bucket: str, key: str) -> Any | None:
        data = self._client.hget(self._key(bucket), key)
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode %s/%s: %s", bucket, key, e)
            return None

    async def put(self, bucket: str, key: str, value: Any) -> None:
        self._client.hset(self._key(bucket), key, json.dumps(value))

    async def delete(self, bucket: str, key: str) -> None:
        self._client.hdel(self._key(bucket), key)

    async def items(self, bucket: str) -> dict[str, Any]:
        raw = self._client.hgetall(self._key(bucket))
        result: dict[str, Any] = {}
        for key, data in raw.items():
            try:
                result[key] = json.loads(data)
            except json.JSONDecodeError:
                continue
        return result

    async def clear(self, *buckets: str) -> None:
        """Drop every bucket in one MULTI/EXEC transaction."""
        pipe = self._client.pipeline(transaction=True)
        for bucket in buckets:
            pipe.delete(self._key(bucket))
        pipe.execute()

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
