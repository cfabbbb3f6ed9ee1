"""RedisResourceStore — share resolved addresses between processes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from ..store import ResourceStore, queue_key, topic_key

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from ..store import AddressFactory

logger = logging.getLogger("snsq.redis_store")


class RedisResourceStore(ResourceStore):
    """
    Redis implementation of ResourceStore.

    Addresses are kept in process memory and in Redis under
    ``{key_prefix}topic:<name>`` / ``{key_prefix}queue:<name>``. A miss is
    resolved under an in-process lock and a Redis lock, so processes sharing
    the Redis instance provision each resource once. Redis failures are
    logged and the factory is called directly; provisioning calls are
    create-if-absent, so the only cost is a repeated call sequence.
    """

    def __init__(
        self,
        redis_client: Redis[bytes],
        *,
        key_prefix: str = "snsq:",
        lock_timeout: float = 60.0,
        blocking_timeout: float = 30.0,
    ) -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout
        self._local: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_or_set_topic_arn(
        self, topic_name: str, factory: AddressFactory
    ) -> str:
        return await self._get_or_set(topic_key(topic_name), factory)

    async def get_or_set_queue_url(
        self, queue_name: str, factory: AddressFactory
    ) -> str:
        return await self._get_or_set(queue_key(queue_name), factory)

    async def _get_or_set(self, key: str, factory: AddressFactory) -> str:
        value = self._local.get(key)
        if value is not None:
            return value

        async with self._locks.setdefault(key, asyncio.Lock()):
            value = self._local.get(key)
            if value is None:
                value = await self._get_or_set_shared(key, factory)
                self._local[key] = value
            return value

    async def _get_or_set_shared(self, key: str, factory: AddressFactory) -> str:
        redis_key = self._key_prefix + key
        value = await self._get(redis_key)
        if value is not None:
            return value

        try:
            lock = self._redis.lock(
                f"{redis_key}:lock",
                timeout=self._lock_timeout,
                blocking_timeout=self._blocking_timeout,
            )
            async with lock:
                value = await self._get(redis_key)
                if value is not None:
                    return value
                value = await factory()
                await self._redis.set(redis_key, value)
                return value
        except RedisError as e:
            if value is not None:
                # factory succeeded; only the write failed
                logger.warning("Redis set failed for key %s: %s", redis_key, e)
                return value
            logger.warning("Redis lock failed for key %s: %s", redis_key, e)
            return await factory()

    async def _get(self, redis_key: str) -> str | None:
        try:
            raw = await self._redis.get(redis_key)
        except RedisError as e:
            logger.warning("Redis get failed for key %s: %s", redis_key, e)
            return None
        if not raw:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    def clear_memory(self) -> None:
        """Forget addresses cached in this process (Redis is untouched)."""
        self._local.clear()
        self._locks.clear()

