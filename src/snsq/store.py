"""ResourceStore — memoize provisioned topic ARNs and queue URLs."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    AddressFactory = Callable[[], Awaitable[str]]

TOPIC_KEY_PREFIX = "topic:"
QUEUE_KEY_PREFIX = "queue:"


def topic_key(topic_name: str) -> str:
    return TOPIC_KEY_PREFIX + topic_name


def queue_key(queue_name: str) -> str:
    return QUEUE_KEY_PREFIX + queue_name


@runtime_checkable
class ResourceStore(Protocol):
    """
    Port for caching resolved resource addresses.

    ``factory`` is awaited only when no address is cached for the name. If
    it raises, nothing is cached and the exception propagates.
    """

    async def get_or_set_topic_arn(
        self, topic_name: str, factory: AddressFactory
    ) -> str: ...

    async def get_or_set_queue_url(
        self, queue_name: str, factory: AddressFactory
    ) -> str: ...


class InMemoryResourceStore(ResourceStore):
    """Process-lifetime store backed by a dict.

    The check-then-set path holds a per-key lock, so concurrent first
    resolutions of one key await a single factory call.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}
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
        value = self._items.get(key)
        if value is not None:
            return value

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            value = self._items.get(key)
            if value is not None:
                return value
            value = await factory()
            self._items[key] = value
            return value

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all cached addresses keyed ``topic:``/``queue:``."""
        return dict(self._items)

    def clear(self) -> None:
        """Forget all cached addresses (for testing)."""
        self._items.clear()
        self._locks.clear()
