"""SNS and SQS client management."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from aiobotocore.session import AioSession

from ..exceptions import TransportError

logger = logging.getLogger("snsq.aws")


class AWSConnectionManager:
    """Manages shared aiobotocore SNS and SQS clients.

    Clients are created lazily on first use and are safe to share between
    concurrent tasks. ``client_kwargs`` (e.g. ``endpoint_url`` for LocalStack)
    are passed to both clients.
    """

    def __init__(
        self,
        region_name: str = "us-east-1",
        *,
        session: AioSession | None = None,
        **client_kwargs: Any,
    ) -> None:
        """Configure region and optional session/client kwargs."""
        self._region = region_name
        self._session = session or AioSession()
        self._client_kwargs = client_kwargs
        self._clients: dict[str, Any] = {}
        self._client_cms: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get_sns_client(self) -> Any:
        """Return the shared SNS client; create if needed."""
        return await self._get_client("sns")

    async def get_sqs_client(self) -> Any:
        """Return the shared SQS client; create if needed."""
        return await self._get_client("sqs")

    async def _get_client(self, service_name: str) -> Any:
        client = self._clients.get(service_name)
        if client is not None:
            return client
        async with self._lock:
            client = self._clients.get(service_name)
            if client is not None:
                return client
            try:
                cm = self._session.create_client(
                    service_name,
                    region_name=self._region,
                    **self._client_kwargs,
                )
                client = await cm.__aenter__()
            except Exception as e:
                raise TransportError(
                    f"Cannot create {service_name} client: {e}"
                ) from e
            self._client_cms[service_name] = cm
            self._clients[service_name] = client
            logger.debug("Created %s client for %s", service_name, self._region)
            return client

    async def close(self) -> None:
        """Close any open clients."""
        async with self._lock:
            for service_name, cm in list(self._client_cms.items()):
                await cm.__aexit__(None, None, None)
                del self._client_cms[service_name]
                del self._clients[service_name]

    async def health_check(self) -> bool:
        """Return True if both SNS and SQS answer a lightweight list call."""
        try:
            sns = await self.get_sns_client()
            await sns.list_topics()
            sqs = await self.get_sqs_client()
            await sqs.list_queues(MaxResults=1)
            return True
        except Exception:  # noqa: BLE001
            logger.debug("AWS health check failed", exc_info=True)
            return False
