"""Registry — resolve payload types to live SNS topics and SQS queues."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .aws.service import ProvisioningService
from .config import RegistryConfig
from .exceptions import ResolutionError, SnsqError
from .naming import DefaultNaming, NamingConvention
from .store import InMemoryResourceStore, ResourceStore

if TYPE_CHECKING:
    from .aws.connection import AWSConnectionManager

_log = logging.getLogger("snsq.registry")


class Registry:
    """Convention-based infrastructure registry.

    Derives resource names from the payload type via a NamingConvention and
    provisions them on first use. Resolved addresses are cached in a
    ResourceStore, so each resource is provisioned at most once per store.

    Usage::

        registry = Registry(connection, naming=PrefixNaming("prod", "billing"))
        publisher = Publisher(connection, topic_resolver=registry.resolve_topic)
        subscriber = Subscriber(connection, queue_resolver=registry.resolve_queue)
    """

    def __init__(
        self,
        connection: AWSConnectionManager,
        *,
        naming: NamingConvention | None = None,
        store: ResourceStore | None = None,
        config: RegistryConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Configure the registry.

        Args:
            connection: Shared SNS/SQS connection manager.
            naming: Naming convention; defaults to DefaultNaming.
            store: Address cache; defaults to a new InMemoryResourceStore.
            config: Provisioning settings; defaults to RegistryConfig().
            logger: Logger to use instead of the ``snsq.registry`` logger.
        """
        self._log = logger or _log
        self._service = ProvisioningService(connection, logger=self._log)
        self._naming = naming or DefaultNaming()
        self._store = store if store is not None else InMemoryResourceStore()
        self._config = config or RegistryConfig()

    @property
    def naming(self) -> NamingConvention:
        return self._naming

    @property
    def store(self) -> ResourceStore:
        return self._store

    async def resolve_topic(self, message: Any) -> str:
        """Return the topic ARN for *message*, provisioning the topic if needed.

        *message* may be a payload type name, class or instance.

        Raises:
            ResolutionError: The topic could not be provisioned.
        """
        topic_name = self._naming.topic_name(message)

        async def provision() -> str:
            self._log.debug("Provisioning topic %s", topic_name)
            return await self._service.ensure_topic(topic_name)

        try:
            return await self._store.get_or_set_topic_arn(topic_name, provision)
        except ResolutionError:
            raise
        except SnsqError as e:
            raise ResolutionError(f"Cannot resolve topic {topic_name}: {e}") from e

    async def resolve_queue(self, message: Any) -> str:
        """Return the queue URL for *message*, provisioning it if needed.

        The topic is resolved first; on a cache miss the error queue, the main
        queue, its policies and the topic subscription are created.

        Raises:
            ResolutionError: The topic or queue could not be provisioned.
        """
        topic_arn = await self.resolve_topic(message)
        queue_name = self._naming.queue_name(message)
        error_queue_name = self._naming.error_queue_name(message)

        async def provision() -> str:
            self._log.debug(
                "Provisioning queue %s (error queue %s)", queue_name, error_queue_name
            )
            return await self._service.ensure_subscription(
                topic_arn,
                queue_name,
                error_queue_name,
                self._config.max_receive_count,
            )

        try:
            return await self._store.get_or_set_queue_url(queue_name, provision)
        except ResolutionError:
            raise
        except SnsqError as e:
            raise ResolutionError(f"Cannot resolve queue {queue_name}: {e}") from e
