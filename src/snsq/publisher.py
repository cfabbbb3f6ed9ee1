"""Publisher — encode payloads and publish them to their SNS topic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .codec import encode, to_transport_body
from .exceptions import ResolutionError, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pydantic import BaseModel

    from .aws.connection import AWSConnectionManager

    TopicResolver = Callable[[Any], Awaitable[str]]

_log = logging.getLogger("snsq.publisher")


class Publisher:
    """Publishes pydantic payloads wrapped in an envelope.

    The topic ARN comes from ``topic_resolver``, typically
    ``Registry.resolve_topic``. Errors are raised to the caller.
    """

    def __init__(
        self,
        connection: AWSConnectionManager,
        *,
        topic_resolver: TopicResolver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Shared SNS/SQS connection manager.
            topic_resolver: Async callable mapping a payload to a topic ARN.
            logger: Logger to use instead of the ``snsq.publisher`` logger.
        """
        self._connection = connection
        self._topic_resolver = topic_resolver
        self._log = logger or _log

    async def publish(self, message: BaseModel, **overrides: Any) -> str:
        """Publish *message* and return the SNS message id.

        *overrides* replace envelope metadata, e.g. ``correlation_id="abc"``.

        Raises:
            EncodeError: The payload cannot be encoded.
            ResolutionError: No topic could be resolved.
            TransportError: The SNS publish call failed.
        """
        data = encode(message, **overrides)
        topic_arn = await self._resolve_topic(message)

        sns = await self._connection.get_sns_client()
        try:
            out = await sns.publish(
                TopicArn=topic_arn,
                Message=to_transport_body(data),
            )
        except Exception as e:
            raise TransportError(f"Publish to {topic_arn} failed: {e}") from e

        message_id = str(out.get("MessageId", ""))
        self._log.debug("Published %s to %s", message_id, topic_arn)
        return message_id

    async def _resolve_topic(self, message: BaseModel) -> str:
        if self._topic_resolver is None:
            raise ResolutionError(
                f"No topic resolver configured for {type(message).__name__}"
            )
        try:
            return await self._topic_resolver(message)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(
                f"Cannot resolve topic for {type(message).__name__}: {e}"
            ) from e

    async def health_check(self) -> bool:
        """Return True if SNS/SQS are reachable."""
        return await self._connection.health_check()
