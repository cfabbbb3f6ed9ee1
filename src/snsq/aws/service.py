"""ProvisioningService — create-if-absent SNS topics and SQS subscriptions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import TransportError
from .policies import sns_access_policy, sqs_access_policy, sqs_redrive_policy

if TYPE_CHECKING:
    from .connection import AWSConnectionManager

_log = logging.getLogger("snsq.aws")


async def _call(client: Any, operation: str, **params: Any) -> dict[str, Any]:
    try:
        result: dict[str, Any] = await getattr(client, operation)(**params)
    except Exception as e:
        raise TransportError(f"{operation} failed: {e}") from e
    return result


def _field(out: dict[str, Any], operation: str, *path: str) -> str:
    """Return the string at *path* in a broker reply."""
    value: Any = out
    for key in path:
        if not isinstance(value, dict) or key not in value:
            raise TransportError(
                f"{operation} returned no {'.'.join(path)}: {out!r}"
            )
        value = value[key]
    return str(value)


class ProvisioningService:
    """Issues the SNS/SQS calls that make a topic or subscription exist.

    Every call is create-if-absent on the AWS side, so repeating a sequence
    for an existing resource is harmless.
    """

    def __init__(
        self,
        connection: AWSConnectionManager,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connection = connection
        self._log = logger or _log

    async def ensure_topic(self, topic_name: str) -> str:
        """Create *topic_name*, restrict it to the owning account, return its ARN.

        Raises:
            TransportError: An SNS call failed.
        """
        sns = await self._connection.get_sns_client()
        out = await _call(sns, "create_topic", Name=topic_name)
        topic_arn = _field(out, "create_topic", "TopicArn")

        await _call(
            sns,
            "set_topic_attributes",
            TopicArn=topic_arn,
            AttributeName="Policy",
            AttributeValue=sns_access_policy(topic_arn),
        )
        self._log.info("Ensured topic %s", topic_arn)
        return topic_arn

    async def ensure_subscription(
        self,
        topic_arn: str,
        queue_name: str,
        error_queue_name: str,
        max_receive_count: int,
    ) -> str:
        """Create the error queue and main queue, subscribe the main queue.

        Order: error queue, main queue, main queue policies (topic may send,
        redrive to the error queue), topic subscription. Returns the main
        queue URL.
        """
        sqs = await self._connection.get_sqs_client()
        sns = await self._connection.get_sns_client()

        _, error_queue_arn = await self._create_queue(sqs, error_queue_name)
        queue_url, queue_arn = await self._create_queue(sqs, queue_name)

        await _call(
            sqs,
            "set_queue_attributes",
            QueueUrl=queue_url,
            Attributes={
                "Policy": sqs_access_policy(topic_arn, queue_arn),
                "RedrivePolicy": sqs_redrive_policy(
                    error_queue_arn, max_receive_count
                ),
            },
        )

        out = await _call(
            sns,
            "subscribe",
            Protocol="sqs",
            TopicArn=topic_arn,
            Endpoint=queue_arn,
        )
        self._log.info(
            "Ensured subscription %s of %s to %s",
            out.get("SubscriptionArn"),
            queue_arn,
            topic_arn,
        )
        return queue_url

    async def _create_queue(self, sqs: Any, queue_name: str) -> tuple[str, str]:
        """Create *queue_name* and return its (URL, ARN)."""
        out = await _call(sqs, "create_queue", QueueName=queue_name)
        queue_url = _field(out, "create_queue", "QueueUrl")

        attrs = await _call(
            sqs,
            "get_queue_attributes",
            QueueUrl=queue_url,
            AttributeNames=["QueueArn"],
        )
        queue_arn = _field(
            attrs, "get_queue_attributes", "Attributes", "QueueArn"
        )
        self._log.debug("Ensured queue %s", queue_url)
        return queue_url, queue_arn
