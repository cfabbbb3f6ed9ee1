"""Unit tests for Publisher with a mocked connection (no real AWS)."""

from __future__ import annotations

import base64
from typing import ClassVar
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from snsq.codec import decode
from snsq.exceptions import EncodeError, ResolutionError, TransportError
from snsq.publisher import Publisher
from snsq.registry import Registry

TOPIC_ARN = "arn:aws:sns:eu-west-1:111122223333:orders-OrderPlaced"


class OrderPlaced(BaseModel):
    type_name: ClassVar[str] = "orders.OrderPlaced"

    order_id: str


@pytest.fixture
def publisher(connection: MagicMock) -> Publisher:
    return Publisher(connection, topic_resolver=AsyncMock(return_value=TOPIC_ARN))


@pytest.mark.asyncio
async def test_publish_sends_base64_envelope(
    publisher: Publisher, sns_client: MagicMock
) -> None:
    message_id = await publisher.publish(
        OrderPlaced(order_id="o-1"), correlation_id="corr-1"
    )

    assert message_id == "sns-message-id"
    sns_client.publish.assert_awaited_once()
    kwargs = sns_client.publish.await_args.kwargs
    assert kwargs["TopicArn"] == TOPIC_ARN
    env = decode(base64.b64decode(kwargs["Message"]), OrderPlaced)
    assert env.payload == OrderPlaced(order_id="o-1")
    assert env.metadata.correlation_id == "corr-1"
    assert env.metadata.type == "orders.OrderPlaced"


@pytest.mark.asyncio
async def test_publish_passes_message_to_resolver(connection: MagicMock) -> None:
    resolver = AsyncMock(return_value=TOPIC_ARN)
    msg = OrderPlaced(order_id="o-1")
    await Publisher(connection, topic_resolver=resolver).publish(msg)
    resolver.assert_awaited_once_with(msg)


@pytest.mark.asyncio
async def test_publish_without_resolver_fails_before_transport(
    connection: MagicMock, sns_client: MagicMock
) -> None:
    publisher = Publisher(connection)
    with pytest.raises(ResolutionError):
        await publisher.publish(OrderPlaced(order_id="o-1"))
    connection.get_sns_client.assert_not_awaited()
    sns_client.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_publish_resolver_failure_raises_resolution_error(
    connection: MagicMock, sns_client: MagicMock
) -> None:
    resolver = AsyncMock(side_effect=RuntimeError("no topic"))
    publisher = Publisher(connection, topic_resolver=resolver)
    with pytest.raises(ResolutionError) as exc_info:
        await publisher.publish(OrderPlaced(order_id="o-1"))
    assert exc_info.value.__cause__ is not None
    sns_client.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_publish_encode_failure(
    publisher: Publisher, sns_client: MagicMock
) -> None:
    with pytest.raises(EncodeError):
        await publisher.publish(OrderPlaced(order_id="o-1"), unknown="x")
    sns_client.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_publish_transport_failure(
    publisher: Publisher, sns_client: MagicMock
) -> None:
    sns_client.publish.side_effect = RuntimeError("throttled")
    with pytest.raises(TransportError) as exc_info:
        await publisher.publish(OrderPlaced(order_id="o-1"))
    assert "throttled" in str(exc_info.value)
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_publish_with_registry_provisions_topic_once(
    connection: MagicMock, sns_client: MagicMock
) -> None:
    registry = Registry(connection)
    publisher = Publisher(connection, topic_resolver=registry.resolve_topic)

    await publisher.publish(OrderPlaced(order_id="o-1"))
    await publisher.publish(OrderPlaced(order_id="o-2"))

    sns_client.create_topic.assert_awaited_once_with(Name="orders-OrderPlaced")
    assert sns_client.publish.await_count == 2
    assert sns_client.publish.await_args.kwargs["TopicArn"] == TOPIC_ARN


@pytest.mark.asyncio
async def test_health_check_delegates_to_connection(
    publisher: Publisher, connection: MagicMock
) -> None:
    assert await publisher.health_check() is True
    connection.health_check.assert_awaited_once()
