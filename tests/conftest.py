"""Pytest fixtures: mocked aiobotocore SNS/SQS clients (no real AWS)."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure the package is importable when running pytest from the repo root
# without ``pip install -e .``
_src = Path(__file__).resolve().parent.parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

ACCOUNT = "111122223333"
REGION = "eu-west-1"


@pytest.fixture
def broker_calls() -> list[tuple[str, dict[str, Any]]]:
    """Ordered (operation, params) log shared by the mocked clients."""
    return []


@pytest.fixture
def sns_client(broker_calls: list[tuple[str, dict[str, Any]]]) -> MagicMock:
    def record(name: str, result: Any) -> AsyncMock:
        def side_effect(**params: Any) -> Any:
            broker_calls.append((name, params))
            return result(params) if callable(result) else result

        return AsyncMock(side_effect=side_effect)

    client = MagicMock()
    client.create_topic = record(
        "sns.create_topic",
        lambda p: {"TopicArn": f"arn:aws:sns:{REGION}:{ACCOUNT}:{p['Name']}"},
    )
    client.set_topic_attributes = record("sns.set_topic_attributes", {})
    client.subscribe = record(
        "sns.subscribe",
        lambda p: {"SubscriptionArn": f"{p['TopicArn']}:subscription-id"},
    )
    client.publish = record("sns.publish", {"MessageId": "sns-message-id"})
    client.list_topics = AsyncMock(return_value={"Topics": []})
    return client


@pytest.fixture
def sqs_client(broker_calls: list[tuple[str, dict[str, Any]]]) -> MagicMock:
    def record(name: str, result: Any) -> AsyncMock:
        def side_effect(**params: Any) -> Any:
            broker_calls.append((name, params))
            return result(params) if callable(result) else result

        return AsyncMock(side_effect=side_effect)

    def queue_arn(params: dict[str, Any]) -> dict[str, Any]:
        name = params["QueueUrl"].rsplit("/", 1)[-1]
        return {"Attributes": {"QueueArn": f"arn:aws:sqs:{REGION}:{ACCOUNT}:{name}"}}

    client = MagicMock()
    client.create_queue = record(
        "sqs.create_queue",
        lambda p: {
            "QueueUrl": f"https://sqs.{REGION}.amazonaws.com/{ACCOUNT}/{p['QueueName']}"
        },
    )
    client.get_queue_attributes = record("sqs.get_queue_attributes", queue_arn)
    client.set_queue_attributes = record("sqs.set_queue_attributes", {})
    client.receive_message = AsyncMock(return_value={"Messages": []})
    client.delete_message = AsyncMock(return_value={})
    client.list_queues = AsyncMock(return_value={"QueueUrls": []})
    return client


@pytest.fixture
def connection(sns_client: MagicMock, sqs_client: MagicMock) -> MagicMock:
    conn = MagicMock()
    conn.get_sns_client = AsyncMock(return_value=sns_client)
    conn.get_sqs_client = AsyncMock(return_value=sqs_client)
    conn.health_check = AsyncMock(return_value=True)
    return conn
