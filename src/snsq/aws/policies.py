"""IAM policy documents attached to provisioned topics and queues."""

from __future__ import annotations

import json
import uuid

from ..exceptions import ResolutionError

_SNS_OWNER_ACTIONS = [
    "SNS:GetTopicAttributes",
    "SNS:SetTopicAttributes",
    "SNS:AddPermission",
    "SNS:RemovePermission",
    "SNS:DeleteTopic",
    "SNS:Subscribe",
    "SNS:ListSubscriptionsByTopic",
    "SNS:Publish",
    "SNS:Receive",
]


def _policy_id() -> str:
    return uuid.uuid4().hex


def account_id_from_arn(arn: str) -> str:
    """Return the account id field of *arn* (``arn:aws:sns:region:account:name``)."""
    parts = arn.split(":")
    if len(parts) < 5:
        raise ResolutionError(f"Invalid ARN: {arn}")
    return parts[4]


def sns_access_policy(topic_arn: str) -> str:
    """Allow only the topic's owning account to use the topic."""
    return json.dumps(
        {
            "Version": "2008-10-17",
            "Id": _policy_id(),
            "Statement": [
                {
                    "Sid": _policy_id(),
                    "Effect": "Allow",
                    "Principal": {"AWS": "*"},
                    "Action": _SNS_OWNER_ACTIONS,
                    "Resource": topic_arn,
                    "Condition": {
                        "StringEquals": {
                            "AWS:SourceOwner": account_id_from_arn(topic_arn)
                        }
                    },
                }
            ],
        }
    )


def sqs_access_policy(topic_arn: str, queue_arn: str) -> str:
    """Allow SNS to deliver messages from *topic_arn* into *queue_arn*."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Id": _policy_id(),
            "Statement": [
                {
                    "Sid": _policy_id(),
                    "Effect": "Allow",
                    "Principal": {"Service": "sns.amazonaws.com"},
                    "Action": ["sqs:SendMessage"],
                    "Resource": queue_arn,
                    "Condition": {"ArnEquals": {"AWS:SourceArn": topic_arn}},
                }
            ],
        }
    )


def sqs_redrive_policy(error_queue_arn: str, max_receive_count: int) -> str:
    """Move messages to *error_queue_arn* after *max_receive_count* receives."""
    return json.dumps(
        {
            "deadLetterTargetArn": error_queue_arn,
            "maxReceiveCount": str(max_receive_count),
        }
    )
