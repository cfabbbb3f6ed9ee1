"""SNS/SQS provisioning and client management (aiobotocore)."""

from __future__ import annotations

from .connection import AWSConnectionManager
from .policies import sns_access_policy, sqs_access_policy, sqs_redrive_policy
from .service import ProvisioningService

__all__ = [
    "AWSConnectionManager",
    "ProvisioningService",
    "sns_access_policy",
    "sqs_access_policy",
    "sqs_redrive_policy",
]
