"""Exceptions raised by snsq."""

from __future__ import annotations


class SnsqError(Exception):
    """Root exception for the entire snsq toolkit."""


class ResolutionError(SnsqError):
    """Raised when a topic or queue cannot be determined or provisioned.

    Fatal to the ``publish()`` or ``subscribe()`` call that triggered it.
    """


class TransportError(SnsqError):
    """Raised when an SNS or SQS call fails."""


class EnvelopeError(SnsqError):
    """Base class for envelope encoding and decoding errors."""


class EncodeError(EnvelopeError):
    """Raised when a payload cannot be boxed into an envelope."""


class DecodeError(EnvelopeError):
    """Raised when envelope bytes are malformed or hold an unexpected payload type."""

    def __init__(self, message: str, message_id: str | None = None) -> None:
        self.message_id = message_id
        super().__init__(message)


class HandlerError(SnsqError):
    """Raised when a subscriber handler fails to process a message."""

    def __init__(self, message: str, message_id: str | None = None) -> None:
        self.message_id = message_id
        super().__init__(message)
