"""Naming conventions — derive topic and queue names from a payload type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .envelope import message_name

ERROR_QUEUE_SUFFIX = "_error"


@runtime_checkable
class NamingConvention(Protocol):
    """Maps a payload type (name, class or instance) to resource names.

    Implementations must be deterministic: the same payload type always
    yields the same names.
    """

    def topic_name(self, message: Any) -> str: ...

    def queue_name(self, message: Any) -> str: ...

    def error_queue_name(self, message: Any) -> str: ...


@dataclass(frozen=True)
class DefaultNaming:
    """One topic and one queue per payload type, named after the type.

    ``orders.OrderPlaced`` maps to topic ``orders-OrderPlaced``, queue
    ``orders-OrderPlaced`` and error queue ``orders-OrderPlaced_error``.
    """

    def topic_name(self, message: Any) -> str:
        return message_name(message)

    def queue_name(self, message: Any) -> str:
        return message_name(message)

    def error_queue_name(self, message: Any) -> str:
        return self.queue_name(message) + ERROR_QUEUE_SUFFIX


@dataclass(frozen=True)
class PrefixNaming:
    """Stage-scoped topics with per-service queues.

    For payload type ``orders.OrderPlaced``::

        topic: {stage}-orders-OrderPlaced
        queue: {stage}-{service}-orders-OrderPlaced
        error: {stage}-{service}-orders-OrderPlaced_error

    Services consuming the same payload type share the topic but each get
    their own queue.
    """

    stage: str
    service: str

    def __post_init__(self) -> None:
        if not self.stage or not self.service:
            raise ValueError("stage and service must be non-empty")

    def topic_name(self, message: Any) -> str:
        return f"{self.stage}-{message_name(message)}"

    def queue_name(self, message: Any) -> str:
        return f"{self.stage}-{self.service}-{message_name(message)}"

    def error_queue_name(self, message: Any) -> str:
        return self.queue_name(message) + ERROR_QUEUE_SUFFIX
