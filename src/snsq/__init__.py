"""Convention-based pub/sub on SNS topics and SQS queues."""

from __future__ import annotations

import logging

from .aws import AWSConnectionManager
from .codec import decode, encode, from_transport_body, to_transport_body
from .config import RegistryConfig, SubscriberConfig
from .envelope import Envelope, Metadata, message_name, type_name_of
from .exceptions import (
    DecodeError,
    EncodeError,
    EnvelopeError,
    HandlerError,
    ResolutionError,
    SnsqError,
    TransportError,
)
from .handler import FunctionHandler, Handler, message_handler, stop_requested
from .naming import DefaultNaming, NamingConvention, PrefixNaming
from .publisher import Publisher
from .registry import Registry
from .store import InMemoryResourceStore, ResourceStore
from .subscriber import Subscriber

logging.getLogger("snsq").addHandler(logging.NullHandler())

__all__ = [
    "AWSConnectionManager",
    "DecodeError",
    "DefaultNaming",
    "EncodeError",
    "Envelope",
    "EnvelopeError",
    "FunctionHandler",
    "Handler",
    "HandlerError",
    "InMemoryResourceStore",
    "Metadata",
    "NamingConvention",
    "PrefixNaming",
    "Publisher",
    "Registry",
    "RegistryConfig",
    "ResolutionError",
    "ResourceStore",
    "SnsqError",
    "Subscriber",
    "SubscriberConfig",
    "TransportError",
    "decode",
    "encode",
    "from_transport_body",
    "message_handler",
    "message_name",
    "stop_requested",
    "to_transport_body",
    "type_name_of",
]
