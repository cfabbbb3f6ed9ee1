"""Envelope codec — wrap payloads with metadata and unwrap them on receipt."""

from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .envelope import Envelope, Metadata, type_name_of
from .exceptions import DecodeError, EncodeError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class _BoxedPayload(BaseModel):
    """Self-describing payload: the type tag travels with the value."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: dict[str, Any]


class _WireEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    correlation_id: str = ""
    timestamp: datetime
    body: _BoxedPayload


def encode(payload: BaseModel, **overrides: Any) -> bytes:
    """Encode *payload* into envelope bytes.

    A fresh id and timestamp are generated and ``type`` is taken from the
    payload; *overrides* replace any of these (typically ``correlation_id``).

    Raises:
        EncodeError: The payload is not a pydantic model, an override is
            invalid, or serialization fails.
    """
    if not isinstance(payload, BaseModel):
        raise EncodeError(
            f"Cannot box payload of type {type(payload).__name__}; "
            "expected a pydantic model"
        )
    name = type_name_of(payload)
    try:
        metadata = Metadata(**{"type": name, **overrides})
        wire = _WireEnvelope(
            id=metadata.id,
            type=metadata.type,
            correlation_id=metadata.correlation_id,
            timestamp=metadata.timestamp,
            body=_BoxedPayload(
                type=name, value=payload.model_dump(mode="json", by_alias=True)
            ),
        )
        return wire.model_dump_json().encode("utf-8")
    except (ValidationError, TypeError, ValueError) as e:
        raise EncodeError(str(e)) from e


def decode(data: bytes, prototype: type[PayloadT] | PayloadT) -> Envelope[PayloadT]:
    """Decode envelope bytes into an Envelope holding an instance of *prototype*.

    Raises:
        DecodeError: The bytes are malformed, or the boxed payload type does
            not match *prototype*.
    """
    cls: type[PayloadT] = prototype if isinstance(prototype, type) else type(prototype)
    try:
        wire = _WireEnvelope.model_validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"Malformed envelope: {e}") from e

    expected = type_name_of(cls)
    if wire.body.type != expected:
        raise DecodeError(
            f"Payload type mismatch: got {wire.body.type!r}, expected {expected!r}",
            message_id=wire.id,
        )
    try:
        # JSON mode: strict models accept their own serialized form
        payload = cls.model_validate_json(json.dumps(wire.body.value))
    except ValidationError as e:
        raise DecodeError(
            f"Invalid {expected} payload: {e}", message_id=wire.id
        ) from e

    metadata = Metadata(
        id=wire.id,
        type=wire.type,
        correlation_id=wire.correlation_id,
        timestamp=wire.timestamp,
    )
    return Envelope(payload=payload, metadata=metadata)


def to_transport_body(data: bytes) -> str:
    """Return envelope bytes as the base64 text published to SNS."""
    return base64.b64encode(data).decode("ascii")


def from_transport_body(body: str | bytes) -> bytes:
    """Extract envelope bytes from an SQS message body.

    SNS deliveries wrap the published text in a JSON notification whose
    ``Message`` field holds it; with raw message delivery the body is the
    base64 text itself.
    """
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
    except UnicodeDecodeError as e:
        raise DecodeError(f"Message body is not UTF-8: {e}") from e

    encoded: Any = text
    try:
        notification = json.loads(text)
    except json.JSONDecodeError:
        notification = None
    if isinstance(notification, dict):
        encoded = notification.get("Message")

    if not isinstance(encoded, str) or not encoded:
        raise DecodeError("Message body holds no envelope")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Message body is not valid base64: {e}") from e
