"""Metadata and Envelope — the payload wrapper shared by publishers and subscribers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class Metadata(BaseModel):
    """Delivery metadata carried alongside every payload.

    ``id`` and ``timestamp`` are always populated when a message is encoded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str = Field(..., description="Fully-qualified payload type name")
    correlation_id: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Envelope(Generic[PayloadT]):
    """A decoded payload together with its metadata."""

    payload: PayloadT
    metadata: Metadata


def type_name_of(obj: Any) -> str:
    """Return the fully-qualified type name for a payload instance, class or name.

    A model may pin its name with a ``type_name`` class variable, e.g.::

        class OrderPlaced(BaseModel):
            type_name: ClassVar[str] = "orders.OrderPlaced"

    Otherwise ``module.QualName`` is used. Strings are returned unchanged.
    """
    if isinstance(obj, str):
        return obj
    cls = obj if isinstance(obj, type) else type(obj)
    pinned = getattr(cls, "type_name", None)
    if isinstance(pinned, str) and pinned:
        return pinned
    return f"{cls.__module__}.{cls.__qualname__}"


def message_name(obj: Any) -> str:
    """Return the hyphen-separated resource name for a payload type.

    ``orders.OrderPlaced`` becomes ``orders-OrderPlaced``.
    """
    return type_name_of(obj).replace(".", "-")
