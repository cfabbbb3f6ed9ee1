"""Validated configuration for subscribers and the registry."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SubscriberConfig(BaseModel):
    """Polling and concurrency settings for a Subscriber.

    ``max_in_flight`` caps concurrently handled messages per ``subscribe()``
    call; the receive size shrinks to the free capacity and a tick with no
    free capacity skips the receive.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_number_of_messages: int = Field(default=10, ge=1, le=10)
    receive_interval: float = Field(default=1.0, gt=0, description="Seconds")
    wait_time_seconds: int = Field(default=20, ge=0, le=20)
    visibility_timeout_seconds: int = Field(default=15, ge=0, le=43200)
    max_in_flight: int = Field(default=100, ge=1)


class RegistryConfig(BaseModel):
    """Provisioning settings for the Registry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_receive_count: int = Field(
        default=5,
        ge=1,
        le=1000,
        description="Receives before a message moves to the error queue",
    )
