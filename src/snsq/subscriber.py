"""Subscriber — poll an SQS queue and hand each message to a typed handler."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from .codec import decode, from_transport_body
from .config import SubscriberConfig
from .exceptions import DecodeError, HandlerError, ResolutionError, TransportError
from .handler import _stop_event

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .aws.connection import AWSConnectionManager
    from .handler import Handler

    QueueResolver = Callable[[Any], Awaitable[str]]
    ErrorSink = Callable[[Exception], None]

_log = logging.getLogger("snsq.subscriber")


def _discard(error: Exception) -> None:  # noqa: ARG001
    """Default error sink."""


class Subscriber:
    """SQS long-polling subscriber with at-least-once delivery.

    Each received message is handled in its own task: decode, invoke the
    handler, then delete. A message is deleted only after its handler
    succeeds; failures leave it on the queue for redelivery and, after the
    queue's max receive count, the error queue.

    Once polling has started, errors never propagate out of ``subscribe()``;
    they are passed to ``on_error``.
    """

    def __init__(
        self,
        connection: AWSConnectionManager,
        *,
        queue_resolver: QueueResolver | None = None,
        config: SubscriberConfig | None = None,
        on_error: ErrorSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Configure subscriber.

        Args:
            connection: Shared SNS/SQS connection manager.
            queue_resolver: Async callable mapping a payload type to a queue
                URL, typically ``Registry.resolve_queue``.
            config: Polling settings; defaults to SubscriberConfig().
            on_error: Called with every error raised after startup.
                Errors are discarded by default.
            logger: Logger to use instead of the ``snsq.subscriber`` logger.
        """
        self._connection = connection
        self._queue_resolver = queue_resolver
        self._config = config or SubscriberConfig()
        self._on_error = on_error or _discard
        self._log = logger or _log

    @property
    def config(self) -> SubscriberConfig:
        return self._config

    async def subscribe(
        self,
        handler: Handler[Any],
        *,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Consume messages for *handler* until *stop_event* is set.

        Returns after the polling loop has stopped and every in-flight
        message has finished handling. If the calling task is cancelled the
        in-flight messages are still drained before the cancellation
        propagates; *stop_event* is set first so handlers checking
        ``stop_requested()`` can finish early.

        Raises:
            ResolutionError: The queue could not be resolved; nothing is
                polled.
        """
        stop = stop_event if stop_event is not None else asyncio.Event()
        queue_url = await self._resolve_queue(handler)
        sqs = await self._connection.get_sqs_client()

        in_flight: set[asyncio.Task[None]] = set()
        # handling tasks copy this context and see the stop signal
        token = _stop_event.set(stop)
        self._log.info("Subscribed %r to %s", handler, queue_url)
        try:
            await self._poll(sqs, queue_url, handler, stop, in_flight)
        except asyncio.CancelledError:
            stop.set()
            raise
        finally:
            if in_flight:
                self._log.debug("Draining %d in-flight message(s)", len(in_flight))
                await asyncio.wait(set(in_flight))
            _stop_event.reset(token)
            self._log.info("Stopped polling %s", queue_url)

    async def _resolve_queue(self, handler: Handler[Any]) -> str:
        payload_type = handler.payload_type
        if self._queue_resolver is None:
            raise ResolutionError(
                f"No queue resolver configured for {payload_type.__name__}"
            )
        try:
            return await self._queue_resolver(payload_type)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(
                f"Cannot resolve queue for {payload_type.__name__}: {e}"
            ) from e

    async def _poll(
        self,
        sqs: Any,
        queue_url: str,
        handler: Handler[Any],
        stop: asyncio.Event,
        in_flight: set[asyncio.Task[None]],
    ) -> None:
        while not await self._stopped_within(stop, self._config.receive_interval):
            capacity = self._config.max_in_flight - len(in_flight)
            if capacity <= 0:
                self._log.debug("No free capacity, skipping receive from %s", queue_url)
                continue

            max_messages = min(self._config.max_number_of_messages, capacity)
            for msg in await self._receive(sqs, queue_url, max_messages, stop):
                task = asyncio.create_task(self._handle(sqs, queue_url, msg, handler))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)

    @staticmethod
    async def _stopped_within(stop: asyncio.Event, timeout: float) -> bool:
        """Wait up to *timeout* seconds; return True if *stop* was set."""
        if stop.is_set():
            return True
        try:
            await asyncio.wait_for(stop.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _receive(
        self,
        sqs: Any,
        queue_url: str,
        max_messages: int,
        stop: asyncio.Event,
    ) -> list[dict[str, Any]]:
        """Long-poll once; abandon the call if *stop* is set meanwhile."""
        receive = asyncio.ensure_future(
            sqs.receive_message(
                QueueUrl=queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=self._config.wait_time_seconds,
                VisibilityTimeout=self._config.visibility_timeout_seconds,
            )
        )
        stopped = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({receive, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopped.cancel()
            if not receive.done():
                receive.cancel()

        if not receive.done() or receive.cancelled():
            return []
        exc = receive.exception()
        if exc is not None:
            error = TransportError(f"Receive from {queue_url} failed: {exc}")
            error.__cause__ = exc
            self._report(error)
            return []
        return list(receive.result().get("Messages") or [])

    async def _handle(
        self,
        sqs: Any,
        queue_url: str,
        msg: dict[str, Any],
        handler: Handler[Any],
    ) -> None:
        """Decode, handle and delete one message. Never raises."""
        self._log.debug("Received %s from %s", msg.get("MessageId"), queue_url)
        try:
            envelope = decode(
                from_transport_body(msg.get("Body", "")), handler.payload_type
            )
        except DecodeError as e:
            self._report(e)
            return

        message_id = envelope.metadata.id
        try:
            await handler.handle(envelope.payload, envelope.metadata)
        except Exception as e:  # noqa: BLE001
            error = HandlerError(
                f"Handler {handler!r} failed for message {message_id}: {e}",
                message_id=message_id,
            )
            error.__cause__ = e
            self._report(error)
            return

        try:
            await sqs.delete_message(
                QueueUrl=queue_url,
                ReceiptHandle=msg["ReceiptHandle"],
            )
        except Exception as e:  # noqa: BLE001
            error = TransportError(f"Delete of message {message_id} failed: {e}")
            error.__cause__ = e
            self._report(error)
            return
        self._log.debug("Handled %s from %s", message_id, queue_url)

    def _report(self, error: Exception) -> None:
        self._log.warning("%s", error)
        try:
            self._on_error(error)
        except Exception:  # noqa: BLE001
            self._log.exception("Error sink raised while reporting %r", error)

    async def health_check(self) -> bool:
        """Return True if SNS/SQS are reachable."""
        return await self._connection.health_check()
