"""Handler — typed message handlers for Subscriber."""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Coroutine

    from .envelope import Metadata

PayloadT = TypeVar("PayloadT", bound=BaseModel)
PayloadT_contra = TypeVar("PayloadT_contra", bound=BaseModel, contravariant=True)

# Stop signal of the subscribe() call running the current handler.
_stop_event: ContextVar[asyncio.Event | None] = ContextVar(
    "snsq_stop_event", default=None
)


def stop_requested() -> bool:
    """Return True once the subscriber running this handler is stopping.

    Long-running handlers may poll this to finish early. Outside a
    subscriber it is always False.
    """
    event = _stop_event.get()
    return event is not None and event.is_set()


@runtime_checkable
class Handler(Protocol[PayloadT_contra]):
    """
    Port for consuming one payload type.

    ``payload_type`` is the prototype the subscriber decodes into; it is
    guaranteed that ``handle`` only receives instances of it. Raising from
    ``handle`` leaves the message unacknowledged.

    Stopping a subscriber does not interrupt running handlers; they are
    drained. A handler that must notice shutdown checks ``stop_requested()``.
    """

    @property
    def payload_type(self) -> type[Any]: ...

    async def handle(self, payload: PayloadT_contra, metadata: Metadata) -> None: ...


class FunctionHandler(Generic[PayloadT]):
    """Adapts an async function to the Handler protocol."""

    def __init__(
        self,
        payload_type: type[PayloadT],
        fn: Callable[[PayloadT, Metadata], Coroutine[Any, Any, None]],
    ) -> None:
        self._payload_type = payload_type
        self._fn = fn

    @property
    def payload_type(self) -> type[PayloadT]:
        return self._payload_type

    async def handle(self, payload: PayloadT, metadata: Metadata) -> None:
        await self._fn(payload, metadata)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__qualname__", repr(self._fn))
        return f"FunctionHandler({self._payload_type.__name__}, {name})"


def message_handler(
    payload_type: type[PayloadT],
) -> Callable[
    [Callable[[PayloadT, Metadata], Coroutine[Any, Any, None]]],
    FunctionHandler[PayloadT],
]:
    """Decorator turning an async function into a Handler for *payload_type*.

    Usage::

        @message_handler(OrderPlaced)
        async def on_order_placed(order: OrderPlaced, metadata: Metadata) -> None:
            ...

        await subscriber.subscribe(on_order_placed, stop_event=stop)
    """

    def decorator(
        fn: Callable[[PayloadT, Metadata], Coroutine[Any, Any, None]],
    ) -> FunctionHandler[PayloadT]:
        return FunctionHandler(payload_type, fn)

    return decorator
