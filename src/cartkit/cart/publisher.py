"""In-process event broadcast.

Each subscription owns an unbounded queue. Publishing appends the event to
every open subscription in order; closing one subscription leaves the
others untouched. Nothing is replayed to late subscribers.
"""

import asyncio

import structlog

from cartkit.cart.events import CartEvent

logger = structlog.get_logger(__name__)

_CLOSED = object()


class CartEventSubscription:
    """Ordered stream of cart events for one consumer.

    Supports ``async for`` and ``async with``; iteration ends after
    ``close()``.
    """

    def __init__(self, publisher: "CartEventPublisher") -> None:
        self._publisher = publisher
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def _deliver(self, event: CartEvent) -> None:
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._publisher._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    def pending(self) -> list[CartEvent]:
        """Drain the events already delivered without waiting."""
        events = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                # Keep the terminator for iterators
                self._queue.put_nowait(_CLOSED)
                break
            events.append(item)
        return events

    async def next(self) -> CartEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item

    def __aiter__(self) -> "CartEventSubscription":
        return self

    async def __anext__(self) -> CartEvent:
        return await self.next()

    async def __aenter__(self) -> "CartEventSubscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class CartEventPublisher:
    def __init__(self) -> None:
        self._subscriptions: list[CartEventSubscription] = []

    def subscribe(self) -> CartEventSubscription:
        subscription = CartEventSubscription(self)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, event: CartEvent) -> None:
        logger.debug("cart_event.published", event_type=type(event).__name__, subscribers=len(self._subscriptions))
        for subscription in list(self._subscriptions):
            subscription._deliver(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _unsubscribe(self, subscription: CartEventSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
