"""In-process publish/subscribe channel for order changes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from itertools import count

from qrmenu.schemas.order import OrderChangeEvent

logger = logging.getLogger(__name__)

Listener = Callable[[OrderChangeEvent], None]


class Subscription:
    """Handle returned by OrderChangeFeed.subscribe; close() releases it."""

    def __init__(self, feed: "OrderChangeFeed", subscription_id: int) -> None:
        self._feed = feed
        self.id = subscription_id
        self._closed = False

    @property
    def active(self) -> bool:
        return not self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._release(self.id)


class OrderChangeFeed:
    """Fan-out of order change events to live listeners.

    Listeners are called synchronously on the publishing thread; they should
    hand the event off (for example to an event loop) and return quickly.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[int, Listener] = {}
        self._ids = count(1)

    def subscribe(self, listener: Listener) -> Subscription:
        with self._lock:
            subscription_id = next(self._ids)
            self._listeners[subscription_id] = listener
        logger.debug("Order feed subscription %s opened", subscription_id)
        return Subscription(self, subscription_id)

    @contextmanager
    def subscription(self, listener: Listener) -> Iterator[Subscription]:
        """Subscribe for the duration of a with-block."""
        handle = self.subscribe(listener)
        try:
            yield handle
        finally:
            handle.close()

    def publish(self, event: OrderChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.items())
        for subscription_id, listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Order feed listener %s failed on %s", subscription_id, event.type)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _release(self, subscription_id: int) -> None:
        with self._lock:
            self._listeners.pop(subscription_id, None)
        logger.debug("Order feed subscription %s released", subscription_id)


order_changes: OrderChangeFeed = OrderChangeFeed()
