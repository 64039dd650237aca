"""
Synchronous publish/subscribe channels.

Architecture:
- Keeps a registry of subscriber callbacks per channel
- Delivers each published event to every live subscriber before returning
- Provides filtered views over a base registry

Design Patterns:
- Observer Pattern: Subscribers observe engine outcomes
- Publisher/Subscriber: Channels decouple engine from observers
- Decorator Pattern: Filtered views wrap callbacks with a predicate

Responsibilities:
1. Subscription management
   - Registration in arrival order
   - Removal by handle
   - Scoped subscriptions via context manager

2. Delivery
   - Synchronous, in registration order
   - Hot: no replay and no buffering
   - Subscriber failures isolated and logged

Cross-cutting:
- Thread safety of the registry
- Logging of subscriber failures

Dependencies:
- machine/engine.py: Owns and publishes on the channels
"""

import logging
import threading
from typing import Any, Callable, Generic, List, Optional, TypeVar

from stately.core.types import Predicate

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[T], None]


class Subscription:
    """Handle returned by ``subscribe``.

    Calling ``unsubscribe`` more than once is harmless. Used as a context
    manager, the subscription is closed when the block exits.
    """

    def __init__(self, channel: "Channel", callback: Callable[[Any], None]) -> None:
        self._channel = channel
        self._callback = callback
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check if the subscription has been cancelled."""
        return self._closed

    @property
    def callback(self) -> Callable[[Any], None]:
        return self._callback

    def unsubscribe(self) -> None:
        """Remove the callback from its channel."""
        if self._closed:
            return
        self._closed = True
        self._channel._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.unsubscribe()


class Channel(Generic[T]):
    """A multicast broadcast channel with synchronous delivery.

    Class Invariants:
    1. Subscribers are invoked in registration order
    2. Every live subscriber sees an event before ``publish`` returns
    3. Late subscribers never see earlier events
    4. A failing subscriber never affects other subscribers or the publisher

    Threading/Concurrency Guarantees:
    1. Registry mutation is guarded by a lock
    2. Dispatch runs outside the lock on a snapshot, so callbacks may
       subscribe or unsubscribe freely
    3. Channels share no state with each other

    Performance Characteristics:
    1. O(1) subscription
    2. O(s) unsubscription and delivery where s is subscriber count
    """

    def __init__(self, name: str) -> None:
        """Initialize a Channel instance.

        Args:
            name: Label used in log messages
        """
        self._name = name
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def subscriber_count(self) -> int:
        """Get the number of live subscriptions, including filtered ones."""
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, callback: Callback) -> Subscription:
        """Register a callback for every future event.

        Args:
            callback: Called with each published event

        Returns:
            A Subscription handle

        Raises:
            ValueError: If callback is not callable
        """
        if not callable(callback):
            raise ValueError("Subscriber must be callable")
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def filter(self, predicate: Predicate) -> "FilteredChannel[T]":
        """Create a view that only delivers events matching ``predicate``."""
        return FilteredChannel(self, predicate)

    def publish(self, event: T) -> None:
        """Deliver ``event`` to every live subscriber, in registration order.

        Args:
            event: The payload to deliver
        """
        with self._lock:
            snapshot = list(self._subscriptions)

        for subscription in snapshot:
            if subscription.closed:
                continue
            try:
                subscription.callback(event)
            except Exception:
                logger.exception("Subscriber %r on channel '%s' failed", subscription.callback, self._name)

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                pass

    def __repr__(self) -> str:
        return f"Channel({self._name!r})"


class FilteredChannel(Generic[T]):
    """A predicate view over a base channel.

    Subscribing registers a wrapping callback on the base channel, so
    ordering and unsubscription follow the base registry exactly.
    """

    def __init__(self, source: Channel, predicate: Predicate, parent: Optional["FilteredChannel"] = None) -> None:
        """Initialize a FilteredChannel instance.

        Args:
            source: Base channel holding the registry
            predicate: Events for which this returns True are delivered
            parent: Enclosing view whose predicate must also hold

        Raises:
            ValueError: If predicate is not callable
        """
        if not callable(predicate):
            raise ValueError("Filter predicate must be callable")
        self._source = source
        self._predicate = predicate
        self._parent = parent

    @property
    def source(self) -> Channel:
        return self._source

    def matches(self, event: Any) -> bool:
        """Check whether ``event`` passes this view and every enclosing one."""
        if self._parent is not None and not self._parent.matches(event):
            return False
        return bool(self._predicate(event))

    def subscribe(self, callback: Callback) -> Subscription:
        """Register a callback for future events that pass the filter.

        Raises:
            ValueError: If callback is not callable
        """
        if not callable(callback):
            raise ValueError("Subscriber must be callable")

        def deliver(event: T) -> None:
            if self.matches(event):
                callback(event)

        return self._source.subscribe(deliver)

    def filter(self, predicate: Predicate) -> "FilteredChannel[T]":
        """Narrow this view further."""
        return FilteredChannel(self._source, predicate, parent=self)
