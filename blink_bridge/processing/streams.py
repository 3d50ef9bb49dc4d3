"""
Update streams

Multi-consumer replacement for a single overwritable callback. Consumers can
either pull through a Subscription (a lazy, non-blocking iterator over what was
published since subscribing) or register a push listener.
"""

import logging
from collections import deque
from typing import Callable, Deque, Generic, Iterator, List, Optional, TypeVar

from ..core.config import SUBSCRIPTION_MAXLEN

T = TypeVar("T")


class Subscription(Generic[T]):
    """
    Pending updates for one consumer

    At most ``maxlen`` updates are held; once full, the oldest pending update
    is dropped for each new one. A consumer that cannot keep up should drain
    regularly or close the subscription.
    """

    def __init__(self, stream: "EventStream[T]", maxlen: Optional[int] = SUBSCRIPTION_MAXLEN):
        self._stream = stream
        self._pending: Deque[T] = deque(maxlen=maxlen)
        self.closed = False
        self.dropped = 0

    def _push(self, item: T) -> None:
        maxlen = self._pending.maxlen
        if maxlen is not None and len(self._pending) == maxlen:
            if self.dropped == 0:
                logging.warning(f"{self._stream.name} subscriber is not draining; "
                                f"dropping oldest of {maxlen} pending updates")
            self.dropped += 1
        self._pending.append(item)

    def __iter__(self) -> Iterator[T]:
        while self._pending:
            yield self._pending.popleft()

    @property
    def maxlen(self) -> Optional[int]:
        return self._pending.maxlen

    def __len__(self) -> int:
        return len(self._pending)

    def drain(self) -> List[T]:
        """Take every pending update"""
        return list(self)

    def close(self) -> None:
        self._stream._unsubscribe(self)
        self._pending.clear()
        self.closed = True


class EventStream(Generic[T]):
    """Fan-out of published updates to subscriptions and listeners"""

    def __init__(self, name: str):
        self.name = name
        self._subscriptions: List[Subscription[T]] = []
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, maxlen: Optional[int] = SUBSCRIPTION_MAXLEN) -> Subscription[T]:
        """
        Start receiving updates

        Args:
            maxlen: Keep only the newest ``maxlen`` pending updates (None for unbounded)
        """
        subscription = Subscription(self, maxlen)
        self._subscriptions.append(subscription)
        return subscription

    def add_listener(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a push consumer; returns a function that removes it"""
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def publish(self, item: T) -> None:
        for subscription in self._subscriptions:
            subscription._push(item)
        for callback in list(self._listeners):
            try:
                callback(item)
            except Exception as e:
                logging.error(f"{self.name} listener failed: {e}")

    def _unsubscribe(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
