"""
Time-based sliding windows

This module implements the sliding windows behind the 60-second blink count and
the 5-minute blink-rate average. Expired items are pruned before every append
and every read, and the average is recomputed from the retained items on each
call so long sessions never accumulate rounding drift.
"""

import logging
from collections import deque
from enum import Enum
from typing import Deque, List, Optional, Union

import numpy as np

from ..core.config import BLINK_WINDOW_MS, RATE_WINDOW_MS
from ..core.data_types import RateSample


class AggregationMode(str, Enum):
    COUNT = "count"
    AVERAGE = "average"


class SlidingWindow:
    """
    Timestamped items retained for a fixed window length

    Items are kept in insertion order. After any public call, every retained
    item satisfies ``now - item.timestamp <= window_ms``.
    """

    def __init__(self, window_ms: int, mode: AggregationMode = AggregationMode.COUNT):
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self.window_ms = window_ms
        self.mode = AggregationMode(mode)
        self._items: Deque[RateSample] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def record(self, timestamp: int, value: float = 1.0) -> None:
        """
        Append an item at the tail, then prune relative to its timestamp

        Args:
            timestamp: Item time in milliseconds
            value: Aggregated value (ignored in COUNT mode)
        """
        if self._items and timestamp < self._items[-1].timestamp:
            logging.warning(
                f"Out-of-order sample: {timestamp} < {self._items[-1].timestamp} "
                f"({self.window_ms} ms window)"
            )
        self.prune(timestamp)
        self._items.append(RateSample(timestamp=int(timestamp), value=value))
        self.prune(timestamp)

    def prune(self, now: int) -> None:
        """Drop every item older than the window relative to ``now``"""
        if not self._items:
            return
        if all(now - item.timestamp <= self.window_ms for item in self._items):
            return
        self._items = deque(item for item in self._items
                            if now - item.timestamp <= self.window_ms)

    def items(self, now: int) -> List[RateSample]:
        """Snapshot of retained items after pruning"""
        self.prune(now)
        return list(self._items)

    def count(self, now: int) -> int:
        self.prune(now)
        return len(self._items)

    def average(self, now: int) -> Optional[float]:
        """Exact mean of retained values, None when nothing is retained"""
        self.prune(now)
        if not self._items:
            return None
        values = np.fromiter((item.value for item in self._items),
                             dtype=np.float64, count=len(self._items))
        return float(np.mean(values))

    def current_value(self, now: int) -> Union[int, float, None]:
        """
        Current aggregate according to the window mode

        Returns:
            COUNT: number of retained items (0 is a valid count)
            AVERAGE: mean of retained values, or None if the window is empty
        """
        if self.mode is AggregationMode.COUNT:
            return self.count(now)
        return self.average(now)

    def clear(self) -> None:
        self._items.clear()


def blink_count_window() -> SlidingWindow:
    """60-second window counting blink events"""
    return SlidingWindow(BLINK_WINDOW_MS, AggregationMode.COUNT)


def rate_average_window() -> SlidingWindow:
    """5-minute window averaging per-notification blink counts"""
    return SlidingWindow(RATE_WINDOW_MS, AggregationMode.AVERAGE)
