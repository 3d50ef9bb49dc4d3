"""
Notification processing pipeline

This module wires the decoder, telemetry extractors, eye-state classifier,
blink detector and both sliding windows into the per-notification path. All
work runs synchronously inside the notification callback.
"""

import logging
import time
from typing import Callable, Optional

from ..core.data_types import (
    BlinkEvent, BlinkRateUpdate, EyeState, ProcessedSample, Recommendation,
)
from ..detection.alertness import recommend
from ..detection.blink_detector import BlinkDetector
from ..detection.eye_state import EyeStateClassifier
from .decoder import PayloadDecoder
from .streams import EventStream
from .telemetry import extract_telemetry
from .windows import SlidingWindow, blink_count_window, rate_average_window


def wall_clock_ms() -> int:
    """Current Unix time in integer milliseconds"""
    return int(time.time() * 1000)


class BlinkMonitor:
    """
    Turn raw sensor notifications into blink counts and a rolling average

    Every processed notification publishes a BlinkRateUpdate carrying the
    60-second blink count; each blink additionally publishes a BlinkEvent on
    ``eye_closures`` for the latency-measurement collaborator.
    """

    def __init__(self, classifier: Optional[EyeStateClassifier] = None,
                 clock: Callable[[], int] = wall_clock_ms):
        self.decoder = PayloadDecoder()
        self.classifier = classifier or EyeStateClassifier()
        self.detector = BlinkDetector()
        self.blink_window: SlidingWindow = blink_count_window()
        self.rate_window: SlidingWindow = rate_average_window()
        self.clock = clock

        self.rate_updates: EventStream[BlinkRateUpdate] = EventStream("blink rate")
        self.eye_closures: EventStream[BlinkEvent] = EventStream("eye closure")

        # Latest-known telemetry for display
        self.latest_reading: Optional[str] = None
        self.battery_percentage: Optional[int] = None
        self.is_charging: bool = False
        self.notifications_processed = 0

    def on_blink_rate_change(self, callback: Callable[[int], None]) -> Callable[[], None]:
        """Register a callback receiving the 60-second count after every notification"""
        return self.rate_updates.add_listener(lambda update: callback(update.blink_count))

    def process_notification(self, data: bytes, now: Optional[int] = None) -> ProcessedSample:
        """
        Process one raw notification

        Args:
            data: Raw notification bytes
            now: Timestamp in milliseconds (defaults to the monitor clock)

        Returns:
            ProcessedSample: Decoded values, classification and current count
        """
        if now is None:
            now = self.clock()

        decoded = self.decoder.decode(data)
        if decoded.text is not None:
            self.latest_reading = decoded.text.strip()

        telemetry = extract_telemetry(decoded.text)
        if telemetry.battery_percentage is not None:
            self.battery_percentage = telemetry.battery_percentage
        if telemetry.is_charging is not None:
            self.is_charging = telemetry.is_charging

        eye_state = self.classifier.classify(decoded)
        blink = self.detector.update(eye_state, now)
        if blink is not None:
            self.blink_window.record(blink.timestamp)
            logging.debug(f"Blink at {blink.timestamp}")
            self.eye_closures.publish(blink)

        blink_count = self.blink_window.count(now)
        self.rate_window.record(now, blink_count)
        self.notifications_processed += 1
        self.rate_updates.publish(BlinkRateUpdate(timestamp=now, blink_count=blink_count))

        return ProcessedSample(
            timestamp=now,
            decoded=decoded,
            eye_state=eye_state,
            blink=blink,
            blink_count=blink_count,
            telemetry=telemetry,
        )

    def handle_notification(self, sender, data: bytearray) -> None:
        """bleak notification callback"""
        try:
            self.process_notification(bytes(data))
        except Exception as e:
            logging.error(f"Error handling notification from {sender}: {e}")

    @property
    def eye_state(self) -> EyeState:
        return self.detector.current_state

    def current_blink_count(self, now: Optional[int] = None) -> int:
        return self.blink_window.count(self.clock() if now is None else now)

    def current_five_minute_average(self, now: Optional[int] = None) -> Optional[float]:
        """5-minute rolling average, None when no recent samples exist"""
        return self.rate_window.average(self.clock() if now is None else now)

    def has_recent_data(self, now: Optional[int] = None) -> bool:
        return self.sample_count(now) > 0

    def sample_count(self, now: Optional[int] = None) -> int:
        return self.rate_window.count(self.clock() if now is None else now)

    def recommendation(self, now: Optional[int] = None) -> Optional[Recommendation]:
        """Alertness state and plan, gated on enough recent samples"""
        if now is None:
            now = self.clock()
        return recommend(self.current_five_minute_average(now), self.sample_count(now))

    def reset(self):
        """Forget detector state, windows and telemetry"""
        self.detector.reset()
        self.blink_window.clear()
        self.rate_window.clear()
        self.latest_reading = None
        self.battery_percentage = None
        self.is_charging = False
        self.notifications_processed = 0
