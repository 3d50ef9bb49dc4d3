"""
Sensor notification processing components

This module contains payload decoding, telemetry extraction, sliding-window
aggregation and the notification pipeline.
"""

from .decoder import PayloadDecoder
from .telemetry import extract_telemetry, parse_battery_percentage, parse_charging_status
from .windows import SlidingWindow, AggregationMode
from .streams import EventStream, Subscription
from .pipeline import BlinkMonitor

__all__ = [
    'PayloadDecoder', 'extract_telemetry', 'parse_battery_percentage',
    'parse_charging_status', 'SlidingWindow', 'AggregationMode',
    'EventStream', 'Subscription', 'BlinkMonitor',
]
