"""
Blink Bridge - Real-time blink rate monitoring from a BLE eye sensor

A modular Python package that decodes eye sensor notifications, detects blinks,
aggregates blink rates over sliding windows and derives an alertness state
with matching guidance.

Python: 3.10+
"""

__version__ = "1.0.0"

# Main package imports for easy access
from .core.data_types import (
    EyeState, AlertnessState, DecodedSample, BlinkEvent, BlinkRateUpdate,
    ProcessedSample, Recommendation,
)
from .acquisition.sources import BleSensorSource, FakeEyeSensorSource
from .processing.decoder import PayloadDecoder
from .processing.windows import SlidingWindow, AggregationMode
from .processing.pipeline import BlinkMonitor
from .detection.eye_state import EyeStateClassifier
from .detection.blink_detector import BlinkDetector
from .detection.alertness import classify_alertness, recommend
from .communication.udp_sender import UdpStateSender

__all__ = [
    'EyeState', 'AlertnessState', 'DecodedSample', 'BlinkEvent', 'BlinkRateUpdate',
    'ProcessedSample', 'Recommendation',
    'BleSensorSource', 'FakeEyeSensorSource',
    'PayloadDecoder', 'SlidingWindow', 'AggregationMode', 'BlinkMonitor',
    'EyeStateClassifier', 'BlinkDetector', 'classify_alertness', 'recommend',
    'UdpStateSender',
]
