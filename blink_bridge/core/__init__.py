"""
Core data types and structures for Blink Bridge

This module contains the fundamental data classes used throughout the system.
"""

from .data_types import (
    EyeState, AlertnessState, DecodedSample, BlinkEvent, RateSample,
    BlinkRateUpdate, TelemetryReading, ThresholdBands, SchedulePlan,
    Recommendation, ProcessedSample,
)
from .exceptions import (
    BlinkBridgeError, SensorConnectionError, DeviceNotFoundError,
    PermissionDeniedError, ServiceNotFoundError, CharacteristicNotFoundError,
    AttemptSupersededError,
)
from .config import *

__all__ = [
    'EyeState', 'AlertnessState', 'DecodedSample', 'BlinkEvent', 'RateSample',
    'BlinkRateUpdate', 'TelemetryReading', 'ThresholdBands', 'SchedulePlan',
    'Recommendation', 'ProcessedSample',
    'BlinkBridgeError', 'SensorConnectionError', 'DeviceNotFoundError',
    'PermissionDeniedError', 'ServiceNotFoundError', 'CharacteristicNotFoundError',
    'AttemptSupersededError',
]
