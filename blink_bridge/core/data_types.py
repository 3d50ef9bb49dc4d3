"""
Core data types for Blink Bridge

This module defines the fundamental data structures used throughout the system
for representing decoded notifications, eye states, blink events and
aggregated blink rates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EyeState(str, Enum):
    """Current eye classification"""
    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"


class AlertnessState(str, Enum):
    """Coarse alertness derived from the 5-minute blink-rate average"""
    HIGH_ALERTNESS = "high-alertness"
    NORMAL = "normal"
    DROWSY = "drowsy"


@dataclass
class DecodedSample:
    """Container for one decoded notification"""
    text: Optional[str] = None            # UTF-8 text, None if undecodable/empty
    numeric_value: Optional[int] = None   # Light level / legacy rate, None if absent


@dataclass(frozen=True)
class BlinkEvent:
    """A single eye-closure transition"""
    timestamp: int  # Unix time in milliseconds


@dataclass(frozen=True)
class RateSample:
    """Blink count observed at one notification"""
    timestamp: int  # Unix time in milliseconds
    value: float


@dataclass(frozen=True)
class BlinkRateUpdate:
    """Emitted for every processed notification"""
    timestamp: int
    blink_count: int  # Blinks within the last 60 seconds


@dataclass
class TelemetryReading:
    """Battery telemetry found in one notification (None = not reported)"""
    battery_percentage: Optional[int] = None
    is_charging: Optional[bool] = None


@dataclass
class ThresholdBands:
    """Light level bands used by the eye-state classifier"""
    eyes_closed_max: float
    blink_min: float
    blink_max: float
    eyes_open_min: float
    eyes_open_max: float


@dataclass
class SchedulePlan:
    """Static guidance attached to an alertness state"""
    title: str
    items: List[str] = field(default_factory=list)


@dataclass
class Recommendation:
    """Alertness classification plus its plan"""
    state: AlertnessState
    label: str
    plan: SchedulePlan
    rolling_average: float
    sample_count: int


@dataclass
class ProcessedSample:
    """Container for the outcome of one processed notification"""
    timestamp: int
    decoded: DecodedSample
    eye_state: EyeState
    blink: Optional[BlinkEvent]
    blink_count: int
    telemetry: TelemetryReading
