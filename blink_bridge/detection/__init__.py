"""
Eye-state and alertness detection

This module implements eye-state classification, blink edge detection and
alertness classification.
"""

from .eye_state import EyeStateClassifier, classify_light_level, parse_eye_state_token
from .blink_detector import BlinkDetector
from .alertness import classify_alertness, get_schedule_plan, recommend

__all__ = [
    'EyeStateClassifier', 'classify_light_level', 'parse_eye_state_token',
    'BlinkDetector', 'classify_alertness', 'get_schedule_plan', 'recommend',
]
