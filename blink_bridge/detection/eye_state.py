"""
Eye-state classification

This module maps a decoded notification to open / closed / unknown. Two signal
paths exist because firmware revisions emit either a symbolic token ("close",
"open") or a raw light level; the token always wins over the numeric reading.
"""

import json
import logging
import os
from typing import Optional

from ..core.data_types import DecodedSample, EyeState, ThresholdBands
from ..core import config


def default_bands() -> ThresholdBands:
    """Threshold bands from the configuration module"""
    return ThresholdBands(
        eyes_closed_max=config.EYES_CLOSED_MAX,
        blink_min=config.BLINK_MIN,
        blink_max=config.BLINK_MAX,
        eyes_open_min=config.EYES_OPEN_MIN,
        eyes_open_max=config.EYES_OPEN_MAX,
    )


def parse_eye_state_token(text: Optional[str]) -> EyeState:
    """Case-insensitive "close" / "open" token lookup; "close" is checked first"""
    if not text:
        return EyeState.UNKNOWN
    lowered = text.strip().lower()
    if "close" in lowered:
        return EyeState.CLOSED
    if "open" in lowered:
        return EyeState.OPEN
    return EyeState.UNKNOWN


def classify_light_level(light_level: float, bands: ThresholdBands) -> EyeState:
    """
    Classify a raw light level reading

    - below eyes_closed_max                  -> CLOSED
    - within [blink_min, blink_max]          -> CLOSED
    - within [eyes_open_min, eyes_open_max]  -> OPEN
    - anything else                          -> UNKNOWN
    """
    if light_level < bands.eyes_closed_max:
        return EyeState.CLOSED
    if bands.blink_min <= light_level <= bands.blink_max:
        return EyeState.CLOSED
    if bands.eyes_open_min <= light_level <= bands.eyes_open_max:
        return EyeState.OPEN
    return EyeState.UNKNOWN


class EyeStateClassifier:
    """
    Classify decoded samples using configured threshold bands

    Bands default to the values in core.config and can be replaced with a
    per-user JSON profile.
    """

    def __init__(self, bands: Optional[ThresholdBands] = None,
                 profile_path: Optional[str] = None):
        self.bands = bands or default_bands()
        self.profile_path = profile_path

        if profile_path and os.path.exists(profile_path):
            self.load_profile(profile_path)

    def load_profile(self, profile_path: str) -> bool:
        """
        Load user threshold profile

        Every value must convert to a number; otherwise the current bands are
        kept and False is returned.
        """
        try:
            with open(profile_path, 'r') as f:
                profile = json.load(f)
            defaults = self.bands
            bands = ThresholdBands(
                eyes_closed_max=float(profile.get("eyes_closed_max", defaults.eyes_closed_max)),
                blink_min=float(profile.get("blink_min", defaults.blink_min)),
                blink_max=float(profile.get("blink_max", defaults.blink_max)),
                eyes_open_min=float(profile.get("eyes_open_min", defaults.eyes_open_min)),
                eyes_open_max=float(profile.get("eyes_open_max", defaults.eyes_open_max)),
            )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to load profile: {e}")
            return False

        self.bands = bands
        logging.info(f"Loaded profile: {profile_path}")
        return True

    def classify(self, decoded: DecodedSample) -> EyeState:
        """
        Classify one decoded notification

        Args:
            decoded: Output of the payload decoder

        Returns:
            EyeState: Token result if present, else band result for the number
        """
        token_state = parse_eye_state_token(decoded.text)
        if token_state is not EyeState.UNKNOWN:
            return token_state

        if decoded.numeric_value is None:
            return EyeState.UNKNOWN

        state = classify_light_level(decoded.numeric_value, self.bands)
        if state is EyeState.UNKNOWN:
            logging.debug(f"Light level {decoded.numeric_value} outside all bands")
        return state
