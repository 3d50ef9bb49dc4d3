"""
Eye-state classifier tests
"""

import json

import pytest

from blink_bridge.core.data_types import DecodedSample, EyeState, ThresholdBands
from blink_bridge.detection.eye_state import (
    EyeStateClassifier, classify_light_level, parse_eye_state_token,
)
from blink_bridge.processing.decoder import PayloadDecoder
from blink_bridge.processing.pipeline import BlinkMonitor

BANDS = ThresholdBands(eyes_closed_max=600, blink_min=1500, blink_max=1700,
                       eyes_open_min=1800, eyes_open_max=2000)


@pytest.mark.parametrize("level, expected", [
    (599, EyeState.CLOSED),
    (1650, EyeState.CLOSED),
    (1750, EyeState.UNKNOWN),
    (1900, EyeState.OPEN),
    (2100, EyeState.UNKNOWN),
])
def test_calibrated_bands(level, expected):
    classifier = EyeStateClassifier(BANDS)
    assert classifier.classify(DecodedSample(numeric_value=level)) is expected


@pytest.mark.parametrize("level, expected", [
    (0, EyeState.CLOSED),
    (600, EyeState.UNKNOWN),
    (1499, EyeState.UNKNOWN),
    (1500, EyeState.CLOSED),
    (1700, EyeState.CLOSED),
    (1800, EyeState.OPEN),
    (2000, EyeState.OPEN),
    (2001, EyeState.UNKNOWN),
])
def test_band_edges(level, expected):
    assert classify_light_level(level, BANDS) is expected


def test_token_beats_numeric_reading():
    classifier = EyeStateClassifier(BANDS)
    decoded = PayloadDecoder().decode(b"close 1400")
    assert decoded.numeric_value == 1400
    assert classifier.classify(decoded) is EyeState.CLOSED
    assert classifier.classify(PayloadDecoder().decode(b"OPEN 300")) is EyeState.OPEN


def test_tokens_are_case_insensitive():
    assert parse_eye_state_token("Eyes CLOSED") is EyeState.CLOSED
    assert parse_eye_state_token(" Open\n") is EyeState.OPEN
    assert parse_eye_state_token("hello") is EyeState.UNKNOWN
    assert parse_eye_state_token(None) is EyeState.UNKNOWN


def test_no_token_and_no_number_is_unknown():
    classifier = EyeStateClassifier(BANDS)
    assert classifier.classify(DecodedSample(text="hello")) is EyeState.UNKNOWN
    assert classifier.classify(DecodedSample()) is EyeState.UNKNOWN


def test_defaults_come_from_config():
    classifier = EyeStateClassifier()
    assert classifier.bands == BANDS


def test_profile_overrides_bands(tmp_path):
    profile = tmp_path / "alice.json"
    profile.write_text(json.dumps({"eyes_closed_max": 800, "eyes_open_min": 1750}))

    classifier = EyeStateClassifier(profile_path=str(profile))

    assert classifier.bands.eyes_closed_max == 800
    assert classifier.bands.eyes_open_min == 1750
    assert classifier.bands.blink_max == 1700
    assert classifier.classify(DecodedSample(numeric_value=700)) is EyeState.CLOSED


def test_broken_profile_keeps_defaults(tmp_path):
    profile = tmp_path / "broken.json"
    profile.write_text("{not json")

    classifier = EyeStateClassifier(BANDS)
    assert classifier.load_profile(str(profile)) is False
    assert classifier.bands == BANDS


@pytest.mark.parametrize("profile_data", [
    {"blink_min": None},
    {"eyes_closed_max": "bright"},
    {"eyes_open_max": [2000]},
    ["eyes_closed_max", 800],
])
def test_profile_with_bad_values_keeps_bands(tmp_path, profile_data):
    profile = tmp_path / "bad.json"
    profile.write_text(json.dumps(profile_data))

    classifier = EyeStateClassifier(BANDS)
    assert classifier.load_profile(str(profile)) is False
    assert classifier.bands == BANDS
    assert classifier.classify(DecodedSample(numeric_value=1650)) is EyeState.CLOSED


def test_numeric_strings_in_profile_are_converted(tmp_path):
    profile = tmp_path / "strings.json"
    profile.write_text(json.dumps({"eyes_closed_max": "800"}))

    classifier = EyeStateClassifier(BANDS)
    assert classifier.load_profile(str(profile)) is True
    assert classifier.bands.eyes_closed_max == 800.0
    assert classifier.classify(DecodedSample(numeric_value=700)) is EyeState.CLOSED


def test_monitor_keeps_processing_after_bad_profile(tmp_path):
    profile = tmp_path / "null.json"
    profile.write_text(json.dumps({"blink_min": None}))

    monitor = BlinkMonitor(EyeStateClassifier(profile_path=str(profile)), clock=lambda: 0)
    result = monitor.process_notification(b"1650", now=0)
    assert result.eye_state is EyeState.CLOSED
    assert result.blink_count == 1
