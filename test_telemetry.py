"""
Battery telemetry extractor tests
"""

import pytest

from blink_bridge.core.data_types import TelemetryReading
from blink_bridge.processing.telemetry import (
    extract_telemetry, parse_battery_percentage, parse_charging_status,
)


@pytest.mark.parametrize("text, expected", [
    ("BAT:72", 72),
    ("BAT=72", 72),
    ("battery:100", 100),
    ("bat:72%", 72),
    ("BATT:0", 0),
    ("open BAT:55 CHG:1", 55),
    ("BAT:101", None),
    ("combat:50", None),
    ("1900", None),
    ("", None),
    (None, None),
])
def test_battery_percentage(text, expected):
    assert parse_battery_percentage(text) == expected


@pytest.mark.parametrize("text, expected", [
    ("CHARGING:1", True),
    ("charging=0", False),
    ("CHG:1", True),
    ("charg:0", False),
    ("BAT:40 chg=1", True),
    ("CHG:10", None),
    ("BAT:40", None),
    (None, None),
])
def test_charging_status(text, expected):
    assert parse_charging_status(text) is expected


def test_absent_telemetry_is_not_a_stale_value():
    assert extract_telemetry("BAT:80 CHG:1") == TelemetryReading(80, True)
    assert extract_telemetry("1900") == TelemetryReading(None, None)
