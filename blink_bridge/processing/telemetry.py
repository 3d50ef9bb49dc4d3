"""
Battery telemetry extraction

Small pattern matchers over the decoded notification text. Recognized forms:
"BAT:72", "BAT=72", "battery:72", "bat:72%", "BATT:72" for the battery level and
"CHARGING:1", "CHG:0", "charg=1" for the charging flag.
"""

import re
from typing import Optional

from ..core.data_types import TelemetryReading

_BATTERY = re.compile(r"\b(?:bat(?:t(?:ery)?)?)[=:](\d+)", re.IGNORECASE)
_CHARGING = re.compile(r"\b(?:charg(?:ing)?|chg)[=:]([01])(?!\d)", re.IGNORECASE)


def parse_battery_percentage(text: Optional[str]) -> Optional[int]:
    """Battery level 0-100, or None when absent or out of range"""
    if not text:
        return None
    match = _BATTERY.search(text)
    if match is None:
        return None
    percentage = int(match.group(1))
    if 0 <= percentage <= 100:
        return percentage
    return None


def parse_charging_status(text: Optional[str]) -> Optional[bool]:
    """True/False for a charging flag, None when the text carries none"""
    if not text:
        return None
    match = _CHARGING.search(text)
    if match is None:
        return None
    return match.group(1) == "1"


def extract_telemetry(text: Optional[str]) -> TelemetryReading:
    """Run both extractors on one notification's text"""
    return TelemetryReading(
        battery_percentage=parse_battery_percentage(text),
        is_charging=parse_charging_status(text),
    )
