"""
Notification payload decoding

This module turns raw BLE notification bytes into decoded text and a numeric
reading. Firmware revisions emit either UTF-8 text ("1650\n", "blink=12",
"close") or the legacy Heart Rate Measurement style binary frame, so several
decodes are tried in a fixed order and failures degrade to None.
"""

import logging
import re
from typing import Optional

from ..core.data_types import DecodedSample

_DIGITS = re.compile(r"[0-9]+")


def decode_text(data: bytes) -> Optional[str]:
    """Decode the payload as UTF-8; None if undecodable or blank"""
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        logging.debug(f"Payload is not UTF-8 text: {e}")
        return None
    return text if text.strip() else None


def parse_number_from_text(text: Optional[str]) -> Optional[int]:
    """
    Extract the first run of ASCII digits as an unsigned integer

    Accepts formats like "12\\n", "blink=12" and "rate:12".
    """
    if not text:
        return None
    match = _DIGITS.search(text)
    if match is None:
        return None
    return int(match.group(0))


def parse_structured_binary(data: bytes) -> Optional[int]:
    """
    Parse the legacy binary frame

    Byte 0 holds flags; bit 0 set means the value is a little-endian uint16 in
    bytes 1-2, otherwise a uint8 in byte 1.

    Returns:
        int: Decoded value, or None for buffers shorter than 2 bytes
    """
    if len(data) < 2:
        return None
    flags = data[0]
    if flags & 0x01 and len(data) >= 3:
        return int.from_bytes(data[1:3], byteorder='little')
    return int(data[1])


class PayloadDecoder:
    """
    Decode raw notifications with a fixed fallback order

    1. UTF-8 text (kept for display and telemetry)
    2. First integer found in the text
    3. Structured binary frame, only when the text held no number
    """

    def decode(self, data: bytes) -> DecodedSample:
        """
        Decode a single notification payload

        Args:
            data: Raw notification bytes

        Returns:
            DecodedSample: Text and/or numeric value; never raises
        """
        data = bytes(data or b"")
        text = decode_text(data)
        numeric_value = parse_number_from_text(text)
        if numeric_value is None:
            numeric_value = parse_structured_binary(data)
        return DecodedSample(text=text, numeric_value=numeric_value)
