"""
Collector communication interface

This module handles fire-and-forget UDP communication with the external
persistence and latency-measurement collectors, formatting blink-rate updates
and eye-closure events into JSON messages.
"""

import json
import logging
import socket
from typing import Any, Dict

from ..core.data_types import BlinkEvent, BlinkRateUpdate
from ..core.config import UDP_HOST, UDP_PORT, DEVICE_ID


class UdpStateSender:
    """
    Send blink-rate updates and eye-closure events via UDP JSON messages

    Delivery is best effort; the processing path never waits on the collector.
    """

    def __init__(self, host: str = UDP_HOST, port: int = UDP_PORT,
                 device_id: str = DEVICE_ID):
        self.host = host
        self.port = port
        self.device_id = device_id
        self.socket = None
        self._setup_socket()

    def _setup_socket(self):
        """Setup UDP socket for communication"""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            logging.info(f"UDP sender initialized: {self.host}:{self.port}")
        except OSError as e:
            logging.error(f"Failed to setup UDP socket: {e}")

    def _send(self, message: Dict[str, Any]) -> bool:
        if self.socket is None:
            return False

        try:
            json_str = json.dumps(message)
            self.socket.sendto(json_str.encode('utf-8'), (self.host, self.port))
            return True
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Failed to send UDP message: {e}")
            return False

    def send_rate_update(self, update: BlinkRateUpdate) -> bool:
        """
        Send a blink-rate measurement for persistence

        Args:
            update: Count published after a processed notification

        Returns:
            bool: True if sent successfully
        """
        return self._send({
            "type": "blink_rate",
            "device_id": self.device_id,
            "t": update.timestamp,
            "blink_rate": int(update.blink_count),
        })

    def send_eye_closure(self, event: BlinkEvent) -> bool:
        """Signal that an eye closure just happened (actuation latency)"""
        return self._send({
            "type": "eye_closed",
            "device_id": self.device_id,
            "t": event.timestamp,
        })

    def close(self):
        """Close UDP socket"""
        if self.socket:
            self.socket.close()
            self.socket = None
