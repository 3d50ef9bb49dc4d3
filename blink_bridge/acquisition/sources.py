"""
Eye sensor data sources

This module provides the BLE transport for the eye sensor (Nordic UART Service
notifications via bleak) and a synthetic source generating realistic payloads
for testing without hardware.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterator, Optional

import numpy as np
from bleak import BleakClient, BleakScanner
from bleak.exc import BleakDBusError, BleakDeviceNotFoundError, BleakError

from ..core.config import (
    DEVICE_ADDRESS, NUS_SERVICE_UUID, NUS_TX_CHARACTERISTIC_UUID,
    NUS_RX_CHARACTERISTIC_UUID, MIN_CONNECTION_INTERVAL_MS,
    MTU_EXCHANGE_DELAY_MS, SCAN_TIMEOUT_SEC, FAKE_NOTIFY_HZ,
)
from ..core.exceptions import (
    AttemptSupersededError, CharacteristicNotFoundError, DeviceNotFoundError,
    PermissionDeniedError, SensorConnectionError, ServiceNotFoundError,
)

NotificationHandler = Callable[[Any, bytearray], None]
DeviceFinder = Callable[[Optional[str], float], Awaitable[Any]]

# BlueZ errors raised when the adapter or bonding policy refuses access
BLUEZ_PERMISSION_ERRORS = ("org.bluez.Error.NotPermitted", "org.bluez.Error.NotAuthorized")


async def find_eye_sensor(address: Optional[str], timeout: float = SCAN_TIMEOUT_SEC):
    """Find the sensor by address, or the first device advertising NUS"""
    if address:
        logging.info(f"Looking for BLE device: {address}")
        return await BleakScanner.find_device_by_address(address, timeout=timeout)

    logging.info("Looking for a BLE device advertising the Nordic UART Service")
    return await BleakScanner.find_device_by_filter(
        lambda device, adv: NUS_SERVICE_UUID in [uuid.lower() for uuid in adv.service_uuids],
        timeout=timeout,
    )


class BleSensorSource:
    """
    Connection lifecycle for a BLE eye sensor

    Each call to connect() starts a new attempt and invalidates any attempt
    still in flight. Every step re-checks the attempt token after awaiting;
    a superseded attempt releases whatever it acquired and touches no shared
    state. connect() never raises: failures are logged and the human-readable
    message is left in ``error``.
    """

    def __init__(self, address: Optional[str] = DEVICE_ADDRESS,
                 on_notification: Optional[NotificationHandler] = None,
                 service_uuid: str = NUS_SERVICE_UUID,
                 characteristic_uuid: str = NUS_TX_CHARACTERISTIC_UUID,
                 auto_discover: bool = True,
                 min_interval_ms: int = MIN_CONNECTION_INTERVAL_MS,
                 mtu_delay_ms: int = MTU_EXCHANGE_DELAY_MS,
                 scan_timeout: float = SCAN_TIMEOUT_SEC,
                 client_factory: Callable[..., Any] = BleakClient,
                 device_finder: DeviceFinder = find_eye_sensor,
                 monotonic: Callable[[], float] = time.monotonic):
        self.address = address
        self.on_notification = on_notification
        self.service_uuid = service_uuid.lower()
        self.characteristic_uuid = characteristic_uuid.lower()
        self.auto_discover = auto_discover
        self.min_interval_ms = min_interval_ms
        self.mtu_delay_ms = mtu_delay_ms
        self.scan_timeout = scan_timeout
        self.client_factory = client_factory
        self.device_finder = device_finder
        self.monotonic = monotonic

        self.connection_state = "disconnected"  # "disconnected" | "connecting" | "connected"
        self.error: Optional[str] = None
        self.last_error: Optional[SensorConnectionError] = None
        self.client = None
        self.characteristic = None
        self.attempt_token = 0
        self._last_attempt_start: Optional[float] = None

    @property
    def is_connected(self) -> bool:
        return (self.connection_state == "connected" and self.client is not None
                and bool(getattr(self.client, "is_connected", False)))

    def _check(self, token: int):
        if token != self.attempt_token:
            raise AttemptSupersededError(f"Connection attempt {token} was cancelled")

    async def connect(self) -> bool:
        """
        Establish connection and enable notifications

        Returns:
            bool: True if connected, False if failed or superseded
        """
        self.attempt_token += 1
        token = self.attempt_token
        client = None
        characteristic = None
        connected = False

        try:
            await self._throttle()
            self._check(token)

            self._last_attempt_start = self.monotonic()
            self.connection_state = "connecting"
            self.error = None
            self.last_error = None
            await self._release_current()
            self._check(token)

            device = await self.device_finder(self.address, self.scan_timeout)
            self._check(token)
            if device is None:
                raise DeviceNotFoundError(
                    f"No BLE device found{' at ' + self.address if self.address else ''}"
                )
            logging.info(f"Step 1: Device selected: {getattr(device, 'address', device)}")

            client = self.client_factory(
                device, disconnected_callback=self._make_disconnect_handler(token)
            )
            await client.connect()
            self._check(token)
            logging.info("Step 2: GATT connected")

            await asyncio.sleep(self.mtu_delay_ms / 1000.0)
            self._check(token)

            characteristic = self._find_characteristic(client)
            logging.info(f"Step 3: Characteristic found: {characteristic.uuid}")

            await client.start_notify(characteristic, self._make_notification_handler(token))
            self._check(token)

            self.client = client
            self.characteristic = characteristic
            self.connection_state = "connected"
            connected = True
            logging.info("Connection complete - notifications enabled")
            return True

        except AttemptSupersededError as e:
            logging.debug(str(e))
            return False
        except Exception as e:
            if token != self.attempt_token:
                logging.debug(f"Superseded attempt {token} failed: {e}")
                return False
            failure = self._categorize(e)
            self.last_error = failure
            self.error = str(failure) or failure.user_message
            self.connection_state = "disconnected"
            logging.error(f"Connection failed: {self.error}")
            return False
        finally:
            if not connected:
                await self._release(client, characteristic)

    async def _throttle(self):
        """Enforce the minimum interval between connection attempts"""
        if self._last_attempt_start is None:
            return
        elapsed_ms = (self.monotonic() - self._last_attempt_start) * 1000.0
        wait_ms = self.min_interval_ms - elapsed_ms
        if wait_ms > 0:
            logging.info(f"Waiting {wait_ms:.0f}ms before next connection attempt...")
            await asyncio.sleep(wait_ms / 1000.0)

    def _find_characteristic(self, client):
        """Locate the NUS TX characteristic, or any notify characteristic"""
        services = client.services
        service = services.get_service(self.service_uuid)
        if service is not None:
            characteristic = service.get_characteristic(self.characteristic_uuid)
            if characteristic is None:
                raise CharacteristicNotFoundError(
                    f"Characteristic {self.characteristic_uuid} not found in NUS service."
                )
            return characteristic

        if not self.auto_discover:
            raise ServiceNotFoundError(
                f"NUS Service ({self.service_uuid}) not found on device. "
                "Make sure the device is advertising the correct service."
            )

        logging.warning("NUS service not found - falling back to cross-service discovery")
        for service in services:
            for characteristic in service.characteristics:
                if "notify" in characteristic.properties:
                    logging.info(f"Found notifying characteristic {characteristic.uuid} "
                                 f"in service {service.uuid}")
                    return characteristic
        raise CharacteristicNotFoundError("No notify-capable characteristic found on this device.")

    def _make_notification_handler(self, token: int) -> NotificationHandler:
        def notification_handler(sender, data: bytearray):
            if token != self.attempt_token or self.on_notification is None:
                return
            self.on_notification(sender, data)
        return notification_handler

    def _make_disconnect_handler(self, token: int):
        def handle_disconnect(client):
            if token != self.attempt_token:
                return
            logging.info("Device disconnected")
            self.connection_state = "disconnected"
            self.client = None
            self.characteristic = None
        return handle_disconnect

    @staticmethod
    def _categorize(error: Exception) -> SensorConnectionError:
        """Map transport exceptions onto user-facing categories"""
        if isinstance(error, SensorConnectionError):
            return error
        if isinstance(error, BleakDeviceNotFoundError):
            return DeviceNotFoundError(DeviceNotFoundError.user_message)
        if isinstance(error, PermissionError):
            return PermissionDeniedError(PermissionDeniedError.user_message)
        if isinstance(error, BleakDBusError) and error.dbus_error in BLUEZ_PERMISSION_ERRORS:
            return PermissionDeniedError(PermissionDeniedError.user_message)
        if isinstance(error, asyncio.TimeoutError):
            return SensorConnectionError(
                f"{SensorConnectionError.user_message} (timed out)"
            )
        if isinstance(error, BleakError):
            return SensorConnectionError(f"{SensorConnectionError.user_message} ({error})")
        return SensorConnectionError(str(error) or "Unknown Bluetooth error occurred.")

    async def _release(self, client, characteristic):
        """Stop notifications and drop the GATT connection, ignoring failures"""
        if client is None:
            return
        if characteristic is not None:
            try:
                await client.stop_notify(characteristic)
            except Exception as e:
                logging.debug(f"Error stopping notifications: {e}")
        try:
            await client.disconnect()
        except Exception as e:
            logging.warning(f"Error disconnecting GATT client: {e}")

    async def _release_current(self):
        client, characteristic = self.client, self.characteristic
        self.client = None
        self.characteristic = None
        await self._release(client, characteristic)

    async def disconnect(self):
        """Cancel any in-flight attempt and release the current connection"""
        self.attempt_token += 1
        try:
            await self._release_current()
            logging.info("BLE sensor disconnected")
        finally:
            self.connection_state = "disconnected"

    async def write_command(self, command: str) -> bool:
        """
        Write a UTF-8 command (e.g. "trigger-vibration") to the device

        Returns:
            bool: True if written
        """
        if not self.is_connected:
            return False
        client = self.client
        target = client.services.get_characteristic(NUS_RX_CHARACTERISTIC_UUID) or self.characteristic
        try:
            await client.write_gatt_char(target, command.encode("utf-8"), response=False)
            return True
        except (BleakError, OSError, asyncio.TimeoutError) as e:
            logging.warning(f"BLE command write failed: {e}")
            return False


class FakeEyeSensorSource:
    """
    Generate synthetic eye sensor notifications for testing

    Mixes the payload shapes seen from real firmware: light levels as text,
    "open"/"close" tokens, legacy binary frames and battery telemetry. The blink
    frequency drifts slowly so the alertness state changes over a session.
    """

    def __init__(self, notify_hz: float = FAKE_NOTIFY_HZ, seed: Optional[int] = None):
        self.notify_hz = notify_hz
        self.rng = np.random.default_rng(seed)
        self.time = 0.0
        self.rate_cycle_time = 240.0  # Full drowsy -> alert cycle (seconds)
        self.blink_samples = 2        # Samples an eye stays closed
        self.battery = 100.0
        self.charging = False
        self._closed_left = 0
        self._count = 0

    def blinks_per_minute(self) -> float:
        return 15.0 + 9.0 * np.sin(2 * np.pi * self.time / self.rate_cycle_time)

    def _light_level(self, closed: bool) -> int:
        if self.rng.random() < 0.05:
            # Reading between bands (ambient light change, sensor noise)
            return int(self.rng.choice([self.rng.integers(1710, 1790),
                                        self.rng.integers(2050, 2300)]))
        if closed:
            if self.rng.random() < 0.5:
                return int(np.clip(self.rng.normal(400, 80), 0, 599))
            return int(np.clip(self.rng.normal(1600, 40), 1500, 1700))
        return int(np.clip(self.rng.normal(1900, 35), 1800, 2000))

    def generate_notification(self) -> bytes:
        """
        Generate the next notification payload

        Returns:
            bytes: Raw notification as delivered by the transport
        """
        self.time += 1.0 / self.notify_hz
        self._count += 1

        if self._closed_left > 0:
            self._closed_left -= 1
            closed = True
        else:
            p_blink = self.blinks_per_minute() / 60.0 / self.notify_hz
            closed = bool(self.rng.random() < p_blink)
            if closed:
                self._closed_left = self.blink_samples - 1

        self.battery = max(0.0, self.battery - 0.001)

        # Battery telemetry rides on a token message so its digits are not read as light
        if self._count % 300 == 0:
            token = "close" if closed else "open"
            return f"{token} BAT:{int(self.battery)} CHG:{int(self.charging)}\n".encode("utf-8")

        fmt = self.rng.random()
        if fmt < 0.1:
            return ("close\n" if closed else "open\n").encode("utf-8")
        level = self._light_level(closed)
        if fmt < 0.2:
            frame = bytes([0x01]) + int(level).to_bytes(2, byteorder='little')
            # Frames that happen to decode as text with a digit take the text path
            if not any(0x30 <= b <= 0x39 for b in frame):
                return frame
        return f"{level}\n".encode("utf-8")

    def notifications(self, count: int) -> Iterator[bytes]:
        for _ in range(count):
            yield self.generate_notification()
