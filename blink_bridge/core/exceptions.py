"""
Blink Bridge exceptions - transport errors categorized by cause
"""


class BlinkBridgeError(Exception):
    """Base exception for Blink Bridge errors."""
    pass


class SensorConnectionError(BlinkBridgeError):
    """Connecting to the sensor failed."""

    user_message = "Failed to connect to device. Make sure it is powered on and in range."


class DeviceNotFoundError(SensorConnectionError):
    """No matching BLE device was found."""

    user_message = "Device not found. Make sure it is powered on, advertising and in range."


class PermissionDeniedError(SensorConnectionError):
    """The OS refused Bluetooth access."""

    user_message = "Bluetooth permission denied. Please allow Bluetooth access."


class ServiceNotFoundError(SensorConnectionError):
    """The Nordic UART Service is missing on the device."""

    user_message = "NUS Service not found on device. Make sure the device is advertising the correct service."


class CharacteristicNotFoundError(SensorConnectionError):
    """No usable notify characteristic was found."""

    user_message = "No notify-capable characteristic found on this device."


class AttemptSupersededError(BlinkBridgeError):
    """A newer connection attempt replaced this one."""
    pass
