"""
BLE eye sensor finder utility

This module scans for nearby BLE devices and flags the ones advertising the
Nordic UART Service, so the right address can be passed to ``--address``.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Tuple

from bleak import BleakScanner
from bleak.exc import BleakError

from ..core.config import NUS_SERVICE_UUID, SCAN_TIMEOUT_SEC

# (address, name, rssi, advertises NUS)
DeviceInfo = Tuple[str, Optional[str], Optional[int], bool]


def advertises_nus(service_uuids) -> bool:
    return NUS_SERVICE_UUID in [uuid.lower() for uuid in service_uuids or []]


async def scan_devices(timeout: float = SCAN_TIMEOUT_SEC) -> List[DeviceInfo]:
    """
    Scan for nearby BLE devices

    Args:
        timeout: Scan duration in seconds

    Returns:
        List[DeviceInfo]: Devices sorted with NUS sensors first, then by signal
    """
    discovered = await BleakScanner.discover(timeout=timeout, return_adv=True)

    devices = []
    for address, (device, adv) in discovered.items():
        devices.append((address, device.name or adv.local_name, adv.rssi,
                        advertises_nus(adv.service_uuids)))

    devices.sort(key=lambda d: (not d[3], -(d[2] if d[2] is not None else -999)))
    return devices


def print_devices(devices: List[DeviceInfo]):
    print("Nearby BLE devices:")
    print("-" * 60)
    if not devices:
        print("No devices found. Make sure Bluetooth is on and the sensor is advertising.")
        return

    for address, name, rssi, is_sensor in devices:
        marker = "NUS ✓" if is_sensor else ""
        rssi_text = f"{rssi:4d} dBm" if rssi is not None else "   ? dBm"
        print(f"{address:20} {rssi_text}  {(name or '(unknown)'):24} {marker}")

    sensors = [d for d in devices if d[3]]
    if sensors:
        print(f"\nTo connect: python -m blink_bridge --run --address {sensors[0][0]}")


def find_sensors(timeout: float = SCAN_TIMEOUT_SEC) -> List[DeviceInfo]:
    """Scan and print; returns the devices found"""
    try:
        devices = asyncio.run(scan_devices(timeout))
    except (BleakError, OSError) as e:
        logging.error(f"BLE scan failed: {e}")
        return []
    print_devices(devices)
    return devices


def main():
    """Entry point for find-eye-sensors"""
    parser = argparse.ArgumentParser(description="List nearby BLE eye sensors")
    parser.add_argument("--timeout", type=float, default=SCAN_TIMEOUT_SEC,
                        help=f"Scan duration in seconds (default: {SCAN_TIMEOUT_SEC})")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s',
                        datefmt='%H:%M:%S')
    devices = find_sensors(args.timeout)
    return 0 if devices else 1


if __name__ == "__main__":
    sys.exit(main())
