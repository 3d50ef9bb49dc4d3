"""
Main CLI entry point for Blink Bridge

This module provides the command-line interface and main processing loops
for the Blink Bridge system.
"""

import argparse
import asyncio
import logging
import os
import sys
import time
from typing import Optional

from ..core.config import *
from ..core.data_types import Recommendation
from ..acquisition.sources import BleSensorSource, FakeEyeSensorSource
from ..detection.eye_state import EyeStateClassifier
from ..processing.pipeline import BlinkMonitor
from ..communication.udp_sender import UdpStateSender
from ..utils.device_finder import find_sensors


def format_status(monitor: BlinkMonitor) -> str:
    """One-line status for the console"""
    now = monitor.clock()
    count = monitor.current_blink_count(now)
    average = monitor.current_five_minute_average(now)
    recommendation = monitor.recommendation(now)

    average_text = f"{average:5.1f}" if average is not None else "  --"
    state_text = recommendation.label if recommendation else "State: collecting data"
    battery_text = (f"{monitor.battery_percentage}%{' (charging)' if monitor.is_charging else ''}"
                    if monitor.battery_percentage is not None else "--")
    return (f"Eye: {monitor.eye_state.value:>7} | Blinks/60s: {count:3d} | "
            f"5-min avg: {average_text} | {state_text} | Battery: {battery_text}")


def print_recommendation(recommendation: Optional[Recommendation]):
    if recommendation is None:
        print("Not enough recent data for a recommendation "
              f"(need {MIN_RECOMMENDATION_SAMPLES} samples within 5 minutes).")
        return
    print(f"{recommendation.label} (5-min average {recommendation.rolling_average:.1f}, "
          f"{recommendation.sample_count} samples)")
    print(recommendation.plan.title)
    for item in recommendation.plan.items:
        print(f"  - {item}")


async def run_fake_processing(monitor: BlinkMonitor, fake_source: FakeEyeSensorSource,
                              duration: Optional[float] = None) -> None:
    """Feed synthetic notifications through the monitor at the configured rate"""
    logging.info("Starting synthetic processing...")
    interval = 1.0 / fake_source.notify_hz
    start_time = time.time()
    last_status_time = 0.0

    while duration is None or time.time() - start_time < duration:
        monitor.process_notification(fake_source.generate_notification())

        current_time = time.time()
        if current_time - last_status_time > STATUS_INTERVAL_SEC:
            print(format_status(monitor))
            last_status_time = current_time

        await asyncio.sleep(interval)


async def run_ble_processing(monitor: BlinkMonitor, source: BleSensorSource,
                             duration: Optional[float] = None) -> None:
    """
    Main real-time processing loop

    Keeps the sensor connected, reconnecting after RETRY_DELAY_SEC when the
    peripheral drops. Notifications are processed in the bleak callback; this
    loop only supervises the connection and prints status.
    """
    logging.info("Starting real-time processing...")
    start_time = time.time()
    last_status_time = 0.0

    try:
        while duration is None or time.time() - start_time < duration:
            if not source.is_connected:
                logging.info("Connecting to eye sensor...")
                if not await source.connect():
                    if source.error:
                        logging.warning(f"Sensor connection failed: {source.error}. "
                                        f"Retrying in {RETRY_DELAY_SEC}s")
                    await asyncio.sleep(RETRY_DELAY_SEC)
                    continue

            current_time = time.time()
            if current_time - last_status_time > STATUS_INTERVAL_SEC:
                print(format_status(monitor))
                last_status_time = current_time

            await asyncio.sleep(1.0)
    finally:
        await source.disconnect()


def run_realtime_processing(args: argparse.Namespace) -> int:
    """Build the pipeline from CLI arguments and run until stopped"""
    profile_path = os.path.join(PROFILE_DIR, f"{args.user}.json") if args.user else None
    monitor = BlinkMonitor(EyeStateClassifier(profile_path=profile_path))

    sender = None
    if not args.no_udp:
        sender = UdpStateSender(args.udp_host, args.udp_port, args.device_id)
        monitor.rate_updates.add_listener(sender.send_rate_update)
        monitor.eye_closures.add_listener(sender.send_eye_closure)

    try:
        if args.fake:
            logging.info("Using synthetic eye sensor data")
            coroutine = run_fake_processing(monitor, FakeEyeSensorSource(seed=args.seed),
                                            args.duration)
        else:
            source = BleSensorSource(address=args.address,
                                     on_notification=monitor.handle_notification,
                                     auto_discover=not args.strict_nus)
            coroutine = run_ble_processing(monitor, source, args.duration)

        logging.info("Real-time processing started. Press Ctrl+C to stop.")
        asyncio.run(coroutine)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        print("\n" + "=" * 60)
        print(f"Session: {monitor.notifications_processed} notifications, "
              f"{monitor.detector.blink_total} blinks")
        print_recommendation(monitor.recommendation())
        monitor.reset()
        if sender is not None:
            sender.close()
        logging.info("Real-time processing stopped")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="Blink Bridge - Real-time blink rate monitoring from a BLE eye sensor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List nearby sensors
  python -m blink_bridge --scan

  # Run with the first sensor advertising the Nordic UART Service
  python -m blink_bridge --run

  # Run with a specific sensor and user threshold profile
  python -m blink_bridge --run --address AA:BB:CC:DD:EE:FF --user alice

  # Test with synthetic data for two minutes
  python -m blink_bridge --run --fake --duration 120
        """
    )

    # Mode selection (mutually exclusive)
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument("--run", action="store_true",
                           help="Run real-time processing")
    mode_group.add_argument("--scan", action="store_true",
                           help="Scan for nearby BLE eye sensors")

    # Data source options
    parser.add_argument("--fake", action="store_true",
                       help="Use synthetic sensor data for testing")
    parser.add_argument("--seed", type=int, default=None,
                       help="Random seed for synthetic data")
    parser.add_argument("--address", default=DEVICE_ADDRESS,
                       help="BLE address of the sensor (default: first NUS device)")
    parser.add_argument("--strict-nus", action="store_true",
                       help="Fail instead of using any notify characteristic when NUS is missing")
    parser.add_argument("--scan-timeout", type=float, default=SCAN_TIMEOUT_SEC,
                       help=f"BLE scan duration in seconds (default: {SCAN_TIMEOUT_SEC})")
    parser.add_argument("--duration", type=float, default=None,
                       help="Stop after this many seconds (default: run until Ctrl+C)")

    # User and threshold options
    parser.add_argument("--user", default=None,
                       help="User ID for threshold profile (profiles/<user>.json)")
    parser.add_argument("--closed-max", type=int, default=EYES_CLOSED_MAX,
                       help=f"Light level below which eyes are closed (default: {EYES_CLOSED_MAX})")
    parser.add_argument("--blink-min", type=int, default=BLINK_MIN,
                       help=f"Blink band lower bound (default: {BLINK_MIN})")
    parser.add_argument("--blink-max", type=int, default=BLINK_MAX,
                       help=f"Blink band upper bound (default: {BLINK_MAX})")
    parser.add_argument("--open-min", type=int, default=EYES_OPEN_MIN,
                       help=f"Open band lower bound (default: {EYES_OPEN_MIN})")
    parser.add_argument("--open-max", type=int, default=EYES_OPEN_MAX,
                       help=f"Open band upper bound (default: {EYES_OPEN_MAX})")

    # Communication options
    parser.add_argument("--udp-host", default=UDP_HOST,
                       help=f"Collector UDP host (default: {UDP_HOST})")
    parser.add_argument("--udp-port", type=int, default=UDP_PORT,
                       help=f"Collector UDP port (default: {UDP_PORT})")
    parser.add_argument("--device-id", default=DEVICE_ID,
                       help=f"Device id attached to outgoing records (default: {DEVICE_ID})")
    parser.add_argument("--no-udp", action="store_true",
                       help="Do not send updates to the collector")

    # Logging
    parser.add_argument("--verbose", "-v", action="store_true",
                       help="Enable verbose logging")

    return parser


def main(argv=None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Print startup info
    print("="*60)
    print("Blink Bridge - Real-time Blink Rate Monitoring")
    print("="*60)

    # Update global config from args (modify the imported module)
    import blink_bridge.core.config as config
    config.EYES_CLOSED_MAX = args.closed_max
    config.BLINK_MIN = args.blink_min
    config.BLINK_MAX = args.blink_max
    config.EYES_OPEN_MIN = args.open_min
    config.EYES_OPEN_MAX = args.open_max

    try:
        if args.scan:
            devices = find_sensors(args.scan_timeout)
            return 0 if devices else 1

        elif args.run:
            return run_realtime_processing(args)

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 0
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
