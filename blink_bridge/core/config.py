"""
Configuration constants for Blink Bridge

This module contains all configuration parameters that users may need to customize
for their specific sensor firmware and processing requirements.
"""

from typing import Optional

# ============================================================================
# SENSOR CONFIGURATION - User should edit these values for their setup
# ============================================================================

# Eye-state light level thresholds (calibrated for the current firmware)
EYES_CLOSED_MAX = 600             # Readings strictly below this are eyes closed
BLINK_MIN = 1500                  # Blink band lower bound (inclusive)
BLINK_MAX = 1700                  # Blink band upper bound (inclusive)
EYES_OPEN_MIN = 1800              # Open band lower bound (inclusive)
EYES_OPEN_MAX = 2000              # Open band upper bound (inclusive)

# Aggregation Configuration
BLINK_WINDOW_MS = 60_000          # Blink count window (blinks per minute)
RATE_WINDOW_MS = 300_000          # Rolling blink-rate average window (5 minutes)

# Alertness Configuration
HIGH_ALERTNESS_BPM = 18           # Average above this is high alertness
DROWSY_BPM = 10                   # Average below this is drowsy
MIN_RECOMMENDATION_SAMPLES = 3    # Samples needed before offering a plan

# BLE Configuration - Nordic UART Service (NUS)
NUS_SERVICE_UUID = "6e400001-b5a3-f393-e0a9-e50e24dcca9e"
NUS_TX_CHARACTERISTIC_UUID = "6e400003-b5a3-f393-e0a9-e50e24dcca9e"  # notify from device
NUS_RX_CHARACTERISTIC_UUID = "6e400002-b5a3-f393-e0a9-e50e24dcca9e"  # write to device
DEVICE_ADDRESS: Optional[str] = None  # None = first device advertising NUS
MIN_CONNECTION_INTERVAL_MS = 2000 # Throttle between connection attempts
MTU_EXCHANGE_DELAY_MS = 500       # Settle time after GATT connect
SCAN_TIMEOUT_SEC = 10.0           # Device discovery timeout
RETRY_DELAY_SEC = 5.0             # Reconnect delay after the peripheral drops

# Communication Configuration
UDP_HOST = "127.0.0.1"            # Persistence / latency collector host
UDP_PORT = 5006                   # Persistence / latency collector port
DEVICE_ID = "eyer-01"             # Device id attached to outgoing records

# Processing loop
STATUS_INTERVAL_SEC = 2.0         # Console status period
FAKE_NOTIFY_HZ = 10.0             # Synthetic notification rate
SUBSCRIPTION_MAXLEN = 3000        # Pending updates kept per subscriber (5 min at 10 Hz)

# File Paths
PROFILE_DIR = "profiles"          # Per-user threshold profiles directory
