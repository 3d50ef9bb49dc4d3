"""
Eye sensor acquisition sources

This module handles the BLE transport to the eye sensor and synthetic data
generation.
"""

from .sources import BleSensorSource, FakeEyeSensorSource, find_eye_sensor

__all__ = ['BleSensorSource', 'FakeEyeSensorSource', 'find_eye_sensor']
