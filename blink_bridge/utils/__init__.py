"""
Utility functions and helpers

This module contains utility functions and helper tools for the Blink Bridge system.
"""

from .device_finder import scan_devices, find_sensors

__all__ = ['scan_devices', 'find_sensors']
